"""
Tests for the exception hierarchy and client-facing error sanitization.
"""
import json

from shipping_quotes.core.error_handler import sanitize_error_message, server_failure_response
from shipping_quotes.core.exceptions import (
    MAX_UPSTREAM_BODY_CHARS,
    AuthError,
    CarrierError,
    NoQuotesError,
    QuoteEngineError,
    RateRequestError,
    ShipmentValidationError,
    truncate_body,
)
from shipping_quotes.services.demo_quotes import get_demo_quotes


class TestExceptionHierarchy:

    def test_carrier_errors(self):
        error = RateRequestError("UPS rate error 500 Internal", carrier="UPS", status=500)
        assert isinstance(error, CarrierError)
        assert isinstance(error, QuoteEngineError)
        assert error.to_dict()["details"] == {"carrier": "UPS", "status": 500}
        assert error.code == "CARRIER_RATE_FAILED"

    def test_auth_error_severity(self):
        assert AuthError("FedEx credentials missing").severity == "P1"

    def test_validation_error_is_rate_error(self):
        error = ShipmentValidationError("missing", missing_fields=["weight_lb"], carrier="FedEx")
        assert isinstance(error, RateRequestError)
        assert error.details["missing_fields"] == ["weight_lb"]
        assert error.details["carrier"] == "FedEx"

    def test_no_quotes_detail(self):
        assert NoQuotesError(["UPS: a", "FedEx: b"]).detail == "UPS: a | FedEx: b"
        assert NoQuotesError().detail == "No quotes returned"

    def test_truncate_body(self):
        assert truncate_body(None) == ""
        long_body = "x" * (MAX_UPSTREAM_BODY_CHARS + 50)
        assert truncate_body(long_body) == "x" * MAX_UPSTREAM_BODY_CHARS + "..."


class TestSanitization:

    def test_plain_message_passes_through(self):
        assert sanitize_error_message(ValueError("boom")) == "boom"

    def test_empty_message_uses_type_name(self):
        assert sanitize_error_message(KeyError()) == "KeyError"

    def test_sensitive_message_hidden(self):
        message = sanitize_error_message(RuntimeError("Authorization: Bearer abc"))
        assert "abc" not in message

    def test_long_message_truncated(self):
        assert len(sanitize_error_message("y" * 500)) == 203

    def test_server_failure_response(self):
        response = server_failure_response(RuntimeError("boom"))
        assert response.status_code == 500
        assert json.loads(response.body) == {"error": "Server failure", "detail": "boom"}


def test_demo_quotes_fixed_order():
    quotes = get_demo_quotes()
    assert [q.total_charge for q in quotes] == [38.45, 36.90, 94.20, 92.10]
    assert {q.notes for q in quotes} == {"demo"}
    assert get_demo_quotes() == quotes
