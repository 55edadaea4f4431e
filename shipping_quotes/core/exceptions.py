"""
Shipping Quotes Exception Hierarchy

Structured exception classes for the quote engine. All exceptions include
code, message, and details for logging and debugging.

Exception Hierarchy:
    QuoteEngineError
    ├── InvalidInputError
    ├── CarrierError
    │   ├── AuthError
    │   └── RateRequestError
    │       └── ShipmentValidationError
    └── NoQuotesError
"""
import logging
from typing import Optional, Dict, Any, List

logger = logging.getLogger(__name__)

# Upstream bodies are embedded in messages; keep them bounded
MAX_UPSTREAM_BODY_CHARS = 500


def truncate_body(body: Optional[str]) -> str:
    if not body:
        return ""
    if len(body) > MAX_UPSTREAM_BODY_CHARS:
        return body[:MAX_UPSTREAM_BODY_CHARS] + "..."
    return body


class QuoteEngineError(Exception):
    """
    Base exception for all quote engine errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        details: Additional context for debugging
        severity: P0-P3 severity level
    """

    default_code: str = "QUOTE_ENGINE_ERROR"
    default_severity: str = "P2"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[str] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        self.severity = severity or self.default_severity
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "severity": self.severity,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class InvalidInputError(QuoteEngineError):
    """Request body could not be parsed into a shipment."""
    default_code = "INVALID_INPUT"
    default_severity = "P3"


# =============================================================================
# CARRIER ERRORS (scoped to one carrier pipeline)
# =============================================================================

class CarrierError(QuoteEngineError):
    """Base exception for failures inside a single carrier pipeline."""
    default_code = "CARRIER_ERROR"
    default_severity = "P2"

    def __init__(
        self,
        message: str,
        carrier: Optional[str] = None,
        status: Optional[int] = None,
        body: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        details.update({
            "carrier": carrier,
            "status": status,
        })
        self.carrier = carrier
        self.status = status
        self.body = body
        super().__init__(message, details=details, **kwargs)


class AuthError(CarrierError):
    """Missing credentials or a rejected OAuth grant."""
    default_code = "CARRIER_AUTH_FAILED"
    default_severity = "P1"


class RateRequestError(CarrierError):
    """Carrier rate endpoint did not return success."""
    default_code = "CARRIER_RATE_FAILED"


class ShipmentValidationError(RateRequestError):
    """Shipment is missing fields the carrier requires."""
    default_code = "SHIPMENT_VALIDATION_FAILED"
    default_severity = "P3"

    def __init__(self, message: str, missing_fields: Optional[List[str]] = None, **kwargs):
        details = kwargs.pop("details", {})
        details["missing_fields"] = list(missing_fields or [])
        self.missing_fields = list(missing_fields or [])
        super().__init__(message, details=details, **kwargs)


# =============================================================================
# AGGREGATE ERRORS (fatal to the whole request)
# =============================================================================

class NoQuotesError(QuoteEngineError):
    """Every selected carrier failed or returned nothing."""
    default_code = "NO_QUOTES"
    default_severity = "P1"

    def __init__(self, warnings: Optional[List[str]] = None, **kwargs):
        self.warnings = list(warnings or [])
        detail = " | ".join(self.warnings) if self.warnings else "No quotes returned"
        details = kwargs.pop("details", {})
        details["warnings"] = self.warnings
        super().__init__(detail, details=details, **kwargs)

    @property
    def detail(self) -> str:
        return self.message
