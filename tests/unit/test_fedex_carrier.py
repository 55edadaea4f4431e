"""
Tests for the FedEx carrier: rate payload, response mapping, transit parsing.
"""
from dataclasses import replace

import httpx
import pytest

from carrier_stubs import FEDEX_HOST, fedex_rate_detail, form_body, json_body
from shipping_quotes.core.exceptions import AuthError, RateRequestError
from shipping_quotes.models.carrier import CarrierCode, CarrierCredentials
from shipping_quotes.modules.shipping.carriers import CarrierFactory
from shipping_quotes.modules.shipping.carriers.fedex import FedExCarrier, parse_transit
from shipping_quotes.schemas.shipping import ShipmentSpec


@pytest.fixture
def fedex(engine_config, carrier_stub) -> FedExCarrier:
    return CarrierFactory.create(CarrierCode.FEDEX, engine_config, carrier_stub.client())


@pytest.mark.parametrize("token,expected", [
    ("ONE_DAY", 1),
    ("TWO_DAYS", 2),
    ("THREE_DAYS", 3),
    ("SEVEN_DAYS", 7),
    ("NEXT_DAY", None),
    ("EIGHT_DAYS", None),
    ("", None),
    (None, None),
    (3, None),
])
def test_parse_transit(token, expected):
    assert parse_transit(token) == expected


class TestFedExRateRequest:

    def test_minimal_payload(self, fedex, shipment):
        payload = fedex.build_rate_request(shipment)
        assert payload["accountNumber"] == {"value": "510087000"}

        requested = payload["requestedShipment"]
        assert requested["shipper"]["address"] == {"postalCode": "10001", "countryCode": "US"}
        assert requested["recipient"]["address"] == {
            "postalCode": "94105",
            "countryCode": "US",
            "residential": False,
        }
        assert requested["pickupType"] == "DROPOFF_AT_FEDEX_LOCATION"
        assert requested["rateRequestType"] == ["ACCOUNT", "LIST"]
        assert requested["requestedPackageLineItems"] == [{"weight": {"units": "LB", "value": 5}}]
        assert "shipDateStamp" not in requested

    def test_optional_fields(self, fedex):
        spec = ShipmentSpec(
            origin_zip="10001",
            dest_zip="94105",
            weight_lb=2.5,
            dimensions_in={"length": 12, "width": 8, "height": 4},
            declared_value=99.99,
            ship_date="2026-11-02",
            residential=True,
            origin_state="NY",
        )
        requested = fedex.build_rate_request(spec)["requestedShipment"]
        item = requested["requestedPackageLineItems"][0]

        assert item["weight"] == {"units": "LB", "value": 2.5}
        assert item["dimensions"] == {"length": 12, "width": 8, "height": 4, "units": "IN"}
        assert item["declaredValue"] == {"currency": "USD", "amount": 99.99}
        assert requested["recipient"]["address"]["residential"] is True
        assert requested["shipper"]["address"]["stateOrProvinceCode"] == "NY"
        assert requested["shipDateStamp"] == "2026-11-02"


class TestFedExRateResponse:

    def test_mapping(self, fedex):
        quotes = fedex.parse_rate_response({"output": {"rateReplyDetails": [
            fedex_rate_detail("FedEx Ground", 11.25, "FOUR_DAYS"),
            fedex_rate_detail("FedEx Priority Overnight", 64.3, day_format="2026-11-03T10:30:00"),
        ]}})

        assert quotes[0].carrier is CarrierCode.FEDEX
        assert quotes[0].service_name == "FedEx Ground"
        assert quotes[0].total_charge == 11.25
        assert quotes[0].transit_days == 4
        assert quotes[1].transit_days is None
        assert quotes[1].estimated_delivery_date == "2026-11-03T10:30:00"

    def test_charge_fallbacks(self, fedex):
        quotes = fedex.parse_rate_response({"output": {"rateReplyDetails": [
            {
                "serviceType": "FEDEX_2_DAY",
                "ratedShipmentDetails": [{"totalNetCharge": {"amount": "40.10", "currency": "USD"}}],
            },
            {
                "serviceName": "FedEx Express Saver",
                "ratedShipmentDetails": [{
                    "shipmentRateDetail": {"totalNetChargeWithDutiesAndTaxes": 33.5},
                }],
            },
            {"serviceName": "FedEx Home Delivery"},
        ]}})

        assert quotes[0].service_name == "FEDEX_2_DAY"
        assert quotes[0].total_charge == 40.1
        assert quotes[1].total_charge == 33.5
        assert quotes[2].total_charge == 0.0

    def test_delivery_date_from_dates_or_times(self, fedex):
        detail = fedex_rate_detail("FedEx 2Day", 40)
        detail["commit"] = {"datesOrTimes": [{"dateOrTimestamp": "2026-11-04T17:00:00"}]}
        detail["transitTime"] = "TWO_DAYS"

        quote = fedex.parse_rate_response({"output": {"rateReplyDetails": [detail]}})[0]
        assert quote.estimated_delivery_date == "2026-11-04T17:00:00"
        assert quote.transit_days == 2

    def test_empty_response(self, fedex):
        assert fedex.parse_rate_response({"output": {}}) == []


class TestFedExPipeline:

    @pytest.mark.asyncio
    async def test_form_body_fallback_then_rate(self, fedex, carrier_stub, shipment):
        def token(request):
            if "Authorization" in request.headers:
                return httpx.Response(401, text="NOT.AUTHORIZED.ERROR")
            return httpx.Response(200, json={"access_token": "form-token"})

        carrier_stub.fedex_token = token
        quotes = await fedex.get_rates(shipment)

        requests = carrier_stub.requests_to(FEDEX_HOST)
        assert [r.url.path for r in requests] == ["/oauth/token", "/oauth/token", "/rate/v1/rates/quotes"]
        assert form_body(requests[1])["client_id"] == "fedex-id"
        assert requests[2].headers["Authorization"] == "Bearer form-token"
        assert json_body(requests[2])["accountNumber"]["value"] == "510087000"
        assert quotes[0].service_name == "FedEx Ground"

    @pytest.mark.asyncio
    async def test_rate_error(self, fedex, carrier_stub, shipment):
        carrier_stub.fedex_rate = lambda r: httpx.Response(400, text='{"errors":[{"code":"ZIP"}]}')
        with pytest.raises(RateRequestError) as exc_info:
            await fedex.get_rates(shipment)
        assert exc_info.value.message == 'FedEx rate error 400 {"errors":[{"code":"ZIP"}]}'

    @pytest.mark.asyncio
    async def test_rate_response_not_json(self, fedex, carrier_stub, shipment):
        carrier_stub.fedex_rate = lambda r: httpx.Response(200, text="<html>maintenance</html>")
        with pytest.raises(RateRequestError, match="not valid JSON"):
            await fedex.get_rates(shipment)

    @pytest.mark.asyncio
    async def test_missing_credentials(self, engine_config, carrier_stub, shipment):
        config = replace(engine_config, fedex=CarrierCredentials())
        fedex = CarrierFactory.create(CarrierCode.FEDEX, config, carrier_stub.client())
        with pytest.raises(AuthError, match="FedEx credentials missing"):
            await fedex.get_rates(shipment)
        assert carrier_stub.requests == []


def test_invalid_net_charge_falls_back(engine_config, carrier_stub):
    fedex = CarrierFactory.create(CarrierCode.FEDEX, engine_config, carrier_stub.client())
    quotes = fedex.parse_rate_response({"output": {"rateReplyDetails": [
        {
            "serviceName": "FedEx Ground",
            "ratedShipmentDetails": [{
                "totalNetCharge": {"amount": "NaN"},
                "shipmentRateDetail": {"totalNetChargeWithDutiesAndTaxes": 14.2},
            }],
        },
        {"serviceName": "FedEx 2Day", "ratedShipmentDetails": [{"totalNetCharge": -3}]},
    ]}})
    assert [q.total_charge for q in quotes] == [14.2, 0.0]
