"""
Tests for the UPS carrier: rate payload, response mapping, request pipeline.
"""
import httpx
import pytest

from carrier_stubs import UPS_RATE_HOST, UPS_TOKEN_HOST, json_body, ups_rated_shipment
from shipping_quotes.core.exceptions import AuthError, RateRequestError, ShipmentValidationError
from shipping_quotes.models.carrier import CarrierCode
from shipping_quotes.modules.shipping.carriers import CarrierFactory
from shipping_quotes.modules.shipping.carriers.ups import UPSCarrier
from shipping_quotes.schemas.shipping import ShipmentSpec
from shipping_quotes.services.quote_aggregator import QuoteAggregator
from shipping_quotes.services.quote_filters import process_quotes


@pytest.fixture
def ups(engine_config, carrier_stub) -> UPSCarrier:
    return CarrierFactory.create(CarrierCode.UPS, engine_config, carrier_stub.client())


class TestUPSRateRequest:

    def test_minimal_payload(self, ups, shipment):
        payload = ups.build_rate_request(shipment)
        request = payload["RateRequest"]
        assert "RequestOption" not in request["Request"]
        assert request["Request"]["TransactionReference"]["CustomerContext"] == "Shipping Quote"

        ship = request["Shipment"]
        assert ship["Shipper"]["Address"] == {"PostalCode": "10001", "CountryCode": "US"}
        assert ship["Shipper"]["ShipperNumber"] == "A1B2C3"
        assert ship["ShipTo"]["Address"] == {"PostalCode": "94105", "CountryCode": "US"}
        assert ship["ShipmentRatingOptions"] == {"RateChartIndicator": ""}
        assert "DeliveryTimeInformation" not in ship

        package = ship["Package"][0]
        assert package["PackagingType"] == {"Code": "02"}
        assert package["PackageWeight"] == {"UnitOfMeasurement": {"Code": "LBS"}, "Weight": "5"}
        assert "Dimensions" not in package
        assert "PackageServiceOptions" not in package

    def test_optional_fields(self, ups):
        spec = ShipmentSpec(
            origin_zip="10001",
            dest_zip="94105",
            weight_lb=2.5,
            dimensions_in={"length": 12, "width": 8.5, "height": 4},
            declared_value=150,
            ship_date="2026-11-02",
            residential=True,
            dest_state="ca",
        )
        ship = ups.build_rate_request(spec)["RateRequest"]["Shipment"]
        package = ship["Package"][0]

        assert package["PackageWeight"]["Weight"] == "2.5"
        assert package["Dimensions"] == {
            "UnitOfMeasurement": {"Code": "IN"},
            "Length": "12",
            "Width": "8.5",
            "Height": "4",
        }
        assert package["PackageServiceOptions"]["DeclaredValue"] == {
            "CurrencyCode": "USD",
            "MonetaryValue": "150",
        }
        assert ship["ShipTo"]["Address"]["ResidentialAddressIndicator"] == ""
        assert ship["ShipTo"]["Address"]["StateProvinceCode"] == "CA"
        assert ship["DeliveryTimeInformation"]["Pickup"] == {"Date": "20261102"}

    def test_rate_headers(self, ups):
        headers = ups.rate_headers()
        assert headers["transId"].startswith("quote_")
        assert headers["transactionSrc"] == "shipping-quotes"


class TestUPSRateResponse:

    def test_rated_shipment_list(self, ups):
        quotes = ups.parse_rate_response({"RateResponse": {"RatedShipment": [
            ups_rated_shipment("UPS Ground", "12.50"),
            ups_rated_shipment("UPS 2nd Day Air", "31.07", days=2, delivery_date="20261104"),
        ]}})

        assert [q.service_name for q in quotes] == ["UPS Ground", "UPS 2nd Day Air"]
        assert quotes[0].carrier is CarrierCode.UPS
        assert quotes[0].total_charge == 12.5
        assert quotes[0].transit_days is None
        assert quotes[0].estimated_delivery_date is None
        assert quotes[1].transit_days == 2
        assert quotes[1].estimated_delivery_date == "20261104"

    def test_single_rated_shipment_object(self, ups):
        quotes = ups.parse_rate_response({
            "RateResponse": {"RatedShipment": ups_rated_shipment("UPS Next Day Air", "88.10", days=1)}
        })
        assert len(quotes) == 1
        assert quotes[0].transit_days == 1

    def test_service_code_fallback_and_bad_charge(self, ups):
        quotes = ups.parse_rate_response({"RateResponse": {"RatedShipment": [
            {"Service": {"Code": "03"}, "TotalCharges": {"MonetaryValue": "n/a"}},
        ]}})
        assert quotes[0].service_name == "03"
        assert quotes[0].total_charge == 0.0

    def test_empty_response(self, ups):
        assert ups.parse_rate_response({}) == []


class TestUPSPipeline:

    @pytest.mark.asyncio
    async def test_get_rates_uses_bearer_token(self, ups, carrier_stub, shipment):
        quotes = await ups.get_rates(shipment)

        assert [q.service_name for q in quotes] == ["UPS Ground"]
        assert len(carrier_stub.requests_to(UPS_TOKEN_HOST)) == 1
        rate_request = carrier_stub.requests_to(UPS_RATE_HOST)[0]
        assert rate_request.url.path == "/api/rating/v2403/Rate"
        assert rate_request.headers["Authorization"] == "Bearer ups-token"
        assert "transId" in rate_request.headers
        assert json_body(rate_request)["RateRequest"]["Shipment"]["ShipTo"]["Address"]["PostalCode"] == "94105"

    @pytest.mark.asyncio
    async def test_fresh_token_per_call(self, ups, carrier_stub, shipment):
        await ups.get_rates(shipment)
        await ups.get_rates(shipment)
        assert len(carrier_stub.requests_to(UPS_TOKEN_HOST)) == 2

    @pytest.mark.asyncio
    async def test_missing_fields_rejected_before_network(self, ups, carrier_stub):
        with pytest.raises(ShipmentValidationError) as exc_info:
            await ups.get_rates(ShipmentSpec(origin_zip="10001"))
        assert exc_info.value.missing_fields == ["dest_zip", "weight_lb"]
        assert carrier_stub.requests == []

    @pytest.mark.asyncio
    async def test_rate_error_carries_status_and_body(self, ups, carrier_stub, shipment):
        carrier_stub.ups_rate = lambda r: httpx.Response(500, text="Internal")
        with pytest.raises(RateRequestError) as exc_info:
            await ups.get_rates(shipment)
        assert exc_info.value.message == "UPS rate error 500 Internal"
        assert exc_info.value.status == 500

    @pytest.mark.asyncio
    async def test_basic_only_no_fallback(self, ups, carrier_stub, shipment):
        carrier_stub.ups_token = lambda r: httpx.Response(401, text="Unauthorized")
        with pytest.raises(AuthError) as exc_info:
            await ups.get_rates(shipment)
        assert exc_info.value.message == "UPS auth failed 401 Unauthorized"
        assert len(carrier_stub.requests_to(UPS_TOKEN_HOST)) == 1
        assert carrier_stub.requests_to(UPS_RATE_HOST) == []


class TestUPSChargeValidation:

    def test_non_finite_and_negative_charges_become_zero(self, ups):
        quotes = ups.parse_rate_response({"RateResponse": {"RatedShipment": [
            ups_rated_shipment("UPS Ground", "NaN"),
            ups_rated_shipment("UPS 3 Day Select", "inf"),
            ups_rated_shipment("UPS 2nd Day Air", "-4.50"),
            ups_rated_shipment("UPS Next Day Air", "30"),
        ]}})
        assert [q.total_charge for q in quotes] == [0.0, 0.0, 0.0, 30.0]

    @pytest.mark.asyncio
    async def test_bad_charge_keeps_results_sorted(self, engine_config, carrier_stub, shipment):
        carrier_stub.ups_rate = lambda r: httpx.Response(200, json={"RateResponse": {"RatedShipment": [
            ups_rated_shipment("UPS Ground", "NaN"),
            ups_rated_shipment("UPS Next Day Air", "30"),
            ups_rated_shipment("UPS 2nd Day Air", "5"),
        ]}})
        aggregator = QuoteAggregator(engine_config, http_client=carrier_stub.client())

        result = await aggregator.aggregate(shipment)
        charges = [q.total_charge for q in process_quotes(result.quotes)]

        assert all(a <= b for a, b in zip(charges, charges[1:]))
        assert charges == [0.0, 5.0, 11.25, 30.0]
