"""
UPS Carrier Implementation v1.0.0

- Implements BaseCarrier interface
- OAuth 2.0 client credentials via HTTP Basic only
- Rating API v2403 (request option fixed by the URL path)
- Registered via @register_carrier decorator
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from shipping_quotes.models.carrier import CarrierCode
from shipping_quotes.modules.shipping.carriers import register_carrier
from shipping_quotes.modules.shipping.carriers.auth import BasicHeaderStrategy
from shipping_quotes.modules.shipping.carriers.base import (
    BaseCarrier,
    Quote,
    format_number,
    to_float,
    to_positive_int,
)
from shipping_quotes.schemas.shipping import ShipmentSpec

logger = logging.getLogger(__name__)

COUNTRY_CODE = "US"
CUSTOMER_SUPPLIED_PACKAGE = "02"
WEIGHT_UNIT = "LBS"
DIMENSION_UNIT = "IN"
CURRENCY = "USD"
# Bill type for Time in Transit on rate requests (non-document)
PACKAGE_BILL_TYPE = "03"


def _ups_address(postal_code: str, state: Optional[str] = None) -> Dict[str, Any]:
    address = {
        "PostalCode": postal_code,
        "CountryCode": COUNTRY_CODE,
    }
    if state:
        address["StateProvinceCode"] = state[:5]
    return address


@register_carrier(CarrierCode.UPS)
class UPSCarrier(BaseCarrier):
    """UPS shipping carrier implementation."""

    _auth_strategies = (BasicHeaderStrategy(),)

    @property
    def carrier_code(self) -> CarrierCode:
        return CarrierCode.UPS

    @property
    def credentials(self):
        return self._config.ups

    @property
    def token_url(self) -> str:
        return self._endpoints.ups_token_url

    @property
    def rate_url(self) -> str:
        return self._endpoints.ups_rate_url

    @property
    def auth_strategies(self):
        return self._auth_strategies

    def rate_headers(self) -> Dict[str, str]:
        return {
            "transId": f"quote_{datetime.now().strftime('%Y%m%d%H%M%S%f')}",
            "transactionSrc": "shipping-quotes",
        }

    def _build_package(self, spec: ShipmentSpec) -> Dict[str, Any]:
        package = {
            "PackagingType": {"Code": CUSTOMER_SUPPLIED_PACKAGE},
            "PackageWeight": {
                "UnitOfMeasurement": {"Code": WEIGHT_UNIT},
                "Weight": format_number(spec.weight_lb),
            },
        }

        if spec.dimensions_in is not None:
            package["Dimensions"] = {
                "UnitOfMeasurement": {"Code": DIMENSION_UNIT},
                "Length": format_number(spec.dimensions_in.length),
                "Width": format_number(spec.dimensions_in.width),
                "Height": format_number(spec.dimensions_in.height),
            }

        if spec.declared_value is not None:
            package["PackageServiceOptions"] = {
                "DeclaredValue": {
                    "CurrencyCode": CURRENCY,
                    "MonetaryValue": format_number(spec.declared_value),
                }
            }

        return package

    def build_rate_request(self, spec: ShipmentSpec) -> Dict[str, Any]:
        shipper = {"Address": _ups_address(spec.origin_zip, spec.origin_state)}
        if self.credentials.account_number:
            shipper["ShipperNumber"] = self.credentials.account_number

        ship_to = {"Address": _ups_address(spec.dest_zip, spec.dest_state)}
        if spec.residential:
            ship_to["Address"]["ResidentialAddressIndicator"] = ""

        # Ship from is the shipper's location
        ship_from = {"Address": _ups_address(spec.origin_zip, spec.origin_state)}

        shipment = {
            "Shipper": shipper,
            "ShipTo": ship_to,
            "ShipFrom": ship_from,
            "Package": [self._build_package(spec)],
            "ShipmentRatingOptions": {"RateChartIndicator": ""},
        }

        if spec.ship_date:
            shipment["DeliveryTimeInformation"] = {
                "PackageBillType": PACKAGE_BILL_TYPE,
                "Pickup": {"Date": spec.ship_date.replace("-", "")},
            }

        return {
            "RateRequest": {
                "Request": {
                    "TransactionReference": {
                        "CustomerContext": self._config.ups_customer_context,
                    },
                },
                "Shipment": shipment,
            }
        }

    def parse_rate_response(self, data: Dict[str, Any]) -> List[Quote]:
        rate_response = data.get("RateResponse") or {}
        rated_shipments = rate_response.get("RatedShipment") or []

        if isinstance(rated_shipments, dict):
            rated_shipments = [rated_shipments]

        quotes = []
        for rs in rated_shipments:
            service = rs.get("Service") or {}
            total = rs.get("TotalCharges") or {}

            # Transit and delivery date are only reported for guaranteed services
            transit_days = None
            delivery_date = None
            guaranteed = rs.get("GuaranteedDelivery")
            if guaranteed is not None:
                transit_days = to_positive_int(guaranteed.get("BusinessDaysInTransit"))
                delivery_date = guaranteed.get("DeliveryDate") or None

            quotes.append(Quote(
                carrier=CarrierCode.UPS,
                service_name=service.get("Description") or service.get("Code") or "",
                total_charge=to_float(total.get("MonetaryValue"), 0.0),
                transit_days=transit_days,
                estimated_delivery_date=delivery_date,
            ))

        return quotes
