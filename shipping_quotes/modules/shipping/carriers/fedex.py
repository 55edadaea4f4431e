"""
FedEx Carrier Implementation v1.0.0

- Implements BaseCarrier interface
- OAuth 2.0 client credentials: HTTP Basic first, form-body fallback
  (account tiers differ in which transmission mode they accept)
- Rate and Transit Times API v1, account and list rates
- Registered via @register_carrier decorator
"""
import logging
import re
from typing import Any, Dict, List, Optional

from shipping_quotes.models.carrier import CarrierCode
from shipping_quotes.modules.shipping.carriers import register_carrier
from shipping_quotes.modules.shipping.carriers.auth import BasicHeaderStrategy, FormBodyStrategy
from shipping_quotes.modules.shipping.carriers.base import (
    BaseCarrier,
    Quote,
    json_number,
    to_float,
)
from shipping_quotes.schemas.shipping import ShipmentSpec

logger = logging.getLogger(__name__)

COUNTRY_CODE = "US"
PICKUP_TYPE = "DROPOFF_AT_FEDEX_LOCATION"
RATE_REQUEST_TYPES = ["ACCOUNT", "LIST"]
WEIGHT_UNIT = "LB"
DIMENSION_UNIT = "IN"
CURRENCY = "USD"

# FedEx transit time tokens, e.g. "TWO_DAYS"
TRANSIT_DAY_WORDS = {
    "ONE": 1,
    "TWO": 2,
    "THREE": 3,
    "FOUR": 4,
    "FIVE": 5,
    "SIX": 6,
    "SEVEN": 7,
}
_TRANSIT_PATTERN = re.compile(r"(\w+)_DAYS?")


def parse_transit(token: Optional[str]) -> Optional[int]:
    """
    Parse a FedEx transit time token into business days.

    "ONE_DAY" -> 1, "TWO_DAYS" -> 2, ... "SEVEN_DAYS" -> 7.
    Anything else ("NEXT_DAY", "", None) -> None.
    """
    if not isinstance(token, str):
        return None
    match = _TRANSIT_PATTERN.search(token)
    if not match:
        return None
    return TRANSIT_DAY_WORDS.get(match.group(1))


def _charge_amount(value: Any) -> Optional[float]:
    """Charges arrive either as a bare number or as {"amount": ..., "currency": ...}."""
    if isinstance(value, dict):
        return to_float(value.get("amount"), None)
    return to_float(value, None)


def _fedex_address(postal_code: str, state: Optional[str] = None) -> Dict[str, Any]:
    address = {
        "postalCode": postal_code,
        "countryCode": COUNTRY_CODE,
    }
    if state:
        address["stateOrProvinceCode"] = state
    return address


@register_carrier(CarrierCode.FEDEX)
class FedExCarrier(BaseCarrier):
    """FedEx shipping carrier implementation."""

    _auth_strategies = (BasicHeaderStrategy(), FormBodyStrategy())

    @property
    def carrier_code(self) -> CarrierCode:
        return CarrierCode.FEDEX

    @property
    def credentials(self):
        return self._config.fedex

    @property
    def token_url(self) -> str:
        return self._endpoints.fedex_token_url

    @property
    def rate_url(self) -> str:
        return self._endpoints.fedex_rate_url

    @property
    def auth_strategies(self):
        return self._auth_strategies

    def _build_line_item(self, spec: ShipmentSpec) -> Dict[str, Any]:
        item = {
            "weight": {"units": WEIGHT_UNIT, "value": json_number(spec.weight_lb)},
        }

        if spec.dimensions_in is not None:
            item["dimensions"] = {
                "length": json_number(spec.dimensions_in.length),
                "width": json_number(spec.dimensions_in.width),
                "height": json_number(spec.dimensions_in.height),
                "units": DIMENSION_UNIT,
            }

        if spec.declared_value is not None:
            item["declaredValue"] = {
                "currency": CURRENCY,
                "amount": json_number(spec.declared_value),
            }

        return item

    def build_rate_request(self, spec: ShipmentSpec) -> Dict[str, Any]:
        recipient_address = _fedex_address(spec.dest_zip, spec.dest_state)
        recipient_address["residential"] = spec.residential

        requested_shipment = {
            "shipper": {"address": _fedex_address(spec.origin_zip, spec.origin_state)},
            "recipient": {"address": recipient_address},
            "pickupType": PICKUP_TYPE,
            "rateRequestType": list(RATE_REQUEST_TYPES),
            "requestedPackageLineItems": [self._build_line_item(spec)],
        }

        if spec.ship_date:
            requested_shipment["shipDateStamp"] = spec.ship_date

        return {
            "accountNumber": {"value": self.credentials.account_number or ""},
            "requestedShipment": requested_shipment,
        }

    def parse_rate_response(self, data: Dict[str, Any]) -> List[Quote]:
        output = data.get("output") or {}
        details = output.get("rateReplyDetails") or []

        quotes = []
        for detail in details:
            rated = detail.get("ratedShipmentDetails") or []
            first_rated = rated[0] if rated else {}

            amount = _charge_amount(first_rated.get("totalNetCharge"))
            if amount is None:
                rate_detail = first_rated.get("shipmentRateDetail") or {}
                amount = _charge_amount(rate_detail.get("totalNetChargeWithDutiesAndTaxes"))

            commit = detail.get("commit") or {}
            delivery_date = (commit.get("dateDetail") or {}).get("dayFormat")
            if not delivery_date:
                dates = commit.get("datesOrTimes") or []
                if dates:
                    delivery_date = dates[0].get("dateOrTimestamp")

            transit = commit.get("transitTime") or detail.get("transitTime")

            quotes.append(Quote(
                carrier=CarrierCode.FEDEX,
                service_name=detail.get("serviceName") or detail.get("serviceType") or "",
                total_charge=amount if amount is not None else 0.0,
                transit_days=parse_transit(transit),
                estimated_delivery_date=delivery_date or None,
            ))

        return quotes
