"""
Demo quotes served while carrier credentials are not configured,
so the frontend can be exercised without live carrier accounts.
"""
from typing import List

from shipping_quotes.models.carrier import CarrierCode
from shipping_quotes.modules.shipping.carriers.base import Quote

DEMO_NOTE = "demo"

DEMO_QUOTES = (
    Quote(CarrierCode.UPS, "UPS® Ground", 38.45, transit_days=4, notes=DEMO_NOTE),
    Quote(CarrierCode.FEDEX, "FedEx Ground®", 36.90, transit_days=4, notes=DEMO_NOTE),
    Quote(CarrierCode.UPS, "UPS 2nd Day Air®", 94.20, transit_days=2, notes=DEMO_NOTE),
    Quote(CarrierCode.FEDEX, "FedEx 2Day®", 92.10, transit_days=2, notes=DEMO_NOTE),
)


def get_demo_quotes() -> List[Quote]:
    """The fixed demo quote set, in fixed order, regardless of shipment."""
    return list(DEMO_QUOTES)
