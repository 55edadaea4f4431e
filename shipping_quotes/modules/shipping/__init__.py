"""
Shipping Module v1.0.0

- BaseCarrier interface for all carrier implementations
- CarrierFactory for dependency injection
- UPS and FedEx rate quoting behind one canonical Quote type
"""
from shipping_quotes.modules.shipping.carriers import CarrierFactory, register_carrier
from shipping_quotes.modules.shipping.carriers.base import BaseCarrier, Quote

__all__ = [
    "CarrierFactory",
    "register_carrier",
    "BaseCarrier",
    "Quote",
]
