"""
Carrier Registry and Factory v1.0.0

- CarrierFactory creates carrier instances based on CarrierCode
- Carriers register themselves with @register_carrier
- Carriers can share code internally (codependent, not isolated)
"""
from typing import Dict, List, Optional, Type
import logging

import httpx

from shipping_quotes.core.config import QuoteEngineConfig
from shipping_quotes.core.endpoints import CarrierEndpoints
from shipping_quotes.models.carrier import CarrierCode
from shipping_quotes.modules.shipping.carriers.base import BaseCarrier

logger = logging.getLogger(__name__)

# Registry of carrier implementations
_CARRIER_REGISTRY: Dict[CarrierCode, Type[BaseCarrier]] = {}


def register_carrier(carrier_code: CarrierCode):
    """
    Decorator to register a carrier implementation.

    Usage:
        @register_carrier(CarrierCode.UPS)
        class UPSCarrier(BaseCarrier):
            ...
    """
    def decorator(cls: Type[BaseCarrier]):
        _CARRIER_REGISTRY[carrier_code] = cls
        logger.debug(f"Registered carrier: {carrier_code.value} -> {cls.__name__}")
        return cls
    return decorator


class CarrierFactory:
    """Factory for creating carrier instances."""

    @classmethod
    def create(
        cls,
        carrier_code: CarrierCode,
        config: QuoteEngineConfig,
        http_client: httpx.AsyncClient,
        endpoints: Optional[CarrierEndpoints] = None,
    ) -> BaseCarrier:
        """
        Build a carrier instance.

        Raises:
            KeyError if no implementation is registered for the code
        """
        carrier_cls = _CARRIER_REGISTRY.get(carrier_code)
        if not carrier_cls:
            raise KeyError(f"No implementation registered for carrier: {carrier_code.value}")
        return carrier_cls(config, http_client, endpoints)

    @classmethod
    def get_registered_carriers(cls) -> List[CarrierCode]:
        """Get list of all registered carrier codes."""
        return list(_CARRIER_REGISTRY.keys())


# Import carriers to trigger registration
# These imports must be at the bottom to avoid circular imports
from shipping_quotes.modules.shipping.carriers.ups import UPSCarrier  # noqa: E402, F401
from shipping_quotes.modules.shipping.carriers.fedex import FedExCarrier  # noqa: E402, F401
