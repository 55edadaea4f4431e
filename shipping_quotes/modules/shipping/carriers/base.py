"""
Base Carrier Interface v1.0.0

- All carriers implement this interface
- Each rate call is a two-stage pipeline: acquire a fresh token, then rate
- Carriers provide their own:
  - Authentication strategy list
  - Rate request payload
  - Rate response mapping to canonical Quotes
"""
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import httpx

from shipping_quotes.core.config import QuoteEngineConfig
from shipping_quotes.core.endpoints import CarrierEndpoints, resolve_endpoints
from shipping_quotes.core.exceptions import (
    RateRequestError,
    ShipmentValidationError,
    truncate_body,
)
from shipping_quotes.models.carrier import CarrierCode, CarrierCredentials
from shipping_quotes.modules.shipping.carriers.auth import AccessToken, AuthStrategy, TokenProvider
from shipping_quotes.schemas.shipping import ShipmentSpec

logger = logging.getLogger(__name__)


# =============================================================================
# Carrier-Agnostic Data Classes
# =============================================================================

@dataclass(frozen=True)
class Quote:
    """Canonical price/transit quote. Currency is always USD."""
    carrier: CarrierCode
    service_name: str
    total_charge: float
    transit_days: Optional[int] = None
    estimated_delivery_date: Optional[str] = None  # carrier format, verbatim
    notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "carrier": self.carrier.value,
            "service_name": self.service_name,
            "total_charge": self.total_charge,
            "transit_days": self.transit_days,
            "estimated_delivery_date": self.estimated_delivery_date,
            "notes": self.notes,
        }


# =============================================================================
# Payload helpers
# =============================================================================

def format_number(value: float) -> str:
    """Render a number the way carrier string fields expect ("5", "5.5")."""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return str(number)


def json_number(value: float):
    """Integral floats become ints so payloads read 5, not 5.0."""
    number = float(value)
    return int(number) if number.is_integer() else number


def to_float(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    """Parse a carrier money amount; NaN, infinities and negatives give the default."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number) or number < 0:
        logger.warning(f"Ignoring invalid carrier amount {value!r}")
        return default
    return number


def to_positive_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


# =============================================================================
# Base Carrier Interface
# =============================================================================

class BaseCarrier(ABC):
    """
    Abstract base class for all shipping carriers.

    Subclasses describe their endpoints, auth strategies and payload
    mapping; the request pipeline itself lives here.
    """

    def __init__(
        self,
        config: QuoteEngineConfig,
        http_client: httpx.AsyncClient,
        endpoints: Optional[CarrierEndpoints] = None,
    ):
        """
        Initialize the carrier.

        Args:
            config: Process-wide quote engine configuration
            http_client: Client shared by the pipelines of one aggregate call
            endpoints: Hosts to call; resolved from config.mode when omitted
        """
        self._config = config
        self._http = http_client
        self._endpoints = endpoints or resolve_endpoints(config.mode)

    @property
    @abstractmethod
    def carrier_code(self) -> CarrierCode:
        """Return the carrier code enum value."""
        pass

    @property
    def carrier_name(self) -> str:
        """Return the human-readable carrier name."""
        return self.carrier_code.value

    @property
    @abstractmethod
    def credentials(self) -> CarrierCredentials:
        pass

    @property
    @abstractmethod
    def token_url(self) -> str:
        pass

    @property
    @abstractmethod
    def rate_url(self) -> str:
        pass

    @property
    @abstractmethod
    def auth_strategies(self) -> Sequence[AuthStrategy]:
        """Ordered OAuth strategies; the first success wins."""
        pass

    @abstractmethod
    def build_rate_request(self, spec: ShipmentSpec) -> Dict[str, Any]:
        """Build the carrier rate request document."""
        pass

    @abstractmethod
    def parse_rate_response(self, data: Dict[str, Any]) -> List[Quote]:
        """Map a successful carrier rate response to Quotes."""
        pass

    def rate_headers(self) -> Dict[str, str]:
        """Carrier-specific headers added to the rate call."""
        return {}

    @property
    def token_provider(self) -> TokenProvider:
        return TokenProvider(
            carrier_name=self.carrier_name,
            token_url=self.token_url,
            http_client=self._http,
            strategies=self.auth_strategies,
        )

    def validate_shipment(self, spec: ShipmentSpec) -> None:
        missing = spec.missing_required_fields()
        if missing:
            raise ShipmentValidationError(
                f"missing required shipment fields: {', '.join(missing)}",
                missing_fields=missing,
                carrier=self.carrier_name,
            )

    async def get_rates(self, spec: ShipmentSpec) -> List[Quote]:
        """
        Get shipping rates from the carrier.

        Returns:
            List of Quote objects for available services

        Raises:
            AuthError: credentials missing or rejected
            RateRequestError: rate endpoint did not return success
        """
        self.validate_shipment(spec)
        token = await self.token_provider.acquire_token(self.credentials)
        payload = self.build_rate_request(spec)
        data = await self._post_rate_request(token, payload)
        quotes = self.parse_rate_response(data)
        logger.info(f"Got {len(quotes)} rates from {self.carrier_name}")
        return quotes

    async def _post_rate_request(self, token: AccessToken, payload: Dict[str, Any]) -> Dict[str, Any]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": token.authorization_header,
        }
        headers.update(self.rate_headers())

        try:
            response = await self._http.post(self.rate_url, headers=headers, json=payload)
        except httpx.RequestError as e:
            logger.error(f"{self.carrier_name} rate request failed: {e!r}")
            raise RateRequestError(
                f"{self.carrier_name} rate request failed: {type(e).__name__} {e}".rstrip(),
                carrier=self.carrier_name,
            )

        logger.debug(f"{self.carrier_name} POST {self.rate_url} -> {response.status_code}")

        if not response.is_success:
            body = truncate_body(response.text)
            logger.error(f"{self.carrier_name} rate error: {response.status_code} - {body}")
            raise RateRequestError(
                f"{self.carrier_name} rate error {response.status_code} {body}".rstrip(),
                carrier=self.carrier_name,
                status=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError:
            raise RateRequestError(
                f"{self.carrier_name} rate response was not valid JSON",
                carrier=self.carrier_name,
                status=response.status_code,
                body=truncate_body(response.text),
            )
        if not isinstance(data, dict):
            raise RateRequestError(
                f"{self.carrier_name} rate response was not a JSON object",
                carrier=self.carrier_name,
                status=response.status_code,
            )
        return data

