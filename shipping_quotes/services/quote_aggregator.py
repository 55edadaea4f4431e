"""
Multi-Carrier Quote Aggregator v1.0.0

- Fans one shipment out to every selected carrier concurrently
- Each carrier pipeline is isolated: a failure becomes a warning string
  and never cancels or delays a sibling
- Returns merged quotes in carrier-invocation order (unsorted)
- Raises NoQuotesError when no carrier produced a quote

Usage:
    aggregator = QuoteAggregator(settings.quote_engine_config())
    result = await aggregator.aggregate(spec, select_carriers("ups"))
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import httpx

from shipping_quotes.core.config import CARRIER_CONNECT_TIMEOUT_SECONDS, QuoteEngineConfig
from shipping_quotes.core.endpoints import resolve_endpoints
from shipping_quotes.core.exceptions import NoQuotesError, QuoteEngineError
from shipping_quotes.models.carrier import CarrierCode
from shipping_quotes.modules.shipping.carriers import CarrierFactory
from shipping_quotes.modules.shipping.carriers.base import Quote
from shipping_quotes.schemas.shipping import ShipmentSpec

logger = logging.getLogger(__name__)

# Invocation order; also the merge order of successful results
DEFAULT_CARRIERS = (CarrierCode.UPS, CarrierCode.FEDEX)


@dataclass
class CarrierOutcome:
    """Result of one carrier pipeline: quotes on success, error on failure."""
    carrier: CarrierCode
    quotes: List[Quote] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def warning(self) -> Optional[str]:
        if self.error is None:
            return None
        if isinstance(self.error, QuoteEngineError):
            message = self.error.message
        else:
            message = str(self.error) or type(self.error).__name__
        return f"{self.carrier.value}: {message}"


@dataclass
class AggregateResult:
    """Merged (unsorted) quotes plus one warning per failed carrier."""
    quotes: List[Quote] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    outcomes: List[CarrierOutcome] = field(default_factory=list)


def select_carriers(only: Optional[str] = None) -> List[CarrierCode]:
    """
    Resolve the carrier-selection hint.

    None/empty selects every carrier; "ups" or "fedex" (any case) selects
    exactly that one. Unknown hints fall back to every carrier.
    """
    if only is None or str(only).strip() == "":
        return list(DEFAULT_CARRIERS)

    carrier = CarrierCode.from_hint(only)
    if carrier is None:
        logger.warning(f"Unknown carrier hint {only!r}, querying all carriers")
        return list(DEFAULT_CARRIERS)
    return [carrier]


class QuoteAggregator:
    """
    Concurrent fan-out across carriers.

    An http_client may be injected (tests, shared pools); otherwise one
    client with the configured timeout is opened per aggregate() call.
    """

    def __init__(
        self,
        config: QuoteEngineConfig,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config
        self._http_client = http_client

    def _timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            self.config.timeout_seconds,
            connect=min(CARRIER_CONNECT_TIMEOUT_SECONDS, self.config.timeout_seconds),
        )

    async def aggregate(
        self,
        spec: ShipmentSpec,
        carriers: Optional[Sequence[CarrierCode]] = None,
    ) -> AggregateResult:
        """
        Get quotes from every selected carrier.

        Args:
            spec: Normalized shipment
            carriers: Carriers to query, in invocation order (default: all)

        Returns:
            AggregateResult with merged quotes and per-carrier warnings

        Raises:
            NoQuotesError: no carrier produced a quote
        """
        selected = list(carriers) if carriers else list(DEFAULT_CARRIERS)

        if self._http_client is not None:
            outcomes = await self._fan_out(spec, selected, self._http_client)
        else:
            async with httpx.AsyncClient(timeout=self._timeout()) as client:
                outcomes = await self._fan_out(spec, selected, client)

        result = AggregateResult(outcomes=outcomes)
        for outcome in outcomes:
            if outcome.ok:
                result.quotes.extend(outcome.quotes)
            else:
                result.warnings.append(outcome.warning)

        if not result.quotes:
            logger.error(f"No quotes from carriers: {result.warnings}")
            raise NoQuotesError(result.warnings)

        return result

    async def _fan_out(
        self,
        spec: ShipmentSpec,
        carriers: List[CarrierCode],
        client: httpx.AsyncClient,
    ) -> List[CarrierOutcome]:
        # Endpoints are resolved per request from the process-wide mode
        endpoints = resolve_endpoints(self.config.mode)
        instances = [
            CarrierFactory.create(code, self.config, client, endpoints)
            for code in carriers
        ]

        logger.info(f"Fetching rates from {', '.join(c.value for c in carriers)}")
        results = await asyncio.gather(
            *(carrier.get_rates(spec) for carrier in instances),
            return_exceptions=True,
        )

        outcomes = []
        for code, result in zip(carriers, results):
            if isinstance(result, Exception):
                logger.warning(f"Error getting rates from {code.value}: {result}")
                outcomes.append(CarrierOutcome(carrier=code, error=result))
            elif isinstance(result, BaseException):
                # Cancellation and interpreter exits are not carrier failures
                raise result
            else:
                outcomes.append(CarrierOutcome(carrier=code, quotes=list(result)))
        return outcomes
