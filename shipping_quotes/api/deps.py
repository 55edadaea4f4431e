"""
API dependencies.

Configuration is built once per process; aggregators are built per request
from that fixed configuration.
"""
from functools import lru_cache
from typing import Optional

import httpx
from fastapi import Depends

from shipping_quotes.core.config import QuoteEngineConfig, Settings, settings
from shipping_quotes.services.quote_aggregator import QuoteAggregator


def get_settings() -> Settings:
    return settings


@lru_cache(maxsize=1)
def get_quote_engine_config() -> QuoteEngineConfig:
    return settings.quote_engine_config()


def get_http_client() -> Optional[httpx.AsyncClient]:
    """Outbound client override; None lets each aggregate call open its own."""
    return None


def get_quote_aggregator(
    config: QuoteEngineConfig = Depends(get_quote_engine_config),
    http_client: Optional[httpx.AsyncClient] = Depends(get_http_client),
) -> QuoteAggregator:
    return QuoteAggregator(config, http_client=http_client)
