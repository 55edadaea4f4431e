"""
OAuth reachability diagnostics.

Reports which credentials are configured and whether each carrier's token
endpoint accepts them. Only a single HTTP Basic attempt is made per carrier;
secrets are never echoed back.
"""
import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from shipping_quotes.core.config import QuoteEngineConfig, Settings
from shipping_quotes.core.endpoints import resolve_endpoints
from shipping_quotes.core.exceptions import AuthError, truncate_body
from shipping_quotes.models.carrier import CarrierCredentials
from shipping_quotes.modules.shipping.carriers.auth import BasicHeaderStrategy, TokenProvider

logger = logging.getLogger(__name__)

CREDENTIAL_SETTINGS = (
    "UPS_CLIENT_ID",
    "UPS_CLIENT_SECRET",
    "FEDEX_CLIENT_ID",
    "FEDEX_CLIENT_SECRET",
    "FEDEX_ACCOUNT_NUMBER",
    "UPS_ACCOUNT_NUMBER",
)


async def probe_token_endpoint(
    carrier_name: str,
    token_url: str,
    credentials: CarrierCredentials,
    http_client: httpx.AsyncClient,
) -> Dict[str, Any]:
    """Attempt one Basic-auth token grant and report the outcome."""
    if not credentials.is_configured:
        return {"ok": False, "error": f"Missing {carrier_name} env vars"}

    strategy = BasicHeaderStrategy()
    provider = TokenProvider(carrier_name, token_url, http_client, [strategy])
    try:
        response = await provider.request_token(strategy, credentials)
    except AuthError as e:
        return {"ok": False, "error": e.message}

    return {
        "ok": response.is_success,
        "status": response.status_code,
        "text": "OK" if response.is_success else truncate_body(response.text),
    }


async def run_diagnostics(
    settings: Settings,
    http_client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, Any]:
    config: QuoteEngineConfig = settings.quote_engine_config()
    endpoints = resolve_endpoints(config.mode)

    async def _probe_all(client: httpx.AsyncClient):
        return await asyncio.gather(
            probe_token_endpoint("UPS", endpoints.ups_token_url, config.ups, client),
            probe_token_endpoint("FedEx", endpoints.fedex_token_url, config.fedex, client),
        )

    if http_client is not None:
        ups_auth, fedex_auth = await _probe_all(http_client)
    else:
        async with httpx.AsyncClient(timeout=config.timeout_seconds) as client:
            ups_auth, fedex_auth = await _probe_all(client)

    logger.info(f"OAuth diagnostics: UPS ok={ups_auth['ok']} FedEx ok={fedex_auth['ok']}")
    return {
        "mode": config.mode.value,
        "env": {name: bool(getattr(settings, name, "")) for name in CREDENTIAL_SETTINGS},
        "upsAuth": ups_auth,
        "fedexAuth": fedex_auth,
    }
