"""
Diagnostics API Routes

GET /diag: credential presence and OAuth reachability per carrier.
"""
import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends

from shipping_quotes.api.deps import get_http_client, get_settings
from shipping_quotes.core.config import Settings
from shipping_quotes.services.diagnostics import run_diagnostics

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/diag")
async def get_diagnostics(
    settings: Settings = Depends(get_settings),
    http_client: Optional[httpx.AsyncClient] = Depends(get_http_client),
):
    """Probe each carrier's token endpoint. Always returns 200."""
    return await run_diagnostics(settings, http_client=http_client)
