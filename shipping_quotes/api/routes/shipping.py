"""
Shipping Quote API Routes

POST /shipping/quote: one shipment in, ranked UPS/FedEx quotes out.

Response shapes:
- 200 {"quotes": [...], "warnings": [...]}  (warnings only when a carrier failed)
- 502 {"error", "detail"} when no carrier produced a quote
- 500 {"error", "detail"} on unexpected failure
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from shipping_quotes.api.deps import get_quote_aggregator, get_settings
from shipping_quotes.core.config import Settings
from shipping_quotes.core.error_handler import server_failure_response
from shipping_quotes.core.exceptions import NoQuotesError
from shipping_quotes.schemas.shipping import normalize_quote_request
from shipping_quotes.services.demo_quotes import get_demo_quotes
from shipping_quotes.services.quote_aggregator import QuoteAggregator, select_carriers
from shipping_quotes.services.quote_filters import process_quotes

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/shipping")

NO_RATES_ERROR = "No rates from carriers"


@router.post("/quote")
async def get_shipping_quote(
    request: Request,
    only: Optional[str] = Query(None, description="Restrict to one carrier: ups or fedex"),
    demo: Optional[str] = Query(None, description="Set to 1 for demo quotes"),
    settings: Settings = Depends(get_settings),
    aggregator: QuoteAggregator = Depends(get_quote_aggregator),
):
    """
    Get comparable quotes from every selected carrier, cheapest first.

    The body is read raw and normalized permissively: a malformed body
    becomes an empty shipment, which each carrier then rejects.
    """
    if demo == "1" or settings.demo_mode_enabled:
        logger.info("Serving demo quotes")
        return {"quotes": [q.to_dict() for q in get_demo_quotes()]}

    try:
        quote_request = normalize_quote_request(await request.body())
        carriers = select_carriers(only if only is not None else quote_request.only)

        result = await aggregator.aggregate(quote_request.shipment, carriers)
        quotes = process_quotes(result.quotes, quote_request.service_filters)

    except NoQuotesError as e:
        return JSONResponse(
            status_code=502,
            content={"error": NO_RATES_ERROR, "detail": e.detail},
        )
    except Exception as e:
        logger.exception(f"Quote request failed: {e}")
        return server_failure_response(e)

    body = {"quotes": [q.to_dict() for q in quotes]}
    if result.warnings:
        body["warnings"] = result.warnings
    return body
