"""
Quote post-processing: service-category filters and price ordering.
"""
import logging
from typing import Iterable, List, Optional, Sequence

from shipping_quotes.modules.shipping.carriers.base import Quote

logger = logging.getLogger(__name__)

# Filter token -> service name keywords
SERVICE_KEYWORDS = {
    "ground": ("ground", "home delivery"),
    "2day": ("2 day", "2day"),
    "overnight": ("overnight", "next day", "priority overnight", "standard overnight", "saver"),
}


def _keywords_for(filters: Iterable[str]) -> List[str]:
    keywords = []
    for token in filters:
        token = (token or "").strip().lower()
        if not token:
            continue
        # Unknown tokens match literally against the service name
        keywords.extend(SERVICE_KEYWORDS.get(token, (token,)))
    return keywords


def _matches(quote: Quote, keywords: Sequence[str]) -> bool:
    name = (quote.service_name or "").lower()
    return any(keyword in name for keyword in keywords)


def matches_filters(quote: Quote, filters: Sequence[str]) -> bool:
    """True when the quote matches at least one filter (or no filters are given)."""
    keywords = _keywords_for(filters)
    return not keywords or _matches(quote, keywords)


def process_quotes(quotes: Sequence[Quote], filters: Optional[Sequence[str]] = None) -> List[Quote]:
    """
    Filter quotes by service category, then sort ascending by total charge.

    The sort is stable, so equal charges keep carrier-invocation order.
    """
    keywords = _keywords_for(filters or [])
    if keywords:
        kept = [q for q in quotes if _matches(q, keywords)]
        logger.debug(f"Service filters {list(filters)} kept {len(kept)}/{len(quotes)} quotes")
    else:
        kept = list(quotes)

    return sorted(kept, key=lambda q: q.total_charge)
