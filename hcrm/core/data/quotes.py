"""
Quote Fetcher
=============

Fetch a short aphorism from the hitokoto service. Quote unavailability never
blocks the card: every failure falls back to a fixed default.
"""

from typing import Any, Iterable, List, Optional, Tuple

import aiohttp

from hcrm.config.logging import get_logger
from hcrm.config.settings import get_settings
from hcrm.core.exceptions import CardError

logger = get_logger(__name__)

DEFAULT_QUOTE = "生活明朗，万物可爱。"


class QuoteServiceError(CardError):
    """Exception raised when the quote service returns an unusable response."""

    pass


def build_query(categories: Iterable[str]) -> List[Tuple[str, str]]:
    """Query parameters with one repeated ``c`` entry per category."""
    params = [("encode", "json")]
    params.extend(("c", code) for code in sorted(set(categories)))
    return params


def _extract_quote(payload: Any) -> str:
    if not isinstance(payload, dict):
        raise QuoteServiceError(f"unexpected payload type {type(payload).__name__}")
    text = payload.get("hitokoto")
    if not isinstance(text, str) or not text.strip():
        raise QuoteServiceError("payload has no hitokoto text")
    return text.strip()


async def _request_quote(session: aiohttp.ClientSession, categories: Iterable[str]) -> str:
    settings = get_settings()
    timeout = aiohttp.ClientTimeout(total=settings.hitokoto_timeout)
    async with session.get(
        settings.hitokoto_url,
        params=build_query(categories),
        headers={"User-Agent": settings.user_agent, "Accept": "application/json"},
        timeout=timeout,
    ) as response:
        if response.status < 200 or response.status >= 300:
            raise QuoteServiceError(f"hitokoto returned HTTP {response.status}")
        payload = await response.json(content_type=None)
    return _extract_quote(payload)


async def fetch_quote(
    categories: Iterable[str], session: Optional[aiohttp.ClientSession] = None
) -> str:
    """
    Fetch a hitokoto quote.

    Args:
        categories: Hitokoto category codes to select from, empty for any
        session: Optional shared aiohttp session

    Returns:
        Quote text, or the default aphorism when the service is unavailable
    """
    categories = list(categories)
    try:
        if session is not None:
            quote = await _request_quote(session, categories)
        else:
            async with aiohttp.ClientSession() as own_session:
                quote = await _request_quote(own_session, categories)
    except Exception as e:
        logger.warning(
            "Hitokoto fetch failed, using default quote",
            error=str(e) or type(e).__name__,
            categories=categories,
        )
        return DEFAULT_QUOTE

    logger.debug("Fetched hitokoto quote", length=len(quote))
    return quote
