"""API routes for Where Next.

SUGGESTIONS (cache-first):
- In-memory TTL cache keyed by normalized trip preferences
- Cache miss: AI provider → seeded suggestions → hardcoded defaults
- The endpoint always answers 200 with a suggestion list, even for
  malformed bodies; ``source`` tells you which strategy produced it.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request

from where_next.config import get_settings
from where_next.models import CacheStatsResponse, SuggestionResponse
from where_next.services.suggestions import (
    SuggestionRequestHandler,
    create_suggestion_handler,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# Service instances
_suggestion_handler: SuggestionRequestHandler | None = None


def get_suggestion_handler() -> SuggestionRequestHandler:
    global _suggestion_handler
    if _suggestion_handler is None:
        _suggestion_handler = create_suggestion_handler(get_settings())
    return _suggestion_handler


async def close_services() -> None:
    global _suggestion_handler
    if _suggestion_handler is not None:
        await _suggestion_handler.aclose()
        _suggestion_handler = None


async def _read_body(request: Request) -> dict[str, Any]:
    """Decode the JSON body; anything but a JSON object counts as empty."""
    try:
        body = await request.json()
    except ValueError:
        logger.info("[SUGGEST] Unparseable request body, using defaults")
        return {}
    if not isinstance(body, dict):
        logger.info(f"[SUGGEST] Expected a JSON object, got {type(body).__name__}, using defaults")
        return {}
    return body


# ============================================================================
# SUGGESTIONS ENDPOINT
# ============================================================================

@router.post(
    "/ai/suggestions",
    response_model=SuggestionResponse,
    response_model_exclude_none=True,
)
async def suggest_trips(
    request: Request,
    handler: SuggestionRequestHandler = Depends(get_suggestion_handler),
) -> SuggestionResponse:
    """Suggest destinations for the given trip preferences.

    Body fields (all optional): ``from``, ``budget`` or ``budgetAmount``,
    ``vibes``, ``adults``, ``kids``, ``additionalDetails``, ``startDate``,
    ``endDate``, ``tripDuration``, ``budgetStyle``.
    """
    body = await _read_body(request)
    return await handler.handle(body)


@router.get("/ai/suggestions/cache-stats", response_model=CacheStatsResponse)
async def suggestion_cache_stats(
    handler: SuggestionRequestHandler = Depends(get_suggestion_handler),
) -> CacheStatsResponse:
    """Hit/miss counters and occupancy of the suggestion cache since startup."""
    return handler.stats()
