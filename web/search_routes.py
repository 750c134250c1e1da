"""
Search Routes - Unified Free-Text Search API

GET /api/search              Aggregated local + external search
GET /api/search/suggestions  Location suggestions for a partial query
GET /api/search/enhanced     Legacy alias, redirects to /api/search
"""

from __future__ import annotations

import logging
from typing import Final, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, RedirectResponse

from core.aggregator import SearchAggregator


logger = logging.getLogger(__name__)


# =============================================================================
# Router Setup
# =============================================================================

router = APIRouter(prefix="/api/search", tags=["search"])

MAX_SUGGESTIONS: Final[int] = 8

# Exception details stay in the log
GENERIC_ERROR_MESSAGE: Final[str] = "Unknown error"

FALLBACK_SUGGESTIONS: Final[tuple[str, ...]] = (
    "Gaborone",
    "Francistown",
    "Phakalane",
    "Mogoditshane",
    "Lobatse",
    "Tlokweng",
)


def get_aggregator(request: Request) -> SearchAggregator:
    return request.app.state.aggregator


# =============================================================================
# Routes
# =============================================================================


@router.get("")
def search(
    request: Request,
    q: str = "",
    sort: str = "relevance",
    limit: Optional[str] = None,
):
    """
    Aggregated property search.

    Any string is a valid query and an unparseable limit falls back to the
    default, so this endpoint has no 400 path. Data source failures only
    shrink the result set; anything else is a 500.
    """
    try:
        response = get_aggregator(request).search(q, sort, limit)
    except Exception:
        logger.exception("Search aggregator error")
        return JSONResponse(
            status_code=500,
            content={"error": "Search failed", "message": GENERIC_ERROR_MESSAGE},
        )

    return response.to_dict()


@router.get("/suggestions")
def suggestions(q: str = ""):
    """Suggest known places containing the typed text."""
    term = q.strip().lower()
    if not term:
        return []
    matches = [place for place in FALLBACK_SUGGESTIONS if term in place.lower()]
    return matches[:MAX_SUGGESTIONS]


@router.get("/enhanced", include_in_schema=False)
def enhanced_search(request: Request):
    """Backward compatibility: redirect to the unified search endpoint."""
    query_string = request.url.query
    target = f"/api/search?{query_string}" if query_string else "/api/search"
    return RedirectResponse(url=target, status_code=302)
