"""
Search Aggregator - Unified Local + External Search Pipeline

Runs one free-text search end to end:
1. Interpret the query into structured criteria
2. Query the local store
3. Query the external intelligence provider
4. Merge and dedupe
5. Rank
6. Truncate to the requested limit

Either data source may fail; a failed branch contributes no results and
the search still succeeds with whatever the other branch returned.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, List

from .local_search import LocalSearch
from .models import SearchCriteria, UnifiedProperty
from .query_parser import parse_free_text
from .ranking import SORT_RELEVANCE, merge_and_dedupe, rank_results

if TYPE_CHECKING:
    from intel.base import BaseSearchProvider


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def parse_limit(value: Any) -> int:
    """
    Parse the requested result limit.

    Missing or unparseable values fall back to DEFAULT_LIMIT; the result
    is clamped to [1, MAX_LIMIT].
    """
    try:
        limit = int(str(value).strip())
    except (TypeError, ValueError):
        return DEFAULT_LIMIT
    if limit <= 0:
        return DEFAULT_LIMIT
    return min(limit, MAX_LIMIT)


@dataclass
class SearchStats:
    """Diagnostic counts for one search."""
    total: int
    local: int
    external: int
    merged: int

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "local": self.local,
            "external": self.external,
            "merged": self.merged,
        }


@dataclass
class SearchResponse:
    """Response envelope for an aggregated search."""
    query: str
    results: List[UnifiedProperty]
    stats: SearchStats
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    )

    def to_dict(self) -> dict:
        return {
            "query": self.query,
            "results": [record.to_dict() for record in self.results],
            "stats": self.stats.to_dict(),
            "timestamp": self.timestamp,
        }


# =============================================================================
# Aggregator
# =============================================================================

class SearchAggregator:
    """
    Orchestrates local and external search for a single request.

    No state is shared between calls; every search builds fresh lists.
    """

    def __init__(
        self,
        local_search: LocalSearch,
        provider: BaseSearchProvider,
        parallel: bool = False,
    ):
        """
        Initialise aggregator.

        Args:
            local_search: Search over the local property store
            provider: External intelligence provider
            parallel: Run the local and external branches concurrently
        """
        self.local_search = local_search
        self.provider = provider
        self.parallel = parallel

    def search(
        self,
        query: str = "",
        sort: str = SORT_RELEVANCE,
        limit: Any = DEFAULT_LIMIT,
    ) -> SearchResponse:
        """
        Run an aggregated search.

        Args:
            query: Raw free-text query (any string is valid)
            sort: relevance, price_low or price_high
            limit: Requested maximum number of results

        Returns:
            SearchResponse with ranked results and diagnostic counts
        """
        query = query or ""
        sort = sort or SORT_RELEVANCE
        max_results = parse_limit(limit)

        logger.info("Search aggregator called: query=%r sort=%s limit=%d", query, sort, max_results)

        # Criteria for the external payload; local search derives its own
        criteria = parse_free_text(query)

        if self.parallel:
            local_results, external_results = self._run_parallel(query, sort, criteria)
        else:
            local_results = self._run_local(query, sort)
            external_results = self._run_external(query, criteria)

        merged = merge_and_dedupe(local_results, external_results)
        ranked = rank_results(merged, sort)
        final = ranked[:max_results]

        logger.info(
            "Search completed: local=%d external=%d merged=%d final=%d",
            len(local_results), len(external_results), len(merged), len(final),
        )

        return SearchResponse(
            query=query,
            results=final,
            stats=SearchStats(
                total=len(final),
                local=len(local_results),
                external=len(external_results),
                merged=len(merged),
            ),
        )

    # =========================================================================
    # Branches
    # =========================================================================

    def _run_local(self, query: str, sort: str) -> List[UnifiedProperty]:
        return self._isolated("local", lambda: self.local_search.query(query, sort))

    def _run_external(self, query: str, criteria: SearchCriteria) -> List[UnifiedProperty]:
        return self._isolated("external", lambda: self.provider.search(query, criteria))

    def _run_parallel(
        self,
        query: str,
        sort: str,
        criteria: SearchCriteria,
    ) -> tuple[List[UnifiedProperty], List[UnifiedProperty]]:
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="search") as pool:
            local_future = pool.submit(self._run_local, query, sort)
            external_future = pool.submit(self._run_external, query, criteria)
            return local_future.result(), external_future.result()

    @staticmethod
    def _isolated(branch: str, run: Callable[[], List[UnifiedProperty]]) -> List[UnifiedProperty]:
        """Run one branch; a failure is logged and yields no results."""
        try:
            return list(run())
        except Exception:
            logger.exception("%s search branch failed", branch.capitalize())
            return []
