"""
Property Search Aggregator - Core Search Logic

This module provides the unified search pipeline:
1. Query interpretation (free text -> SearchCriteria)
2. Local store search (listings repository)
3. External intelligence search (see the intel package)
4. Merge & dedupe (address containment)
5. Ranking (local first, then requested sort)
"""

from .models import (
    SearchCriteria,
    UnifiedProperty,
    Coordinates,
    Agency,
    SOURCE_LOCAL,
    SOURCE_EXTERNAL,
)
from .normalise import (
    normalise_numeric,
    normalise_price,
    normalise_string_array,
    normalise_property_row,
    build_coordinates,
    to_coordinate,
    to_finite_number,
)
from .query_parser import parse_free_text, GAZETTEER, DESCRIPTIVE_TERMS
from .ranking import (
    merge_and_dedupe,
    rank_results,
    SORT_RELEVANCE,
    SORT_PRICE_LOW,
    SORT_PRICE_HIGH,
)
from .local_search import LocalSearch, LOCAL_RESULT_LIMIT
from .aggregator import SearchAggregator, SearchResponse, SearchStats, parse_limit

__all__ = [
    # Models
    "SearchCriteria",
    "UnifiedProperty",
    "Coordinates",
    "Agency",
    "SOURCE_LOCAL",
    "SOURCE_EXTERNAL",
    # Normalisation
    "normalise_numeric",
    "normalise_price",
    "normalise_string_array",
    "normalise_property_row",
    "build_coordinates",
    "to_coordinate",
    "to_finite_number",
    # Query interpretation
    "parse_free_text",
    "GAZETTEER",
    "DESCRIPTIVE_TERMS",
    # Merge & rank
    "merge_and_dedupe",
    "rank_results",
    "SORT_RELEVANCE",
    "SORT_PRICE_LOW",
    "SORT_PRICE_HIGH",
    # Pipeline
    "LocalSearch",
    "LOCAL_RESULT_LIMIT",
    "SearchAggregator",
    "SearchResponse",
    "SearchStats",
    "parse_limit",
]
