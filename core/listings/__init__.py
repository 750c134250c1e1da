"""
Property listings store.

In-memory property repository with filtered queries, full-text ranking,
pagination and a short-lived query cache invalidated on writes.
"""

from core.listings.cache import QueryCache, DEFAULT_TTL_SECONDS
from core.listings.filters import (
    PropertyFilters,
    ListingQueryFilters,
    parse_property_filters,
    format_validation_errors,
)
from core.listings.predicates import (
    TextQuery,
    all_of,
    any_of,
    eq,
    gte,
    ilike,
    lte,
    order_rows,
)
from core.listings.repository import PropertyRepository

__all__ = [
    # Cache
    "QueryCache",
    "DEFAULT_TTL_SECONDS",
    # Filters
    "PropertyFilters",
    "ListingQueryFilters",
    "parse_property_filters",
    "format_validation_errors",
    # Predicates
    "TextQuery",
    "all_of",
    "any_of",
    "eq",
    "gte",
    "ilike",
    "lte",
    "order_rows",
    # Repository
    "PropertyRepository",
]
