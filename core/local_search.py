"""
Local store search.

Builds a conjunctive filter over the property store from the criteria the
query interpreter derives, and maps matching rows to UnifiedProperty.
"""

from __future__ import annotations

import logging
from typing import Final, List, Optional

from core.listings.predicates import OrderBy, Predicate, all_of, any_of, eq, gte, ilike, lte
from core.listings.repository import NEWEST_FIRST, PropertyRepository

from .models import SOURCE_LOCAL, Agency, SearchCriteria, UnifiedProperty
from .normalise import (
    build_coordinates,
    normalise_price,
    normalise_string_array,
    to_finite_number,
    whole_number,
)
from .query_parser import parse_free_text
from .ranking import SORT_PRICE_HIGH, SORT_PRICE_LOW


logger = logging.getLogger(__name__)


LOCAL_RESULT_LIMIT: Final[int] = 50
LOCAL_AGENCY_NAME: Final[str] = "BeeDab Properties"

PLAIN_TEXT_COLUMNS: Final[tuple[str, ...]] = (
    "title",
    "description",
    "city",
    "address",
    "property_type",
)


def build_local_filter(raw_query: str, criteria: SearchCriteria) -> Optional[Predicate]:
    """
    Build the store predicate for a search.

    Structured criteria are AND-combined, with the descriptive residual as
    an extra title/description substring clause. With no structured
    criteria the raw query is matched as plain text across the text
    columns. An empty query matches everything.
    """
    if not raw_query or not raw_query.strip():
        return None

    if not criteria.has_structured_filters():
        term = raw_query.strip()
        return any_of(*(ilike(column, term) for column in PLAIN_TEXT_COLUMNS))

    terms: list[Predicate] = []
    if criteria.beds is not None:
        terms.append(gte("bedrooms", criteria.beds))
    if criteria.type:
        terms.append(eq("property_type", criteria.type))
    if criteria.location:
        terms.append(ilike("city", criteria.location))
    if criteria.min_price is not None:
        terms.append(gte("price", criteria.min_price))
    if criteria.max_price is not None:
        terms.append(lte("price", criteria.max_price))
    if criteria.query:
        terms.append(any_of(
            ilike("title", criteria.query),
            ilike("description", criteria.query),
        ))
    return all_of(*terms)


def ordering_for(sort: str) -> OrderBy:
    """price_low / price_high by price, anything else newest first."""
    if sort == SORT_PRICE_LOW:
        return (("price", False), ("id", False))
    if sort == SORT_PRICE_HIGH:
        return (("price", True), ("id", False))
    return NEWEST_FIRST


def row_to_unified(row: dict) -> UnifiedProperty:
    """Map a normalised store row to a local UnifiedProperty."""
    return UnifiedProperty(
        id=f"local_{row.get('id')}",
        title=str(row.get("title") or ""),
        price=normalise_price(row.get("price")),
        address=str(row.get("address") or ""),
        city=str(row.get("city") or ""),
        property_type=str(row.get("property_type") or ""),
        source=SOURCE_LOCAL,
        bedrooms=whole_number(to_finite_number(row.get("bedrooms"))),
        bathrooms=whole_number(to_finite_number(row.get("bathrooms"))),
        description=str(row.get("description") or ""),
        images=normalise_string_array(row.get("images")),
        coordinates=build_coordinates(row.get("latitude"), row.get("longitude")),
        agency=Agency(name=LOCAL_AGENCY_NAME),
    )


class LocalSearch:
    """Free-text search over the local property store."""

    def __init__(self, repository: PropertyRepository):
        self.repository = repository

    def query(self, raw_query: str, sort: str) -> List[UnifiedProperty]:
        """
        Search the local store.

        Store errors are logged and produce an empty list; this method
        never raises because of the store.

        Args:
            raw_query: Free-text search as typed.
            sort: price_low, price_high, or anything else for newest first.

        Returns:
            Up to LOCAL_RESULT_LIMIT UnifiedProperty records.
        """
        try:
            criteria = parse_free_text(raw_query)
            logger.debug("Parsed query filters: %s", criteria.to_dict())

            rows = self.repository.select(
                where=build_local_filter(raw_query, criteria),
                order_by=ordering_for(sort),
                limit=LOCAL_RESULT_LIMIT,
            )
            results = [row_to_unified(row) for row in rows]
        except Exception:
            logger.exception("Local property query failed for %r", raw_query)
            return []

        logger.info("Local search returned %d properties", len(results))
        return results
