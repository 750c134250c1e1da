"""
Property Repository - In-Memory Property Store

Stores marketplace property rows and answers filtered listing queries.
Rows are normalised on the way out (numeric price, list-valued images and
features, finite-or-None coordinates). Listing query results are cached
for five minutes and the cache is invalidated on every write.

This is an in-memory implementation with optional JSON file persistence.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from core.listings.cache import DEFAULT_TTL_SECONDS, QueryCache
from core.listings.filters import MAX_PAGE_SIZE, PropertyFilters
from core.listings.predicates import (
    OrderBy,
    Predicate,
    TextQuery,
    all_of,
    any_of,
    eq,
    gte,
    ilike,
    lte,
    order_rows,
)
from core.normalise import normalise_property_row, to_coordinate, to_finite_number


logger = logging.getLogger(__name__)


CACHE_PREFIX = "properties"
MIN_TEXT_SEARCH_LENGTH = 2

REQUIRED_FIELDS = ("title", "address", "city")

# Recency with id as a deterministic tiebreak
NEWEST_FIRST: OrderBy = (("created_at", True), ("id", True))

LEGACY_SORTS: dict[str, OrderBy] = {
    "price_low": (("price", False),),
    "price_high": (("price", True),),
    "newest": NEWEST_FIRST,
}

SORT_COLUMNS = {
    "price": "price",
    "date": "created_at",
    "size": "square_feet",
    "bedrooms": "bedrooms",
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _has_valid_coordinates(row: dict) -> bool:
    return row.get("latitude") is not None and row.get("longitude") is not None


# =============================================================================
# Repository
# =============================================================================


class PropertyRepository:
    """
    Repository for property listings.

    Provides CRUD operations, filtered listing queries and a low-level
    select() used by the search aggregator. Safe for concurrent readers.
    """

    def __init__(
        self,
        persist_path: Optional[str] = None,
        cache: Optional[QueryCache] = None,
        cache_ttl: float = DEFAULT_TTL_SECONDS,
    ):
        """
        Initialise repository.

        Args:
            persist_path: Optional path to a JSON file to load from and save to
            cache: Optional cache instance (a new one is created otherwise)
            cache_ttl: TTL in seconds for cached listing queries
        """
        self._rows: dict[int, dict] = {}
        self._next_id = 1
        self._lock = threading.RLock()
        self._cache = cache or QueryCache(default_ttl=cache_ttl)
        self._cache_ttl = cache_ttl
        self._persist_path = Path(persist_path) if persist_path else None

        if self._persist_path and self._persist_path.exists():
            self._load_from_file()

    @property
    def cache(self) -> QueryCache:
        return self._cache

    # =========================================================================
    # Persistence
    # =========================================================================

    def _save_to_file(self) -> None:
        """Persist rows to file."""
        if not self._persist_path:
            return

        data = {
            "properties": list(self._rows.values()),
            "saved_at": _now(),
        }

        self._persist_path.parent.mkdir(parents=True, exist_ok=True)
        self._persist_path.write_text(json.dumps(data, indent=2, default=str))

    def _load_from_file(self) -> None:
        """Load rows from file; accepts {"properties": [...]} or a bare list."""
        try:
            data = json.loads(self._persist_path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            # Start empty rather than refusing to boot
            logger.warning("Could not load property data from %s: %s", self._persist_path, e)
            return

        rows = data.get("properties", []) if isinstance(data, dict) else data
        for raw in rows:
            if not isinstance(raw, dict):
                continue
            row = dict(raw)
            row_id = int(to_finite_number(row.get("id")) or self._next_id)
            row["id"] = row_id
            row.setdefault("status", "active")
            row.setdefault("created_at", _now())
            row.setdefault("updated_at", row["created_at"])
            self._rows[row_id] = row
            self._next_id = max(self._next_id, row_id + 1)

        logger.info("Loaded %d properties from %s", len(self._rows), self._persist_path)

    # =========================================================================
    # Reads
    # =========================================================================

    def select(
        self,
        where: Optional[Predicate] = None,
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[dict]:
        """
        Run a read query over normalised rows.

        Args:
            where: Optional predicate; rows failing it are excluded
            order_by: Optional ordering, primary key first
            limit: Optional maximum number of rows
            offset: Rows to skip after ordering

        Returns:
            Normalised copies of the matching rows
        """
        with self._lock:
            rows = [normalise_property_row(copy.deepcopy(row)) for row in self._rows.values()]

        if where is not None:
            rows = [row for row in rows if where(row)]
        rows = order_rows(rows, order_by)
        if offset:
            rows = rows[offset:]
        if limit is not None:
            rows = rows[:limit]
        return rows

    def get(self, property_id: int) -> Optional[dict]:
        """
        Get a property by ID.

        Returns:
            Normalised row if found, None otherwise
        """
        with self._lock:
            row = self._rows.get(property_id)
            if row is None:
                return None
            return normalise_property_row(copy.deepcopy(row))

    def list(self, filters: Optional[PropertyFilters] = None) -> list[dict]:
        """
        Query properties with filters, pagination and sorting.

        Results are cached per distinct filter set for the cache TTL.

        Args:
            filters: Optional PropertyFilters

        Returns:
            List of normalised rows
        """
        filters = filters or PropertyFilters()
        cache_key = QueryCache.create_key(CACHE_PREFIX, filters.cache_params())

        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug("Properties served from cache")
            return copy.deepcopy(cached)

        conditions: list[Predicate] = []
        order_by: Optional[OrderBy] = None

        if filters.min_price is not None:
            conditions.append(gte("price", filters.min_price))
        if filters.max_price is not None:
            conditions.append(lte("price", filters.max_price))
        if filters.property_type and filters.property_type != "all":
            conditions.append(eq("property_type", filters.property_type))
        if filters.min_bedrooms is not None:
            conditions.append(gte("bedrooms", filters.min_bedrooms))
        if filters.min_bathrooms is not None:
            conditions.append(gte("bathrooms", filters.min_bathrooms))
        if filters.min_square_feet is not None:
            conditions.append(gte("square_feet", filters.min_square_feet))
        if filters.max_square_feet is not None:
            conditions.append(lte("square_feet", filters.max_square_feet))

        term = (filters.effective_search_term or "").strip()
        if term:
            if len(term) >= MIN_TEXT_SEARCH_LENGTH:
                text_query = TextQuery(term)
                conditions.append(text_query.matches)
                order_by = ((text_query.rank, True),) + tuple(NEWEST_FIRST)
            else:
                conditions.append(any_of(
                    ilike("title", term),
                    ilike("description", term),
                    ilike("address", term),
                    ilike("city", term),
                ))

        if filters.state:
            conditions.append(eq("state", filters.state))
        if filters.zip_code:
            conditions.append(eq("zip_code", filters.zip_code))
        if filters.listing_type:
            conditions.append(eq("listing_type", filters.listing_type))
        if filters.status:
            conditions.append(eq("status", filters.status))

        if order_by is None:
            order_by = self._ordering_for(filters)

        limit = None
        if filters.limit is not None:
            limit = min(MAX_PAGE_SIZE, max(0, int(filters.limit)))
        offset = max(0, int(filters.offset)) if filters.offset is not None else 0

        rows = self.select(
            where=all_of(*conditions) if conditions else None,
            order_by=order_by,
            limit=limit,
            offset=offset,
        )

        if filters.require_valid_coordinates:
            valid = [row for row in rows if _has_valid_coordinates(row)]
            for row in rows:
                if not _has_valid_coordinates(row):
                    logger.debug(
                        "Filtering out property %s %r - invalid coordinates: lat=%s, lng=%s",
                        row.get("id"), row.get("title"), row.get("latitude"), row.get("longitude"),
                    )
            logger.info(
                "Retrieved %d valid properties (filtered from %d total)", len(valid), len(rows)
            )
            rows = valid
        else:
            logger.info("Retrieved %d properties", len(rows))

        self._cache.set(cache_key, copy.deepcopy(rows), ttl=self._cache_ttl)
        return rows

    @staticmethod
    def _ordering_for(filters: PropertyFilters) -> OrderBy:
        """Resolve sort_by / sort_order to an ordering (newest first by default)."""
        if not filters.sort_by:
            return NEWEST_FIRST
        if filters.sort_by in LEGACY_SORTS:
            return LEGACY_SORTS[filters.sort_by]
        column = SORT_COLUMNS[filters.sort_by]
        return ((column, filters.sort_order != "asc"),)

    def get_user_properties(self, owner_id: int) -> list[dict]:
        """All properties owned by a user, newest first."""
        return self.select(where=eq("owner_id", owner_id), order_by=NEWEST_FIRST)

    def count(self) -> int:
        with self._lock:
            return len(self._rows)

    # =========================================================================
    # Writes
    # =========================================================================

    def create(self, data: dict[str, Any]) -> dict:
        """
        Create a property.

        Args:
            data: Property fields (title, address and city are required)

        Returns:
            The stored property, normalised

        Raises:
            ValueError: If a required field is missing
        """
        missing = [name for name in REQUIRED_FIELDS if not str(data.get(name) or "").strip()]
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")

        with self._lock:
            row = dict(data)
            row["id"] = self._next_id
            self._next_id += 1
            row["latitude"] = to_coordinate(data.get("latitude"))
            row["longitude"] = to_coordinate(data.get("longitude"))
            row.setdefault("status", "active")
            row.setdefault("views", 0)
            row["created_at"] = row.get("created_at") or _now()
            row["updated_at"] = row["created_at"]
            self._rows[row["id"]] = row
            self._save_to_file()
            stored = copy.deepcopy(row)

        self._cache.invalidate_prefix(CACHE_PREFIX)
        return normalise_property_row(stored)

    def update(self, property_id: int, updates: dict[str, Any]) -> Optional[dict]:
        """
        Update a property in place.

        id and created_at cannot be changed. Coordinates that do not parse
        are stored as None.

        Returns:
            The updated property, or None if it does not exist
        """
        with self._lock:
            row = self._rows.get(property_id)
            if row is None:
                return None

            for key, value in updates.items():
                if key in ("id", "created_at"):
                    continue
                if key in ("latitude", "longitude"):
                    value = to_coordinate(value)
                row[key] = value
            row["updated_at"] = _now()
            self._save_to_file()
            stored = copy.deepcopy(row)

        self._cache.invalidate_prefix(CACHE_PREFIX)
        return normalise_property_row(stored)

    def delete(self, property_id: int) -> bool:
        """
        Delete a property.

        Returns:
            True if deleted, False if not found
        """
        with self._lock:
            if property_id not in self._rows:
                return False
            del self._rows[property_id]
            self._save_to_file()

        self._cache.invalidate_prefix(CACHE_PREFIX)
        return True

    def increment_views(self, property_id: int) -> None:
        """Bump the view counter and persist it; does not touch the listing cache."""
        with self._lock:
            row = self._rows.get(property_id)
            if row is None:
                return
            row["views"] = int(to_finite_number(row.get("views")) or 0) + 1
            self._save_to_file()
