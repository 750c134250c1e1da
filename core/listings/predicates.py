"""
Row predicates and ordering for listing queries.

Predicates are plain callables over normalised property rows, combined
with all_of() / any_of(). Orderings are sequences of (key, descending)
pairs where key is a column name or a callable over the row.
"""

from __future__ import annotations

import math
import re
from collections import Counter
from typing import Any, Callable, Final, Optional, Sequence, Union

from core.normalise import to_finite_number


Row = dict
Predicate = Callable[[Row], bool]
SortKey = Union[str, Callable[[Row], Any]]
OrderBy = Sequence[tuple[SortKey, bool]]

NUMERIC_COLUMNS: Final[frozenset[str]] = frozenset({
    "id",
    "price",
    "bedrooms",
    "bathrooms",
    "square_feet",
    "views",
    "days_on_market",
})

TEXT_SEARCH_COLUMNS: Final[tuple[str, ...]] = ("title", "description", "address", "city")

_TOKEN = re.compile(r"\w+")


def column_value(row: Row, column: str) -> Any:
    """Read a column, coercing numeric columns to float (None if unusable)."""
    value = row.get(column)
    if column in NUMERIC_COLUMNS:
        return to_finite_number(value)
    return value


# =============================================================================
# Predicates
# =============================================================================

def gte(column: str, bound: float) -> Predicate:
    def predicate(row: Row) -> bool:
        value = column_value(row, column)
        return value is not None and value >= bound
    return predicate


def lte(column: str, bound: float) -> Predicate:
    def predicate(row: Row) -> bool:
        value = column_value(row, column)
        return value is not None and value <= bound
    return predicate


def eq(column: str, expected: Any) -> Predicate:
    """Equality; strings compare case-insensitively."""
    if isinstance(expected, str):
        wanted = expected.lower()
        return lambda row: str(row.get(column) or "").lower() == wanted
    return lambda row: row.get(column) == expected


def ilike(column: str, term: str) -> Predicate:
    """Case-insensitive substring match (SQL ILIKE '%term%')."""
    needle = term.lower()
    return lambda row: needle in str(row.get(column) or "").lower()


def all_of(*predicates: Predicate) -> Predicate:
    return lambda row: all(p(row) for p in predicates)


def any_of(*predicates: Predicate) -> Predicate:
    return lambda row: any(p(row) for p in predicates)


# =============================================================================
# Full-Text Search
# =============================================================================

def tokenize(text: str) -> list[str]:
    return _TOKEN.findall(text.lower())


class TextQuery:
    """
    Token search over title, description, address and city.

    A row matches when every query token appears in its text. Rank is the
    number of query-token occurrences, damped by document length.
    """

    def __init__(self, term: str, columns: Sequence[str] = TEXT_SEARCH_COLUMNS):
        self.term = term
        self.tokens = tokenize(term)
        self.columns = tuple(columns)

    def _document(self, row: Row) -> list[str]:
        return tokenize(" ".join(str(row.get(column) or "") for column in self.columns))

    def matches(self, row: Row) -> bool:
        if not self.tokens:
            return False
        words = set(self._document(row))
        return all(token in words for token in self.tokens)

    def rank(self, row: Row) -> float:
        document = self._document(row)
        if not document:
            return 0.0
        counts = Counter(document)
        occurrences = sum(counts[token] for token in set(self.tokens))
        return occurrences / (1 + math.log(len(document)))


# =============================================================================
# Ordering
# =============================================================================

def _sort_value(row: Row, key: SortKey) -> Any:
    if callable(key):
        return key(row)
    return column_value(row, key)


def order_rows(rows: list[Row], order_by: Optional[OrderBy]) -> list[Row]:
    """
    Sort rows by several keys; the first key is the primary one.

    Rows with a missing value for a key sort after rows that have one,
    in either direction.
    """
    if not order_by:
        return list(rows)

    ordered = list(rows)
    for key, descending in reversed(list(order_by)):
        present = [row for row in ordered if _sort_value(row, key) is not None]
        missing = [row for row in ordered if _sort_value(row, key) is None]
        present.sort(key=lambda row: _sort_value(row, key), reverse=descending)
        ordered = present + missing
    return ordered
