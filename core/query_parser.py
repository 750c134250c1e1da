"""
Free-text query interpreter.

Turns "3 bedroom house under 500k in gaborone" into SearchCriteria using a
fixed cascade of pattern rules. Each rule reads the raw text and may set a
field; rules run in a fixed order and a later rule overwrites an earlier one
for the same field (the price rules rely on this).
"""

from __future__ import annotations

import re
from typing import Callable, Final, Optional, Union

from .models import SearchCriteria


# =============================================================================
# Vocabularies
# =============================================================================

DESCRIPTIVE_TERMS: Final[tuple[str, ...]] = (
    "modern",
    "luxury",
    "new",
    "renovated",
    "spacious",
    "cozy",
    "family",
)

WORD_NUMBERS: Final[dict[str, int]] = {
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
}

# Checked in order, first match wins
PROPERTY_TYPE_PATTERNS: Final[tuple[tuple[str, re.Pattern], ...]] = (
    ("house", re.compile(r"\b(?:house|standalone|detached)\b")),
    ("apartment", re.compile(r"\b(?:apartment|flat|unit)\b")),
    ("townhouse", re.compile(r"\b(?:townhouse|townhome)\b")),
    ("plot", re.compile(r"\b(?:plot|land|vacant)\b")),
    ("farm", re.compile(r"\b(?:farm|agricultural)\b")),
    ("commercial", re.compile(r"\b(?:commercial|office|retail)\b")),
)

GAZETTEER: Final[tuple[str, ...]] = (
    "gaborone",
    "francistown",
    "kasane",
    "maun",
    "serowe",
    "palapye",
    "kanye",
)

PRICE_MULTIPLIERS: Final[dict[str, int]] = {
    "": 1,
    "k": 1_000,
    "m": 1_000_000,
}


# =============================================================================
# Patterns
# =============================================================================

_AMOUNT = r"(\d+(?:\.\d+)?)(?:\s*([km])\b)?"

PRICE_RANGE_PATTERN: Final = re.compile(rf"{_AMOUNT}\s*(?:to|-)\s*{_AMOUNT}")
PRICE_UNDER_PATTERN: Final = re.compile(rf"\bunder\s+{_AMOUNT}")
PRICE_OVER_PATTERN: Final = re.compile(rf"\bover\s+{_AMOUNT}")
PRICE_ABOVE_PATTERN: Final = re.compile(rf"\babove\s+{_AMOUNT}")

_BED_SUFFIX = r"\s*(?:bedroomed|bedroom|bed)"
DIGIT_BEDS_PATTERN: Final = re.compile(rf"(\d+){_BED_SUFFIX}")
WORD_BEDS_PATTERN: Final = re.compile(
    rf"\b({'|'.join(WORD_NUMBERS)}){_BED_SUFFIX}"
)

DESCRIPTIVE_PATTERNS: Final[tuple[tuple[str, re.Pattern], ...]] = tuple(
    (term, re.compile(rf"\b{term}\b")) for term in DESCRIPTIVE_TERMS
)


# =============================================================================
# Rules
# =============================================================================

def parse_amount(number: str, suffix: Optional[str]) -> Union[int, float]:
    """
    Convert a matched price literal and optional k/m suffix to a value.

    Whole results are returned as int (500k -> 500000).
    """
    amount = round(float(number) * PRICE_MULTIPLIERS[(suffix or "").lower()], 2)
    return int(amount) if amount.is_integer() else amount


def _descriptive_rule(text: str, criteria: SearchCriteria) -> None:
    terms = [term for term, pattern in DESCRIPTIVE_PATTERNS if pattern.search(text)]
    if terms:
        criteria.query = " ".join(terms)


def _price_range_rule(text: str, criteria: SearchCriteria) -> None:
    match = PRICE_RANGE_PATTERN.search(text)
    if match:
        criteria.min_price = parse_amount(match.group(1), match.group(2))
        criteria.max_price = parse_amount(match.group(3), match.group(4))


def _under_rule(text: str, criteria: SearchCriteria) -> None:
    match = PRICE_UNDER_PATTERN.search(text)
    if match:
        criteria.max_price = parse_amount(match.group(1), match.group(2))


def _over_rule(text: str, criteria: SearchCriteria) -> None:
    match = PRICE_OVER_PATTERN.search(text)
    if match:
        criteria.min_price = parse_amount(match.group(1), match.group(2))


def _above_rule(text: str, criteria: SearchCriteria) -> None:
    match = PRICE_ABOVE_PATTERN.search(text)
    if match:
        criteria.min_price = parse_amount(match.group(1), match.group(2))


def _bedrooms_rule(text: str, criteria: SearchCriteria) -> None:
    match = DIGIT_BEDS_PATTERN.search(text)
    if match:
        criteria.beds = int(match.group(1))
        return
    match = WORD_BEDS_PATTERN.search(text)
    if match:
        criteria.beds = WORD_NUMBERS[match.group(1)]


def _property_type_rule(text: str, criteria: SearchCriteria) -> None:
    for property_type, pattern in PROPERTY_TYPE_PATTERNS:
        if pattern.search(text):
            criteria.type = property_type
            return


def _location_rule(text: str, criteria: SearchCriteria) -> None:
    for place in GAZETTEER:
        if place in text:
            criteria.location = place
            return


Rule = Callable[[str, SearchCriteria], None]

RULES: Final[tuple[Rule, ...]] = (
    _descriptive_rule,
    _price_range_rule,
    _under_rule,
    _over_rule,
    _above_rule,
    _bedrooms_rule,
    _property_type_rule,
    _location_rule,
)


def parse_free_text(query: Optional[str]) -> SearchCriteria:
    """
    Derive structured search criteria from a free-text query.

    Never raises: input that matches no rule yields empty criteria.

    Args:
        query: Raw search text as typed by the user.

    Returns:
        SearchCriteria with every field that a rule could extract.
    """
    criteria = SearchCriteria()
    if not query or not isinstance(query, str):
        return criteria

    text = query.lower()
    for rule in RULES:
        rule(text, criteria)

    return criteria
