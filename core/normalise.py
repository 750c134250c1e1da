"""
Normalisation helpers shared by every boundary a property record crosses.

Stored rows and provider payloads disagree on types: prices arrive as text
("P 450 000"), image lists as JSON strings or comma-separated text, and
coordinates as strings, numbers or nothing. Everything is coerced here.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any, Optional

from .models import Coordinates


_NON_NUMERIC = re.compile(r"[^\d.\-]")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def to_finite_number(value: Any) -> Optional[float]:
    """
    Coerce a value to a finite float.

    Returns:
        The float, or None when the value is missing or not a finite number.
    """
    if value is None or isinstance(value, bool):
        return None
    if _is_number(value):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def normalise_numeric(value: Any) -> float:
    """
    Coerce a possibly-formatted numeric value, falling back to 0.

    Strings are tried as-is first, then with every character other than
    digits, '.' and '-' removed ("P 1,200,000" -> 1200000).
    """
    direct = to_finite_number(value)
    if direct is not None:
        return direct

    if isinstance(value, str):
        cleaned = _NON_NUMERIC.sub("", value)
        number = to_finite_number(cleaned)
        if number is not None:
            return number

    return 0.0


def normalise_price(value: Any) -> float:
    """Normalise a price; never NaN, never negative."""
    price = normalise_numeric(value)
    return price if price > 0 else 0.0


def to_coordinate(value: Any) -> Optional[float]:
    """Coerce a latitude or longitude value, None when unusable."""
    return to_finite_number(value)


def build_coordinates(lat: Any, lng: Any) -> Optional[Coordinates]:
    """Build a coordinate pair only when both components are finite."""
    lat_value = to_coordinate(lat)
    lng_value = to_coordinate(lng)
    if lat_value is None or lng_value is None:
        return None
    return Coordinates(lat=lat_value, lng=lng_value)


def normalise_string_array(value: Any) -> list[str]:
    """
    Materialise an array-like field as a list of strings.

    Precedence: list passthrough, JSON-parse attempt, comma-split fallback,
    single-element wrap.
    """
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item is not None]

    if value is None:
        return []

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        try:
            parsed = json.loads(text)
        except (json.JSONDecodeError, ValueError):
            if "," in text:
                return [part.strip() for part in text.split(",") if part.strip()]
            return [text]
        if isinstance(parsed, list):
            return [str(item) for item in parsed if item is not None]
        if parsed is None or parsed == "":
            return []
        return [str(parsed)]

    return [str(value)]


def normalise_property_row(row: dict) -> dict:
    """
    Normalise a stored property row on its way out of the store.

    Returns a new dict; the stored row is left untouched.
    """
    normalised = dict(row)
    normalised["price"] = normalise_price(row.get("price"))
    normalised["images"] = normalise_string_array(row.get("images"))
    normalised["features"] = normalise_string_array(row.get("features"))
    normalised["latitude"] = to_coordinate(row.get("latitude"))
    normalised["longitude"] = to_coordinate(row.get("longitude"))
    return normalised


def whole_number(value: Optional[float]) -> Optional[float]:
    """Return integral floats as int (3.0 -> 3); other values unchanged."""
    if value is not None and float(value).is_integer():
        return int(value)
    return value
