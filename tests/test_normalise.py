"""
Tests for record normalisation helpers.
"""

import math
import pytest
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.models import Coordinates
from core.normalise import (
    build_coordinates,
    normalise_numeric,
    normalise_price,
    normalise_property_row,
    normalise_string_array,
    to_coordinate,
    to_finite_number,
    whole_number,
)


# =============================================================================
# Test: Prices
# =============================================================================

class TestPriceNormalisation:
    """Prices are always finite and non-negative."""

    def test_garbage_string_becomes_zero(self):
        price = normalise_price("not-a-number")

        assert price == 0
        assert not math.isnan(price)

    @pytest.mark.parametrize("raw,expected", [
        ("450000", 450000),
        ("P 1,200,000", 1200000),
        ("850 000", 850000),
        ("450000.50", 450000.5),
        (725000, 725000),
        (99.5, 99.5),
    ])
    def test_formatted_prices(self, raw, expected):
        assert normalise_price(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", float("nan"), float("inf"), "nan", [], {}])
    def test_unusable_values_become_zero(self, raw):
        assert normalise_price(raw) == 0

    def test_negative_price_clamped(self):
        assert normalise_price(-500) == 0

    def test_numeric_keeps_sign(self):
        assert normalise_numeric("-12") == -12


# =============================================================================
# Test: Array Fields
# =============================================================================

class TestStringArrays:
    """Array-like fields always come out as lists."""

    def test_list_passthrough(self):
        assert normalise_string_array(["a.jpg", "b.jpg"]) == ["a.jpg", "b.jpg"]

    def test_list_items_stringified(self):
        assert normalise_string_array([1, None, "x"]) == ["1", "x"]

    def test_json_encoded_list(self):
        assert normalise_string_array('["a.jpg", "b.jpg"]') == ["a.jpg", "b.jpg"]

    def test_comma_separated(self):
        assert normalise_string_array("a.jpg, b.jpg") == ["a.jpg", "b.jpg"]

    def test_single_value_wrapped(self):
        assert normalise_string_array("single.jpg") == ["single.jpg"]

    def test_json_scalar_wrapped(self):
        assert normalise_string_array('"x.jpg"') == ["x.jpg"]

    @pytest.mark.parametrize("raw", [None, "", "  ", "null", '""', "[]"])
    def test_empty_values(self, raw):
        assert normalise_string_array(raw) == []

    def test_non_string_scalar(self):
        assert normalise_string_array(42) == ["42"]


# =============================================================================
# Test: Coordinates & Numbers
# =============================================================================

class TestCoordinates:
    """Coordinates are finite floats or absent."""

    @pytest.mark.parametrize("raw,expected", [
        ("-24.6541", -24.6541),
        (25.9, 25.9),
        (0, 0.0),
        ("", None),
        ("abc", None),
        (None, None),
        (float("nan"), None),
        (True, None),
    ])
    def test_to_coordinate(self, raw, expected):
        assert to_coordinate(raw) == expected

    def test_pair_requires_both(self):
        assert build_coordinates("-24.6", "x") is None
        assert build_coordinates(None, "25.9") is None

    def test_valid_pair(self):
        assert build_coordinates("-24.6", 25.9) == Coordinates(lat=-24.6, lng=25.9)

    def test_zero_is_a_valid_coordinate(self):
        assert build_coordinates(0, 0) == Coordinates(lat=0.0, lng=0.0)

    def test_finite_number(self):
        assert to_finite_number("3") == 3.0
        assert to_finite_number("three") is None
        assert to_finite_number(float("-inf")) is None

    def test_whole_number(self):
        assert whole_number(3.0) == 3
        assert isinstance(whole_number(3.0), int)
        assert whole_number(2.5) == 2.5
        assert whole_number(None) is None


# =============================================================================
# Test: Row Normalisation
# =============================================================================

class TestRowNormalisation:
    """Stored rows are normalised without mutating the original."""

    def test_row_fields_normalised(self):
        row = {
            "id": 7,
            "price": "P 450 000",
            "images": '["a.jpg"]',
            "features": "garage, pool",
            "latitude": "-24.65",
            "longitude": "not-a-coordinate",
        }

        normalised = normalise_property_row(row)

        assert normalised["price"] == 450000
        assert normalised["images"] == ["a.jpg"]
        assert normalised["features"] == ["garage", "pool"]
        assert normalised["latitude"] == -24.65
        assert normalised["longitude"] is None
        assert normalised["id"] == 7

    def test_original_untouched(self):
        row = {"price": "100", "images": "a.jpg"}

        normalise_property_row(row)

        assert row == {"price": "100", "images": "a.jpg"}
