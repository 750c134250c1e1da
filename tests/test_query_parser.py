"""
Tests for the free-text query interpreter.

Verifies:
- Reference queries produce the expected criteria
- Price shorthand (k / m) and range / under / over / above rules
- Later price rules overwrite earlier ones
- Bedroom digit form takes precedence over word form
- Property type categories are checked in order
- Parser never raises
"""

import pytest
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.models import SearchCriteria
from core.query_parser import parse_amount, parse_free_text


# =============================================================================
# Test: Reference Queries
# =============================================================================

class TestReferenceQueries:
    """Queries with known expected criteria."""

    def test_bedroom_house_under_price(self):
        criteria = parse_free_text("3 bedroom house under 500k")

        assert criteria.to_dict() == {"beds": 3, "type": "house", "maxPrice": 500000}

    def test_descriptive_apartment_range_location(self):
        criteria = parse_free_text("modern apartment 200k to 800k in gaborone")

        assert criteria.to_dict() == {
            "query": "modern",
            "type": "apartment",
            "minPrice": 200000,
            "maxPrice": 800000,
            "location": "gaborone",
        }

    def test_house_over_million(self):
        criteria = parse_free_text("house over 1m")

        assert criteria.to_dict() == {"type": "house", "minPrice": 1000000}


# =============================================================================
# Test: Price Rules
# =============================================================================

class TestPriceRules:
    """Price range, floor and ceiling extraction."""

    def test_range_with_dash(self):
        criteria = parse_free_text("plot 100k-300k")

        assert criteria.min_price == 100000
        assert criteria.max_price == 300000

    def test_range_without_suffix(self):
        criteria = parse_free_text("flat 450000 to 900000")

        assert criteria.min_price == 450000
        assert criteria.max_price == 900000

    def test_above_sets_floor_only(self):
        criteria = parse_free_text("farm above 2m")

        assert criteria.min_price == 2000000
        assert criteria.max_price is None

    def test_decimal_millions(self):
        criteria = parse_free_text("house under 1.5m")

        assert criteria.max_price == 1500000
        assert isinstance(criteria.max_price, int)

    def test_uppercase_suffix(self):
        criteria = parse_free_text("HOUSE UNDER 750K")

        assert criteria.max_price == 750000

    def test_under_overwrites_range_ceiling(self):
        """Range runs first, a later 'under' match replaces max_price."""
        criteria = parse_free_text("under 400k 100k-900k")

        assert criteria.min_price == 100000
        assert criteria.max_price == 400000

    def test_above_overwrites_range_floor(self):
        criteria = parse_free_text("200k to 800k above 300k")

        assert criteria.min_price == 300000
        assert criteria.max_price == 800000

    def test_over_with_range(self):
        criteria = parse_free_text("over 500k to 1m")

        assert criteria.min_price == 500000
        assert criteria.max_price == 1000000

    def test_no_price(self):
        criteria = parse_free_text("house in maun")

        assert criteria.min_price is None
        assert criteria.max_price is None

    @pytest.mark.parametrize("number,suffix,expected", [
        ("500", None, 500),
        ("500", "k", 500000),
        ("2", "m", 2000000),
        ("0.75", "m", 750000),
        ("1.25", None, 1.25),
    ])
    def test_parse_amount(self, number, suffix, expected):
        assert parse_amount(number, suffix) == expected


# =============================================================================
# Test: Bedrooms
# =============================================================================

class TestBedrooms:
    """Bedroom count extraction."""

    def test_word_form(self):
        assert parse_free_text("three bedroom flat").beds == 3

    def test_bed_suffix(self):
        assert parse_free_text("2 bed apartment").beds == 2

    def test_bedroomed_suffix(self):
        assert parse_free_text("five bedroomed house").beds == 5

    def test_digit_form_takes_precedence(self):
        assert parse_free_text("two bedroom or 4 bed").beds == 4

    def test_no_bedrooms(self):
        assert parse_free_text("plot in kanye").beds is None


# =============================================================================
# Test: Property Type
# =============================================================================

class TestPropertyType:
    """Property type categories."""

    @pytest.mark.parametrize("query,expected", [
        ("standalone in gaborone", "house"),
        ("detached home", "house"),
        ("unit near campus", "apartment"),
        ("townhouse in block 8", "townhouse"),
        ("townhome", "townhouse"),
        ("vacant land", "plot"),
        ("agricultural holding", "farm"),
        ("office space", "commercial"),
        ("retail shop", "commercial"),
    ])
    def test_categories(self, query, expected):
        assert parse_free_text(query).type == expected

    def test_first_category_wins(self):
        """house is checked before plot."""
        assert parse_free_text("house with land").type == "house"

    def test_no_type(self):
        assert parse_free_text("something in serowe").type is None


# =============================================================================
# Test: Location & Descriptive Terms
# =============================================================================

class TestLocationAndDescriptors:
    """Gazetteer and descriptive term extraction."""

    def test_location_case_insensitive(self):
        assert parse_free_text("LUXURY villa in Kasane").location == "kasane"

    def test_first_gazetteer_entry_wins(self):
        assert parse_free_text("maun or gaborone").location == "gaborone"

    def test_unknown_location(self):
        assert parse_free_text("house in lobatse").location is None

    def test_descriptors_joined_in_vocabulary_order(self):
        criteria = parse_free_text("spacious modern family home")

        assert criteria.query == "modern spacious family"

    def test_descriptor_requires_whole_word(self):
        assert parse_free_text("renewed lease").query is None


# =============================================================================
# Test: Totality
# =============================================================================

class TestTotality:
    """The parser never raises and always returns criteria."""

    @pytest.mark.parametrize("query", [
        "",
        "   ",
        None,
        "k",
        "-",
        "to to to",
        "999999999999999999999m to 1k",
        "över 5 kr ß",
        "3bedroom5bed",
        "\n\t",
    ])
    def test_odd_inputs(self, query):
        criteria = parse_free_text(query)

        assert isinstance(criteria, SearchCriteria)

    def test_empty_query_yields_empty_criteria(self):
        criteria = parse_free_text("")

        assert criteria.to_dict() == {}
        assert not criteria.has_structured_filters()

    def test_deterministic(self):
        query = "modern 3 bedroom house 500k to 2m in gaborone"

        assert parse_free_text(query) == parse_free_text(query)
