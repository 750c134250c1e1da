"""
Listing Filters - Query-String Validation for Listing Endpoints

Validates the filter parameters accepted by the plain listing endpoints.
Empty values are treated as absent, strings are trimmed and unknown keys
are ignored. Invalid values raise pydantic.ValidationError, which the
routes turn into a 400 with the structured error list.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator


SortBy = Literal["price", "date", "size", "bedrooms", "price_low", "price_high", "newest"]
SortOrder = Literal["asc", "desc"]

DEFAULT_STATUS = "active"
MAX_PAGE_SIZE = 100


class PropertyFilters(BaseModel):
    """Filters for listing queries (camelCase aliases match the query string)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    min_price: Optional[float] = Field(default=None, ge=0, alias="minPrice")
    max_price: Optional[float] = Field(default=None, ge=0, alias="maxPrice")
    property_type: Optional[str] = Field(default=None, alias="propertyType")
    min_bedrooms: Optional[int] = Field(default=None, ge=0, alias="minBedrooms")
    min_bathrooms: Optional[float] = Field(default=None, ge=0, alias="minBathrooms")
    min_square_feet: Optional[int] = Field(default=None, ge=0, alias="minSquareFeet")
    max_square_feet: Optional[int] = Field(default=None, ge=0, alias="maxSquareFeet")
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = Field(default=None, alias="zipCode")
    address: Optional[str] = None
    title: Optional[str] = None
    location: Optional[str] = None
    listing_type: Optional[str] = Field(default=None, alias="listingType")
    status: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=1, le=MAX_PAGE_SIZE)
    offset: Optional[int] = Field(default=None, ge=0)
    sort_by: Optional[SortBy] = Field(default=None, alias="sortBy")
    sort_order: Optional[SortOrder] = Field(default=None, alias="sortOrder")
    require_valid_coordinates: Optional[bool] = Field(default=None, alias="requireValidCoordinates")
    search_term: Optional[str] = Field(default=None, alias="searchTerm")

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        # Repeated query params arrive as lists; the first one wins
        if isinstance(value, (list, tuple)):
            value = value[0] if value else None
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
        return value

    @field_validator("sort_order", mode="before")
    @classmethod
    def _lowercase_order(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value

    def cache_params(self) -> dict[str, Any]:
        """Flatten filters for cache key construction."""
        return self.model_dump()

    @property
    def effective_search_term(self) -> Optional[str]:
        """The free-text term: search_term, else location, city, address, title."""
        for candidate in (self.search_term, self.location, self.city, self.address, self.title):
            if candidate:
                return candidate
        return None


class ListingQueryFilters(PropertyFilters):
    """Filters parsed from a public listing request; status defaults to active."""

    @model_validator(mode="after")
    def _default_status(self) -> "ListingQueryFilters":
        if self.status is None:
            self.status = DEFAULT_STATUS
        return self


def parse_property_filters(params: dict[str, Any]) -> ListingQueryFilters:
    """
    Validate listing query parameters.

    Raises:
        pydantic.ValidationError: If any parameter is invalid.
    """
    return ListingQueryFilters.model_validate(params)


def format_validation_errors(exc: ValidationError) -> list[dict[str, Any]]:
    """Convert a ValidationError to a JSON-safe list of {field, message} entries."""
    details = []
    for error in exc.errors():
        details.append({
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", "Invalid value"),
        })
    return details
