"""
Data models for the search aggregator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


SOURCE_LOCAL = "local"
SOURCE_EXTERNAL = "external"


@dataclass
class SearchCriteria:
    """Structured constraints derived from a free-text search query."""

    beds: Optional[int] = None
    type: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    location: Optional[str] = None
    query: Optional[str] = None  # Residual descriptive terms ("modern luxury")

    def has_structured_filters(self) -> bool:
        """Check if any criterion other than the descriptive residual was derived."""
        return any(
            value is not None
            for value in (self.beds, self.type, self.location, self.min_price, self.max_price)
        )

    def to_dict(self) -> dict:
        """Convert to the wire shape, omitting absent fields."""
        data = {
            "beds": self.beds,
            "type": self.type,
            "minPrice": self.min_price,
            "maxPrice": self.max_price,
            "location": self.location,
            "query": self.query,
        }
        return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class Coordinates:
    """A finite latitude/longitude pair."""

    lat: float
    lng: float

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}


@dataclass
class Agency:
    """Listing agency or agent shown alongside a result."""

    name: str
    contact: Optional[str] = None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"name": self.name}
        if self.contact:
            data["contact"] = self.contact
        return data


@dataclass
class UnifiedProperty:
    """
    A property listing in the shape shared by local and external sources.

    Ids are prefixed by source (local_<n> / external_<n>) so the two
    sources never collide inside one result list.
    """

    id: str
    title: str
    price: float
    address: str
    city: str
    property_type: str
    source: str

    # Optional fields
    bedrooms: Optional[float] = None
    bathrooms: Optional[float] = None
    score: Optional[float] = None
    description: str = ""
    images: list[str] = field(default_factory=list)
    coordinates: Optional[Coordinates] = None
    agency: Optional[Agency] = None

    @property
    def is_local(self) -> bool:
        return self.source == SOURCE_LOCAL

    def to_dict(self) -> dict:
        """Convert to the JSON response shape (camelCase, absent optionals omitted)."""
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "price": self.price,
            "address": self.address,
            "city": self.city,
            "propertyType": self.property_type,
            "source": self.source,
            "description": self.description,
            "images": list(self.images),
        }
        if self.bedrooms is not None:
            data["bedrooms"] = self.bedrooms
        if self.bathrooms is not None:
            data["bathrooms"] = self.bathrooms
        if self.score is not None:
            data["score"] = self.score
        if self.coordinates is not None:
            data["coordinates"] = self.coordinates.to_dict()
        if self.agency is not None:
            data["agency"] = self.agency.to_dict()
        return data
