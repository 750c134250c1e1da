"""
External intelligence search client.

Forwards a free-text query and its derived criteria to the external intelligence
search provider and maps the provider's loosely-typed results into
UnifiedProperty records.

The provider is a soft dependency: with no API key configured it is
disabled, and any failure (HTTP error, network error, timeout, bad JSON)
yields an empty result list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Final, List, Optional

import requests

from core.models import SOURCE_EXTERNAL, Agency, SearchCriteria, UnifiedProperty
from core.normalise import (
    build_coordinates,
    normalise_price,
    normalise_string_array,
    to_finite_number,
    whole_number,
)

from .base import BaseSearchProvider


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

SEARCH_PATH = "/intel/search"
DEFAULT_TIMEOUT_SECONDS: Final[float] = 8.0
DEFAULT_SCORE: Final[float] = 0.8
DEFAULT_TITLE: Final[str] = "External Property"
DEFAULT_AGENCY_NAME: Final[str] = "External Agent"
USER_AGENT = "PropertySearchAggregator/1.0"


# =============================================================================
# Outcome
# =============================================================================

@dataclass
class IntelSearchOutcome:
    """Result of one provider call: records on success, error text on failure."""
    records: List[UnifiedProperty] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, error: str) -> "IntelSearchOutcome":
        return cls(records=[], error=error)


# =============================================================================
# Mapping
# =============================================================================

def map_external_result(item: dict, index: int) -> UnifiedProperty:
    """
    Map one provider result to a UnifiedProperty.

    Args:
        item: Result object from the provider response.
        index: Position in the response, used as the id when the provider
            omits one.
    """
    provider_id = item.get("id")
    if provider_id is None or provider_id == "":
        provider_id = index

    agent = item.get("agent") if isinstance(item.get("agent"), dict) else {}
    score = to_finite_number(item.get("score"))

    return UnifiedProperty(
        id=f"external_{provider_id}",
        title=str(item.get("title") or DEFAULT_TITLE),
        price=normalise_price(item.get("price")),
        address=str(item.get("address") or ""),
        city=str(item.get("city") or ""),
        property_type=str(item.get("propertyType") or item.get("property_type") or ""),
        source=SOURCE_EXTERNAL,
        bedrooms=whole_number(to_finite_number(item.get("bedrooms"))),
        bathrooms=whole_number(to_finite_number(item.get("bathrooms"))),
        score=score if score is not None else DEFAULT_SCORE,
        description=str(item.get("description") or ""),
        images=normalise_string_array(item.get("images")),
        coordinates=build_coordinates(
            item.get("lat", item.get("latitude")),
            item.get("lng", item.get("longitude")),
        ),
        agency=Agency(
            name=str(agent.get("name") or DEFAULT_AGENCY_NAME),
            contact=agent.get("phone") or agent.get("email") or None,
        ),
    )


# =============================================================================
# Client
# =============================================================================

class IntelSearchClient(BaseSearchProvider):
    """
    HTTP client for the external intelligence search provider.

    Features:
    - Single attempt per search, no retries
    - Bounded timeout; a timeout counts as a failed search
    - Disabled (no request made) when no API key is configured
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key or None
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
            "Content-Type": "application/json",
        })

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    @property
    def search_url(self) -> str:
        return f"{self.base_url}{SEARCH_PATH}"

    def fetch(self, query: str, criteria: SearchCriteria) -> IntelSearchOutcome:
        """
        Call the provider once and report the outcome.

        Never raises; every failure is returned as IntelSearchOutcome.failure.
        """
        if not self.enabled:
            return IntelSearchOutcome.failure("external search disabled: no API key configured")

        payload = {"query": query, "filters": criteria.to_dict()}

        try:
            response = self._session.post(
                self.search_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
        except requests.Timeout:
            return IntelSearchOutcome.failure(f"timed out after {self.timeout}s")
        except requests.RequestException as e:
            return IntelSearchOutcome.failure(f"request failed: {e}")

        if not response.ok:
            return IntelSearchOutcome.failure(
                f"HTTP {response.status_code} {response.reason or ''}".strip()
            )

        try:
            data = response.json()
        except ValueError as e:
            return IntelSearchOutcome.failure(f"unparseable response body: {e}")

        if not isinstance(data, dict):
            return IntelSearchOutcome.failure("response body is not a JSON object")

        results = data.get("results") or []
        if not isinstance(results, list):
            return IntelSearchOutcome.failure("response 'results' is not a list")

        records = [
            map_external_result(item, index)
            for index, item in enumerate(results)
            if isinstance(item, dict)
        ]
        return IntelSearchOutcome(records=records)

    def search(self, query: str, criteria: SearchCriteria) -> List[UnifiedProperty]:
        """
        Search the provider, degrading to an empty list on any failure.

        Args:
            query: Raw free-text query.
            criteria: Structured criteria sent along as filters.

        Returns:
            Mapped records, or [] when disabled or failing.
        """
        try:
            outcome = self.fetch(query, criteria)
        except Exception:
            # Mapping bugs must not take the search down either
            logger.exception("External search crashed for %r", query)
            return []

        if not outcome.ok:
            if self.enabled:
                logger.error("External search failed for %r: %s", query, outcome.error)
            else:
                logger.warning("Skipping external search: %s", outcome.error)
            return []

        logger.info("External search returned %d properties", len(outcome.records))
        return outcome.records

    def close(self) -> None:
        """Close the session."""
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
