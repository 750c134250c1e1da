"""
Base search provider interface.
"""

from abc import ABC, abstractmethod
from typing import List

from core.models import SearchCriteria, UnifiedProperty


class BaseSearchProvider(ABC):
    """Abstract base class for external property search providers."""

    @property
    @abstractmethod
    def enabled(self) -> bool:
        """Whether the provider is configured and should be queried."""
        pass

    @abstractmethod
    def search(self, query: str, criteria: SearchCriteria) -> List[UnifiedProperty]:
        """
        Search the provider for properties.

        Implementations must not raise: failures degrade to an empty list.

        Args:
            query: Raw free-text query.
            criteria: Structured criteria derived from the query.

        Returns:
            List of UnifiedProperty objects with source "external".
        """
        pass
