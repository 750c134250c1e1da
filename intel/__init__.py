"""
External intelligence providers for supplementary listings.

Available providers:
- IntelSearchClient: intelligence search service reached over HTTP
"""

from .base import BaseSearchProvider
from .client import (
    IntelSearchClient,
    IntelSearchOutcome,
    map_external_result,
)

__all__ = [
    "BaseSearchProvider",
    "IntelSearchClient",
    "IntelSearchOutcome",
    "map_external_result",
]
