"""
Utility modules for the search aggregator.
"""

from .config import Config

__all__ = ["Config"]
