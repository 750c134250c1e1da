"""
Configuration management.
"""

import os
from dataclasses import dataclass, field
from typing import Optional


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


@dataclass
class Config:
    """
    Application configuration.

    Loads from environment variables with sensible defaults. A missing
    intel API key is valid: external search is simply disabled.
    """

    # Server
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    debug: bool = field(default_factory=lambda: _env_bool("DEBUG"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    # External intelligence provider
    intel_base_url: str = field(
        default_factory=lambda: os.getenv("INTEL_BASE_URL", "http://127.0.0.1:5000")
    )
    intel_api_key: Optional[str] = field(
        default_factory=lambda: os.getenv("INTEL_API_KEY") or os.getenv("OPENAI_API_KEY") or None
    )
    intel_timeout: float = field(default_factory=lambda: float(os.getenv("INTEL_TIMEOUT", "8")))

    # Search
    parallel_search: bool = field(default_factory=lambda: _env_bool("PARALLEL_SEARCH"))

    # Data
    data_path: Optional[str] = field(
        default_factory=lambda: os.getenv("DATA_PATH", "./data/properties.json") or None
    )
    cache_ttl_seconds: float = field(
        default_factory=lambda: float(os.getenv("CACHE_TTL_SECONDS", "300"))
    )

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        return cls()

    @property
    def intel_enabled(self) -> bool:
        return bool(self.intel_api_key)

    def to_dict(self) -> dict:
        """Convert config to dictionary (the API key is never included)."""
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "log_level": self.log_level,
            "intel_base_url": self.intel_base_url,
            "intel_enabled": self.intel_enabled,
            "intel_timeout": self.intel_timeout,
            "parallel_search": self.parallel_search,
            "data_path": self.data_path,
            "cache_ttl_seconds": self.cache_ttl_seconds,
        }
