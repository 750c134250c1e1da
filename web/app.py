"""
FastAPI application for the property search aggregator.

Production deployment configuration via environment variables.
"""

import logging
import os
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.aggregator import SearchAggregator
from core.listings import PropertyRepository
from core.local_search import LocalSearch
from intel import BaseSearchProvider, IntelSearchClient
from utils.config import Config
from web.property_routes import router as property_router
from web.search_routes import router as search_router


logger = logging.getLogger(__name__)


# =============================================================================
# Environment Configuration
# =============================================================================

# Production mode detection
IS_PRODUCTION = os.getenv("RAILWAY_ENVIRONMENT") is not None or os.getenv("PRODUCTION", "").lower() == "true"

# CORS configuration - explicit origins only in production
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "").split(",") if os.getenv("ALLOWED_ORIGINS") else []
if not ALLOWED_ORIGINS and not IS_PRODUCTION:
    # Development fallback only
    ALLOWED_ORIGINS = ["http://localhost:5173", "http://127.0.0.1:5173"]


def create_app(
    config: Optional[Config] = None,
    repository: Optional[PropertyRepository] = None,
    provider: Optional[BaseSearchProvider] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Configuration (loaded from the environment when omitted)
        repository: Property store (built from config.data_path when omitted)
        provider: External search provider (IntelSearchClient when omitted)
    """
    config = config or Config.load()

    app = FastAPI(
        title="Property Search Aggregator",
        description="Unified free-text search over local and external property listings",
        version="0.1.0",
        docs_url=None if IS_PRODUCTION else "/docs",
        redoc_url=None if IS_PRODUCTION else "/redoc",
        openapi_url=None if IS_PRODUCTION else "/openapi.json",
        debug=config.debug and not IS_PRODUCTION,
    )

    @app.get("/health", include_in_schema=False)
    def health():
        """Health endpoint. No dependencies, no IO."""
        return {"status": "healthy"}

    if ALLOWED_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=ALLOWED_ORIGINS,
            allow_credentials=True,
            allow_methods=["GET"],
            allow_headers=["*"],
        )

    # Initialize components
    if repository is None:
        repository = PropertyRepository(
            persist_path=config.data_path,
            cache_ttl=config.cache_ttl_seconds,
        )
    if provider is None:
        provider = IntelSearchClient(
            base_url=config.intel_base_url,
            api_key=config.intel_api_key,
            timeout=config.intel_timeout,
        )
        if not provider.enabled:
            logger.warning("Intel API key not configured; external search disabled")

    app.state.config = config
    app.state.repository = repository
    app.state.provider = provider
    app.state.aggregator = SearchAggregator(
        local_search=LocalSearch(repository),
        provider=provider,
        parallel=config.parallel_search,
    )

    app.include_router(search_router)
    app.include_router(property_router)

    @app.get("/api/health")
    def api_health():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": "0.1.0",
            "environment": "production" if IS_PRODUCTION else "development",
            "external_search": provider.enabled,
            "properties": repository.count(),
        }

    return app


# Create app instance for uvicorn
app = create_app()
