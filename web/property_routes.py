"""
Property Routes - Plain Listing Browse API

GET /api/properties        Filtered, paginated listings
GET /api/properties/{id}   Single listing

Filters are validated up front; invalid query strings get a 400 with the
list of offending fields.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from core.listings import (
    PropertyRepository,
    format_validation_errors,
    parse_property_filters,
)


logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/properties", tags=["properties"])


def get_repository(request: Request) -> PropertyRepository:
    return request.app.state.repository


@router.get("")
def list_properties(request: Request):
    """List properties matching the query-string filters."""
    try:
        filters = parse_property_filters(dict(request.query_params))
    except ValidationError as e:
        return JSONResponse(
            status_code=400,
            content={
                "error": "Invalid property filters",
                "details": format_validation_errors(e),
            },
        )

    try:
        return get_repository(request).list(filters)
    except Exception:
        logger.exception("Get properties error")
        return JSONResponse(status_code=500, content={"message": "Failed to fetch properties"})


@router.get("/{property_id}")
def get_property(property_id: int, request: Request):
    """Fetch one property by id."""
    repository = get_repository(request)
    prop = repository.get(property_id)
    if prop is None:
        raise HTTPException(status_code=404, detail="Property not found")
    repository.increment_views(property_id)
    return prop
