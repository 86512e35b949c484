"""
Location endpoints
==================

GET /api/v1/locations                       -- every location in the network
GET /api/v1/locations/{source}/destinations -- locations reachable from source
"""

from fastapi import APIRouter, Depends, Request

from cabroute.api.dependencies import get_lifecycle
from cabroute.api.middleware import RATE_LIMIT, limiter
from cabroute.services.lifecycle import BookingLifecycle

router = APIRouter(prefix="/locations", tags=["locations"])


@router.get("", response_model=list[str], summary="List all locations")
@limiter.limit(RATE_LIMIT)
async def list_locations(
    request: Request,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
):
    return await lifecycle.list_locations()


@router.get(
    "/{source}/destinations",
    response_model=list[str],
    summary="List destinations reachable from a location",
)
@limiter.limit(RATE_LIMIT)
async def list_destinations(
    request: Request,
    source: str,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
):
    return await lifecycle.destinations_from(source)
