"""
Admin / observability endpoints
===============================

GET /api/v1/admin/active-bookings -- bookings still holding a reservation
GET /api/v1/admin/health          -- simple health check
"""

from fastapi import APIRouter, Depends, Request

from cabroute.api.dependencies import get_lifecycle
from cabroute.api.middleware import RATE_LIMIT, limiter
from cabroute.api.schemas import BookingResponse, HealthResponse
from cabroute.services.lifecycle import BookingLifecycle

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get(
    "/active-bookings",
    response_model=list[BookingResponse],
    summary="List confirmed and in-progress bookings",
)
@limiter.limit(RATE_LIMIT)
async def get_active_bookings(
    request: Request,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
):
    bookings = await lifecycle.list_bookings()
    return [b for b in bookings if not b.is_terminal]


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
