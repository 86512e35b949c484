"""
Booking endpoints
=================

POST  /api/v1/bookings/quote               -- shortest route + priced options
POST  /api/v1/bookings                     -- create a booking (201)
GET   /api/v1/bookings                     -- all bookings, newest first
GET   /api/v1/bookings/{booking_id}        -- booking by system id
GET   /api/v1/bookings/code/{human_code}   -- booking by public code
GET   /api/v1/bookings/contact/{contact}   -- bookings for a rider contact
PATCH /api/v1/bookings/{booking_id}/status -- lifecycle transition
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from cabroute.api.dependencies import get_lifecycle
from cabroute.api.middleware import RATE_LIMIT, limiter
from cabroute.api.schemas import (
    BookingCreateRequest,
    BookingResponse,
    QuoteRequest,
    QuoteResponse,
    StatusUpdateRequest,
)
from cabroute.services.lifecycle import BookingLifecycle, BookingRequest

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post(
    "/quote",
    response_model=QuoteResponse,
    summary="Calculate route and cost per vehicle",
)
@limiter.limit(RATE_LIMIT)
async def quote(
    request: Request,
    body: QuoteRequest,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
):
    return await lifecycle.quote(body.source, body.destination)


@router.post(
    "",
    status_code=201,
    response_model=BookingResponse,
    summary="Create a booking",
    responses={409: {"description": "Vehicle already reserved for the interval."}},
)
@limiter.limit(RATE_LIMIT)
async def create_booking(
    request: Request,
    body: BookingCreateRequest,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
):
    return await lifecycle.create(
        BookingRequest(
            source=body.source,
            destination=body.destination,
            vehicle_id=body.vehicle_id,
            start=body.start_time,
            rider_contact=body.rider_contact,
        )
    )


@router.get("", response_model=list[BookingResponse], summary="List bookings")
@limiter.limit(RATE_LIMIT)
async def list_bookings(
    request: Request,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
):
    return await lifecycle.list_bookings()


@router.get(
    "/code/{human_code}",
    response_model=BookingResponse,
    summary="Find a booking by its public code",
)
@limiter.limit(RATE_LIMIT)
async def get_by_code(
    request: Request,
    human_code: str,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
):
    return await lifecycle.find_by_human_code(human_code)


@router.get(
    "/contact/{contact}",
    response_model=list[BookingResponse],
    summary="List a rider's bookings",
)
@limiter.limit(RATE_LIMIT)
async def get_by_contact(
    request: Request,
    contact: str,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
):
    return await lifecycle.find_by_contact(contact)


@router.get("/{booking_id}", response_model=BookingResponse, summary="Get a booking")
@limiter.limit(RATE_LIMIT)
async def get_booking(
    request: Request,
    booking_id: str,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
):
    return await lifecycle.get(booking_id)


@router.patch(
    "/{booking_id}/status",
    response_model=BookingResponse,
    summary="Change booking status",
    description=(
        "Moves a booking to in-progress, completed or cancelled. "
        "Completing or cancelling releases the vehicle's reservation."
    ),
)
@limiter.limit(RATE_LIMIT)
async def update_status(
    request: Request,
    booking_id: str,
    body: StatusUpdateRequest,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
):
    return await lifecycle.transition(booking_id, body.status)
