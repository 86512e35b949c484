"""Maps core failures onto HTTP responses."""

from fastapi import Request
from fastapi.responses import JSONResponse

from cabroute.domain.errors import (
    BookingError,
    BookingNotFound,
    CodeAllocationFailed,
    DuplicateEdge,
    DuplicateVehicle,
    EdgeNotFound,
    InvalidContact,
    InvalidEdge,
    InvalidInterval,
    InvalidTransition,
    InvalidVehicle,
    ResourceBusy,
    SameLocation,
    UnknownLocation,
    UnreachableDestination,
    VehicleNotFound,
    VehicleUnavailable,
)

STATUS_CODES: dict[type[BookingError], int] = {
    InvalidEdge: 400,
    InvalidVehicle: 400,
    InvalidInterval: 400,
    SameLocation: 400,
    InvalidContact: 400,
    UnknownLocation: 404,
    VehicleNotFound: 404,
    BookingNotFound: 404,
    EdgeNotFound: 404,
    DuplicateEdge: 409,
    DuplicateVehicle: 409,
    VehicleUnavailable: 409,
    InvalidTransition: 409,
    UnreachableDestination: 422,
    ResourceBusy: 503,
    CodeAllocationFailed: 503,
}


def status_for(exc: BookingError) -> int:
    for error_type, status_code in STATUS_CODES.items():
        if isinstance(exc, error_type):
            return status_code
    return 400


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    return JSONResponse(
        status_code=status_for(exc),
        content={"detail": exc.message, "code": exc.code},
    )
