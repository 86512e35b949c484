"""
Typed failures raised by the routing and booking core.

Every error carries a stable ``code`` so the request layer can serialise
it without inspecting messages.  Except for ``NotificationFailure`` all of
them abort the operation before anything is committed.
"""

from __future__ import annotations


class BookingError(Exception):
    code = "booking_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ── Route graph input ─────────────────────────────────────────────────


class InvalidEdge(BookingError):
    code = "invalid_edge"


class DuplicateEdge(BookingError):
    code = "duplicate_edge"


class EdgeNotFound(BookingError):
    code = "edge_not_found"


# ── Routing queries ───────────────────────────────────────────────────


class UnknownLocation(BookingError):
    code = "unknown_location"


class UnreachableDestination(BookingError):
    code = "unreachable_destination"


# ── Caller input ──────────────────────────────────────────────────────


class SameLocation(BookingError):
    code = "same_location"


class InvalidContact(BookingError):
    code = "invalid_contact"


# ── Fleet / lifecycle ─────────────────────────────────────────────────


class InvalidVehicle(BookingError):
    code = "invalid_vehicle"


class DuplicateVehicle(BookingError):
    code = "duplicate_vehicle"


class InvalidInterval(BookingError):
    code = "invalid_interval"


class VehicleNotFound(BookingError):
    code = "vehicle_not_found"


class VehicleUnavailable(BookingError):
    code = "vehicle_unavailable"


class BookingNotFound(BookingError):
    code = "booking_not_found"


class InvalidTransition(BookingError):
    """Raised when a booking status change violates the state machine."""

    code = "invalid_transition"


class ResourceBusy(BookingError):
    """The per-resource critical section could not be entered in time."""

    code = "resource_busy"


class CodeAllocationFailed(BookingError):
    """No unused human booking code could be generated."""

    code = "code_allocation_failed"


class NotificationFailure(BookingError):
    """Delivery to a notification sink failed.  Logged, never surfaced."""

    code = "notification_failure"
