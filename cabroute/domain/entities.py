"""
Domain entities with business logic.

Patterns used
-------------
- **Immutable snapshots**: ``Vehicle`` and ``Booking`` are frozen; every
  change builds a new instance with ``dataclasses.replace`` which the
  caller validates and then commits through a unit of work.
- **State Pattern** on ``Booking``: enforces valid lifecycle transitions
  (confirmed -> in-progress -> completed | cancelled).
- ``Vehicle.is_available`` delegates the overlap rule to
  ``availability.is_available``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional

from .availability import is_available
from .enums import BOOKING_TRANSITIONS, BookingStatus
from .errors import InvalidTransition


def normalize_location(value: str) -> str:
    """Trim and upper-case a location token; ``" a "`` -> ``"A"``."""
    return (value or "").strip().upper()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with stored values."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class RouteEdge:
    source: str
    target: str
    duration_minutes: int

    @property
    def key(self) -> tuple[str, str]:
        return (self.source, self.target)


@dataclass(frozen=True)
class Reservation:
    booking_id: str
    start: datetime
    end: datetime

    @property
    def interval(self) -> tuple[datetime, datetime]:
        return (self.start, self.end)


# ── Entities ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Vehicle:
    id: str
    name: str
    rate_per_minute: float
    active: bool = True
    reservations: tuple[Reservation, ...] = ()

    def is_available(self, start: datetime, end: datetime) -> bool:
        return is_available((r.interval for r in self.reservations), (start, end))

    def reservation_for(self, booking_id: str) -> Optional[Reservation]:
        for reservation in self.reservations:
            if reservation.booking_id == booking_id:
                return reservation
        return None

    def with_reservation(self, reservation: Reservation) -> Vehicle:
        kept = tuple(
            r for r in self.reservations if r.booking_id != reservation.booking_id
        )
        ordered = sorted(kept + (reservation,), key=lambda r: (r.start, r.booking_id))
        return replace(self, reservations=tuple(ordered))

    def without_reservation(self, booking_id: str) -> Vehicle:
        return replace(
            self,
            reservations=tuple(
                r for r in self.reservations if r.booking_id != booking_id
            ),
        )


@dataclass(frozen=True)
class Booking:
    id: str
    human_code: str
    source: str
    destination: str
    vehicle_id: str
    path: tuple[str, ...]
    total_duration: int
    estimated_cost: float
    start: datetime
    end: datetime
    status: BookingStatus = BookingStatus.CONFIRMED
    rider_contact: Optional[str] = None
    notification_sent: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def reservation(self) -> Reservation:
        return Reservation(booking_id=self.id, start=self.start, end=self.end)

    def transition_to(self, new_status: BookingStatus) -> Booking:
        """Return a copy in *new_status* if the transition is legal, else raise."""
        allowed = BOOKING_TRANSITIONS.get(self.status, set())
        if new_status not in allowed:
            raise InvalidTransition(
                f"Cannot transition booking {self.human_code} "
                f"from {self.status.value} to {new_status.value}"
            )
        return replace(self, status=new_status, updated_at=utcnow())

    def mark_notified(self) -> Booking:
        return replace(self, notification_sent=True, updated_at=utcnow())
