"""
Booking Lifecycle
=================

The core surface exposed to the request layer: quoting, booking creation,
status transitions and read-only lookups.

Concurrency safety
------------------
* The route graph is rebuilt from the edge store for every call and only
  read, so routing runs unsynchronised.
* The availability check and the commit of ``booking + reservation`` run
  inside ``locks.hold(vehicle_id)`` and one unit of work.  The same holds
  for releasing a reservation together with a terminal status write.
* Notifications are enqueued after commit and never awaited here.  A
  failure to enqueue is logged; the committed booking is still returned.

State machine
-------------
confirmed -> in-progress -> completed, confirmed | in-progress -> cancelled
(``confirmed -> completed`` is accepted as well).  ``completed`` and
``cancelled`` are terminal.
"""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional, Protocol, Union

from cabroute.domain.entities import Booking, as_utc, utcnow
from cabroute.domain.enums import BookingStatus, NotificationEvent
from cabroute.domain.errors import (
    BookingNotFound,
    CodeAllocationFailed,
    InvalidContact,
    InvalidTransition,
    VehicleNotFound,
    VehicleUnavailable,
)
from cabroute.domain.graph import RouteGraph
from cabroute.domain.planner import Quote, RoutePlan, TripPlanner, validate_endpoints
from cabroute.infrastructure.locks import LockManager
from cabroute.infrastructure.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

CONTACT_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
HUMAN_CODE_ATTEMPTS = 5


class NotificationPublisher(Protocol):
    def publish(self, booking: Booking, event: NotificationEvent) -> bool: ...


@dataclass(frozen=True)
class BookingRequest:
    source: str
    destination: str
    vehicle_id: str
    start: datetime
    rider_contact: Optional[str] = None


def normalize_contact(contact: Optional[str]) -> Optional[str]:
    """Blank means absent; otherwise require an email shape and lowercase it."""
    if contact is None or not contact.strip():
        return None
    contact = contact.strip()
    if not CONTACT_PATTERN.match(contact):
        raise InvalidContact("Invalid email format")
    return contact.lower()


def new_human_code() -> str:
    return uuid.uuid4().hex[:8].upper()


class BookingLifecycle:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        locks: LockManager,
        notifier: Optional[NotificationPublisher] = None,
        planner: Optional[TripPlanner] = None,
        code_factory: Callable[[], str] = new_human_code,
    ):
        self.uow_factory = uow_factory
        self.locks = locks
        self.notifier = notifier
        self.planner = planner or TripPlanner()
        self.code_factory = code_factory

    # ── Routing ───────────────────────────────────────────────────────

    async def load_graph(self) -> RouteGraph:
        async with self.uow_factory() as uow:
            edges = await uow.edges.scan()
        return RouteGraph.build(edges)

    async def quote(self, source: str, destination: str) -> Quote:
        validate_endpoints(source, destination)
        async with self.uow_factory() as uow:
            graph = RouteGraph.build(await uow.edges.scan())
            vehicles = await uow.vehicles.list_active()
        return self.planner.quote(graph, source, destination, vehicles)

    async def list_locations(self) -> list[str]:
        return (await self.load_graph()).all_nodes()

    async def destinations_from(self, source: str) -> list[str]:
        return list((await self.load_graph()).reachable_from(source))

    # ── Commands ──────────────────────────────────────────────────────

    async def create(self, request: BookingRequest) -> Booking:
        source, destination = validate_endpoints(request.source, request.destination)
        contact = normalize_contact(request.rider_contact)
        route: RoutePlan = self.planner.plan_route(
            await self.load_graph(), source, destination
        )

        start = as_utc(request.start)
        end = start + timedelta(minutes=route.total_duration)

        async with self.locks.hold(request.vehicle_id):
            async with self.uow_factory() as uow:
                vehicle = await uow.vehicles.get(request.vehicle_id)
                if vehicle is None or not vehicle.active:
                    raise VehicleNotFound(
                        f"Vehicle {request.vehicle_id} not found or inactive"
                    )
                if not vehicle.is_available(start, end):
                    logger.info(
                        "Vehicle %s unavailable for %s - %s",
                        vehicle.id,
                        start.isoformat(),
                        end.isoformat(),
                    )
                    raise VehicleUnavailable(
                        f"Vehicle {vehicle.id} is not available for the requested time"
                    )

                now = utcnow()
                booking = Booking(
                    id=str(uuid.uuid4()),
                    human_code=await self._unique_human_code(uow),
                    rider_contact=contact,
                    source=source,
                    destination=destination,
                    vehicle_id=vehicle.id,
                    path=route.path,
                    total_duration=route.total_duration,
                    estimated_cost=self.planner.estimate(route, vehicle),
                    start=start,
                    end=end,
                    status=BookingStatus.CONFIRMED,
                    created_at=now,
                    updated_at=now,
                )
                await uow.bookings.upsert(booking)
                await uow.vehicles.upsert(vehicle.with_reservation(booking.reservation()))
                await uow.commit()

        logger.info(
            "Booking %s created: %s -> %s on vehicle %s (%d min, %.2f)",
            booking.human_code,
            source,
            destination,
            booking.vehicle_id,
            booking.total_duration,
            booking.estimated_cost,
        )
        self._notify(booking, NotificationEvent.CREATED)
        return booking

    async def transition(
        self, booking_id: str, new_status: Union[BookingStatus, str]
    ) -> Booking:
        target = self._parse_status(new_status)
        if target is BookingStatus.CONFIRMED:
            raise InvalidTransition("A booking cannot be moved back to confirmed")

        current = await self.get(booking_id)
        async with self.locks.hold(current.vehicle_id):
            async with self.uow_factory() as uow:
                booking = await uow.bookings.get(booking_id)
                if booking is None:
                    raise BookingNotFound(f"Booking {booking_id} not found")
                updated = booking.transition_to(target)
                await uow.bookings.upsert(updated)
                if updated.is_terminal:
                    vehicle = await uow.vehicles.get(booking.vehicle_id)
                    if vehicle is not None:
                        await uow.vehicles.upsert(vehicle.without_reservation(booking.id))
                await uow.commit()

        logger.info(
            "Booking %s: %s -> %s",
            updated.human_code,
            booking.status.value,
            updated.status.value,
        )
        self._notify(updated, NotificationEvent.STATUS_CHANGED)
        return updated

    async def mark_notified(self, booking_id: str) -> Optional[Booking]:
        """Flag ``notification_sent`` without racing a concurrent status write."""
        async with self.uow_factory() as uow:
            current = await uow.bookings.get(booking_id)
        if current is None:
            return None
        async with self.locks.hold(current.vehicle_id):
            async with self.uow_factory() as uow:
                booking = await uow.bookings.get(booking_id)
                if booking is None or booking.notification_sent:
                    return booking
                updated = booking.mark_notified()
                await uow.bookings.upsert(updated)
                await uow.commit()
        return updated

    async def handle_delivery(self, booking: Booking, event: NotificationEvent) -> None:
        if event is NotificationEvent.CREATED:
            await self.mark_notified(booking.id)

    # ── Queries ───────────────────────────────────────────────────────

    async def get(self, booking_id: str) -> Booking:
        async with self.uow_factory() as uow:
            booking = await uow.bookings.get(booking_id)
        if booking is None:
            raise BookingNotFound(f"Booking {booking_id} not found")
        return booking

    async def find_by_human_code(self, human_code: str) -> Booking:
        code = human_code.strip().upper()
        async with self.uow_factory() as uow:
            booking = await uow.bookings.get_by_human_code(code)
        if booking is None:
            raise BookingNotFound(f"Booking {code} not found")
        return booking

    async def find_by_contact(self, contact: str) -> list[Booking]:
        async with self.uow_factory() as uow:
            bookings = await uow.bookings.list_by_contact(contact.strip().lower())
        return sorted(bookings, key=lambda b: b.created_at, reverse=True)

    async def list_bookings(self) -> list[Booking]:
        async with self.uow_factory() as uow:
            bookings = await uow.bookings.scan()
        return sorted(bookings, key=lambda b: b.created_at, reverse=True)

    # ── Internals ─────────────────────────────────────────────────────

    @staticmethod
    def _parse_status(value: Union[BookingStatus, str]) -> BookingStatus:
        try:
            return BookingStatus(value)
        except ValueError:
            raise InvalidTransition(f"Unknown booking status: {value}") from None

    async def _unique_human_code(self, uow: UnitOfWork) -> str:
        for _ in range(HUMAN_CODE_ATTEMPTS):
            code = self.code_factory()
            if await uow.bookings.get_by_human_code(code) is None:
                return code
        raise CodeAllocationFailed("Could not allocate a unique booking code")

    def _notify(self, booking: Booking, event: NotificationEvent) -> None:
        if self.notifier is None or not booking.rider_contact:
            return
        try:
            self.notifier.publish(booking, event)
        except Exception:
            logger.exception(
                "Publishing %s for booking %s failed", event.value, booking.human_code
            )
