"""
Repository Pattern -- abstracts storage so the booking lifecycle stays
storage-agnostic.

Every collection is a keyed store with ``get``, ``upsert``, ``delete`` and
``scan`` (filter by predicate).  The abstract classes define that contract
plus the few lookups the lifecycle needs; the SQL implementations below
receive an ``AsyncSession`` (unit-of-work) and translate between ORM rows
and domain snapshots.  ``memory.py`` provides the in-memory double.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Generic, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import BookingModel, ReservationModel, RouteEdgeModel, VehicleModel
from cabroute.domain.entities import Booking, Reservation, RouteEdge, Vehicle, as_utc

K = TypeVar("K")
T = TypeVar("T")

Predicate = Optional[Callable[[T], bool]]


class Repository(ABC, Generic[K, T]):
    @abstractmethod
    async def get(self, key: K) -> Optional[T]: ...

    @abstractmethod
    async def upsert(self, entity: T) -> T: ...

    @abstractmethod
    async def delete(self, key: K) -> bool: ...

    @abstractmethod
    async def scan(self, predicate: Predicate = None) -> list[T]: ...


class EdgeRepository(Repository[tuple[str, str], RouteEdge]):
    """Edge source: consumed to rebuild the route graph on demand."""


class VehicleRepository(Repository[str, Vehicle]):
    """Fleet source."""

    async def list_active(self) -> list[Vehicle]:
        return await self.scan(lambda v: v.active)


class BookingRepository(Repository[str, Booking]):
    async def get_by_human_code(self, human_code: str) -> Optional[Booking]:
        matches = await self.scan(lambda b: b.human_code == human_code)
        return matches[0] if matches else None

    async def list_by_contact(self, contact: str) -> list[Booking]:
        return await self.scan(lambda b: b.rider_contact == contact)


def _apply(items: list[T], predicate: Predicate) -> list[T]:
    if predicate is None:
        return items
    return [item for item in items if predicate(item)]


# ── SQL implementations ───────────────────────────────────────────────


class SqlEdgeRepository(EdgeRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _to_domain(model: RouteEdgeModel) -> RouteEdge:
        return RouteEdge(
            source=model.source,
            target=model.target,
            duration_minutes=model.duration_minutes,
        )

    async def _get_model(self, key: tuple[str, str]) -> Optional[RouteEdgeModel]:
        source, target = key
        result = await self.session.execute(
            select(RouteEdgeModel).where(
                RouteEdgeModel.source == source, RouteEdgeModel.target == target
            )
        )
        return result.scalar_one_or_none()

    async def get(self, key: tuple[str, str]) -> Optional[RouteEdge]:
        model = await self._get_model(key)
        return self._to_domain(model) if model else None

    async def upsert(self, entity: RouteEdge) -> RouteEdge:
        model = await self._get_model(entity.key)
        if model is None:
            model = RouteEdgeModel(source=entity.source, target=entity.target)
            self.session.add(model)
        model.duration_minutes = entity.duration_minutes
        await self.session.flush()
        return entity

    async def delete(self, key: tuple[str, str]) -> bool:
        model = await self._get_model(key)
        if model is None:
            return False
        await self.session.delete(model)
        await self.session.flush()
        return True

    async def scan(self, predicate: Predicate = None) -> list[RouteEdge]:
        result = await self.session.execute(
            select(RouteEdgeModel).order_by(RouteEdgeModel.source, RouteEdgeModel.target)
        )
        return _apply([self._to_domain(m) for m in result.scalars().all()], predicate)


class SqlVehicleRepository(VehicleRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _to_domain(model: VehicleModel) -> Vehicle:
        reservations = sorted(
            (
                Reservation(
                    booking_id=r.booking_id,
                    start=as_utc(r.start_time),
                    end=as_utc(r.end_time),
                )
                for r in model.reservations
            ),
            key=lambda r: (r.start, r.booking_id),
        )
        return Vehicle(
            id=model.id,
            name=model.name,
            rate_per_minute=model.rate_per_minute,
            active=model.active,
            reservations=tuple(reservations),
        )

    async def get(self, key: str) -> Optional[Vehicle]:
        model = await self.session.get(VehicleModel, key)
        return self._to_domain(model) if model else None

    async def upsert(self, entity: Vehicle) -> Vehicle:
        model = await self.session.get(VehicleModel, entity.id)
        if model is None:
            model = VehicleModel(id=entity.id, reservations=[])
            self.session.add(model)
        model.name = entity.name
        model.rate_per_minute = entity.rate_per_minute
        model.active = entity.active

        # Diff reservations so unchanged rows are left in place
        wanted = {r.booking_id: r for r in entity.reservations}
        for existing in list(model.reservations):
            reservation = wanted.pop(existing.booking_id, None)
            if reservation is None:
                model.reservations.remove(existing)
            else:
                existing.start_time = reservation.start
                existing.end_time = reservation.end
        for reservation in wanted.values():
            model.reservations.append(
                ReservationModel(
                    booking_id=reservation.booking_id,
                    start_time=reservation.start,
                    end_time=reservation.end,
                )
            )
        await self.session.flush()
        return entity

    async def delete(self, key: str) -> bool:
        model = await self.session.get(VehicleModel, key)
        if model is None:
            return False
        await self.session.delete(model)
        await self.session.flush()
        return True

    async def scan(self, predicate: Predicate = None) -> list[Vehicle]:
        result = await self.session.execute(select(VehicleModel).order_by(VehicleModel.id))
        return _apply([self._to_domain(m) for m in result.scalars().all()], predicate)

    async def list_active(self) -> list[Vehicle]:
        result = await self.session.execute(
            select(VehicleModel)
            .where(VehicleModel.active.is_(True))
            .order_by(VehicleModel.id)
        )
        return [self._to_domain(m) for m in result.scalars().all()]


class SqlBookingRepository(BookingRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _to_domain(model: BookingModel) -> Booking:
        return Booking(
            id=model.id,
            human_code=model.human_code,
            rider_contact=model.rider_contact,
            source=model.source,
            destination=model.destination,
            vehicle_id=model.vehicle_id,
            path=tuple(model.path),
            total_duration=model.total_duration,
            estimated_cost=model.estimated_cost,
            start=as_utc(model.start_time),
            end=as_utc(model.end_time),
            status=model.status,
            notification_sent=model.notification_sent,
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )

    async def get(self, key: str) -> Optional[Booking]:
        model = await self.session.get(BookingModel, key)
        return self._to_domain(model) if model else None

    async def upsert(self, entity: Booking) -> Booking:
        model = await self.session.get(BookingModel, entity.id)
        if model is None:
            model = BookingModel(id=entity.id)
            self.session.add(model)
        model.human_code = entity.human_code
        model.rider_contact = entity.rider_contact
        model.source = entity.source
        model.destination = entity.destination
        model.vehicle_id = entity.vehicle_id
        model.path = list(entity.path)
        model.total_duration = entity.total_duration
        model.estimated_cost = entity.estimated_cost
        model.start_time = entity.start
        model.end_time = entity.end
        model.status = entity.status
        model.notification_sent = entity.notification_sent
        model.created_at = entity.created_at
        model.updated_at = entity.updated_at
        await self.session.flush()
        return entity

    async def delete(self, key: str) -> bool:
        model = await self.session.get(BookingModel, key)
        if model is None:
            return False
        await self.session.delete(model)
        await self.session.flush()
        return True

    async def scan(self, predicate: Predicate = None) -> list[Booking]:
        result = await self.session.execute(
            select(BookingModel).order_by(BookingModel.created_at)
        )
        return _apply([self._to_domain(m) for m in result.scalars().all()], predicate)

    async def get_by_human_code(self, human_code: str) -> Optional[Booking]:
        result = await self.session.execute(
            select(BookingModel).where(BookingModel.human_code == human_code)
        )
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    async def list_by_contact(self, contact: str) -> list[Booking]:
        result = await self.session.execute(
            select(BookingModel)
            .where(BookingModel.rider_contact == contact)
            .order_by(BookingModel.created_at)
        )
        return [self._to_domain(m) for m in result.scalars().all()]
