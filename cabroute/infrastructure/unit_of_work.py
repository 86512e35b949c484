"""
Unit of Work -- groups repository writes so they commit together.

The booking lifecycle writes a booking and the owning vehicle's
reservation set in one unit; either both become visible or neither does.
Leaving the ``async with`` block without ``commit()`` discards every
staged write, including when an exception propagates.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .repositories import (
    BookingRepository,
    EdgeRepository,
    SqlBookingRepository,
    SqlEdgeRepository,
    SqlVehicleRepository,
    VehicleRepository,
)


class UnitOfWork(ABC):
    edges: EdgeRepository
    vehicles: VehicleRepository
    bookings: BookingRepository

    async def __aenter__(self) -> UnitOfWork:
        return self

    async def __aexit__(self, *args) -> None:
        await self.rollback()

    @abstractmethod
    async def commit(self) -> None: ...

    @abstractmethod
    async def rollback(self) -> None: ...


class SqlUnitOfWork(UnitOfWork):
    """One ``AsyncSession`` per unit; commit on success, rollback otherwise."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self.session: AsyncSession | None = None

    async def __aenter__(self) -> SqlUnitOfWork:
        self.session = self._session_factory()
        self.edges = SqlEdgeRepository(self.session)
        self.vehicles = SqlVehicleRepository(self.session)
        self.bookings = SqlBookingRepository(self.session)
        return self

    async def __aexit__(self, *args) -> None:
        try:
            await super().__aexit__(*args)
        finally:
            await self.session.close()

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
