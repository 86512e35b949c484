"""
In-memory store -- the test double behind the repository interfaces.

``InMemoryDatabase`` holds committed snapshots.  Each
``InMemoryUnitOfWork`` stages writes in its own overlay; ``commit()``
applies the whole overlay in a single synchronous step, so no other
coroutine can observe half of a unit.  Snapshots are immutable, so
handing out the stored objects directly is safe.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, Optional, TypeVar

from .repositories import (
    BookingRepository,
    EdgeRepository,
    Predicate,
    VehicleRepository,
)
from .unit_of_work import UnitOfWork

K = TypeVar("K")
T = TypeVar("T")

_DELETED: Any = object()


class InMemoryDatabase:
    def __init__(self):
        self.tables: dict[str, dict[Any, Any]] = {
            "edges": {},
            "vehicles": {},
            "bookings": {},
        }


class _InMemoryCollection(Generic[K, T]):
    def __init__(
        self,
        committed: dict[K, T],
        pending: dict[K, T],
        key_fn: Callable[[T], K],
    ):
        self._committed = committed
        self._pending = pending
        self._key_fn = key_fn

    async def get(self, key: K) -> Optional[T]:
        if key in self._pending:
            value = self._pending[key]
            return None if value is _DELETED else value
        return self._committed.get(key)

    async def upsert(self, entity: T) -> T:
        self._pending[self._key_fn(entity)] = entity
        return entity

    async def delete(self, key: K) -> bool:
        if await self.get(key) is None:
            return False
        self._pending[key] = _DELETED
        return True

    async def scan(self, predicate: Predicate = None) -> list[T]:
        merged = dict(self._committed)
        for key, value in self._pending.items():
            if value is _DELETED:
                merged.pop(key, None)
            else:
                merged[key] = value
        items = [merged[key] for key in sorted(merged)]
        if predicate is None:
            return items
        return [item for item in items if predicate(item)]


class InMemoryEdgeRepository(_InMemoryCollection, EdgeRepository):
    pass


class InMemoryVehicleRepository(_InMemoryCollection, VehicleRepository):
    pass


class InMemoryBookingRepository(_InMemoryCollection, BookingRepository):
    async def scan(self, predicate: Predicate = None) -> list:
        items = await super().scan(predicate)
        return sorted(items, key=lambda b: b.created_at)


class InMemoryUnitOfWork(UnitOfWork):
    def __init__(self, database: InMemoryDatabase):
        self.database = database
        self._pending: dict[str, dict[Any, Any]] = {}

    async def __aenter__(self) -> InMemoryUnitOfWork:
        self._pending = {name: {} for name in self.database.tables}
        tables = self.database.tables
        self.edges = InMemoryEdgeRepository(
            tables["edges"], self._pending["edges"], lambda e: e.key
        )
        self.vehicles = InMemoryVehicleRepository(
            tables["vehicles"], self._pending["vehicles"], lambda v: v.id
        )
        self.bookings = InMemoryBookingRepository(
            tables["bookings"], self._pending["bookings"], lambda b: b.id
        )
        return self

    async def commit(self) -> None:
        # No awaits below: the overlay lands atomically on the event loop
        for name, staged in self._pending.items():
            table = self.database.tables[name]
            for key, value in staged.items():
                if value is _DELETED:
                    table.pop(key, None)
                else:
                    table[key] = value
            staged.clear()

    async def rollback(self) -> None:
        for staged in self._pending.values():
            staged.clear()
