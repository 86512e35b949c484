"""
Repository and unit-of-work tests.

Every case runs twice: against the in-memory store and against SQLAlchemy
on an in-memory SQLite database (via aiosqlite).
"""

from __future__ import annotations

from functools import partial

import pytest
import pytest_asyncio

from cabroute.domain.entities import Booking, Reservation, RouteEdge, Vehicle
from cabroute.domain.enums import BookingStatus
from cabroute.infrastructure.database import (
    create_engine,
    create_schema,
    create_session_factory,
)
from cabroute.infrastructure.memory import InMemoryDatabase, InMemoryUnitOfWork
from cabroute.infrastructure.seed_data import default_edges, default_vehicles, seed
from cabroute.infrastructure.unit_of_work import SqlUnitOfWork
from cabroute.services.lifecycle import BookingLifecycle, BookingRequest
from tests.conftest import TEST_DB_URL, at, load


@pytest_asyncio.fixture(params=["memory", "sql"])
async def store(request):
    """A unit-of-work factory for each storage backend."""
    if request.param == "memory":
        yield partial(InMemoryUnitOfWork, InMemoryDatabase())
        return
    engine = create_engine(TEST_DB_URL)
    await create_schema(engine)
    yield partial(SqlUnitOfWork, create_session_factory(engine))
    await engine.dispose()


def make_booking(booking_id: str, code: str, contact=None, hour: int = 10) -> Booking:
    return Booking(
        id=booking_id,
        human_code=code,
        source="A",
        destination="C",
        vehicle_id="V1",
        path=("A", "B", "C"),
        total_duration=13,
        estimated_cost=32.5,
        start=at(hour),
        end=at(hour, 13),
        rider_contact=contact,
    )


class TestEdges:
    @pytest.mark.asyncio
    async def test_upsert_get_and_scan(self, store):
        await load(store, vehicles=[])
        async with store() as uow:
            edge = await uow.edges.get(("A", "C"))
            edges = await uow.edges.scan()
        assert edge == RouteEdge("A", "C", 10)
        assert len(edges) == 6
        assert [e.key for e in edges] == sorted(e.key for e in edges)

    @pytest.mark.asyncio
    async def test_upsert_replaces_duration(self, store):
        await load(store, vehicles=[])
        async with store() as uow:
            await uow.edges.upsert(RouteEdge("A", "C", 3))
            await uow.commit()
        async with store() as uow:
            assert (await uow.edges.get(("A", "C"))).duration_minutes == 3
            assert len(await uow.edges.scan()) == 6

    @pytest.mark.asyncio
    async def test_delete(self, store):
        await load(store, vehicles=[])
        async with store() as uow:
            assert await uow.edges.delete(("A", "C")) is True
            assert await uow.edges.delete(("A", "Z")) is False
            await uow.commit()
        async with store() as uow:
            assert await uow.edges.get(("A", "C")) is None

    @pytest.mark.asyncio
    async def test_scan_with_predicate(self, store):
        await load(store, vehicles=[])
        async with store() as uow:
            from_a = await uow.edges.scan(lambda e: e.source == "A")
        assert {e.target for e in from_a} == {"B", "C"}


class TestVehicles:
    @pytest.mark.asyncio
    async def test_list_active(self, store):
        await load(store)
        async with store() as uow:
            active = await uow.vehicles.list_active()
        assert [v.id for v in active] == ["V1", "V2"]

    @pytest.mark.asyncio
    async def test_reservations_round_trip(self, store):
        await load(store)
        first = Reservation("b-1", at(10), at(10, 30))
        second = Reservation("b-2", at(9), at(9, 30))
        async with store() as uow:
            vehicle = await uow.vehicles.get("V1")
            vehicle = vehicle.with_reservation(first).with_reservation(second)
            await uow.vehicles.upsert(vehicle)
            await uow.commit()

        async with store() as uow:
            stored = await uow.vehicles.get("V1")
        assert [r.booking_id for r in stored.reservations] == ["b-2", "b-1"]
        assert stored.reservations[1].start == at(10)
        assert stored.reservations[1].start.tzinfo is not None

    @pytest.mark.asyncio
    async def test_removed_reservation_is_deleted(self, store):
        await load(store)
        async with store() as uow:
            vehicle = (await uow.vehicles.get("V1")).with_reservation(
                Reservation("b-1", at(10), at(10, 30))
            )
            await uow.vehicles.upsert(vehicle.with_reservation(Reservation("b-2", at(11), at(12))))
            await uow.commit()
        async with store() as uow:
            vehicle = await uow.vehicles.get("V1")
            await uow.vehicles.upsert(vehicle.without_reservation("b-1"))
            await uow.commit()
        async with store() as uow:
            stored = await uow.vehicles.get("V1")
        assert [r.booking_id for r in stored.reservations] == ["b-2"]


class TestBookings:
    @pytest.mark.asyncio
    async def test_snapshot_round_trip(self, store):
        await load(store)
        booking = make_booking("b-1", "CODE0001", contact="r@example.com")
        async with store() as uow:
            await uow.bookings.upsert(booking)
            await uow.commit()
        async with store() as uow:
            stored = await uow.bookings.get("b-1")
        assert stored.path == ("A", "B", "C")
        assert stored.status == BookingStatus.CONFIRMED
        assert stored.start == at(10)
        assert stored.end == at(10, 13)
        assert stored.estimated_cost == 32.5

    @pytest.mark.asyncio
    async def test_finders(self, store):
        await load(store)
        async with store() as uow:
            await uow.bookings.upsert(make_booking("b-1", "CODE0001", "r@example.com"))
            await uow.bookings.upsert(make_booking("b-2", "CODE0002", "r@example.com", 12))
            await uow.bookings.upsert(make_booking("b-3", "CODE0003", None, 14))
            await uow.commit()
        async with store() as uow:
            by_code = await uow.bookings.get_by_human_code("CODE0002")
            by_contact = await uow.bookings.list_by_contact("r@example.com")
            missing = await uow.bookings.get_by_human_code("NOPE")
        assert by_code.id == "b-2"
        assert {b.id for b in by_contact} == {"b-1", "b-2"}
        assert missing is None

    @pytest.mark.asyncio
    async def test_status_update_persists(self, store):
        await load(store)
        booking = make_booking("b-1", "CODE0001")
        async with store() as uow:
            await uow.bookings.upsert(booking)
            await uow.commit()
        async with store() as uow:
            await uow.bookings.upsert(booking.transition_to(BookingStatus.IN_PROGRESS))
            await uow.commit()
        async with store() as uow:
            assert (await uow.bookings.get("b-1")).status == BookingStatus.IN_PROGRESS


class TestUnitOfWork:
    @pytest.mark.asyncio
    async def test_uncommitted_writes_are_discarded(self, store):
        async with store() as uow:
            await uow.edges.upsert(RouteEdge("A", "B", 5))
            await uow.vehicles.upsert(Vehicle(id="V1", name="Cab", rate_per_minute=1.0))
        async with store() as uow:
            assert await uow.edges.scan() == []
            assert await uow.vehicles.get("V1") is None

    @pytest.mark.asyncio
    async def test_exception_rolls_back(self, store):
        with pytest.raises(RuntimeError):
            async with store() as uow:
                await uow.vehicles.upsert(Vehicle(id="V1", name="Cab", rate_per_minute=1.0))
                raise RuntimeError("abort")
        async with store() as uow:
            assert await uow.vehicles.get("V1") is None

    @pytest.mark.asyncio
    async def test_own_writes_visible_before_commit(self, store):
        async with store() as uow:
            await uow.vehicles.upsert(Vehicle(id="V1", name="Cab", rate_per_minute=1.0))
            assert (await uow.vehicles.get("V1")).name == "Cab"
            assert [v.id for v in await uow.vehicles.scan()] == ["V1"]


class TestMemoryIsolation:
    @pytest.mark.asyncio
    async def test_pending_writes_invisible_to_other_units(self):
        database = InMemoryDatabase()
        async with InMemoryUnitOfWork(database) as writer:
            await writer.vehicles.upsert(Vehicle(id="V1", name="Cab", rate_per_minute=1.0))
            async with InMemoryUnitOfWork(database) as reader:
                assert await reader.vehicles.get("V1") is None
            await writer.commit()
        async with InMemoryUnitOfWork(database) as reader:
            assert await reader.vehicles.get("V1") is not None

    @pytest.mark.asyncio
    async def test_pending_delete_hides_committed_row(self):
        database = InMemoryDatabase()
        await load(lambda: InMemoryUnitOfWork(database), vehicles=[])
        async with InMemoryUnitOfWork(database) as uow:
            await uow.edges.delete(("A", "B"))
            assert await uow.edges.get(("A", "B")) is None
            assert len(await uow.edges.scan()) == 5
        assert ("A", "B") in database.tables["edges"]


class TestSeed:
    @pytest.mark.asyncio
    async def test_seed_once(self, store):
        async with store() as uow:
            await seed(uow)
        async with store() as uow:
            await seed(uow)
        async with store() as uow:
            vehicles = await uow.vehicles.scan()
            edges = await uow.edges.scan()
        assert len(vehicles) == len(default_vehicles())
        assert len(edges) == len(default_edges())


class TestLifecycleOnSql:
    @pytest.mark.asyncio
    async def test_booking_flow(self, sql_uow_factory, locks, publisher):
        await load(sql_uow_factory)
        lifecycle = BookingLifecycle(sql_uow_factory, locks, notifier=publisher)

        booking = await lifecycle.create(
            BookingRequest("A", "C", "V1", at(9), rider_contact="r@example.com")
        )
        async with sql_uow_factory() as uow:
            vehicle = await uow.vehicles.get("V1")
        assert [r.booking_id for r in vehicle.reservations] == [booking.id]

        cancelled = await lifecycle.transition(booking.id, "cancelled")
        assert cancelled.status == BookingStatus.CANCELLED
        async with sql_uow_factory() as uow:
            assert (await uow.vehicles.get("V1")).reservations == ()

        found = await lifecycle.find_by_contact("R@example.com")
        assert [b.status for b in found] == [BookingStatus.CANCELLED]
        assert (await lifecycle.find_by_human_code(booking.human_code)).id == booking.id
