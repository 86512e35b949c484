"""
Shared test fixtures.

Every test gets its own ``InMemoryDatabase`` and lock manager, so nothing
leaks between cases.  SQL-backend tests use an in-memory SQLite database
(via aiosqlite) so they run without Docker / PostgreSQL / Redis.
"""

from datetime import datetime, timezone
from functools import partial
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine

from cabroute.domain.entities import Booking, RouteEdge, Vehicle
from cabroute.domain.enums import NotificationEvent
from cabroute.infrastructure.database import (
    create_engine,
    create_schema,
    create_session_factory,
)
from cabroute.infrastructure.locks import LocalLockManager
from cabroute.infrastructure.memory import InMemoryDatabase, InMemoryUnitOfWork
from cabroute.infrastructure.notifications import NotificationSink
from cabroute.infrastructure.unit_of_work import SqlUnitOfWork
from cabroute.services.lifecycle import BookingLifecycle

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

# Scenario network: A-B=5, A-C=10, B-C=8 in both directions
TRIANGLE_EDGES = [
    RouteEdge("A", "B", 5),
    RouteEdge("B", "A", 5),
    RouteEdge("A", "C", 10),
    RouteEdge("C", "A", 10),
    RouteEdge("B", "C", 8),
    RouteEdge("C", "B", 8),
]

FLEET = [
    Vehicle(id="V1", name="Economic Cab", rate_per_minute=2.5),
    Vehicle(id="V2", name="Standard Cab", rate_per_minute=3.0),
    Vehicle(id="V3", name="Retired Cab", rate_per_minute=1.0, active=False),
]


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 10, 18, hour, minute, tzinfo=timezone.utc)


class RecordingPublisher:
    """Stands in for the dispatcher; records what the lifecycle publishes."""

    def __init__(self):
        self.published: list[tuple[Booking, NotificationEvent]] = []

    def publish(self, booking: Booking, event: NotificationEvent) -> bool:
        self.published.append((booking, event))
        return True


class RecordingSink(NotificationSink):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[tuple[Booking, NotificationEvent]] = []
        self.closed = False

    async def send(self, booking: Booking, event: NotificationEvent) -> None:
        if self.fail:
            raise RuntimeError("smtp down")
        self.sent.append((booking, event))

    async def close(self) -> None:
        self.closed = True


async def load(uow_factory, edges=TRIANGLE_EDGES, vehicles=FLEET) -> None:
    async with uow_factory() as uow:
        for edge in edges:
            await uow.edges.upsert(edge)
        for vehicle in vehicles:
            await uow.vehicles.upsert(vehicle)
        await uow.commit()


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture
def database() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def uow_factory(database):
    return partial(InMemoryUnitOfWork, database)


@pytest.fixture
def locks() -> LocalLockManager:
    return LocalLockManager(wait_seconds=1.0)


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest_asyncio.fixture
async def lifecycle(uow_factory, locks, publisher) -> BookingLifecycle:
    """Lifecycle over the triangle network and a three-vehicle fleet."""
    await load(uow_factory)
    return BookingLifecycle(uow_factory, locks, notifier=publisher)


@pytest_asyncio.fixture
async def sql_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create tables on a fresh SQLite database, then dispose of it."""
    engine = create_engine(TEST_DB_URL)
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def sql_uow_factory(sql_engine):
    return partial(SqlUnitOfWork, create_session_factory(sql_engine))
