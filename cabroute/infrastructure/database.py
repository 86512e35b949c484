"""
Async SQLAlchemy engine and session factory.

Uses ``asyncpg`` as the PostgreSQL driver for non-blocking I/O.  The
engine is only created when the SQL storage backend is selected, so the
in-memory backend never opens a connection.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models."""


def create_engine(database_url: str) -> AsyncEngine:
    pool_options = {}
    if not database_url.startswith("sqlite"):
        pool_options = {"pool_size": 20, "max_overflow": 10}
    return create_async_engine(database_url, echo=False, **pool_options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables (local development and tests; production uses Alembic)."""
    from . import models  # noqa: F401  registers the mappers

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
