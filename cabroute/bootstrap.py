"""
Service wiring.

``build_services`` constructs the store, lock manager, notification
dispatcher and core services from ``Settings`` and returns them in one
``Services`` object.  Nothing here is a module-level singleton: the API
factory and the tests each build their own instance.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Optional

from cabroute.config import Settings
from cabroute.infrastructure.locks import LocalLockManager, LockManager, RedisLockManager
from cabroute.infrastructure.memory import InMemoryDatabase, InMemoryUnitOfWork
from cabroute.infrastructure.notifications import (
    LoggingNotificationSink,
    NotificationSink,
    WebhookNotificationSink,
)
from cabroute.infrastructure.seed_data import seed
from cabroute.infrastructure.unit_of_work import UnitOfWork
from cabroute.services.catalog import RouteCatalog
from cabroute.services.fleet import FleetManager
from cabroute.services.lifecycle import BookingLifecycle
from cabroute.workers.notifier import NotificationDispatcher

logger = logging.getLogger(__name__)


@dataclass
class Services:
    lifecycle: BookingLifecycle
    fleet: FleetManager
    catalog: RouteCatalog
    dispatcher: NotificationDispatcher
    uow_factory: Callable[[], UnitOfWork]
    seed_demo_data: bool = False
    engine: Optional[Any] = None
    redis: Optional[Any] = None

    async def startup(self) -> None:
        if self.seed_demo_data:
            async with self.uow_factory() as uow:
                await seed(uow)
        await self.dispatcher.start()

    async def shutdown(self) -> None:
        await self.dispatcher.stop()
        if self.redis is not None:
            await self.redis.aclose()
        if self.engine is not None:
            await self.engine.dispose()


def _build_sink(settings: Settings) -> NotificationSink:
    if settings.notification_webhook_url:
        return WebhookNotificationSink(
            settings.notification_webhook_url,
            timeout_seconds=settings.notification_timeout_seconds,
        )
    return LoggingNotificationSink()


def build_services(
    settings: Settings,
    *,
    sink: Optional[NotificationSink] = None,
    database: Optional[InMemoryDatabase] = None,
) -> Services:
    engine = None
    if settings.storage_backend == "sql":
        from cabroute.infrastructure.database import create_engine, create_session_factory
        from cabroute.infrastructure.unit_of_work import SqlUnitOfWork

        engine = create_engine(settings.database_url)
        uow_factory = partial(SqlUnitOfWork, create_session_factory(engine))
    else:
        uow_factory = partial(InMemoryUnitOfWork, database or InMemoryDatabase())

    redis = None
    locks: LockManager
    if settings.lock_backend == "redis":
        from cabroute.infrastructure.redis_client import create_redis

        redis = create_redis(settings.redis_url)
        locks = RedisLockManager(
            redis,
            ttl_seconds=settings.lock_ttl_seconds,
            wait_seconds=settings.lock_wait_seconds,
        )
    else:
        locks = LocalLockManager(wait_seconds=settings.lock_wait_seconds)

    dispatcher = NotificationDispatcher(
        sink or _build_sink(settings), queue_size=settings.notification_queue_size
    )
    lifecycle = BookingLifecycle(uow_factory, locks, notifier=dispatcher)
    dispatcher.on_delivered = lifecycle.handle_delivery

    logger.info(
        "Services built (storage=%s, locks=%s)",
        settings.storage_backend,
        settings.lock_backend,
    )
    return Services(
        lifecycle=lifecycle,
        fleet=FleetManager(uow_factory, locks),
        catalog=RouteCatalog(uow_factory, locks),
        dispatcher=dispatcher,
        uow_factory=uow_factory,
        seed_demo_data=settings.seed_demo_data,
        engine=engine,
        redis=redis,
    )
