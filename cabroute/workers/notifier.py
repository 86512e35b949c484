"""
Background Notification Worker
==============================

Bookings are committed first; only then is a notification enqueued with
``publish``, which never blocks and never raises.  A single worker task
drains the queue and hands each message to the configured sink.

Failure isolation
-----------------
* A full queue drops the message with a warning.
* A sink failure is logged and the worker moves on; the booking state that
  triggered it is never touched.
* ``on_delivered`` runs after a successful delivery (used to flag
  ``notification_sent`` on the booking); its failures are logged too.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from cabroute.domain.entities import Booking
from cabroute.domain.enums import NotificationEvent
from cabroute.infrastructure.notifications import NotificationSink

logger = logging.getLogger(__name__)

DeliveryCallback = Callable[[Booking, NotificationEvent], Awaitable[None]]


@dataclass(frozen=True)
class Notification:
    booking: Booking
    event: NotificationEvent


class NotificationDispatcher:
    def __init__(
        self,
        sink: NotificationSink,
        queue_size: int = 256,
        on_delivered: Optional[DeliveryCallback] = None,
    ):
        self.sink = sink
        self.on_delivered = on_delivered
        self._queue: asyncio.Queue[Notification] = asyncio.Queue(maxsize=queue_size)
        self._task: asyncio.Task | None = None

    # ── Public API ────────────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())
        logger.info("Notification worker started")

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        await self.sink.close()
        logger.info("Notification worker stopped")

    def publish(self, booking: Booking, event: NotificationEvent) -> bool:
        """Enqueue without waiting.  Returns False if the message was dropped."""
        try:
            self._queue.put_nowait(Notification(booking, event))
        except asyncio.QueueFull:
            logger.warning(
                "Notification queue full; dropping %s for booking %s",
                event.value,
                booking.human_code,
            )
            return False
        return True

    async def drain(self) -> None:
        """Wait until every queued notification has been handled."""
        await self._queue.join()

    # ── Internals ─────────────────────────────────────────────────────

    async def _loop(self) -> None:
        while True:
            notification = await self._queue.get()
            try:
                await self.deliver(notification)
            finally:
                self._queue.task_done()

    async def deliver(self, notification: Notification) -> bool:
        booking, event = notification.booking, notification.event
        try:
            await self.sink.send(booking, event)
        except Exception:
            logger.exception(
                "Notification %s for booking %s failed", event.value, booking.human_code
            )
            return False

        if self.on_delivered is not None:
            try:
                await self.on_delivered(booking, event)
            except Exception:
                logger.exception(
                    "Post-delivery update for booking %s failed", booking.human_code
                )
        return True
