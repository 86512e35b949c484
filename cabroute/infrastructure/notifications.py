"""
Notification sinks.

A sink receives a booking snapshot and a lifecycle event tag.  Sinks are
only ever called from the background dispatcher, never from the booking
critical path; a failing sink raises ``NotificationFailure`` which the
dispatcher logs.

* ``LoggingNotificationSink`` -- default when no webhook is configured.
* ``WebhookNotificationSink`` -- POSTs a JSON payload with ``httpx``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from cabroute.domain.entities import Booking
from cabroute.domain.enums import BookingStatus, NotificationEvent
from cabroute.domain.errors import NotificationFailure

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    BookingStatus.CONFIRMED: "Your booking is confirmed.",
    BookingStatus.IN_PROGRESS: "Your cab is on the way!",
    BookingStatus.COMPLETED: "Your trip has been completed.",
    BookingStatus.CANCELLED: "Your booking has been cancelled.",
}


def build_payload(booking: Booking, event: NotificationEvent) -> dict[str, Any]:
    if event is NotificationEvent.CREATED:
        subject = f"Cab Booking Confirmation - {booking.human_code}"
    else:
        subject = f"Booking Update - {booking.human_code}"
    return {
        "event": event.value,
        "to": booking.rider_contact,
        "subject": subject,
        "message": STATUS_MESSAGES[booking.status],
        "booking": {
            "id": booking.id,
            "human_code": booking.human_code,
            "status": booking.status.value,
            "source": booking.source,
            "destination": booking.destination,
            "route": list(booking.path),
            "total_duration": booking.total_duration,
            "estimated_cost": round(booking.estimated_cost, 2),
            "vehicle_id": booking.vehicle_id,
            "start": booking.start.isoformat(),
            "end": booking.end.isoformat(),
        },
    }


class NotificationSink(ABC):
    @abstractmethod
    async def send(self, booking: Booking, event: NotificationEvent) -> None: ...

    async def close(self) -> None:
        return None


class LoggingNotificationSink(NotificationSink):
    async def send(self, booking: Booking, event: NotificationEvent) -> None:
        payload = build_payload(booking, event)
        logger.info(
            "Notification %s to %s: %s", event.value, payload["to"], payload["subject"]
        )


class WebhookNotificationSink(NotificationSink):
    def __init__(
        self,
        url: str,
        timeout_seconds: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    async def send(self, booking: Booking, event: NotificationEvent) -> None:
        try:
            response = await self._client.post(self.url, json=build_payload(booking, event))
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise NotificationFailure(
                f"Webhook delivery of {event.value} for {booking.human_code} failed: {exc}"
            ) from exc

    async def close(self) -> None:
        await self._client.aclose()
