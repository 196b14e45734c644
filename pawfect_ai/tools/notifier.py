"""
Booking Notifier

Fire-and-forget delivery of typed booking events to the notification service.
Delivery failures are logged here and never reach the booking operation.
"""

import logging
from typing import Any, Dict, Optional, Protocol, runtime_checkable

import httpx

from pawfect_ai.core.config import settings
from pawfect_ai.core.logging import get_trace_id

logger = logging.getLogger(__name__)

# Event types
BOOKING_CREATED = "booking_created"
BOOKING_STATUS_UPDATED = "booking_status_updated"
BOOKING_CANCELLED = "booking_cancelled"
BOOKING_RESCHEDULED = "booking_rescheduled"

NOTIFY_PATH = "/notifications"


@runtime_checkable
class Notifier(Protocol):

    async def send(self, event: str, recipient_id: str, payload: Dict[str, Any]) -> None:
        ...


_client: Optional[httpx.AsyncClient] = None


def get_client() -> httpx.AsyncClient:
    global _client

    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(timeout=settings.NOTIFICATION_CLIENT_TIMEOUT)
        logger.info("Initialized notification httpx.AsyncClient")

    return _client


async def aclose_client() -> None:
    global _client

    if _client is not None and not _client.is_closed:
        await _client.aclose()
        logger.info("Closed notification httpx.AsyncClient")
        _client = None


class HttpNotifier:
    """Posts {event, recipient_id, payload} to the notification service."""

    def __init__(self, base_url: Optional[str] = None):
        self.url = (base_url or settings.NOTIFICATION_SERVICE_URL).rstrip("/") + NOTIFY_PATH

    async def send(self, event: str, recipient_id: str, payload: Dict[str, Any]) -> None:
        headers = {"Content-Type": "application/json"}
        trace_id = get_trace_id()
        if trace_id != "-":
            headers["x-request-id"] = trace_id

        body = {"event": event, "recipient_id": recipient_id, "payload": payload}
        try:
            response = await get_client().post(self.url, json=body, headers=headers)
            response.raise_for_status()
            logger.debug(f"Delivered {event} to {recipient_id}")
        except httpx.HTTPError as e:
            logger.warning(f"Notification {event} to {recipient_id} not delivered: {type(e).__name__}: {e}")
