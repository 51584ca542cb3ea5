"""Relay notifier — how backend processes push events into the relay.

Learn: Notifications are a side effect of some other request (a user
registers, an order is placed). If the relay is down or slow, that
request must still succeed, so every failure here is logged and turned
into a False return value. Nothing is raised, nothing is retried.

Usage:
    notifier = RelayNotifier(settings.relay_url)
    await notifier.notify_admins(notification)      # → "admin" room
    await notifier.notify("order:status:changed", {...}, room="user:42")
"""

from typing import Any, Optional

import httpx
import structlog

from shoprelay.realtime.events import (
    ADMIN_NOTIFICATION,
    ADMIN_NOTIFICATION_TYPES,
    ADMIN_ROOM,
    BROADCAST_ALL,
)
from shoprelay.schemas.notify import AdminNotification

logger = structlog.get_logger()


class RelayNotifier:
    """Fire-and-forget client for POST /api/notify."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 2.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout
        )

    async def notify(
        self,
        event: str,
        data: dict[str, Any],
        room: str = BROADCAST_ALL,
    ) -> bool:
        """Ask the relay to emit ``event`` to ``room``. True if it accepted."""
        try:
            response = await self._client.post(
                "/api/notify",
                json={"room": room, "event": event, "data": data},
            )
        except httpx.HTTPError as e:
            logger.error(
                "relay.notify_failed",
                room=room,
                event_name=event,
                error=str(e) or type(e).__name__,
            )
            return False

        if response.is_error:
            logger.error(
                "relay.notify_failed",
                room=room,
                event_name=event,
                status_code=response.status_code,
            )
            return False
        return True

    async def notify_admins(self, notification: AdminNotification) -> bool:
        """Push a back-office notification to every connected admin."""
        if notification.type not in ADMIN_NOTIFICATION_TYPES:
            # Still sent; the backend may add types before this list does.
            logger.warning("relay.unknown_notification_type", type=notification.type)
        return await self.notify(
            ADMIN_NOTIFICATION,
            notification.model_dump(mode="json"),
            room=ADMIN_ROOM,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "RelayNotifier":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
