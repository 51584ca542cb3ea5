"""Socket.IO namespace — handshake auth and client-originated events.

Learn: Each connection goes Connected → (event round-trips) → Disconnected.
The handshake is the only place that waits on the network (token check
against the backend). Everything after that is in-memory room delivery.

Rejections stay local to the offending socket:
- bad/missing token  → ConnectionRefusedError, the socket never connects
- missing fields     → "error" event to the sender only
- non-admin action   → "error" event to the sender only
The connection itself stays up after an event-level rejection.

Socket.IO event names contain colons ("order:status:update"), which
can't be method names, so trigger_event maps them to on_order_status_update.
"""

from typing import Any, Optional

import socketio
import structlog
from pydantic import BaseModel, ValidationError
from socketio import exceptions as socketio_exceptions

from shoprelay.auth.gateway import AuthError, AuthGateway
from shoprelay.realtime.events import (
    ADMIN_ROOM,
    BROADCAST_ALL,
    CONNECTED,
    ERROR,
    NOTIFICATION_RECEIVED,
    NOTIFICATION_SEND,
    ORDER_CREATED,
    ORDER_NEW,
    ORDER_STATUS_CHANGED,
    ORDER_STATUS_UPDATE,
    ORDER_STATUS_UPDATED,
    TYPING_START,
    TYPING_STARTED,
    TYPING_STOP,
    TYPING_STOPPED,
    timestamp,
    user_room,
)
from shoprelay.realtime.registry import Connection
from shoprelay.realtime.state import RelayState
from shoprelay.schemas.events import NotificationSend, OrderNew, OrderStatusUpdate, Typing

logger = structlog.get_logger()

MISSING_FIELDS = "Missing required fields"
UNAUTHORIZED = "Unauthorized"


class RelayNamespace(socketio.AsyncNamespace):
    """Default namespace of the relay."""

    def __init__(self, state: RelayState, gateway: AuthGateway, namespace: str = "/"):
        super().__init__(namespace)
        self.state = state
        self.gateway = gateway
        # sids whose token check is still in flight
        self._handshakes: set[str] = set()

    async def trigger_event(self, event, *args):
        return await super().trigger_event((event or "").replace(":", "_"), *args)

    # ─── Lifecycle ─────────────────────────────────────────

    async def on_connect(self, sid: str, environ: dict, auth: Any = None):
        self._handshakes.add(sid)
        try:
            user = await self.gateway.authenticate(auth)
        except AuthError as e:
            logger.info("relay.auth_rejected", sid=sid, reason=str(e))
            raise socketio_exceptions.ConnectionRefusedError(str(e))
        finally:
            pending = sid in self._handshakes
            self._handshakes.discard(sid)

        # The socket may have dropped while the backend was answering.
        if not pending:
            logger.info("relay.handshake_abandoned", sid=sid, user_id=user.user_id)
            return False

        connection = self.state.attach(sid, user)
        logger.info(
            "relay.connected",
            sid=sid,
            user_id=user.user_id,
            user=user.display_name,
            rooms=sorted(connection.rooms),
        )
        await self.state.router.send(
            sid,
            CONNECTED,
            {
                "message": "Connected to server",
                "userId": user.backend_id,
                "timestamp": timestamp(),
            },
        )

    async def on_disconnect(self, sid: str, reason: Any = None):
        self._handshakes.discard(sid)
        connection = self.state.detach(sid)
        if connection is not None:
            logger.info(
                "relay.disconnected",
                sid=sid,
                user_id=connection.user_id,
                reason=str(reason) if reason is not None else None,
            )

    # ─── Orders ────────────────────────────────────────────

    async def on_order_status_update(self, sid: str, data: Any = None):
        """Admin changed an order's status: tell admins, then everyone."""
        connection = await self._sender(sid, ORDER_STATUS_UPDATE)
        if connection is None:
            return
        try:
            payload = _parse(OrderStatusUpdate, data)
            if payload is None or not payload.is_complete():
                await self._reject(sid, ORDER_STATUS_UPDATE, MISSING_FIELDS)
                return
            if not connection.user.is_admin():
                await self._reject(sid, ORDER_STATUS_UPDATE, UNAUTHORIZED)
                return

            router = self.state.router
            await router.emit(
                ADMIN_ROOM,
                ORDER_STATUS_UPDATED,
                {
                    "orderId": payload.order_id,
                    "status": payload.status,
                    "paymentStatus": payload.payment_status,
                    "updatedBy": connection.user.backend_id,
                    "timestamp": timestamp(),
                },
            )
            # The relay can't tell who owns the order, so every client hears it.
            await router.emit(
                BROADCAST_ALL,
                ORDER_STATUS_CHANGED,
                {
                    "orderId": payload.order_id,
                    "status": payload.status,
                    "timestamp": timestamp(),
                },
            )
            logger.info(
                "relay.order_status_updated",
                order_id=payload.order_id,
                status=payload.status,
                updated_by=connection.user_id,
            )
        except Exception:
            logger.exception("relay.event_failed", sid=sid, event_name=ORDER_STATUS_UPDATE)
            await self.state.router.send(sid, ERROR, {"message": "Failed to update order status"})

    async def on_order_new(self, sid: str, data: Any = None):
        """A new order was placed: tell the admin room."""
        connection = await self._sender(sid, ORDER_NEW)
        if connection is None:
            return
        try:
            payload = _parse(OrderNew, data)
            if payload is None:
                # No required fields here; only an unreadable payload fails.
                await self._reject(sid, ORDER_NEW, "Failed to notify new order")
                return
            await self.state.router.emit(
                ADMIN_ROOM,
                ORDER_CREATED,
                {
                    "orderId": payload.order_id,
                    "orderNumber": payload.order_number,
                    "customerName": payload.customer_name,
                    "total": payload.total,
                    "timestamp": timestamp(),
                },
            )
            logger.info(
                "relay.order_created",
                order_number=payload.order_number,
                sender=connection.user_id,
            )
        except Exception:
            logger.exception("relay.event_failed", sid=sid, event_name=ORDER_NEW)
            await self.state.router.send(sid, ERROR, {"message": "Failed to notify new order"})

    # ─── Notifications ─────────────────────────────────────

    async def on_notification_send(self, sid: str, data: Any = None):
        """Direct notification to every socket of one user."""
        connection = await self._sender(sid, NOTIFICATION_SEND)
        if connection is None:
            return
        try:
            payload = _parse(NotificationSend, data)
            if payload is None or not payload.is_complete():
                await self._reject(sid, NOTIFICATION_SEND, MISSING_FIELDS)
                return
            await self.state.router.emit(
                user_room(payload.user_id),
                NOTIFICATION_RECEIVED,
                {
                    "message": payload.message,
                    "type": payload.type or "info",
                    "timestamp": timestamp(),
                },
            )
            logger.info(
                "relay.notification_sent",
                target_user_id=str(payload.user_id),
                sender=connection.user_id,
            )
        except Exception:
            logger.exception("relay.event_failed", sid=sid, event_name=NOTIFICATION_SEND)
            await self.state.router.send(sid, ERROR, {"message": "Failed to send notification"})

    # ─── Typing indicators ─────────────────────────────────

    async def on_typing_start(self, sid: str, data: Any = None):
        connection = await self._sender(sid, TYPING_START)
        if connection is None:
            return
        await self._relay_typing(
            connection,
            data,
            TYPING_STARTED,
            {"userId": connection.user.backend_id, "userName": connection.user.display_name},
        )

    async def on_typing_stop(self, sid: str, data: Any = None):
        connection = await self._sender(sid, TYPING_STOP)
        if connection is None:
            return
        await self._relay_typing(
            connection, data, TYPING_STOPPED, {"userId": connection.user.backend_id}
        )

    async def _relay_typing(
        self, connection: Connection, data: Any, event: str, body: dict
    ) -> None:
        payload = _parse(Typing, data)
        if payload is None or payload.room_id is None or payload.room_id == "":
            return
        await self.state.router.emit(
            str(payload.room_id), event, body, skip_sid=connection.sid
        )

    # ─── Helpers ───────────────────────────────────────────

    async def _sender(self, sid: str, event: str) -> Optional[Connection]:
        """The registered connection behind sid, or reject the event."""
        connection = self.state.registry.get(sid)
        if connection is None:
            await self._reject(sid, event, UNAUTHORIZED)
        return connection

    async def _reject(self, sid: str, event: str, message: str) -> None:
        logger.info("relay.event_rejected", sid=sid, event_name=event, reason=message)
        await self.state.router.send(sid, ERROR, {"message": message})


def _parse(model: type[BaseModel], data: Any) -> Optional[BaseModel]:
    """Validate a client payload; None if it isn't a usable JSON object."""
    if not isinstance(data, dict):
        return None
    try:
        return model.model_validate(data)
    except ValidationError:
        return None
