"""Event ingress — the backend pushes socket events over HTTP.

Learn: The storefront backend calls this after a domain action (user
registered, order placed, ...) with {room, event, data}. The relay emits
``event`` with ``data`` to every socket in ``room``:
- "all" or no room → every connected socket
- any other name  → members of that room (none → nothing happens)

Emission is fire-and-forget: success means "handed to the sockets",
not "delivered". Callers are expected to log failures and move on.
"""

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from shoprelay.realtime.events import BROADCAST_ALL
from shoprelay.realtime.state import RelayState, get_relay_state
from shoprelay.schemas.notify import NotifyRequest, NotifyResponse

logger = structlog.get_logger()
router = APIRouter()


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=NotifyResponse(success=False, message=message).model_dump(),
    )


@router.post("/notify", response_model=NotifyResponse)
async def notify(
    body: NotifyRequest,
    state: RelayState = Depends(get_relay_state),
):
    """Emit an event into the socket fabric."""
    if not body.event or body.data is None:
        return _failure(400, "Missing required fields: event, data")

    room = body.room or BROADCAST_ALL
    try:
        recipients = await state.router.emit(room, body.event, body.data)
    except Exception:
        logger.exception("relay.notify_failed", room=room, event_name=body.event)
        return _failure(500, "Failed to send notification")

    logger.info(
        "relay.notify_emitted",
        room=room,
        event_name=body.event,
        recipients=recipients,
    )
    return NotifyResponse(success=True, message="Notification sent")
