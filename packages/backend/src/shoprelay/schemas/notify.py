"""Pydantic schemas for the HTTP side of the relay.

Learn: NotifyRequest fields are all optional on purpose — a body missing
``event`` or ``data`` is answered with the relay's own 400 message rather
than FastAPI's generic 422 validation error.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


# ─── Ingress (backend → relay) ──────────────────────────


class NotifyRequest(BaseModel):
    """Server-to-server trigger: emit ``event`` with ``data`` to ``room``."""
    room: Optional[str] = Field(
        None, description="Room name, or 'all' / omitted to broadcast"
    )
    event: Optional[str] = Field(None, description="Socket event name to emit")
    data: Optional[dict[str, Any]] = Field(
        None, description="JSON object forwarded verbatim as the event payload"
    )


class NotifyResponse(BaseModel):
    success: bool
    message: str


# ─── Admin notifications (payload of admin:notification) ─


class AdminNotification(BaseModel):
    """A back-office notification as stored by the storefront backend."""
    id: int
    type: str = Field(..., description="e.g. user_registered, order_created")
    title: str
    message: str
    data: Optional[dict[str, Any]] = None
    created_at: datetime


# ─── Health ─────────────────────────────────────────────


class HealthRead(BaseModel):
    status: str
    version: str
    connections: int
    users: int
