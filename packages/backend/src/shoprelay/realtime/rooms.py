"""Room router — who is in which room, and delivery to a room.

Learn: Rooms are just names mapped to sets of sids. They exist while at
least one socket is in them and vanish when the last member leaves.

Two kinds are assigned automatically on connect:
- user:<id> — every socket of that user
- admin     — every socket whose user has the admin role

Delivery goes through an emitter with python-socketio's signature
(``await emitter.emit(event, data, to=sid)``). In production that's the
AsyncServer itself; tests pass a recorder.
"""

from typing import Any, Optional, Protocol

import structlog

from shoprelay.realtime.events import ADMIN_ROOM, BROADCAST_ALL, user_room
from shoprelay.realtime.registry import Connection, ConnectionRegistry

logger = structlog.get_logger()


class Emitter(Protocol):
    async def emit(self, event: str, data: Any = None, to: Optional[str] = None, **kwargs) -> None:
        ...


class RoomRouter:
    def __init__(self, registry: ConnectionRegistry, emitter: Emitter):
        self.registry = registry
        self.emitter = emitter
        self._rooms: dict[str, set[str]] = {}

    # ─── Membership ────────────────────────────────────────

    def place(self, connection: Connection) -> set[str]:
        """Join a new connection to the rooms its identity entitles it to."""
        self.join(connection, user_room(connection.user_id))
        if connection.user.is_admin():
            self.join(connection, ADMIN_ROOM)
            logger.info("relay.admin_joined", user_id=connection.user_id, sid=connection.sid)
        return set(connection.rooms)

    def join(self, connection: Connection, room: str) -> None:
        self._rooms.setdefault(room, set()).add(connection.sid)
        connection.rooms.add(room)

    def leave_all(self, sid: str) -> None:
        """Drop a sid from every room. Safe to call for unknown sids."""
        for room in list(self._rooms):
            members = self._rooms[room]
            members.discard(sid)
            if not members:
                del self._rooms[room]
        connection = self.registry.get(sid)
        if connection is not None:
            connection.rooms.clear()

    def members(self, room: str) -> set[str]:
        return set(self._rooms.get(room, ()))

    def rooms_of(self, sid: str) -> set[str]:
        return {room for room, members in self._rooms.items() if sid in members}

    def room_names(self) -> list[str]:
        return list(self._rooms)

    # ─── Delivery ──────────────────────────────────────────

    def resolve(self, target: Optional[str]) -> list[str]:
        """Sids addressed by a target; "all", None and "" mean everyone."""
        if not target or target == BROADCAST_ALL:
            return self.registry.sids()
        return list(self._rooms.get(target, ()))

    async def emit(
        self,
        target: Optional[str],
        event: str,
        data: Any,
        *,
        skip_sid: Optional[str] = None,
    ) -> int:
        """Deliver an event to a room (or everyone). Returns the recipient count.

        An empty or unknown room is not an error — nobody receives anything.
        """
        sids = [sid for sid in self.resolve(target) if sid != skip_sid]
        for sid in sids:
            await self.emitter.emit(event, data, to=sid)
        return len(sids)

    async def send(self, sid: str, event: str, data: Any) -> None:
        """Deliver an event to a single socket."""
        await self.emitter.emit(event, data, to=sid)
