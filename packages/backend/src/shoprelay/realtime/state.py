"""Relay state — the one owned store behind every handler.

Created once per app (see main.create_app) and injected into both the
Socket.IO namespace and the HTTP routes, so each test can start from a
fresh, empty relay.
"""

from typing import Optional

from starlette.requests import Request

from shoprelay.auth.identity import UserIdentity
from shoprelay.realtime.registry import Connection, ConnectionRegistry
from shoprelay.realtime.rooms import Emitter, RoomRouter


class RelayState:
    def __init__(self, emitter: Emitter):
        self.registry = ConnectionRegistry()
        self.router = RoomRouter(self.registry, emitter)

    def attach(self, sid: str, user: UserIdentity) -> Connection:
        """Register an authenticated socket and put it in its rooms."""
        connection = self.registry.register(sid, user)
        self.router.place(connection)
        return connection

    def detach(self, sid: str) -> Optional[Connection]:
        """Remove a socket from its rooms and the registry. Idempotent."""
        self.router.leave_all(sid)
        return self.registry.unregister(sid)


def get_relay_state(request: Request) -> RelayState:
    """FastAPI dependency — the RelayState of the app serving this request."""
    return request.app.state.relay
