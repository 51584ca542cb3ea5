"""Connection registry — live sockets and the users behind them.

Learn: Two indexes are kept:
- by sid: every live socket (a user may have several tabs open)
- by user id: the user's most recent socket, for presence lookups

A reconnect registers a new sid and takes over the user's presence entry.
When the old socket's disconnect arrives later, it must not erase the
newer entry, so unregister only drops the presence entry it still owns.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from shoprelay.auth.identity import UserIdentity


@dataclass
class Connection:
    """One live, authenticated Socket.IO session."""

    sid: str
    user: UserIdentity
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    rooms: set[str] = field(default_factory=set)

    @property
    def user_id(self) -> str:
        return self.user.user_id


class ConnectionRegistry:
    def __init__(self):
        self._by_sid: dict[str, Connection] = {}
        self._by_user: dict[str, str] = {}

    def register(self, sid: str, user: UserIdentity) -> Connection:
        """Track a freshly authenticated socket."""
        connection = Connection(sid=sid, user=user)
        self._by_sid[sid] = connection
        self._by_user[user.user_id] = sid
        return connection

    def unregister(self, sid: str) -> Optional[Connection]:
        """Forget a socket. Returns None if it was already gone."""
        connection = self._by_sid.pop(sid, None)
        if connection is None:
            return None
        if self._by_user.get(connection.user_id) == sid:
            del self._by_user[connection.user_id]
        return connection

    def get(self, sid: str) -> Optional[Connection]:
        return self._by_sid.get(sid)

    def for_user(self, user_id) -> Optional[Connection]:
        """Most recent live connection of a user."""
        sid = self._by_user.get(str(user_id))
        return self._by_sid.get(sid) if sid else None

    def sids(self) -> list[str]:
        return list(self._by_sid)

    def user_ids(self) -> list[str]:
        return list(self._by_user)

    @property
    def user_count(self) -> int:
        return len(self._by_user)

    def __len__(self) -> int:
        return len(self._by_sid)

    def __contains__(self, sid: str) -> bool:
        return sid in self._by_sid
