"""Connection registry + room router tests.

Learn: These exercise the in-memory store directly, without a handshake.
The namespace tests cover the same rules end-to-end.
"""

import pytest

from shoprelay.auth.identity import UserIdentity
from shoprelay.realtime.events import ADMIN_ROOM, user_room
from shoprelay.realtime.registry import ConnectionRegistry
from shoprelay.realtime.state import RelayState


def _user(user_id, *roles) -> UserIdentity:
    return UserIdentity.from_payload(
        {"id": user_id, "name": f"user{user_id}", "roles": [{"name": r} for r in roles]}
    )


# ─── Registry ───────────────────────────────────────────


def test_register_and_lookup():
    registry = ConnectionRegistry()
    connection = registry.register("sid-1", _user(5))

    assert registry.get("sid-1") is connection
    assert registry.for_user(5) is connection
    assert registry.for_user("5") is connection
    assert "sid-1" in registry
    assert len(registry) == 1
    assert registry.user_count == 1
    assert connection.connected_at.tzinfo is not None


def test_unregister_is_idempotent():
    registry = ConnectionRegistry()
    registry.register("sid-1", _user(5))

    assert registry.unregister("sid-1") is not None
    assert registry.unregister("sid-1") is None
    assert registry.unregister("never-seen") is None
    assert len(registry) == 0
    assert registry.for_user(5) is None


def test_reconnect_replaces_user_entry():
    registry = ConnectionRegistry()
    registry.register("old", _user(5))
    registry.register("new", _user(5))

    assert registry.user_ids() == ["5"]
    assert registry.for_user(5).sid == "new"


def test_stale_disconnect_keeps_newer_entry():
    registry = ConnectionRegistry()
    registry.register("old", _user(5))
    registry.register("new", _user(5))

    registry.unregister("old")

    assert registry.for_user(5).sid == "new"
    assert registry.user_count == 1


# ─── Rooms ──────────────────────────────────────────────


def test_customer_joins_only_personal_room(emitter):
    state = RelayState(emitter)
    connection = state.attach("sid-1", _user(5, "customer"))

    assert connection.rooms == {user_room(5)}
    assert state.router.rooms_of("sid-1") == {"user:5"}
    assert state.router.members(ADMIN_ROOM) == set()


def test_admin_joins_admin_room(emitter):
    state = RelayState(emitter)
    connection = state.attach("sid-1", _user(1, "admin"))

    assert connection.rooms == {"user:1", ADMIN_ROOM}
    assert state.router.members(ADMIN_ROOM) == {"sid-1"}


def test_detach_empties_rooms(emitter):
    state = RelayState(emitter)
    state.attach("sid-1", _user(1, "admin"))

    state.detach("sid-1")
    state.detach("sid-1")

    assert state.router.room_names() == []
    assert len(state.registry) == 0


def test_two_tabs_share_personal_room(emitter):
    state = RelayState(emitter)
    state.attach("tab-1", _user(5))
    state.attach("tab-2", _user(5))

    assert state.router.members("user:5") == {"tab-1", "tab-2"}

    state.detach("tab-1")
    assert state.router.members("user:5") == {"tab-2"}


@pytest.mark.asyncio
async def test_emit_to_room(emitter):
    state = RelayState(emitter)
    state.attach("a", _user(1, "admin"))
    state.attach("b", _user(2))

    count = await state.router.emit(ADMIN_ROOM, "ping", {"n": 1})

    assert count == 1
    assert emitter.sent == [("a", "ping", {"n": 1})]


@pytest.mark.asyncio
@pytest.mark.parametrize("target", ["all", None, ""])
async def test_emit_broadcast_targets(emitter, target):
    state = RelayState(emitter)
    state.attach("a", _user(1, "admin"))
    state.attach("b", _user(2))

    count = await state.router.emit(target, "ping", {})

    assert count == 2
    assert sorted(emitter.recipients("ping")) == ["a", "b"]


@pytest.mark.asyncio
async def test_emit_to_empty_room_is_noop(emitter):
    state = RelayState(emitter)
    state.attach("b", _user(2))

    assert await state.router.emit(ADMIN_ROOM, "ping", {}) == 0
    assert await state.router.emit("user:999", "ping", {}) == 0
    assert emitter.sent == []


@pytest.mark.asyncio
async def test_emit_skips_sender(emitter):
    state = RelayState(emitter)
    state.attach("tab-1", _user(5))
    state.attach("tab-2", _user(5))

    count = await state.router.emit("user:5", "ping", {}, skip_sid="tab-1")

    assert count == 1
    assert emitter.recipients("ping") == ["tab-2"]
