"""Test fixtures — a fresh relay per test, with the outside world faked.

Learn: Two collaborators are replaced:

1. The storefront backend's GET /api/user → FakeBackend behind
   httpx.MockTransport. It records every call, so tests can assert that
   a token-less handshake never reached the network.
2. The Socket.IO server's emit() → RecordingEmitter. It records
   (sid, event, data) for each delivery instead of writing to sockets.

Everything else (gateway, registry, rooms, namespace, FastAPI routes) is
the real code.
"""

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from shoprelay.auth.gateway import AuthGateway
from shoprelay.config import Settings
from shoprelay.main import create_app
from shoprelay.realtime.namespace import RelayNamespace
from shoprelay.realtime.state import RelayState

BACKEND_URL = "http://backend.test"

ADMIN_TOKEN = "admin-token"
CUSTOMER_TOKEN = "customer-token"
OTHER_CUSTOMER_TOKEN = "other-customer-token"


class RecordingEmitter:
    """Stands in for socketio.AsyncServer.emit."""

    def __init__(self):
        self.sent: list[tuple[str, str, object]] = []

    async def emit(self, event, data=None, to=None, **kwargs):
        self.sent.append((to, event, data))

    def received(self, sid: str, event: str | None = None) -> list:
        """Payloads delivered to one socket (optionally of one event)."""
        return [
            data
            for to, name, data in self.sent
            if to == sid and (event is None or name == event)
        ]

    def recipients(self, event: str) -> list[str]:
        return [to for to, name, _ in self.sent if name == event]

    def events(self) -> list[str]:
        return [name for _, name, _ in self.sent]

    def clear(self) -> None:
        self.sent.clear()


class FakeBackend:
    """Stands in for the storefront's GET /api/user."""

    def __init__(self):
        self.users: dict[str, dict] = {}
        self.calls: list[httpx.Request] = []

    def add_user(self, token: str, user_id, name: str, roles=()) -> dict:
        user = {
            "id": user_id,
            "name": name,
            "email": f"{name.lower()}@shop.test",
            "roles": [{"id": i + 1, "name": role} for i, role in enumerate(roles)],
        }
        self.users[token] = user
        return user

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        token = request.headers.get("Authorization", "").removeprefix("Bearer ")
        user = self.users.get(token)
        if user is None:
            return httpx.Response(401, json={"message": "Unauthenticated."})
        return httpx.Response(200, json=user)


@pytest.fixture()
def backend():
    fake = FakeBackend()
    fake.add_user(ADMIN_TOKEN, 1, "Alice", roles=["admin"])
    fake.add_user(CUSTOMER_TOKEN, 2, "Bob", roles=["customer"])
    fake.add_user(OTHER_CUSTOMER_TOKEN, 3, "Carol")
    return fake


@pytest_asyncio.fixture()
async def gateway(backend):
    client = httpx.AsyncClient(
        base_url=BACKEND_URL, transport=httpx.MockTransport(backend.handler)
    )
    gw = AuthGateway(BACKEND_URL, timeout=1.0, client=client)
    yield gw
    await gw.aclose()


@pytest.fixture()
def emitter():
    return RecordingEmitter()


@pytest.fixture()
def state(emitter):
    return RelayState(emitter=emitter)


@pytest.fixture()
def namespace(state, gateway):
    return RelayNamespace(state, gateway)


@pytest.fixture()
def connect(namespace):
    """Connect a socket through the real handshake path."""

    async def _connect(sid: str, token: str | None):
        auth = {"token": token} if token is not None else None
        await namespace.trigger_event("connect", sid, {}, auth)
        return namespace.state.registry.get(sid)

    return _connect


@pytest.fixture()
def test_settings():
    return Settings(
        backend_url=BACKEND_URL,
        frontend_url="http://shop.test",
        relay_url="http://relay.test",
    )


@pytest.fixture()
def app(test_settings, gateway, emitter):
    return create_app(test_settings, gateway=gateway, emitter=emitter)


@pytest_asyncio.fixture()
async def client(app):
    """HTTP client talking to the relay's FastAPI side in-process."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://relay.test") as ac:
        yield ac
