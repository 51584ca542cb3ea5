"""ASGI application factory.

Learn: Two protocols share one port:
- /socket.io/* → python-socketio AsyncServer (browser clients)
- everything else → FastAPI (POST /api/notify, GET /api/health)

create_app() builds the FastAPI side and the Socket.IO server around one
RelayState; create_asgi_app() puts the Socket.IO ASGI wrapper in front.
Lifespan events pass through the wrapper to FastAPI.
"""

from contextlib import asynccontextmanager
from typing import Optional

import socketio
import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shoprelay import __version__
from shoprelay.api import api_router
from shoprelay.auth.gateway import AuthGateway
from shoprelay.config import Settings, settings
from shoprelay.middleware.request_id import RequestIdMiddleware
from shoprelay.realtime.namespace import RelayNamespace
from shoprelay.realtime.rooms import Emitter
from shoprelay.realtime.state import RelayState

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    config: Settings = app.state.settings
    logger.info(
        "relay.starting",
        version=__version__,
        environment=config.environment,
        port=config.port,
        frontend_url=config.frontend_url,
        backend_url=config.backend_url,
    )

    yield

    logger.info(
        "relay.shutdown",
        connections=len(app.state.relay.registry),
        users=app.state.relay.registry.user_count,
    )
    await app.state.gateway.aclose()


async def _invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("relay.invalid_request", errors=len(exc.errors()))
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Invalid request body"},
    )


def create_app(
    app_settings: Optional[Settings] = None,
    *,
    gateway: Optional[AuthGateway] = None,
    emitter: Optional[Emitter] = None,
) -> FastAPI:
    """Build the FastAPI app and its Socket.IO server.

    ``gateway`` and ``emitter`` default to the real backend client and the
    Socket.IO server; tests pass fakes.
    """
    config = app_settings or settings

    sio = socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins="*" if config.frontend_url == "*" else config.cors_origins,
        cors_credentials=True,
        transports=["websocket", "polling"],
        ping_interval=config.ping_interval,
        ping_timeout=config.ping_timeout,
    )
    gateway = gateway or AuthGateway(
        config.backend_url, timeout=config.auth_timeout_seconds
    )
    state = RelayState(emitter=emitter or sio)
    namespace = RelayNamespace(state, gateway)
    sio.register_namespace(namespace)

    app = FastAPI(
        title="Shoprelay",
        description="Real-time notification relay for the storefront",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.sio = sio
    app.state.gateway = gateway
    app.state.relay = state
    app.state.namespace = namespace

    # Request flow: RequestId → CORS → handler
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIdMiddleware)

    app.add_exception_handler(RequestValidationError, _invalid_body)
    app.include_router(api_router)

    return app


def create_asgi_app(app: FastAPI) -> socketio.ASGIApp:
    """Wrap the FastAPI app so /socket.io/ requests reach the Socket.IO server."""
    return socketio.ASGIApp(app.state.sio, other_asgi_app=app)


# Default app instance (used by uvicorn: shoprelay.main:app)
api = create_app()
app = create_asgi_app(api)
