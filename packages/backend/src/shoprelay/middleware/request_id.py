"""Request ID middleware — unique ID per ingress request for tracing.

Learn: The backend can pass its own X-Request-ID so a notification can be
followed from the storefront logs into the relay logs. Otherwise a UUID
is generated. The ID is bound to structlog's contextvars for the request
and echoed back in the response header.
"""

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Generate or propagate X-Request-ID and bind it for logging."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id, path=request.url.path
        )

        response: Response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response
