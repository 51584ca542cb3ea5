"""Auth gateway — verifies handshake tokens against the storefront backend.

Learn: The relay has no user table and no signing key. A token is valid
iff the backend's "current user" endpoint accepts it as a Bearer
credential and answers with a user object that has an id.

Failure handling:
- No token → TokenMissingError, and no network call at all
- Anything else going wrong (4xx/5xx, bad JSON, no id, timeout) →
  AuthenticationFailedError with a generic message. The real reason is
  logged, never sent to the client.

There is no retry: a failed verification rejects that one connection
attempt and the browser's reconnect policy takes it from there.
"""

from typing import Any, Optional

import httpx
import structlog

from shoprelay.auth.identity import UserIdentity

logger = structlog.get_logger()

USER_ENDPOINT = "/api/user"


class AuthError(Exception):
    """Raised when a handshake cannot be authenticated.

    ``str(exc)`` is safe to send to the client.
    """


class TokenMissingError(AuthError):
    def __init__(self, message: str = "Authentication token required"):
        super().__init__(message)


class AuthenticationFailedError(AuthError):
    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message)


def extract_token(auth: Any) -> Optional[str]:
    """Pull the bearer token out of a Socket.IO handshake auth payload."""
    if not isinstance(auth, dict):
        return None
    token = auth.get("token")
    if not isinstance(token, str) or not token:
        return None
    return token


class AuthGateway:
    """Resolve handshake tokens to users via the backend's /api/user."""

    def __init__(
        self,
        backend_url: str,
        *,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.backend_url = backend_url.rstrip("/")
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(
            base_url=self.backend_url, timeout=timeout
        )

    async def authenticate(self, auth: Any) -> UserIdentity:
        """Verify the handshake auth payload and return the user behind it."""
        token = extract_token(auth)
        if token is None:
            raise TokenMissingError()
        return await self.verify_token(token)

    async def verify_token(self, token: str) -> UserIdentity:
        try:
            response = await self._client.get(
                USER_ENDPOINT,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Accept": "application/json",
                },
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            logger.warning(
                "relay.auth_failed", reason="request_error", error=str(e)
            )
            raise AuthenticationFailedError() from e

        if response.status_code >= 400:
            logger.info(
                "relay.auth_failed",
                reason="rejected_by_backend",
                status_code=response.status_code,
            )
            raise AuthenticationFailedError()

        try:
            payload = response.json()
        except ValueError as e:
            logger.warning("relay.auth_failed", reason="malformed_body")
            raise AuthenticationFailedError() from e

        if not isinstance(payload, dict):
            logger.warning("relay.auth_failed", reason="malformed_body")
            raise AuthenticationFailedError()

        try:
            return UserIdentity.from_payload(payload)
        except ValueError as e:
            logger.warning("relay.auth_failed", reason="missing_user_id")
            raise AuthenticationFailedError() from e

    async def aclose(self) -> None:
        await self._client.aclose()
