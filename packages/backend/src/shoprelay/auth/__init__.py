"""Authentication for socket connections.

Tokens are never decoded here: the storefront backend owns user sessions,
so every handshake token is verified by asking the backend who it belongs
to (GET /api/user). The answer becomes a UserIdentity attached to the
connection for the rest of its life.
"""

from shoprelay.auth.gateway import (
    AuthenticationFailedError,
    AuthError,
    AuthGateway,
    TokenMissingError,
)
from shoprelay.auth.identity import Role, UserIdentity

__all__ = [
    "AuthError",
    "AuthGateway",
    "AuthenticationFailedError",
    "Role",
    "TokenMissingError",
    "UserIdentity",
]
