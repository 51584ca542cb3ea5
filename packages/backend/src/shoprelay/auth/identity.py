"""Resolved user identity attached to a socket connection."""

from enum import Enum
from typing import Any, Optional


class Role(str, Enum):
    """Role names the relay cares about.

    The backend may send any role; only ``admin`` changes relay behaviour
    (admin room membership, order status updates).
    """

    ADMIN = "admin"


class UserIdentity:
    """The backend's answer to "who owns this token".

    Built from the /api/user payload: ``{id, name, email, roles: [{name}]}``.
    The raw payload is kept so handlers can read fields the relay does not
    model.
    """

    def __init__(
        self,
        user_id: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
        roles: Optional[frozenset[str]] = None,
        raw: Optional[dict[str, Any]] = None,
    ):
        self.user_id = user_id
        self.name = name
        self.email = email
        self.roles = roles or frozenset()
        self.raw = raw or {}

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "UserIdentity":
        """Build an identity from a backend user object.

        Raises ValueError when the payload carries no usable id.
        """
        user_id = payload.get("id")
        if not user_id:
            raise ValueError("user payload has no id")
        return cls(
            user_id=str(user_id),
            name=payload.get("name"),
            email=payload.get("email"),
            roles=_role_names(payload.get("roles")),
            raw=payload,
        )

    @property
    def display_name(self) -> Optional[str]:
        return self.name or self.email

    @property
    def backend_id(self) -> Any:
        """The id exactly as the backend sent it (usually an int)."""
        return self.raw.get("id", self.user_id)

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def is_admin(self) -> bool:
        return self.has_role(Role.ADMIN.value)

    def __repr__(self) -> str:
        return f"UserIdentity(user_id={self.user_id!r}, roles={sorted(self.roles)!r})"


def _role_names(roles: Any) -> frozenset[str]:
    """Normalise ``[{"name": "admin"}, "editor", ...]`` into a set of names."""
    if not isinstance(roles, list):
        return frozenset()
    names = set()
    for role in roles:
        if isinstance(role, dict):
            name = role.get("name")
        else:
            name = role
        if isinstance(name, str) and name:
            names.add(name)
    return frozenset(names)
