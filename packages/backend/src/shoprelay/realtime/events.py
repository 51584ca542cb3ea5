"""Event name constants and payload helpers.

Learn: Centralizing event names prevents typos between the relay, the
backend notifier and the frontend listeners.
"""

from datetime import datetime, timezone

# ─── Rooms ───────────────────────────────────────────────

BROADCAST_ALL = "all"
ADMIN_ROOM = "admin"


def user_room(user_id) -> str:
    return f"user:{user_id}"


# ─── Client → relay ──────────────────────────────────────

ORDER_STATUS_UPDATE = "order:status:update"
ORDER_NEW = "order:new"
NOTIFICATION_SEND = "notification:send"
TYPING_START = "typing:start"
TYPING_STOP = "typing:stop"

# ─── Relay → client ──────────────────────────────────────

CONNECTED = "connected"
ERROR = "error"
ORDER_STATUS_UPDATED = "order:status:updated"
ORDER_STATUS_CHANGED = "order:status:changed"
ORDER_CREATED = "order:created"
NOTIFICATION_RECEIVED = "notification:received"
TYPING_STARTED = "typing:started"
TYPING_STOPPED = "typing:stopped"

# ─── Backend → relay (via POST /api/notify) ──────────────

ADMIN_NOTIFICATION = "admin:notification"

# Admin notification types raised by the storefront backend
NOTIFICATION_USER_REGISTERED = "user_registered"
NOTIFICATION_ORDER_CREATED = "order_created"
NOTIFICATION_PRODUCT_REVIEW = "product_review"
NOTIFICATION_SUPPORT_MESSAGE = "support_message"
NOTIFICATION_NEWSLETTER_SUBSCRIBED = "newsletter_subscribed"

ADMIN_NOTIFICATION_TYPES = frozenset({
    NOTIFICATION_USER_REGISTERED,
    NOTIFICATION_ORDER_CREATED,
    NOTIFICATION_PRODUCT_REVIEW,
    NOTIFICATION_SUPPORT_MESSAGE,
    NOTIFICATION_NEWSLETTER_SUBSCRIBED,
})


def timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds, e.g. 2025-01-01T10:00:00.000Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
