"""Shoprelay — real-time notification relay for the storefront.

Bridges the storefront backend and connected browser clients: the backend
pushes events over HTTP, browsers receive them over Socket.IO rooms
(one personal room per user plus a shared admin room).
"""

__version__ = "0.1.0"
