"""Real-time infrastructure — Socket.IO rooms fed by HTTP and clients.

Learn: Events reach browsers through two entrances:
1. Backend → POST /api/notify → RoomRouter → sockets in the target room
2. Browser → socket event → RelayNamespace (role checks) → RoomRouter

All state (who is connected, who is in which room) lives in one
RelayState owned by the app instance. Nothing is persisted.
"""
