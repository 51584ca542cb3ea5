#!/usr/bin/env python3
"""
Shoprelay listener — watch what a browser would receive.

Connects to the relay with a storefront token (same handshake as the SPA),
prints every event it gets, and optionally fires a test notification
through the HTTP ingress so you can see it arrive.

Run with:
    python examples/listen.py --token <storefront token> [--ping]

Requires: pip install "python-socketio[asyncio_client]" httpx
Relay must be running: shoprelay serve
"""

import argparse
import asyncio
import json
import sys

import httpx
import socketio

RELAY = "http://localhost:3001"

EVENTS = [
    "connected",
    "error",
    "admin:notification",
    "order:created",
    "order:status:updated",
    "order:status:changed",
    "notification:received",
    "typing:started",
    "typing:stopped",
]


async def main(token: str, ping: bool, seconds: float) -> None:
    sio = socketio.AsyncClient()

    def printer(name):
        async def handler(data=None):
            print(f"← {name}: {json.dumps(data, ensure_ascii=False)}")
        return handler

    for name in EVENTS:
        sio.on(name, printer(name))

    try:
        await sio.connect(RELAY, auth={"token": token}, transports=["websocket"])
    except socketio.exceptions.ConnectionError as e:
        print(f"ERROR: handshake rejected: {e}")
        sys.exit(1)

    if ping:
        # Goes to everyone, like a backend broadcast would
        async with httpx.AsyncClient(base_url=RELAY, timeout=5) as client:
            resp = await client.post(
                "/api/notify",
                json={"room": "all", "event": "notification:received",
                      "data": {"message": "Hello from listen.py", "type": "info"}},
            )
        print(f"→ POST /api/notify: {resp.status_code} {resp.json()}")

    await asyncio.sleep(seconds)
    await sio.disconnect()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--token", required=True)
    parser.add_argument("--ping", action="store_true", help="send a test broadcast")
    parser.add_argument("--seconds", type=float, default=30.0)
    args = parser.parse_args()
    asyncio.run(main(args.token, args.ping, args.seconds))
