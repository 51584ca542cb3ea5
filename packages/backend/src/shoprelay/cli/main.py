"""Shoprelay CLI — run the relay, push test events, check health.

Usage:
    shoprelay serve                                   # Run the relay (uvicorn)
    shoprelay serve --port 3001 --reload              # Dev mode
    shoprelay notify admin:notification --room admin --data '{"id": 1, "title": "Hi"}'
    shoprelay health                                  # Connections + version
"""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Optional

import click
import httpx

from shoprelay.client.notifier import RelayNotifier
from shoprelay.config import settings
from shoprelay.realtime.events import BROADCAST_ALL

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _relay_url(url: Optional[str]) -> str:
    return (url or settings.relay_url).rstrip("/")


def _client(url: Optional[str]) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the relay."""
    return httpx.AsyncClient(base_url=_relay_url(url), timeout=5.0)


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


def _parse_data(raw: str) -> dict:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="--data")
    if not isinstance(data, dict):
        raise click.BadParameter("must be a JSON object", param_hint="--data")
    return data


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="shoprelay")
def cli():
    """Shoprelay — real-time notification relay for the storefront."""


@cli.command()
@click.option("--host", default=None, help="Bind address (default: SHOPRELAY_HOST)")
@click.option("--port", type=int, default=None, help="Port (default: SHOPRELAY_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the relay (Socket.IO + HTTP ingress) with uvicorn."""
    import uvicorn

    uvicorn.run(
        "shoprelay.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@cli.command()
@click.argument("event")
@click.option("--room", default=BROADCAST_ALL, show_default=True, help="Target room")
@click.option("--data", "raw_data", default="{}", help="JSON object payload")
@click.option("--url", default=None, help="Relay URL (default: SHOPRELAY_RELAY_URL)")
def notify(event: str, room: str, raw_data: str, url: Optional[str]):
    """Emit EVENT to a room through a running relay."""
    data = _parse_data(raw_data)

    async def _send() -> bool:
        async with RelayNotifier(
            _relay_url(url), timeout=settings.notify_timeout_seconds
        ) as notifier:
            return await notifier.notify(event, data, room=room)

    if not asyncio.run(_send()):
        click.secho(f"Failed to emit '{event}' to '{room}'", fg="red", err=True)
        sys.exit(1)
    click.secho(f"Emitted '{event}' to '{room}'", fg="green")


@cli.command()
@click.option("--url", default=None, help="Relay URL (default: SHOPRELAY_RELAY_URL)")
def health(url: Optional[str]):
    """Show relay version and live connection counts."""

    async def _get() -> dict:
        async with _client(url) as client:
            r = await client.get("/api/health")
            r.raise_for_status()
            return r.json()

    try:
        data = asyncio.run(_get())
    except httpx.HTTPError as e:
        click.secho(f"Relay unreachable: {e}", fg="red", err=True)
        sys.exit(1)
    click.echo(_pretty_json(data))


def main():
    cli()


if __name__ == "__main__":
    main()
