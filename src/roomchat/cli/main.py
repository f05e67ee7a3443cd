"""roomchat CLI — run the chat server and manage channel passwords.

Usage:
    roomchat serve                       # Run the WebSocket server
    roomchat serve --port 4000           # Override ROOMCHAT_PORT
    roomchat channels                    # List configured channels
    roomchat hash-password               # Hash a password for ROOMCHAT_CHANNELS
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import click
import structlog

from roomchat import __version__
from roomchat.auth.password import hash_password
from roomchat.config import settings

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _configure_logging(level_name: str) -> None:
    """Filter structlog output by ROOMCHAT_LOG_LEVEL."""
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        raise click.BadParameter(f"Unknown log level {level_name!r}", param_hint="ROOMCHAT_LOG_LEVEL")
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(level))


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k, "—"))[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="roomchat")
def main():
    """roomchat — room-based real-time chat over WebSockets."""


# ---------------------------------------------------------------------------
# roomchat serve
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", "-h", help="Bind address (default: ROOMCHAT_HOST)")
@click.option("--port", "-p", type=int, help="Listen port (default: ROOMCHAT_PORT)")
def serve(host: Optional[str], port: Optional[int]):
    """Run the chat server."""
    import uvicorn

    _configure_logging(settings.log_level)

    scheme = "wss" if settings.ssl_certfile else "ws"
    bind_host = host or settings.host
    bind_port = port or settings.port
    click.echo(f"Running server on {scheme}://{bind_host}:{bind_port}/ws")

    uvicorn.run(
        "roomchat.main:app",
        host=bind_host,
        port=bind_port,
        log_level=settings.log_level,
        ws_ping_interval=settings.ws_ping_interval,
        ws_ping_timeout=settings.ws_ping_timeout,
        ssl_certfile=settings.ssl_certfile,
        ssl_keyfile=settings.ssl_keyfile,
    )


# ---------------------------------------------------------------------------
# roomchat channels
# ---------------------------------------------------------------------------


@main.command()
def channels():
    """List the configured channels."""
    rows = [
        {"name": c.name, "access": "private" if c.password_hash else "public"}
        for c in settings.channels
    ]
    if not rows:
        click.echo("No channels configured.")
        return
    _print_table(rows, [("CHANNEL", "name", 30), ("ACCESS", "access", 8)])


# ---------------------------------------------------------------------------
# roomchat hash-password
# ---------------------------------------------------------------------------


@main.command("hash-password")
@click.password_option(help="Channel password (prompted if omitted)")
@click.option("--rounds", default=12, show_default=True, help="bcrypt work factor")
def hash_password_cmd(password: str, rounds: int):
    """Print a bcrypt hash to use as a channel's password_hash."""
    if len(password) > 128:
        click.secho("Error: passwords are limited to 128 characters", fg="red", err=True)
        sys.exit(1)
    click.echo(hash_password(password, rounds=rounds))


if __name__ == "__main__":
    main()
