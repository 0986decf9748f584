"""Publish a board."""

import asyncio
from pathlib import Path

import httpx
import typer
from rich.console import Console

from s83.cli.output import format_error, format_info, format_panel, format_success, json_output
from s83.cli.utils import ConfigError, ConfigManager
from s83.protocol import Board, S83Error, TransportError, Transport

console = Console()


async def _publish(server: str, board: Board) -> httpx.Response:
    """PUT the board to the configured server."""
    async with Transport() as transport:
        return await transport.put_board(server, board)


def pub_command(
    profile: str,
    path: Path,
    dry: bool = False,
    json_flag: bool = False,
) -> None:
    """Sign the file at PATH as a board and publish it to the profile's server.

    A time element stamped now is prepended when the file has none.
    """
    config = ConfigManager(profile)
    try:
        profile_config = config.load()
    except ConfigError as e:
        format_error(console, str(e), hint=f"Run 's83 -p {profile} init' to create the profile")
        raise typer.Exit(code=1)

    creator = profile_config.creator
    if creator is None or not creator.is_valid():
        format_error(
            console,
            "Invalid creator configuration",
            hint=f"Run 's83 -p {profile} new --save' to mine a creator key",
        )
        raise typer.Exit(code=1)

    if profile_config.server is None and not dry:
        format_error(
            console,
            "Missing server configuration",
            hint=f"Add a 'server:' line to {config.config_path}",
        )
        raise typer.Exit(code=1)

    try:
        data = path.read_bytes()
    except OSError as e:
        format_error(console, f"Cannot read {path}: {e}")
        raise typer.Exit(code=2)

    try:
        board = creator.publish(data)
    except S83Error as e:
        format_error(console, f"Invalid board: {e}")
        raise typer.Exit(code=2)

    if dry:
        if json_flag:
            json_output(
                console,
                {
                    "status": "valid",
                    "key": board.key,
                    "size": len(board.content),
                    "timestamp": board.timestamp,
                    "signature": str(board.signature),
                },
            )
        else:
            format_success(console, "This board should publish (pending TTL checks)")
            format_info(console, f"Size: {len(board.content)}")
            format_panel(console, board.key, str(board))
        return

    try:
        resp = asyncio.run(_publish(profile_config.server, board))
    except TransportError as e:
        format_error(console, f"Failed to publish board: {e}")
        raise typer.Exit(code=3)

    if resp.status_code not in (200, 204):
        format_error(console, f"Server rejected board: {resp.status_code}: {resp.text}")
        raise typer.Exit(code=3)

    if json_flag:
        json_output(
            console,
            {
                "status": "published",
                "key": board.key,
                "server": profile_config.server,
                "timestamp": board.timestamp,
            },
        )
    else:
        format_success(console, f"Published board for {board.key} to {profile_config.server}")
