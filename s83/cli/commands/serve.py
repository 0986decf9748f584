"""Run the board server."""

import dataclasses
from pathlib import Path
from typing import Optional

import typer
import uvicorn
from rich.console import Console

from s83.cli.output import format_error, format_info
from s83.server.app import create_app
from s83.server.config import load_config_from_env
from s83.store import StoreError

console = Console()


def serve_command(
    host: Optional[str] = None,
    port: Optional[int] = None,
    store: Optional[Path] = None,
) -> None:
    """Serve boards over HTTP. Settings come from the environment, options override them."""
    try:
        config = load_config_from_env()
    except ValueError as e:
        format_error(console, f"Invalid server configuration: {e}")
        raise typer.Exit(code=2)

    overrides = {}
    if host is not None:
        overrides["host"] = host
    if port is not None:
        overrides["port"] = port
    if store is not None:
        overrides["store_path"] = store
    config = dataclasses.replace(config, **overrides)

    config.store_path.mkdir(parents=True, exist_ok=True)
    try:
        app = create_app(config)
    except StoreError as e:
        format_error(console, f"Cannot open board store: {e}")
        raise typer.Exit(code=1)

    bind_host = config.host or "0.0.0.0"
    format_info(console, f"Starting server on {bind_host}:{config.port}")
    uvicorn.run(app, host=bind_host, port=config.port)
