"""Initialize a profile."""

from typing import Optional

import typer
from rich.console import Console

from s83.cli.output import format_error, format_success, json_output
from s83.cli.utils import ConfigManager, validate_server_url

console = Console()


def init_command(
    profile: str,
    server: Optional[str] = None,
    force: bool = False,
    json_flag: bool = False,
) -> None:
    """Create ~/.s83/<profile>/config.yaml and the local boards directory."""
    if server:
        try:
            server = validate_server_url(server)
        except ValueError as e:
            format_error(console, str(e))
            raise typer.Exit(code=2)

    config = ConfigManager(profile)

    if config.exists() and not force:
        format_error(
            console,
            f"Configuration already exists at {config.config_path}",
            hint="Use --force to overwrite existing configuration",
        )
        raise typer.Exit(code=1)

    config.save(server)

    if json_flag:
        json_output(
            console,
            {
                "status": "initialized",
                "profile": profile,
                "server": server,
                "config_path": str(config.config_path),
            },
        )
    else:
        format_success(console, f"Profile '{profile}' initialized")
        console.print(f"[cyan]Server:[/cyan]  {server or '(none)'}")
        console.print(f"[cyan]Config:[/cyan]  {config.config_path}")
        if not config.has_creator():
            console.print("[yellow]Hint:[/yellow] run 's83 new --save' to mine a creator key")
