"""Main CLI entry point for s83."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from s83.cli.commands.follow import follow_command
from s83.cli.commands.get import get_command
from s83.cli.commands.init import init_command
from s83.cli.commands.new import new_command
from s83.cli.commands.pub import pub_command
from s83.cli.commands.serve import serve_command
from s83.cli.commands.who import who_command
from s83.cli.utils.config import DEFAULT_PROFILE

app = typer.Typer(
    name="s83",
    help="Spring '83 - publish and follow signed boards",
    no_args_is_help=True,
    add_completion=False,
)
console = Console()


@app.callback()
def profile_option(
    ctx: typer.Context,
    profile: str = typer.Option(DEFAULT_PROFILE, "-p", "--profile", help="Name of the profile to use"),
) -> None:
    """Spring '83 - publish and follow signed boards."""
    ctx.obj = {"profile": profile}


def _profile(ctx: typer.Context) -> str:
    return ctx.obj["profile"] if ctx.obj else DEFAULT_PROFILE


@app.command("init")
def init(
    ctx: typer.Context,
    server: str = typer.Option(None, "-s", "--server", help="Server URL to publish to"),
    force: bool = typer.Option(False, "-f", "--force", help="Overwrite config"),
    json_flag: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Create a profile."""
    init_command(_profile(ctx), server, force, json_flag)


@app.command("new")
def new(
    ctx: typer.Context,
    jobs: int = typer.Option(1, "-j", "--jobs", help="Number of miners to run concurrently"),
    save: bool = typer.Option(False, "--save", help="Save the key to the profile"),
    force: bool = typer.Option(False, "-f", "--force", help="Overwrite an existing key"),
    json_flag: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Generate a new creator keypair."""
    new_command(_profile(ctx), jobs, save, force, json_flag)


@app.command("who")
def who(
    ctx: typer.Context,
    json_flag: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show profile information."""
    who_command(_profile(ctx), json_flag)


@app.command("pub")
def pub(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="File to publish as a board"),
    dry: bool = typer.Option(False, "--dry", help="Dry run, print board locally instead of publishing"),
    json_flag: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Publish a board."""
    pub_command(_profile(ctx), path, dry, json_flag)


@app.command("get")
def get(
    ctx: typer.Context,
    key: Optional[str] = typer.Argument(None, help="Get a single board from the profile's server"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Write the Daily Spring to this path"),
    new_only: bool = typer.Option(False, "--new", help="Only show new boards"),
    browse: bool = typer.Option(False, "--go", help="Open the Daily Spring in a browser"),
    json_flag: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Download follows and make your Daily Spring."""
    get_command(_profile(ctx), key, output, new_only, browse, json_flag)


@app.command("follow")
def follow(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="Board URL ending in the publisher key"),
    handle: str = typer.Option("", "--handle", help="Name to show for this board"),
    json_flag: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Follow a board."""
    follow_command(_profile(ctx), url, handle, json_flag)


@app.command("serve")
def serve(
    host: str = typer.Option(None, "--host", help="Bind address (default: HOST or 0.0.0.0)"),
    port: int = typer.Option(None, "--port", help="Port (default: PORT or 8080)"),
    store: Path = typer.Option(None, "--store", help="Board store directory (default: STORE)"),
) -> None:
    """Run a board server."""
    serve_command(host, port, store)


def main() -> None:
    """Entry point."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled[/yellow]")
        raise SystemExit(130)
