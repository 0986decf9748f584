"""Follow a board."""

import typer
from rich.console import Console

from s83.cli.output import format_error, format_success, format_warning, json_output
from s83.cli.utils import ConfigError, ConfigManager
from s83.protocol import Follow, S83Error

console = Console()


def follow_command(
    profile: str,
    url: str,
    handle: str = "",
    json_flag: bool = False,
) -> None:
    """Add the board at URL to the profile's follows."""
    try:
        follow = Follow.from_url(url.strip(), handle.strip())
    except S83Error as e:
        format_error(console, f"Invalid board URL: {e}")
        raise typer.Exit(code=2)

    config = ConfigManager(profile)
    try:
        added = config.add_follow(follow)
    except ConfigError as e:
        format_error(console, str(e), hint=f"Run 's83 -p {profile} init' to create the profile")
        raise typer.Exit(code=1)

    if json_flag:
        json_output(
            console,
            {"status": "followed" if added else "already_followed", "key": follow.key, "url": follow.url, "handle": follow.handle},
        )
    elif added:
        format_success(console, f"Following {follow}")
    else:
        format_warning(console, f"Already following {follow.key}")
