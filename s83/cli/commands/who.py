"""Show profile information."""

import typer
from rich.console import Console

from s83.cli.output import format_error, format_key_value, format_table, json_output
from s83.cli.utils import ConfigError, ConfigManager

console = Console()


def who_command(profile: str, json_flag: bool = False) -> None:
    """Show which profile is in use, its server, creator and follows."""
    config = ConfigManager(profile)
    try:
        profile_config = config.load()
    except ConfigError as e:
        if json_flag:
            json_output(console, {"status": "not_initialized", "error": str(e)})
        else:
            format_error(console, str(e), hint=f"Run 's83 -p {profile} init' to create the profile")
        raise typer.Exit(code=1)

    creator = profile_config.creator
    status = {
        "name": profile_config.name,
        "path": str(profile_config.path),
        "server": profile_config.server,
        "public": str(creator) if creator else None,
        "valid": creator.is_valid() if creator else False,
        "follows": [
            {"key": f.key, "url": f.url, "handle": f.handle} for f in profile_config.follows
        ],
    }

    if json_flag:
        json_output(console, status)
        return

    format_key_value(
        console,
        {
            "name": status["name"],
            "path": status["path"],
            "server": status["server"] or "(none)",
            "pub": status["public"] or "(none)",
            "valid": "yes" if status["valid"] else "no",
        },
    )
    if profile_config.follows:
        format_table(
            console,
            "Follows",
            ["Handle", "Key", "URL"],
            [(f.handle, f.key, f.url) for f in profile_config.follows],
        )
