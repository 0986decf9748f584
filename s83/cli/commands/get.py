"""Fetch followed boards and render the Daily Spring."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from s83.cli.output import format_error, format_info, format_success, format_warning, json_output
from s83.cli.render import DigestEntry, default_digest_path, render_digest
from s83.cli.utils import ConfigError, ConfigManager, validate_key
from s83.protocol import Follow, FollowError, FollowReport, Transport, sync_follows
from s83.store import BoardStore, StoreError

console = Console()


async def _sync(follows: list[Follow], boards_dir: Path) -> FollowReport:
    """Sync every follow into the profile's local board store."""
    store = BoardStore.open(boards_dir)
    async with Transport() as transport:
        return await sync_follows(transport, follows, store)


def _digest_entries(follows: list[Follow], report: FollowReport, new_only: bool) -> list[DigestEntry]:
    entries = []
    for follow in follows:
        board = report.new.get(follow.key)
        if board is not None:
            entries.append(DigestEntry(follow, board, new=True))
        elif not new_only and follow.key in report.local:
            entries.append(DigestEntry(follow, report.local[follow.key]))
    return entries


def get_command(
    profile: str,
    key: Optional[str] = None,
    output: Optional[Path] = None,
    new_only: bool = False,
    browse: bool = False,
    json_flag: bool = False,
) -> None:
    """Download followed boards (or the single board KEY) and build the digest."""
    config = ConfigManager(profile)
    try:
        profile_config = config.load()
    except ConfigError as e:
        format_error(console, str(e), hint=f"Run 's83 -p {profile} init' to create the profile")
        raise typer.Exit(code=1)

    follows = profile_config.follows
    if key:
        try:
            key = validate_key(key)
        except ValueError as e:
            format_error(console, str(e))
            raise typer.Exit(code=2)
        if profile_config.server is None:
            format_error(console, "Missing server configuration", hint=f"Add a 'server:' line to {config.config_path}")
            raise typer.Exit(code=1)
        follows = [Follow.on_server(profile_config.server, key)]

    if not follows and not json_flag:
        format_warning(console, "No follows configured")

    profile_config.boards_dir.mkdir(parents=True, exist_ok=True)
    try:
        report = asyncio.run(_sync(follows, profile_config.boards_dir))
    except StoreError as e:
        format_error(console, f"Cannot open board store: {e}")
        raise typer.Exit(code=1)

    if not json_flag:
        for follow in follows:
            if follow.key in report.failed:
                format_warning(console, f"Failed to get board for {follow}: {report.failed[follow.key]}")
            elif follow.key in report.not_modified:
                format_info(console, f"304 - no new board for {follow}")

    if new_only and not report.new and not report.all_failed:
        if json_flag:
            json_output(console, {"status": "no_new_boards", "failed": report.failed})
        else:
            format_info(console, "No new boards")
        return

    out_path = output or default_digest_path(config.profile_dir)
    try:
        out_path.write_text(render_digest(_digest_entries(follows, report, new_only), profile), encoding="utf-8")
    except OSError as e:
        format_error(console, f"Cannot write digest to {out_path}: {e}")
        raise typer.Exit(code=1)

    try:
        report.raise_for_failure()
    except FollowError as e:
        if json_flag:
            json_output(console, {"status": "failed", "error": str(e), "failed": e.failed, "digest": str(out_path)})
        else:
            format_error(console, str(e))
        raise typer.Exit(code=1)

    if json_flag:
        json_output(
            console,
            {
                "status": "partial" if report.failed else "ok",
                "total": report.total,
                "new": sorted(report.new),
                "not_modified": report.not_modified,
                "failed": report.failed,
                "digest": str(out_path),
            },
        )
    else:
        if report.failed:
            format_warning(console, f"Failed to get {len(report.failed)}/{report.total} boards")
        else:
            format_success(console, f"Saved {len(report.new)} new boards to {profile_config.boards_dir}")
        format_info(console, f"Published your 'Daily Spring' to: {out_path}")

    if browse:
        if typer.launch(str(out_path)) != 0:
            format_warning(console, "Failed launching a browser")
