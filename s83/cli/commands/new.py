"""Mine a new creator keypair."""

import time

import typer
from rich.console import Console

from s83.cli.output import format_error, format_success, json_output
from s83.cli.utils import ConfigManager, validate_jobs
from s83.protocol import mine

console = Console()


def new_command(
    profile: str,
    jobs: int = 1,
    save: bool = False,
    force: bool = False,
    json_flag: bool = False,
) -> None:
    """Mine a creator key whose public half carries a valid expiry suffix.

    Mining is a brute-force search and may take a long time; more jobs
    search in parallel.
    """
    try:
        jobs = validate_jobs(jobs)
    except ValueError as e:
        format_error(console, str(e))
        raise typer.Exit(code=2)

    config = ConfigManager(profile)
    if save and config.has_creator() and not force:
        format_error(
            console,
            f"Creator key already exists at {config.key_path}",
            hint="Use --force to overwrite the existing key",
        )
        raise typer.Exit(code=1)

    if not json_flag:
        console.print(f"[cyan]Generating a new creator key with {jobs} miners. Please be patient.[/cyan]")

    start = time.monotonic()
    result = mine(jobs)
    elapsed = max(time.monotonic() - start, 1e-6)
    kps = int(result.attempts / elapsed)

    if save:
        config.save_creator(result.creator)

    if json_flag:
        data = {
            "status": "mined",
            "public": str(result.creator),
            "attempts": result.attempts,
            "seconds": round(elapsed, 3),
        }
        if save:
            data["key_path"] = str(config.key_path)
        else:
            data["secret"] = result.creator.export_private_key()
        json_output(console, data)
        return

    format_success(
        console,
        f"Found a valid key in {result.attempts} iterations over {int(elapsed)} seconds ({kps} kps)",
    )
    console.print("The public key is your creator id. Share it!")
    console.print(f"[cyan]public:[/cyan] {result.creator}")
    if save:
        console.print(f"[cyan]saved:[/cyan]  {config.key_path}")
    else:
        console.print("[yellow]The secret key is SECRET. Do not share it or lose it.[/yellow]")
        console.print(f"[cyan]secret:[/cyan] {result.creator.export_private_key()}")
