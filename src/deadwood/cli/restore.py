"""Restore CLI command - undo a safe-delete run from its backup."""

from pathlib import Path

import typer

from ..deletion import SafeDeletionSystem
from . import app
from ._common import cli_errors, console, quiet_option, verbose_option


@app.command()
def restore(
    backup_path: Path = typer.Argument(
        ..., help="Backup directory printed by safe-delete", exists=True, file_okay=False
    ),
    force: bool = typer.Option(False, "--force", help="Restore a backup that was already used"),
    verbose: bool = verbose_option(),
    quiet: bool = quiet_option(),
):
    """
    Restore every file in a backup to its exact pre-deletion bytes.

    [bold cyan]Examples:[/bold cyan]

      deadwood restore .deadwood/backups/safe-deletion-20260101T120000000000Z
    """
    with cli_errors("restore", verbose=verbose, quiet=quiet):
        restored = SafeDeletionSystem().restore_from_backup(backup_path, force=force)
        console.print(f"[green]Restored {len(restored)} file(s)[/green] from {backup_path}")
        for path in restored:
            console.print(f"  {path}")
