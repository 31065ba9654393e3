"""Safe-delete CLI command - preview or remove dead functions with rollback."""

from dataclasses import replace
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..context import RunContext
from ..deletion import CommandValidator, SafeDeletionResult, SafeDeletionSystem, ValidationRecord
from ..snapshot import load_snapshot
from . import app
from ._common import (
    OutputFormat,
    cli_errors,
    config_option,
    console,
    format_option,
    print_json,
    quiet_option,
    resolve_config,
    snapshot_argument,
    verbose_option,
)


@app.command("safe-delete")
def safe_delete(
    snapshot: Path = snapshot_argument(),
    execute: bool = typer.Option(
        False, "--execute", help="Modify files (default is a preview)"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Force a preview even with --execute"),
    root: Path = typer.Option(
        Path("."),
        "--root",
        help="Directory snapshot file paths are relative to",
        exists=True,
        file_okay=False,
        dir_okay=True,
    ),
    confidence_threshold: Optional[float] = typer.Option(
        None,
        "--confidence-threshold",
        min=0.0,
        max=1.0,
        help="Call edges below this confidence do not keep their callee alive",
    ),
    min_confidence: Optional[float] = typer.Option(
        None, "--min-confidence", min=0.0, max=1.0, help="Minimum candidate confidence"
    ),
    max_batch: Optional[int] = typer.Option(
        None, "--max-batch", min=1, help="Functions deleted and validated together"
    ),
    include_exports: bool = typer.Option(
        False, "--include-exports", help="Also delete unused exported functions"
    ),
    include_static_methods: bool = typer.Option(
        False, "--include-static-methods", help="Also delete unused static methods"
    ),
    exclude_tests: bool = typer.Option(
        False, "--exclude-tests", help="Never delete functions in test files"
    ),
    exclude: Optional[list[str]] = typer.Option(
        None, "--exclude", help="Glob pattern of paths to leave alone (repeatable)"
    ),
    type_check_cmd: Optional[str] = typer.Option(
        None, "--type-check-cmd", help="Command run as the type check after each batch"
    ),
    test_cmd: Optional[str] = typer.Option(
        None, "--test-cmd", help="Command run as the test suite after each batch"
    ),
    timeout: Optional[int] = typer.Option(
        None, "--timeout", min=1, help="Per-command validation timeout in seconds"
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    fmt: OutputFormat = format_option(),
    config: Optional[Path] = config_option(),
    verbose: bool = verbose_option(),
    quiet: bool = quiet_option(),
):
    """
    Find dead functions and delete them in validated, reversible batches.

    Without [bold]--execute[/bold] nothing is modified. With it, every touched
    file is backed up first; a batch that breaks the type check or tests is
    rolled back while other batches are kept.

    [bold cyan]Examples:[/bold cyan]

      deadwood safe-delete snapshot.json

      deadwood safe-delete snapshot.json --execute --test-cmd "pytest -x -q"

      deadwood restore .deadwood/backups/safe-deletion-20260101T120000000000Z
    """
    with cli_errors("safe-delete", verbose=verbose, quiet=quiet):
        settings = resolve_config(
            config,
            deletion={
                "confidence_threshold": confidence_threshold,
                "candidate_min_confidence": min_confidence,
                "max_functions_per_batch": max_batch,
                "include_exports": include_exports or None,
                "include_static_methods": include_static_methods or None,
                "exclude_tests": exclude_tests or None,
                "type_check_command": type_check_cmd,
                "test_command": test_cmd,
                "validation_timeout_seconds": timeout,
            },
        )
        options = settings.deletion
        if exclude:
            options = replace(options, exclude_patterns=options.exclude_patterns + tuple(exclude))

        data = load_snapshot(snapshot)
        store = data.type_store()
        root = root.resolve()

        preview = SafeDeletionSystem(
            store=store,
            options=replace(options, execute=False, dry_run=False),
            root=root,
            context=RunContext(snapshot_id=data.id),
        ).run(data.functions, data.edges, data.id)

        if not execute or dry_run or not preview.candidate_functions:
            _emit(preview, fmt)
            return

        if fmt is OutputFormat.RICH:
            _output_rich(preview)
        if not yes:
            typer.confirm(
                f"Delete {len(preview.candidate_functions)} function(s) under {root}?",
                abort=True,
            )

        validator = CommandValidator(
            options.type_check_command,
            options.test_command,
            cwd=root,
            timeout_seconds=options.validation_timeout_seconds,
        )
        result = SafeDeletionSystem(
            store=store,
            validator=validator,
            options=replace(options, execute=True, dry_run=False),
            root=root,
            context=RunContext(snapshot_id=data.id),
        ).run(data.functions, data.edges, data.id)

        if fmt is OutputFormat.JSON:
            print_json(_to_json(result))
        else:
            _output_summary(result)
        if result.errors:
            raise typer.Exit(1)


def _emit(result: SafeDeletionResult, fmt: OutputFormat) -> None:
    if fmt is OutputFormat.JSON:
        print_json(_to_json(result))
    else:
        _output_rich(result)


def _validation_json(record: Optional[ValidationRecord]) -> Optional[dict]:
    return record.to_dict() if record is not None else None


def _to_json(result: SafeDeletionResult) -> dict:
    return {
        "preview": result.preview,
        "candidates": [
            {
                "function_id": c.function_id,
                "name": c.function_info.name,
                "file": c.function_info.file_path,
                "start_line": c.function_info.start_line,
                "end_line": c.function_info.end_line,
                "reason": c.reason.value,
                "confidence": c.confidence_score,
                "callers": c.callers_count,
                "impact": c.estimated_impact.value,
            }
            for c in result.candidate_functions
        ],
        "protected": [
            {
                "function_id": p.function_info.id,
                "name": p.function_info.name,
                "confidence": p.confidence_score,
                "reason": p.protection_reason,
            }
            for p in result.protected_functions
        ],
        "deleted": [c.function_id for c in result.deleted_functions],
        "skipped": [c.function_id for c in result.skipped_functions],
        "batches": [
            {
                "index": b.index,
                "functions": b.function_ids,
                "committed": b.committed,
                "validation": _validation_json(b.validation),
                "error": b.error,
            }
            for b in result.batches
        ],
        "pre_delete_validation": _validation_json(result.pre_delete_validation),
        "post_delete_validation": _validation_json(result.post_delete_validation),
        "backup_path": result.backup_path,
        "errors": result.errors,
        "warnings": result.warnings,
    }


def _output_rich(result: SafeDeletionResult) -> None:
    console.print()
    console.print(
        f"[bold cyan]SAFE DELETE[/bold cyan] -- {len(result.candidate_functions)} candidate(s)"
        + (" [dim](preview)[/dim]" if result.preview else "")
    )
    console.print()

    if result.candidate_functions:
        table = Table(show_header=True)
        table.add_column("Function", min_width=24)
        table.add_column("Location")
        table.add_column("Reason")
        table.add_column("Confidence", justify="right")
        table.add_column("Impact")
        for c in result.candidate_functions:
            fn = c.function_info
            table.add_row(
                fn.name,
                f"{fn.file_path}:{fn.start_line}-{fn.end_line}",
                c.reason.value,
                f"{c.confidence_score:.2f}",
                c.estimated_impact.value,
            )
        console.print(table)
    else:
        console.print("[green]Nothing to delete.[/green]")

    if result.protected_functions:
        console.print()
        console.print(
            f"[bold]Protected by type contracts ({len(result.protected_functions)}):[/bold]"
        )
        for p in result.protected_functions:
            console.print(
                f"  - {p.function_info.name} [dim]{p.confidence_score:.2f}[/dim] "
                f"{p.protection_reason or ''}"
            )
    for warning in result.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")

    if result.preview and result.candidate_functions:
        console.print()
        console.print("[dim]Run again with --execute to delete these functions.[/dim]")


def _check_label(passed: Optional[bool]) -> str:
    if passed is None:
        return "[dim]n/a[/dim]"
    return "[green]passed[/green]" if passed else "[red]failed[/red]"


def _output_summary(result: SafeDeletionResult) -> None:
    console.print()
    for batch in result.batches:
        status = "[green]committed[/green]" if batch.committed else "[red]rolled back[/red]"
        line = f"  Batch {batch.index + 1}: {len(batch.function_ids)} function(s) {status}"
        if batch.validation is not None:
            line += (
                f"  type check {_check_label(batch.validation.type_check_passed)}"
                f"  tests {_check_label(batch.validation.tests_passed)}"
            )
        console.print(line)

    console.print()
    console.print(
        f"[bold]Deleted {len(result.deleted_functions)}[/bold], "
        f"skipped {len(result.skipped_functions)}"
    )
    for warning in result.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")
    for error in result.errors:
        console.print(f"[red]Error:[/red] {error}")
    if result.backup_path:
        console.print(f"Backup: {result.backup_path}")
        console.print(f"[dim]Undo with: deadwood restore {result.backup_path}[/dim]")
