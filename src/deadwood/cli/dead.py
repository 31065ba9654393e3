"""Dead CLI command - functions unreachable from every entry point."""

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..graph import (
    DeadCodeInfo,
    EntryPointDetector,
    ReachabilityResult,
    analyze_reachability,
    build_call_graph,
    get_dead_code_info,
)
from ..snapshot import load_snapshot
from . import app
from ._common import (
    OutputFormat,
    cli_errors,
    console,
    format_option,
    print_json,
    quiet_option,
    snapshot_argument,
    verbose_option,
)


@app.command()
def dead(
    snapshot: Path = snapshot_argument(),
    exclude_tests: bool = typer.Option(
        False, "--exclude-tests", help="Ignore test files as roots and as results"
    ),
    min_size: int = typer.Option(0, "--min-size", min=0, help="Minimum function size in lines"),
    fmt: OutputFormat = format_option(),
    verbose: bool = verbose_option(),
    quiet: bool = quiet_option(),
):
    """
    List unreachable functions.

    [bold cyan]Examples:[/bold cyan]

      deadwood dead snapshot.json

      deadwood dead snapshot.json --exclude-tests --min-size 5
    """
    with cli_errors("dead", verbose=verbose, quiet=quiet):
        data = load_snapshot(snapshot)
        graph = build_call_graph(data.functions, data.edges)
        functions = list(graph.functions.values())

        entry_ids = EntryPointDetector(exclude_tests=exclude_tests).detect_ids(
            functions, graph.edges
        )
        result = analyze_reachability(functions, graph.edges, entry_ids)
        info = get_dead_code_info(
            result.unreachable,
            functions,
            graph.edges,
            exclude_tests=exclude_tests,
            min_function_size=min_size,
        )

        if fmt is OutputFormat.JSON:
            print_json(_to_json(result, info))
        else:
            _output_rich(result, info)


def _to_json(result: ReachabilityResult, info: list[DeadCodeInfo]) -> dict:
    return {
        "entry_points": len(result.entry_points),
        "reachable": len(result.reachable),
        "unreachable": len(result.unreachable),
        "unused_exports": sorted(result.unused_exports),
        "dead_code": [
            {
                "function_id": d.function_id,
                "name": d.function_name,
                "file": d.file_path,
                "start_line": d.start_line,
                "end_line": d.end_line,
                "size": d.size,
                "reason": d.reason.value,
            }
            for d in info
        ],
    }


def _output_rich(result: ReachabilityResult, info: list[DeadCodeInfo]) -> None:
    console.print()
    console.print(
        f"[bold cyan]DEAD CODE[/bold cyan] -- {len(result.unreachable)} unreachable, "
        f"{len(result.reachable)} reachable from {len(result.entry_points)} entry point(s)"
    )
    console.print()

    if not info:
        console.print("[green]No dead code found.[/green]")
        return

    table = Table(show_header=True)
    table.add_column("Function", min_width=24)
    table.add_column("Location")
    table.add_column("Lines", justify="right")
    table.add_column("Reason")
    for d in info:
        table.add_row(
            d.function_name, f"{d.file_path}:{d.start_line}", str(d.size), d.reason.value
        )
    console.print(table)
    console.print(f"[dim]{sum(d.size for d in info)} line(s) in {len(info)} function(s)[/dim]")
