"""Cycles CLI command - classified call cycles."""

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..context import RunContext
from ..cycles import CyclesAnalysisResult, EnhancedCycleAnalyzer
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

_IMPORTANCE_STYLE = {
    "CRITICAL": "bold red",
    "HIGH": "red",
    "MEDIUM": "yellow",
    "LOW": "dim",
}


@app.command()
def cycles(
    snapshot: Path = snapshot_argument(),
    exclude_recursive: bool = typer.Option(
        False, "--exclude-recursive", help="Drop self-recursive functions"
    ),
    recursive_only: bool = typer.Option(
        False, "--recursive-only", help="Show only self-recursive functions"
    ),
    exclude_clear: bool = typer.Option(
        False, "--exclude-clear", help="Drop cycles through teardown functions such as clear()"
    ),
    min_complexity: Optional[int] = typer.Option(
        None, "--min-complexity", min=1, help="Minimum number of functions in a cycle"
    ),
    cross_layer_only: bool = typer.Option(
        False, "--cross-layer-only", help="Only cycles crossing an architectural layer"
    ),
    cross_module_only: bool = typer.Option(
        False, "--cross-module-only", help="Only cycles crossing a module"
    ),
    max_length: Optional[int] = typer.Option(
        None, "--max-length", min=1, help="Longest cycle to search for"
    ),
    max_cycles: Optional[int] = typer.Option(
        None, "--max-cycles", min=1, help="Stop after this many cycles"
    ),
    limit: int = typer.Option(20, "--limit", "-n", min=1, help="Rows to display"),
    fmt: OutputFormat = format_option(),
    config: Optional[Path] = config_option(),
    verbose: bool = verbose_option(),
    quiet: bool = quiet_option(),
):
    """
    List call cycles, classified and ranked by architectural impact.

    [bold cyan]Examples:[/bold cyan]

      deadwood cycles snapshot.json

      deadwood cycles snapshot.json --exclude-recursive --cross-layer-only

      deadwood cycles snapshot.json --format json
    """
    with cli_errors("cycles", verbose=verbose, quiet=quiet):
        settings = resolve_config(
            config,
            cycles={
                "exclude_recursive": exclude_recursive or None,
                "recursive_only": recursive_only or None,
                "exclude_clear": exclude_clear or None,
                "min_complexity": min_complexity,
                "cross_layer_only": cross_layer_only or None,
                "cross_module_only": cross_module_only or None,
                "max_length": max_length,
                "max_cycles": max_cycles,
            },
        )
        data = load_snapshot(snapshot)
        analyzer = EnhancedCycleAnalyzer(RunContext(snapshot_id=data.id))
        result = analyzer.analyze_classified_cycles(data.edges, data.functions, settings.cycles)

        if fmt is OutputFormat.JSON:
            print_json(_to_json(result))
        else:
            _output_rich(result, limit)


def _to_json(result: CyclesAnalysisResult) -> dict:
    return {
        "total_cycles": result.total_cycles,
        "filtered_cycles": result.filtered_cycles,
        "truncated": result.truncated,
        "importance_summary": result.importance_summary,
        "filter_stats": {
            "exclude_recursive": result.filter_stats.exclude_recursive,
            "recursive_only": result.filter_stats.recursive_only,
            "exclude_clear": result.filter_stats.exclude_clear,
            "min_complexity": result.filter_stats.min_complexity,
            "cross_layer_only": result.filter_stats.cross_layer_only,
            "cross_module_only": result.filter_stats.cross_module_only,
        },
        "cycles": [
            {
                "id": c.id,
                "nodes": c.nodes,
                "names": c.node_names,
                "type": c.type.value,
                "importance": c.importance.value,
                "score": c.score,
                "cross_file": c.cross_file,
                "cross_module": c.cross_module,
                "cross_layer": c.cross_layer,
                "files": c.files,
                "modules": c.modules,
                "layers": c.layers,
                "cyclomatic_complexity": c.cyclomatic_complexity,
                "recommendations": c.recommendations,
            }
            for c in result.classified_cycles
        ],
    }


def _scope(cycle) -> str:
    if cycle.cross_layer:
        return "layer"
    if cycle.cross_module:
        return "module"
    return "file" if cycle.cross_file else "local"


def _output_rich(result: CyclesAnalysisResult, limit: int) -> None:
    console.print()
    console.print(
        f"[bold cyan]CALL CYCLES[/bold cyan] -- {result.filtered_cycles} shown "
        f"of {result.total_cycles} found"
    )
    if result.truncated:
        console.print("[yellow]Search stopped at a limit; more cycles may exist.[/yellow]")
    if result.filter_stats.total_excluded:
        console.print(f"[dim]{result.filter_stats.total_excluded} excluded by filters[/dim]")
    console.print()

    if not result.classified_cycles:
        console.print("[green]No cycles.[/green]")
        return

    table = Table(show_header=True, show_lines=False, pad_edge=True)
    table.add_column("Score", justify="right")
    table.add_column("Importance")
    table.add_column("Type")
    table.add_column("Cycle", min_width=30)
    table.add_column("Scope")

    for c in result.classified_cycles[:limit]:
        style = _IMPORTANCE_STYLE[c.importance.value]
        path = " -> ".join(c.node_names + c.node_names[:1])
        table.add_row(
            f"{c.score:.1f}",
            f"[{style}]{c.importance.value}[/{style}]",
            c.type.value,
            path,
            _scope(c),
        )
    console.print(table)

    if len(result.classified_cycles) > limit:
        console.print(f"[dim]... {len(result.classified_cycles) - limit} more[/dim]")

    top = result.classified_cycles[0]
    if top.recommendations:
        console.print()
        console.print(f"[bold]Top cycle ({top.id}):[/bold]")
        for rec in top.recommendations:
            console.print(f"  - {rec}")
