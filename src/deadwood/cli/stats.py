"""Stats CLI command - fan-in/fan-out metrics, hubs and utilities."""

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..graph import (
    DependencyMetrics,
    DependencyMetricsCalculator,
    DependencyStats,
    EntryPointDetector,
    build_call_graph,
    cyclic_function_ids,
)
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


@app.command()
def stats(
    snapshot: Path = snapshot_argument(),
    hub_threshold: Optional[int] = typer.Option(
        None, "--hub-threshold", min=1, help="Fan-in at which a function is a hub"
    ),
    utility_threshold: Optional[int] = typer.Option(
        None, "--utility-threshold", min=1, help="Fan-out at which a function is a utility"
    ),
    max_hubs: Optional[int] = typer.Option(None, "--max-hubs", min=0, help="Hubs to list"),
    max_utilities: Optional[int] = typer.Option(
        None, "--max-utilities", min=0, help="Utilities to list"
    ),
    exclude_tests: bool = typer.Option(
        False, "--exclude-tests", help="Do not treat test functions as entry points"
    ),
    fmt: OutputFormat = format_option(),
    config: Optional[Path] = config_option(),
    verbose: bool = verbose_option(),
    quiet: bool = quiet_option(),
):
    """
    Show dependency metrics: averages, hubs, utilities and isolated functions.

    [bold cyan]Examples:[/bold cyan]

      deadwood stats snapshot.json

      deadwood stats snapshot.json --hub-threshold 10 --format json
    """
    with cli_errors("stats", verbose=verbose, quiet=quiet):
        settings = resolve_config(
            config,
            metrics={
                "hub_threshold": hub_threshold,
                "utility_threshold": utility_threshold,
                "max_hub_functions": max_hubs,
                "max_utility_functions": max_utilities,
            },
        )
        data = load_snapshot(snapshot)
        graph = build_call_graph(data.functions, data.edges)
        functions = list(graph.functions.values())

        entry_ids = EntryPointDetector(exclude_tests=exclude_tests).detect_ids(
            functions, graph.edges
        )
        calculator = DependencyMetricsCalculator()
        metrics = calculator.calculate_metrics(
            functions, graph.edges, entry_ids, cyclic_function_ids(graph.edges)
        )
        summary = calculator.generate_stats(metrics, settings.metrics, entry_ids)

        if fmt is OutputFormat.JSON:
            print_json(_to_json(summary, metrics))
        else:
            _output_rich(summary, metrics)


def _metric_json(m: DependencyMetrics) -> dict:
    return {
        "function_id": m.function_id,
        "name": m.function_name,
        "file": m.file_path,
        "fan_in": m.fan_in,
        "fan_out": m.fan_out,
        "total_callers": m.total_callers,
        "total_calls": m.total_calls,
        "depth_from_entry": m.depth_from_entry,
        "max_call_chain": m.max_call_chain,
        "is_cyclic": m.is_cyclic,
        "is_recursive": m.is_recursive,
    }


def _to_json(summary: DependencyStats, metrics: list[DependencyMetrics]) -> dict:
    return {
        "total_functions": summary.total_functions,
        "avg_fan_in": round(summary.avg_fan_in, 4),
        "avg_fan_out": round(summary.avg_fan_out, 4),
        "max_fan_in": summary.max_fan_in,
        "max_fan_out": summary.max_fan_out,
        "hub_functions": [m.function_id for m in summary.hub_functions],
        "utility_functions": [m.function_id for m in summary.utility_functions],
        "isolated_functions": [m.function_id for m in summary.isolated_functions],
        "metrics": [_metric_json(m) for m in metrics],
    }


def _ranked_table(title: str, rows: list[DependencyMetrics], column: str) -> Table:
    table = Table(title=title, show_header=True, title_justify="left")
    table.add_column("Function", min_width=24)
    table.add_column("File")
    table.add_column(column, justify="right")
    table.add_column("Depth", justify="right")
    for m in rows:
        value = m.fan_in if column == "Fan-in" else m.fan_out
        depth = str(m.depth_from_entry) if m.depth_from_entry >= 0 else "-"
        table.add_row(m.function_name, m.file_path, str(value), depth)
    return table


def _output_rich(summary: DependencyStats, metrics: list[DependencyMetrics]) -> None:
    console.print()
    console.print(f"[bold cyan]DEPENDENCY STATS[/bold cyan] -- {summary.total_functions} functions")
    console.print()
    console.print(
        f"  Fan-in   avg {summary.avg_fan_in:.2f}  max {summary.max_fan_in}\n"
        f"  Fan-out  avg {summary.avg_fan_out:.2f}  max {summary.max_fan_out}"
    )
    cyclic = sum(1 for m in metrics if m.is_cyclic)
    if cyclic:
        console.print(f"  [yellow]{cyclic} function(s) on a call cycle[/yellow]")
    console.print()

    if summary.hub_functions:
        console.print(_ranked_table("Hub functions", summary.hub_functions, "Fan-in"))
        console.print()
    if summary.utility_functions:
        console.print(_ranked_table("Utility functions", summary.utility_functions, "Fan-out"))
        console.print()
    if summary.isolated_functions:
        console.print(f"[bold]Isolated functions ({len(summary.isolated_functions)}):[/bold]")
        for m in summary.isolated_functions:
            console.print(f"  - {m.function_name} [dim]{m.file_path}[/dim]")
