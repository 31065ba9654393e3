"""Shared CLI helpers."""

import json
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Any, Iterator, Optional

import typer
from rich.console import Console
from rich.markup import escape

from ..config import DeadwoodConfig, load_config
from ..exceptions import DeadwoodError
from ..logging_config import setup_logging

console = Console()


class OutputFormat(str, Enum):
    RICH = "rich"
    JSON = "json"


def snapshot_argument() -> Any:
    return typer.Argument(
        ...,
        help="Snapshot JSON produced by the extraction pass",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    )


def format_option() -> Any:
    return typer.Option(
        OutputFormat.RICH, "--format", "-f", help="Output format", case_sensitive=False
    )


def config_option() -> Any:
    return typer.Option(
        None,
        "--config",
        "-c",
        help="TOML config file (default: ./deadwood.toml when present)",
        exists=True,
        dir_okay=False,
    )


def verbose_option() -> Any:
    return typer.Option(False, "--verbose", "-v", help="Enable DEBUG logging")


def quiet_option() -> Any:
    return typer.Option(False, "--quiet", "-q", help="Only log errors")


def resolve_config(config: Optional[Path] = None, **sections: dict) -> DeadwoodConfig:
    """Build config from CLI options; ``None`` option values keep file/env settings."""
    return load_config(config_file=config, **sections)


def print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))


@contextmanager
def cli_errors(command: str, verbose: bool = False, quiet: bool = False) -> Iterator[Any]:
    """Configure logging and turn deadwood errors into exit status 1."""
    logger = setup_logging(verbose=verbose, quiet=quiet)
    try:
        yield logger

    except (typer.Exit, typer.Abort):
        raise

    except DeadwoodError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    except KeyboardInterrupt:
        logger.info(f"{command} interrupted by user")
        console.print("\n[yellow]Interrupted[/yellow]")
        raise typer.Exit(130)

    except Exception as e:
        logger.exception(f"Unexpected error during {command}")
        console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
        if verbose:
            console.print_exception()
        raise typer.Exit(1)
