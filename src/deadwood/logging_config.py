"""
Logging for deadwood runs.

Log records go to stderr through rich, so ``--format json`` output on stdout
can be piped straight into other tools. Every module logs under the
``deadwood`` namespace; library users who never call ``setup_logging`` get
the standard library's default handling.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

_ROOT = "deadwood"


def log_level(verbose: bool = False, quiet: bool = False) -> int:
    """Map the CLI's ``--verbose``/``--quiet`` flags to a level; quiet wins."""
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.WARNING


def setup_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """
    Route deadwood logs to a rich stderr handler.

    Skipped candidates, rollbacks and storage failures log at WARNING, so
    they show by default. Verbose mode adds per-function scoring detail,
    source paths and locals in tracebacks.

    Args:
        verbose: Log at DEBUG
        quiet: Log only errors

    Returns:
        The ``deadwood`` package logger
    """
    level = log_level(verbose, quiet)

    # Paths and snippets in messages may contain "[...]"; never read them as markup
    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        markup=False,
        show_time=True,
        show_path=verbose,
    )

    # force: each CLI invocation in one process starts from a clean root
    logging.basicConfig(
        level=level, format="%(message)s", datefmt="[%X]", handlers=[handler], force=True
    )

    logger = logging.getLogger(_ROOT)
    logger.setLevel(level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger for ``name`` under the ``deadwood`` namespace (the root when omitted)."""
    if name is None:
        return logging.getLogger(_ROOT)
    if not name.startswith(_ROOT):
        name = f"{_ROOT}.{name}"
    return logging.getLogger(name)
