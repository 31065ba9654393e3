"""CLI entry point - registers all subcommands."""

import typer

from .. import __version__

app = typer.Typer(
    name="deadwood",
    help=f"deadwood {__version__} - call-graph reachability, cycles and safe dead-code deletion",
    add_completion=False,
    rich_markup_mode="rich",
)


# Import subcommands to register them
from .cycles import cycles as _cycles  # noqa: F401, E402
from .stats import stats as _stats  # noqa: F401, E402
from .dead import dead as _dead  # noqa: F401, E402
from .safe_delete import safe_delete as _safe_delete  # noqa: F401, E402
from .restore import restore as _restore  # noqa: F401, E402


def main() -> None:
    app()
