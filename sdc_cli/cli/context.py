"""
CLI Context.

Per-invocation state shared by all commands (global options and the lazily
built SmartDataCenter) and the error boundary every command runs inside.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

import typer
from rich.console import Console
from rich.markup import escape

from sdc_cli.core.exceptions import ApplicationError
from sdc_cli.core.logging import get_logger, log_with_source
from sdc_cli.sdc import SmartDataCenter

logger = get_logger(__name__)

console = Console()
err_console = Console(stderr=True)


@dataclass
class CliState:
    """Global options, plus the SmartDataCenter built on first use."""

    profile: str | None = None
    verbose: bool = False
    _sdc: SmartDataCenter | None = field(default=None, repr=False)

    @property
    def sdc(self) -> SmartDataCenter:
        if self._sdc is None:
            self._sdc = SmartDataCenter(profile_name=self.profile)
        return self._sdc


def get_state(ctx: typer.Context) -> CliState:
    """Return the CliState stored by the main callback (a default one if absent)."""
    if not isinstance(ctx.obj, CliState):
        ctx.obj = CliState()
    return ctx.obj


def report_error(err: BaseException, verbose: bool = False) -> None:
    """Print an error to stderr the way every command does.

    ``verbose`` adds the traceback; only pass it from inside an except block.
    """
    err_console.print(f"[red]Error: {escape(str(err))}[/red]")
    if verbose:
        err_console.print_exception()


@contextmanager
def cli_errors(state: CliState, command: str) -> Iterator[None]:
    """
    Command error boundary.

    Application and configuration errors become a red one-line message on
    stderr and exit code 1. Tracebacks are shown only with --verbose.
    """
    try:
        yield
    except (ApplicationError, ValueError, FileNotFoundError, RuntimeError) as e:
        log_with_source(logger, "cli", "debug", "Command failed", command=command, error=str(e))
        report_error(e, state.verbose)
        raise typer.Exit(1) from e
