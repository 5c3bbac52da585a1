"""
sdc command-line client.

Built with Typer for type-safe commands and Rich for formatted output.

Usage:
    sdc --help
    sdc profile                      # List profiles, '*' marks the active one
    sdc dcs                          # List configured datacenters
    sdc machines                     # List machines in every datacenter of the profile
    sdc machines state=running -j    # Filtered, as JSON
    sdc -p prod -v machines          # Other profile, debug logging on stderr

Options:
    --verbose, -v     Debug logging (console format, stderr)
    --profile, -p     Profile to use (default: $SDC_PROFILE, then profiles.yaml default)
    --version         Print version and exit
"""

from typing import Optional

import typer

from sdc_cli.cli.commands.dcs import dcs
from sdc_cli.cli.commands.machines import machines
from sdc_cli.cli.commands.profile import profile
from sdc_cli.cli.context import CliState, console, report_error

app = typer.Typer(
    name="sdc",
    help="SmartDataCenter CLI - one view of your machines across every datacenter.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("profile")(profile)
app.command("dcs")(dcs)
app.command("machines")(machines)


def _version_callback(value: bool) -> None:
    if not value:
        return
    try:
        from sdc_cli.core.config import get_app_config

        application = get_app_config().application
        console.print(f"{application.name} {application.version}", highlight=False)
    except (FileNotFoundError, RuntimeError, ValueError):
        console.print("[yellow]unknown[/yellow]")
    raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Verbose/debug output.",
    ),
    profile_name: Optional[str] = typer.Option(
        None,
        "--profile",
        "-p",
        metavar="NAME",
        help="Profile to use (default: $SDC_PROFILE, then the configured default).",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Print version and exit.",
    ),
) -> None:
    """
    SmartDataCenter CLI.

    Queries every datacenter of a profile concurrently and merges the results.
    """
    from sdc_cli.core.logging import setup_logging

    try:
        if verbose:
            setup_logging(level="DEBUG", format_type="console")
        else:
            setup_logging()
    except (FileNotFoundError, RuntimeError, ValueError, KeyError) as e:
        report_error(e)
        raise typer.Exit(1) from e

    ctx.obj = CliState(profile=profile_name, verbose=verbose)


def run() -> None:
    """Console-script entry point."""
    app()


if __name__ == "__main__":
    run()
