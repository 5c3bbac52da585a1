"""
Machine Commands.

Lists machines from every datacenter of the active profile at once. Each
datacenter is queried concurrently; records from datacenters that answer
are shown even when others fail, and the failures are reported on stderr.
"""

from typing import Optional

import typer
from rich.markup import escape

from sdc_cli.cli.context import cli_errors, console, err_console, get_state, report_error
from sdc_cli.cli.output import check_fields, print_json, split_fields, tabulate
from sdc_cli.core.logging import get_logger, log_with_source
from sdc_cli.fanout.consumer import collect
from sdc_cli.schemas.machine import MACHINE_FIELDS
from sdc_cli.schemas.query import MachineQuery

logger = get_logger(__name__)

DEFAULT_COLUMNS = "dc,id,name,state,created"
DEFAULT_SORT = "created"


def machines(
    ctx: typer.Context,
    filters: Optional[list[str]] = typer.Argument(
        None, help="Filters as key=value (name, state, image, type, brand, memory, tag.<name>, ...).",
    ),
    json_output: bool = typer.Option(False, "--json", "-j", help="JSON output."),
    columns: str = typer.Option(DEFAULT_COLUMNS, "--columns", "-o", help="Comma-separated columns to show."),
    sort: str = typer.Option(DEFAULT_SORT, "--sort", "-s", help="Comma-separated fields to sort by."),
    allow_partial: bool = typer.Option(
        False, "--allow-partial", help="Exit 0 when exactly one of several datacenters fails.",
    ),
) -> None:
    """
    List machines across all datacenters of the profile.

    Examples:
        sdc machines
        sdc machines state=running
        sdc machines -o dc,name,primary_ip -s dc,name
        sdc machines --json tag.role=db
    """
    state = get_state(ctx)
    with cli_errors(state, "machines"):
        query = MachineQuery.from_args(filters or [])
        if not json_output:
            check_fields("column", split_fields(columns), MACHINE_FIELDS)
            check_fields("sort", split_fields(sort), MACHINE_FIELDS)

        result = collect(state.sdc.list_machines(query))
        rows = [tagged.as_dict(by_alias=json_output) for tagged in result.records]

        if json_output:
            print_json(console, rows)
        else:
            console.print(tabulate(rows, columns, sort=sort, valid_fields=MACHINE_FIELDS))

        log_with_source(
            logger, "cli", "info", "Machines listed",
            records=len(rows), succeeded=result.succeeded, failed=result.failed,
        )

    err = result.error(single_failure_fatal=not allow_partial)
    if err is not None:
        report_error(err)
        raise typer.Exit(1)
    for dc_err in result.errors:
        err_console.print(f"[yellow]Warning: {escape(str(dc_err))}[/yellow]")
