"""
Datacenter Commands.
"""

import typer

from sdc_cli.cli.context import cli_errors, console, get_state
from sdc_cli.cli.output import print_json, tabulate
from sdc_cli.schemas.datacenter import Datacenter

DC_COLUMNS = ("name", "url")


def dcs(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", "-j", help="JSON output."),
) -> None:
    """
    List configured datacenters.

    Examples:
        sdc dcs
        sdc dcs --json
    """
    state = get_state(ctx)
    with cli_errors(state, "dcs"):
        rows = [
            Datacenter(name=name, url=url).model_dump()
            for name, url in sorted(state.sdc.datacenters.items())
        ]

        if json_output:
            print_json(console, rows)
        else:
            console.print(tabulate(rows, DC_COLUMNS, sort="name", valid_fields=DC_COLUMNS))
