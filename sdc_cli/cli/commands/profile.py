"""
Profile Commands.

List the configured account profiles and mark the active one.
"""

import typer

from sdc_cli.cli.context import cli_errors, console, get_state
from sdc_cli.cli.output import print_json, tabulate
from sdc_cli.schemas.datacenter import ProfileView

PROFILE_COLUMNS = ("curr", "name", "dcs", "user", "key_id")


def profile(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", "-j", help="JSON output."),
) -> None:
    """
    List account profiles.

    The active profile is marked with '*'. A profile without a datacenter
    list queries every configured datacenter ('all').

    Examples:
        sdc profile
        sdc -p prod profile --json
    """
    state = get_state(ctx)
    with cli_errors(state, "profile"):
        sdc = state.sdc
        rows = [
            ProfileView(
                curr="*" if p.name == sdc.profile.name else " ",
                name=p.name,
                dcs="all" if p.dcs is None else ",".join(p.dcs),
                user=p.user,
                key_id=p.key_id,
            ).model_dump()
            for p in sdc.profiles
        ]

        if json_output:
            print_json(console, rows)
        else:
            console.print(tabulate(rows, PROFILE_COLUMNS, sort="name,user", valid_fields=PROFILE_COLUMNS))
