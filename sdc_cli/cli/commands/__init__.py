"""
CLI Commands.

One module per command, registered on the Typer app in sdc_cli.cli.main.
"""
