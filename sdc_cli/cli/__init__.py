"""
CLI Client Module.

Command-line client built with Typer and Rich.

Architecture:
- CLI is a thin presentation layer
- Fan-out and per-DC logic live in sdc_cli.fanout and sdc_cli.cloudapi
- Commands reach them through sdc_cli.sdc.SmartDataCenter
- Tables and JSON go to stdout; errors and logs go to stderr

Usage:
    sdc --help
    sdc machines
"""
