"""
sdc_cli

Command-line client for a CloudAPI replicated across several datacenters.

- core/: configuration, logging, errors, concurrency, retries
- schemas/: pydantic records and queries
- cloudapi/: per-datacenter HTTP client
- fanout/: concurrent multi-datacenter query aggregator
- cli/: Typer commands and Rich output
"""
