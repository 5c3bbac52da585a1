"""Core infrastructure: config, logging, exceptions, concurrency, resilience."""
