"""CLI command modules."""

from truename.cli.commands import audit, config, database, resolve, serve

__all__ = [
    "audit",
    "config",
    "database",
    "resolve",
    "serve",
]
