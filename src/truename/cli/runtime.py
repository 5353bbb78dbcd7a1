"""Shared runtime bootstrap helpers for CLI entrypoints."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

import typer
from pydantic import ValidationError as ConfigValidationError

from truename.cli.console import error
from truename.config import TrueNameConfig, load_config
from truename.db import Database
from truename.resolution import ResolutionEngine, create_resolution_engine
from truename.store import SqlNameStore


@dataclass(slots=True)
class Runtime:
    """Composed runtime dependencies for CLI command handlers."""

    config: TrueNameConfig
    database: Database
    store: SqlNameStore
    engine: ResolutionEngine


def load_config_or_exit(config_path: Path | None) -> TrueNameConfig:
    """Load configuration, printing the problem and exiting on failure."""
    try:
        return load_config(config_path)
    except FileNotFoundError as e:
        error(str(e))
        raise typer.Exit(1) from None
    except (ConfigValidationError, ValueError) as e:
        error(f"Invalid configuration: {e}")
        raise typer.Exit(1) from None


def build_database(config: TrueNameConfig) -> Database:
    """Create a (not yet connected) Database from configuration."""
    return Database(
        database_url=config.database_url(),
        database_path=config.database.path,
    )


@asynccontextmanager
async def open_runtime(config: TrueNameConfig) -> AsyncIterator[Runtime]:
    """Connect the database and wire the engine for the duration of a command."""
    database = build_database(config)
    await database.connect()
    try:
        store = SqlNameStore(database)
        yield Runtime(
            config=config,
            database=database,
            store=store,
            engine=create_resolution_engine(store, config.resolution),
        )
    finally:
        await database.disconnect()


def configure_command_logging(config: TrueNameConfig) -> None:
    """Set up logging for a one-shot command: quiet console, optional JSONL."""
    from truename.logging import configure_logging

    configure_logging(
        level=config.logging.level or "WARNING",
        log_to_file=config.logging.log_to_file,
    )
