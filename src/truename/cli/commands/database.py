"""Database management commands.

Provides commands for:
- init: create any missing tables
- status: show connection details and row counts
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from truename.cli.console import console, create_table, error, success

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration file",
    ),
]


def register(app: typer.Typer) -> None:
    """Register the db command group."""
    db_app = typer.Typer(help="Database management commands")

    @db_app.command("init")
    def db_init(config: ConfigOption = None) -> None:
        """Create the identity and audit tables."""
        from truename.cli.runtime import build_database, load_config_or_exit

        truename_config = load_config_or_exit(config)
        database = build_database(truename_config)

        async def run() -> None:
            await database.connect()
            try:
                await database.create_tables()
            finally:
                await database.disconnect()

        try:
            asyncio.run(run())
        except (SQLAlchemyError, OSError) as e:
            error(f"Failed to create tables: {e}")
            raise typer.Exit(1) from None
        success("Database initialized")

    @db_app.command("status")
    def db_status(config: ConfigOption = None) -> None:
        """Show the database location and table row counts."""
        from truename.cli.runtime import build_database, load_config_or_exit
        from truename.db.models import Base
        from truename.logging import redact

        truename_config = load_config_or_exit(config)
        database = build_database(truename_config)

        async def run() -> dict[str, int]:
            await database.connect()
            try:
                counts: dict[str, int] = {}
                async with database.session() as session:
                    for table in Base.metadata.sorted_tables:
                        result = await session.execute(
                            select(func.count()).select_from(table)
                        )
                        counts[table.name] = result.scalar_one()
                return counts
            finally:
                await database.disconnect()

        console.print(f"[bold]Database:[/bold] {redact(database.url)}")
        try:
            counts = asyncio.run(run())
        except (SQLAlchemyError, OSError) as e:
            error(f"Database unavailable: {e}")
            console.print("Run 'truename db init' to create the tables")
            raise typer.Exit(1) from None

        table = create_table("Tables", [("Table", "cyan"), ("Rows", "green")])
        for name, count in counts.items():
            table.add_row(name, str(count))
        console.print(table)

    app.add_typer(db_app, name="db")
