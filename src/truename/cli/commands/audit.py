"""Audit log inspection command."""

import asyncio
import json
from pathlib import Path
from typing import Annotated

import typer

from truename.cli.console import console, create_table, dim


def register(app: typer.Typer) -> None:
    """Register the audit command."""

    @app.command()
    def audit(
        target: Annotated[str, typer.Argument(help="Target user ID")],
        limit: Annotated[
            int,
            typer.Option(
                "--limit",
                "-n",
                help="Maximum entries to show",
                min=1,
            ),
        ] = 20,
        as_json: Annotated[
            bool,
            typer.Option("--json", help="Print entries as JSON"),
        ] = False,
        config: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="Path to configuration file",
            ),
        ] = None,
    ) -> None:
        """Show recent name disclosures for a user, newest first."""
        from truename.cli.runtime import (
            configure_command_logging,
            load_config_or_exit,
            open_runtime,
        )
        from truename.store import AuditRecord

        truename_config = load_config_or_exit(config)
        configure_command_logging(truename_config)

        async def run() -> list[AuditRecord]:
            async with open_runtime(truename_config) as runtime:
                return await runtime.store.list_audit_entries(target, limit=limit)

        entries = asyncio.run(run())

        if as_json:
            payload = [
                {
                    "id": entry.id,
                    "target_id": entry.target_id,
                    "requester_id": entry.requester_id,
                    "context_id": entry.context_id,
                    "resolved_name_id": entry.resolved_name_id,
                    "action": entry.action,
                    "accessed_at": (
                        entry.accessed_at.isoformat() if entry.accessed_at else None
                    ),
                    "details": entry.details,
                }
                for entry in entries
            ]
            typer.echo(json.dumps(payload, indent=2))
            return

        if not entries:
            dim(f"No audit entries for {target}")
            return

        table = create_table(
            f"Disclosures of {target}",
            [
                ("When", "dim"),
                ("Requester", "cyan"),
                ("Source", "green"),
                ("Name", {"style": "bold", "overflow": "fold"}),
            ],
        )
        for entry in entries:
            when = (
                entry.accessed_at.strftime("%Y-%m-%d %H:%M:%S")
                if entry.accessed_at
                else "-"
            )
            table.add_row(
                when,
                entry.requester_id or "-",
                entry.source or "-",
                entry.resolved_name or "-",
            )
        console.print(table)
        dim(f"{len(entries)} entries")
