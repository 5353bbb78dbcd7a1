"""Name resolution commands."""

import asyncio
import json
from pathlib import Path
from typing import Annotated, Any

import typer

from truename.cli.console import console, create_table, dim, error
from truename.errors import ValidationError

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration file",
    ),
]
RequesterOption = Annotated[
    str | None,
    typer.Option(
        "--requester",
        "-r",
        help="Identity asking for the name",
    ),
]
ContextOption = Annotated[
    str | None,
    typer.Option(
        "--context",
        "-x",
        help="Context name to resolve for",
    ),
]
JsonOption = Annotated[
    bool,
    typer.Option(
        "--json",
        help="Print the full resolution as JSON",
    ),
]


def _print_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2))


def _print_resolution(data: dict[str, Any]) -> None:
    metadata = data["metadata"]
    console.print(f"[bold]{data['name']}[/bold]")
    console.print(f"Source: [cyan]{data['source']}[/cyan]")
    for key in ("context_name", "consent_id", "fallback_reason", "error"):
        if key in metadata:
            console.print(f"{key}: {metadata[key]}")
    dim(f"Resolved in {metadata['response_time_ms']:.2f}ms")


def register(app: typer.Typer) -> None:
    """Register the resolve, batch and benchmark commands."""

    @app.command()
    def resolve(
        target: Annotated[str, typer.Argument(help="Target user ID")],
        requester: RequesterOption = None,
        context: ContextOption = None,
        as_json: JsonOption = False,
        config: ConfigOption = None,
    ) -> None:
        """Resolve the name to disclose for a user."""
        from truename.cli.runtime import (
            configure_command_logging,
            load_config_or_exit,
            open_runtime,
        )

        truename_config = load_config_or_exit(config)
        configure_command_logging(truename_config)

        async def run() -> dict[str, Any]:
            async with open_runtime(truename_config) as runtime:
                resolution = await runtime.engine.resolve(target, requester, context)
                return resolution.to_dict()

        data = asyncio.run(run())
        if as_json:
            _print_json(data)
        else:
            _print_resolution(data)

    @app.command()
    def batch(
        target: Annotated[str, typer.Argument(help="Target user ID")],
        contexts: Annotated[
            list[str], typer.Argument(help="Context names to resolve")
        ],
        as_json: JsonOption = False,
        config: ConfigOption = None,
    ) -> None:
        """Resolve one name per context for a user."""
        from truename.cli.runtime import (
            configure_command_logging,
            load_config_or_exit,
            open_runtime,
        )

        truename_config = load_config_or_exit(config)
        configure_command_logging(truename_config)

        async def run() -> list[dict[str, Any]]:
            async with open_runtime(truename_config) as runtime:
                results = await runtime.engine.resolve_batch(target, contexts)
                return [r.to_dict() for r in results]

        results = asyncio.run(run())
        if as_json:
            _print_json({"results": results})
            return

        table = create_table(
            f"Names for {target}",
            [
                ("Context", "cyan"),
                ("Name", {"style": "bold", "overflow": "fold"}),
                ("Source", "green"),
            ],
        )
        for context_name, data in zip(contexts, results, strict=True):
            table.add_row(context_name, data["name"], data["source"])
        console.print(table)

    @app.command()
    def benchmark(
        target: Annotated[str, typer.Argument(help="Target user ID")],
        requester: RequesterOption = None,
        context: ContextOption = None,
        iterations: Annotated[
            int,
            typer.Option(
                "--iterations",
                "-n",
                help="Number of resolutions to time",
            ),
        ] = 10,
        as_json: JsonOption = False,
        config: ConfigOption = None,
    ) -> None:
        """Time repeated resolutions of the same request.

        Every iteration is a real resolution and is audited.
        """
        from truename.cli.runtime import (
            configure_command_logging,
            load_config_or_exit,
            open_runtime,
        )
        from truename.resolution import BenchmarkResult, ResolveRequest

        truename_config = load_config_or_exit(config)
        configure_command_logging(truename_config)

        async def run() -> BenchmarkResult:
            async with open_runtime(truename_config) as runtime:
                return await runtime.engine.benchmark(
                    ResolveRequest(target, requester, context), iterations
                )

        try:
            result = asyncio.run(run())
        except ValidationError as e:
            error(str(e))
            raise typer.Exit(1) from None

        if as_json:
            _print_json(result.to_dict())
            return

        console.print(f"[bold]Benchmark:[/bold] {result.iterations} iterations")
        console.print(f"  average: {result.average_ms:.2f}ms")
        console.print(f"  min:     {result.min_ms:.2f}ms")
        console.print(f"  max:     {result.max_ms:.2f}ms")
        console.print(f"  total:   {result.total_ms:.2f}ms")
