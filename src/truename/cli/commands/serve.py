"""Server command for running the TrueName API."""

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer

logger = logging.getLogger(__name__)


def register(app: typer.Typer) -> None:
    """Register the serve command."""

    @app.command()
    def serve(
        config: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="Path to configuration file",
            ),
        ] = None,
        host: Annotated[
            str | None,
            typer.Option(
                "--host",
                "-h",
                help="Host to bind to (default: server.host)",
            ),
        ] = None,
        port: Annotated[
            int | None,
            typer.Option(
                "--port",
                "-p",
                help="Port to bind to (default: server.port)",
            ),
        ] = None,
    ) -> None:
        """Start the TrueName HTTP server."""
        try:
            asyncio.run(_run_server(config, host, port))
        except KeyboardInterrupt:
            # Use print here since logging may not be configured yet
            print("\nServer stopped")


async def _run_server(
    config_path: Path | None = None,
    host: str | None = None,
    port: int | None = None,
) -> None:
    """Run the server asynchronously."""
    from truename.cli.runtime import build_database, load_config_or_exit
    from truename.logging import configure_logging
    from truename.server import ServerRunner, create_app

    truename_config = load_config_or_exit(config_path)

    configure_logging(
        level=truename_config.logging.level,
        use_rich=True,
        log_to_file=truename_config.logging.log_to_file,
    )

    database = build_database(truename_config)
    fastapi_app = create_app(database, truename_config)

    bind_host = host or truename_config.server.host
    bind_port = port or truename_config.server.port
    logger.info("Starting TrueName server on %s:%s", bind_host, bind_port)

    runner = ServerRunner(fastapi_app, host=bind_host, port=bind_port)
    await runner.run()
