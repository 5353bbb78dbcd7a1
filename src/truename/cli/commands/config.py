"""Configuration management commands."""

from pathlib import Path
from typing import Annotated

import typer

from truename.cli.console import console, dim, error, success


def register(app: typer.Typer) -> None:
    """Register the config command group."""
    config_app = typer.Typer(help="Configuration commands")

    @config_app.command("show")
    def config_show(
        path: Annotated[
            Path | None,
            typer.Option(
                "--path",
                "-p",
                help="Path to config file (default: search standard locations)",
            ),
        ] = None,
    ) -> None:
        """Show the effective configuration with secrets masked."""
        import json

        from rich.syntax import Syntax

        from truename.cli.runtime import load_config_or_exit

        truename_config = load_config_or_exit(path)
        # SecretStr fields serialize masked in json mode
        content = json.dumps(truename_config.model_dump(mode="json"), indent=2)
        console.print(Syntax(content, "json", theme="monokai"))

    @config_app.command("validate")
    def config_validate(
        path: Annotated[
            Path | None,
            typer.Option(
                "--path",
                "-p",
                help="Path to config file (default: search standard locations)",
            ),
        ] = None,
    ) -> None:
        """Validate a configuration file."""
        from pydantic import ValidationError

        from truename.config import ConfigError, load_config

        try:
            truename_config = load_config(path)
        except FileNotFoundError as e:
            error(str(e))
            raise typer.Exit(1) from None
        except ConfigError as e:
            error(str(e))
            raise typer.Exit(1) from None
        except ValidationError as e:
            error("Configuration is invalid:")
            for err in e.errors():
                loc = ".".join(str(part) for part in err["loc"])
                console.print(f"  [red]{loc}[/red]: {err['msg']}")
            raise typer.Exit(1) from None

        success("Configuration is valid")
        dim(f"anonymous name: {truename_config.resolution.anonymous_name}")
        dim(f"strict store errors: {truename_config.resolution.strict_store_errors}")

    app.add_typer(config_app, name="config")
