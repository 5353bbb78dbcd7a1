"""Main CLI application."""

import typer

from truename.cli.commands import audit, config, database, resolve, serve

app = typer.Typer(
    name="truename",
    help="TrueName - context-aware name resolution",
    no_args_is_help=True,
)

resolve.register(app)
audit.register(app)
database.register(app)
config.register(app)
serve.register(app)


if __name__ == "__main__":
    app()
