"""FastAPI application for the TrueName server."""

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from truename import __version__
from truename.resolution import create_resolution_engine
from truename.server.routes import health, resolve
from truename.store import SqlNameStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from truename.config import TrueNameConfig
    from truename.db import Database
    from truename.resolution import ResolutionEngine

logger = logging.getLogger(__name__)


class TrueNameServer:
    """Main server application.

    Owns the database lifecycle and the resolution engine shared by all
    requests.
    """

    def __init__(self, database: "Database", config: "TrueNameConfig"):
        self._database = database
        self._config = config
        self._engine = create_resolution_engine(
            SqlNameStore(database), config.resolution
        )
        self._app = self._create_app()

    @property
    def app(self) -> FastAPI:
        """Get the FastAPI application."""
        return self._app

    @property
    def engine(self) -> "ResolutionEngine":
        return self._engine

    def _create_app(self) -> FastAPI:
        """Create and configure the FastAPI app."""

        @asynccontextmanager
        async def lifespan(app: FastAPI) -> "AsyncIterator[None]":
            logger.info("Starting TrueName server")
            if not self._database.is_connected:
                await self._database.connect()

            yield

            logger.info("Shutting down TrueName server")
            await self._database.disconnect()

        app = FastAPI(
            title="TrueName",
            description="Context-aware name resolution API",
            version=__version__,
            lifespan=lifespan,
        )

        app.state.server = self
        app.state.database = self._database
        app.state.engine = self._engine

        app.include_router(health.router, tags=["health"])
        app.include_router(resolve.router, prefix="/resolve", tags=["resolve"])

        return app


def create_app(database: "Database", config: "TrueNameConfig") -> FastAPI:
    """Create the FastAPI application.

    Args:
        database: Database the name store reads from.
        config: Loaded configuration.

    Returns:
        Configured FastAPI application.
    """
    server = TrueNameServer(database=database, config=config)
    return server.app
