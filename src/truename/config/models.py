"""Configuration models using Pydantic."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, SecretStr, model_validator

from truename.config.paths import get_database_path

DEFAULT_ANONYMOUS_NAME = "Anonymous User"


class DatabaseConfig(BaseModel):
    """Configuration for the relational name store.

    ``url`` takes precedence over ``path``. Without a URL the store is a
    local SQLite file opened through aiosqlite.
    """

    url: SecretStr | None = None
    path: Path = Field(default_factory=get_database_path)


class ServerConfig(BaseModel):
    """Configuration for HTTP server."""

    host: str = "127.0.0.1"
    port: int = 8080


class ResolutionConfig(BaseModel):
    """Behaviour of the name resolution engine."""

    # Placeholder disclosed when nothing else can be resolved
    anonymous_name: str = DEFAULT_ANONYMOUS_NAME
    # True = a store error in the consent/context tiers ends the call with
    # error_fallback instead of falling through to the next tier
    strict_store_errors: bool = False
    # Resolve batch items with asyncio.gather instead of one at a time
    batch_concurrency: bool = False

    @model_validator(mode="after")
    def _validate_anonymous_name(self) -> "ResolutionConfig":
        if not self.anonymous_name.strip():
            raise ValueError("resolution.anonymous_name must not be blank")
        return self


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None = None
    log_to_file: bool = False


class ConfigError(ValueError):
    """Configuration file could not be parsed."""

    pass


class TrueNameConfig(BaseModel):
    """Root configuration model."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    resolution: ResolutionConfig = Field(default_factory=ResolutionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def database_url(self) -> str | None:
        """Return the configured database URL, if any."""
        if self.database.url is None:
            return None
        return self.database.url.get_secret_value()
