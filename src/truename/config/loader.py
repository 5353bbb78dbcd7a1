"""Configuration loading from TOML files and environment variables."""

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import SecretStr

from truename.config.models import ConfigError, TrueNameConfig
from truename.config.paths import get_config_path

DATABASE_URL_ENV = "TRUENAME_DATABASE_URL"


def _get_default_config_paths() -> list[Path]:
    """Get ordered list of default config file locations."""
    return [
        Path("config.toml"),  # Current directory
        get_config_path(),  # ~/.truename/config.toml (or TRUENAME_HOME)
        Path("/etc/truename/config.toml"),  # System-wide
    ]


def _resolve_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply environment overrides where the file leaves values unset."""
    database = config.setdefault("database", {})
    if database.get("url") is None:
        value = os.environ.get(DATABASE_URL_ENV)
        if value:
            database["url"] = SecretStr(value)
    return config


def load_config(path: Path | None = None) -> TrueNameConfig:
    """Load configuration from TOML file.

    Args:
        path: Explicit path to config file. If None, searches default locations.

    Returns:
        Validated TrueNameConfig instance.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
        ConfigError: If the config file is not valid TOML.
        pydantic.ValidationError: If config values are invalid.
    """
    config_path: Path | None = None

    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        for default_path in _get_default_config_paths():
            expanded = default_path.expanduser()
            if expanded.exists():
                config_path = expanded
                break

    # Unlike an explicit path, a missing default file means "use defaults"
    if config_path is None:
        return TrueNameConfig.model_validate(_resolve_env_overrides({}))

    try:
        with config_path.open("rb") as f:
            raw_config = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

    raw_config = _resolve_env_overrides(raw_config)

    return TrueNameConfig.model_validate(raw_config)


def get_default_config() -> TrueNameConfig:
    """Get a default configuration for development/testing."""
    return TrueNameConfig()
