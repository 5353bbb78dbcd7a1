"""Centralized path management for TrueName.

All local state (config, SQLite database, logs) is stored under a single
base directory. The base directory can be overridden with the
TRUENAME_HOME environment variable.

Default locations:
- Linux/macOS: ~/.truename
- Windows: %USERPROFILE%\\.truename
"""

import os
from functools import lru_cache
from pathlib import Path

ENV_VAR = "TRUENAME_HOME"


@lru_cache(maxsize=1)
def get_truename_home() -> Path:
    """Get the base directory for all TrueName data.

    Resolution order:
    1. TRUENAME_HOME environment variable (if set)
    2. Platform default (~/.truename)

    Returns:
        Path to the TrueName home directory.
    """
    if env_home := os.environ.get(ENV_VAR):
        return Path(env_home).expanduser().resolve()

    return Path.home() / ".truename"


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_truename_home() / "config.toml"


def get_database_path() -> Path:
    """Get the default SQLite database path."""
    return get_truename_home() / "data" / "truename.db"


def get_logs_path() -> Path:
    """Get the default logs directory path."""
    return get_truename_home() / "logs"
