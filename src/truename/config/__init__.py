"""Configuration module."""

from truename.config.loader import get_default_config, load_config
from truename.config.models import (
    DEFAULT_ANONYMOUS_NAME,
    ConfigError,
    DatabaseConfig,
    LoggingConfig,
    ResolutionConfig,
    ServerConfig,
    TrueNameConfig,
)
from truename.config.paths import (
    get_config_path,
    get_database_path,
    get_logs_path,
    get_truename_home,
)

__all__ = [
    "DEFAULT_ANONYMOUS_NAME",
    "ConfigError",
    "DatabaseConfig",
    "LoggingConfig",
    "ResolutionConfig",
    "ServerConfig",
    "TrueNameConfig",
    "get_config_path",
    "get_database_path",
    "get_default_config",
    "get_logs_path",
    "get_truename_home",
    "load_config",
]
