"""Configuration system for site-backup-ng.

This module provides TOML-based configuration loading, validation,
and schema definitions for the backup-all command.
"""

from .loader import ConfigError, find_config_file, load_config
from .schema import (
    ApiConfig,
    BackupDefaults,
    Config,
    GlobalConfig,
    SessionConfig,
)

__all__ = [
    "ApiConfig",
    "BackupDefaults",
    "GlobalConfig",
    "SessionConfig",
    "Config",
    "load_config",
    "find_config_file",
    "ConfigError",
]
