"""Configuration schema definitions using dataclasses.

Defines the structure for TOML configuration with sensible defaults.
"""

from dataclasses import dataclass, field
from typing import Optional

DEFAULT_API_URL = "https://api.example-platform.io/api/"
DEFAULT_SESSION_FILE = "~/.config/site-backup-ng/session.json"
DEFAULT_CACHE_DIR = "~/.cache/site-backup-ng"


@dataclass
class ApiConfig:
    """Platform API connection settings.

    Attributes:
        base_url: Root URL of the platform API
        timeout: Request timeout in seconds
        verify_ssl: Whether to verify TLS certificates
    """

    base_url: str = DEFAULT_API_URL
    timeout: float = 30.0
    verify_ssl: bool = True


@dataclass
class SessionConfig:
    """Where the saved login session lives.

    Attributes:
        file: Path to the JSON session file written at login
    """

    file: str = DEFAULT_SESSION_FILE


@dataclass
class BackupDefaults:
    """Default values for backup-all options not given on the command line.

    Attributes:
        element: Backup element (all, code, database, files)
        changes: Pending SFTP changes policy (commit, ignore, skip)
        env: Environment id or "all"
        keep_for: Days to retain the created backups
    """

    element: str = "all"
    changes: str = "commit"
    env: str = "all"
    keep_for: int = 365


@dataclass
class GlobalConfig:
    """Global configuration settings.

    Attributes:
        cache_dir: Directory for the cached site list (None disables the cache)
        log_file: Path to log file (None for no file logging)
    """

    cache_dir: Optional[str] = DEFAULT_CACHE_DIR
    log_file: Optional[str] = None


@dataclass
class Config:
    """Root configuration object."""

    global_config: GlobalConfig = field(default_factory=GlobalConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    backup: BackupDefaults = field(default_factory=BackupDefaults)
