"""TOML configuration loading and validation.

Handles config file discovery, parsing, and validation with helpful error messages.
"""

import tomllib
from pathlib import Path
from typing import Any

from ..core.options import ChangesPolicy, Element
from .schema import (
    ApiConfig,
    BackupDefaults,
    Config,
    GlobalConfig,
    SessionConfig,
)


class ConfigError(Exception):
    """Configuration loading or validation error."""

    pass


# Config file search paths in priority order
CONFIG_PATHS = [
    Path.home() / ".config" / "site-backup-ng" / "config.toml",
    Path("/etc/site-backup-ng/config.toml"),
]

KNOWN_SECTIONS = frozenset({"global", "api", "session", "backup"})


def find_config_file(explicit_path: str | None = None) -> Path | None:
    """Find configuration file.

    Args:
        explicit_path: Explicitly specified config path (highest priority)

    Returns:
        Path to config file, or None if not found
    """
    if explicit_path:
        path = Path(explicit_path)
        if path.exists():
            return path
        raise ConfigError(f"Config file not found: {explicit_path}")

    for path in CONFIG_PATHS:
        if path.exists():
            return path

    return None


def _expect(section: str, key: str, value: Any, kind: type | tuple) -> Any:
    # bool is an int subclass
    if isinstance(value, bool) and kind is not bool:
        raise ConfigError(f"[{section}] {key} has the wrong type: {value!r}")
    if not isinstance(value, kind):
        raise ConfigError(f"[{section}] {key} has the wrong type: {value!r}")
    return value


def _parse_api(data: dict[str, Any]) -> ApiConfig:
    """Parse API configuration from dict."""
    defaults = ApiConfig()
    base_url = _expect("api", "base_url", data.get("base_url", defaults.base_url), str)
    if not base_url.startswith(("http://", "https://")):
        raise ConfigError(f"[api] base_url must be an http(s) URL: {base_url!r}")

    timeout = _expect(
        "api", "timeout", data.get("timeout", defaults.timeout), (int, float)
    )
    if timeout <= 0:
        raise ConfigError("[api] timeout must be positive")

    return ApiConfig(
        base_url=base_url,
        timeout=float(timeout),
        verify_ssl=_expect(
            "api", "verify_ssl", data.get("verify_ssl", defaults.verify_ssl), bool
        ),
    )


def _parse_session(data: dict[str, Any]) -> SessionConfig:
    """Parse session configuration from dict."""
    return SessionConfig(
        file=_expect("session", "file", data.get("file", SessionConfig().file), str)
    )


def _parse_backup(data: dict[str, Any]) -> BackupDefaults:
    """Parse backup defaults from dict."""
    defaults = BackupDefaults()
    element = _expect("backup", "element", data.get("element", defaults.element), str)
    if element not in Element.values():
        raise ConfigError(
            f"[backup] element must be one of {', '.join(Element.values())}"
        )

    changes = _expect("backup", "changes", data.get("changes", defaults.changes), str)
    if changes not in ChangesPolicy.values():
        raise ConfigError(
            f"[backup] changes must be one of {', '.join(ChangesPolicy.values())}"
        )

    keep_for = _expect(
        "backup", "keep_for", data.get("keep_for", defaults.keep_for), int
    )
    if keep_for < 1:
        raise ConfigError("[backup] keep_for must be at least 1 day")

    return BackupDefaults(
        element=element,
        changes=changes,
        env=_expect("backup", "env", data.get("env", defaults.env), str),
        keep_for=keep_for,
    )


def _parse_global(data: dict[str, Any]) -> GlobalConfig:
    """Parse global configuration from dict."""
    defaults = GlobalConfig()
    cache_dir = data.get("cache_dir", defaults.cache_dir)
    # An empty string turns the site list cache off
    if cache_dir == "":
        cache_dir = None
    if cache_dir is not None:
        _expect("global", "cache_dir", cache_dir, str)

    log_file = data.get("log_file")
    if log_file is not None:
        _expect("global", "log_file", log_file, str)

    return GlobalConfig(cache_dir=cache_dir, log_file=log_file)


def _validate_config(config: Config, data: dict[str, Any]) -> list[str]:
    """Validate configuration and return list of warnings."""
    warnings = []

    for section in sorted(set(data) - KNOWN_SECTIONS):
        warnings.append(f"Unknown section [{section}] ignored")

    if config.api.base_url.startswith("http://"):
        warnings.append("API base_url is not using https")

    if not config.api.verify_ssl:
        warnings.append("TLS certificate verification is disabled")

    if config.global_config.cache_dir is None:
        warnings.append("Site list cache disabled; --cached will always refetch")

    return warnings


def load_config(path: Path | str) -> tuple[Config, list[str]]:
    """Load and validate configuration from TOML file.

    Args:
        path: Path to configuration file

    Returns:
        Tuple of (Config object, list of warnings)

    Raises:
        ConfigError: If config is invalid or cannot be parsed
    """
    path = Path(path)

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML syntax: {e}")
    except OSError as e:
        raise ConfigError(f"Cannot read config file: {e}")

    config = Config(
        global_config=_parse_global(data.get("global", {})),
        api=_parse_api(data.get("api", {})),
        session=_parse_session(data.get("session", {})),
        backup=_parse_backup(data.get("backup", {})),
    )

    # Validate and collect warnings
    warnings = _validate_config(config, data)

    return config, warnings


def generate_example_config() -> str:
    """Generate example configuration file content."""
    return """# site-backup-ng configuration
# See documentation for full options

[global]
cache_dir = "~/.cache/site-backup-ng"   # "" disables the site list cache
# log_file = "~/.local/state/site-backup-ng/backup.log"

[api]
base_url = "https://api.example-platform.io/api/"
timeout = 30
verify_ssl = true

[session]
file = "~/.config/site-backup-ng/session.json"

# Defaults for options not given on the command line
[backup]
element = "all"     # all, code, database or files
changes = "commit"  # commit, ignore or skip pending sftp changes
env = "all"         # dev, test, live, a multidev name, or all
keep_for = 365      # days to retain each backup
"""
