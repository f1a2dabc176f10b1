"""Shared CLI utilities and argument parsers."""

import argparse
import logging

from ..config import Config, find_config_file, load_config

logger = logging.getLogger(__name__)


def add_verbosity_args(parser: argparse.ArgumentParser) -> None:
    """Add verbosity-related arguments to a parser."""
    group = parser.add_argument_group("Output options")
    group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    group.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )
    group.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output",
    )


def add_filter_args(parser: argparse.ArgumentParser) -> None:
    """Add the site filter options of backup-all."""
    group = parser.add_argument_group("Site filters")
    group.add_argument(
        "--team",
        action="store_true",
        help="Only sites you are a team member of",
    )
    group.add_argument(
        "--owner",
        metavar="UUID",
        help='Only sites a specific user owns; use "me" for your own user',
    )
    group.add_argument(
        "--org",
        metavar="ID",
        nargs="?",
        const="all",
        help="Only sites you can access via the organization; 'all' for any",
    )
    group.add_argument(
        "--name",
        metavar="REGEX",
        help="Only sites whose name matches the regular expression",
    )


def get_log_level(args: argparse.Namespace) -> str:
    """Determine log level from parsed arguments.

    Args:
        args: Parsed command line arguments

    Returns:
        Log level string (DEBUG, INFO, WARNING, ERROR)
    """
    if getattr(args, "debug", False):
        return "DEBUG"
    elif getattr(args, "quiet", False):
        return "WARNING"
    elif getattr(args, "verbose", False):
        return "DEBUG"
    else:
        return "INFO"


def load_effective_config(args: argparse.Namespace) -> Config:
    """Load the config file named by --config, a default location, or defaults.

    Raises:
        ConfigError: If a config file exists but is invalid
    """
    config_path = find_config_file(getattr(args, "config", None))
    if config_path is None:
        logger.debug("No configuration file found, using defaults")
        return Config()

    logger.debug("Loading configuration from: %s", config_path)
    config, warnings = load_config(config_path)
    for warning in warnings:
        logger.warning("Config: %s", warning)
    return config
