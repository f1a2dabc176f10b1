"""Backup-all command: Back up every site the current user can access."""

import argparse
import logging
import time

from ..__logger__ import create_logger
from ..config import Config, ConfigError
from ..core.backup_all import BackupAllReport, BackupStatus, backup_all
from ..core.options import BackupAllOptions, OptionError
from ..models import ApiError, HttpPlatformClient, Sites
from ..session import Session, SessionError, load_session
from .common import get_log_level, load_effective_config

logger = logging.getLogger(__name__)


def make_client(config: Config, session: Session) -> HttpPlatformClient:
    """Create the API client for this run."""
    return HttpPlatformClient(
        base_url=config.api.base_url,
        token=session.token,
        timeout=config.api.timeout,
        verify_ssl=config.api.verify_ssl,
    )


def _given_or_default(args: argparse.Namespace, name: str, default: str) -> str:
    # Only a missing option falls back; an empty value is still validated
    value = getattr(args, name, None)
    return default if value is None else value


def build_options(args: argparse.Namespace, config: Config) -> BackupAllOptions:
    """Merge command line arguments over config defaults.

    Raises:
        OptionError: If an option value is invalid
    """
    defaults = config.backup
    return BackupAllOptions.build(
        env=_given_or_default(args, "env", defaults.env),
        element=_given_or_default(args, "element", defaults.element),
        changes=_given_or_default(args, "changes", defaults.changes),
        name=getattr(args, "name", None),
        team=getattr(args, "team", False),
        owner=getattr(args, "owner", None),
        org=getattr(args, "org", None),
        cached=getattr(args, "cached", False),
        keep_for=defaults.keep_for,
        dry_run=getattr(args, "dry_run", False),
        continue_on_error=getattr(args, "continue_on_error", False),
    )


def execute_backup_all(args: argparse.Namespace) -> int:
    """Execute the backup-all command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    log_level = get_log_level(args)
    create_logger(log_level)

    try:
        config = load_effective_config(args)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return 1

    if config.global_config.log_file:
        create_logger(log_level, config.global_config.log_file)

    # Element and changes are checked before anything touches the platform
    try:
        options = build_options(args, config)
    except OptionError as e:
        logger.error("%s", e)
        return 1

    try:
        session = load_session(getattr(args, "session", None) or config.session.file)
    except SessionError as e:
        logger.error("%s", e)
        return 1

    if options.dry_run:
        logger.info("Dry run mode - no commits or backups will be made")

    started = time.monotonic()
    try:
        with make_client(config, session) as client:
            sites = Sites(client, session.user_id, config.global_config.cache_dir)
            report = backup_all(sites, options, session.user_id)
    except OptionError as e:
        logger.error("%s", e)
        return 1
    except ApiError as e:
        logger.error("Backup aborted: %s", e)
        return 1

    _log_summary(report, time.monotonic() - started)
    return 0 if report.ok else 1


def _log_summary(report: BackupAllReport, elapsed: float) -> None:
    if not report.outcomes:
        return

    logger.info(
        "Processed %d environment(s) across %d site(s) in %.1fs",
        len(report.outcomes),
        len(report.sites),
        elapsed,
    )
    for status in BackupStatus:
        count = report.count(status)
        if count:
            logger.info("  %s: %d", status.value.replace("_", " "), count)

    for outcome in report.failed:
        logger.error("  failed: %s.%s (%s)", outcome.site, outcome.env, outcome.error)
