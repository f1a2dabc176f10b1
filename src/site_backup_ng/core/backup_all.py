"""Back up every matching site/environment pair.

The flow is: fetch the site list, filter it, check --env against what is
left, then for each (site, environment) pair optionally commit pending
SFTP changes and request a backup workflow. Everything happens in order
on the calling thread.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..models.client import ApiError
from ..models.collections import Sites
from .filters import apply_filters
from .options import ALL, BackupAllOptions, ChangesPolicy, validate_env

logger = logging.getLogger(__name__)

SFTP_MODE = "sftp"


class BackupStatus(Enum):
    """What happened to one site/environment pair."""

    BACKED_UP = "backed_up"
    SKIPPED = "skipped"
    FAILED = "failed"
    PLANNED = "planned"


@dataclass
class BackupOutcome:
    """Result of the backup procedure for one environment."""

    site: str
    env: str
    element: str
    status: BackupStatus
    committed: bool = False
    workflow_id: Optional[str] = None
    error: Optional[str] = None


@dataclass
class BackupAllReport:
    """Outcomes of a backup-all run, in the order they were attempted."""

    sites: list[str] = field(default_factory=list)
    outcomes: list[BackupOutcome] = field(default_factory=list)

    def count(self, status: BackupStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)

    @property
    def failed(self) -> list[BackupOutcome]:
        return [o for o in self.outcomes if o.status is BackupStatus.FAILED]

    @property
    def ok(self) -> bool:
        return not self.failed


def backup_environment(
    sites: Sites,
    name: str,
    env_id: str,
    options: BackupAllOptions,
) -> BackupOutcome:
    """Back up one environment of one site.

    Pending SFTP changes only matter when the element includes code. With
    changes present, the policy decides whether they get committed first,
    left out of the backup, or whether the backup is skipped.

    Raises:
        ApiError: If resolving, diffstat, commit or backup creation fails
    """
    element = options.element.value
    site = sites.get(name)
    env = site.environments.get(env_id)

    outcome = BackupOutcome(
        site=name, env=env_id, element=element, status=BackupStatus.BACKED_UP
    )
    backup = True

    if env.info("connection_mode") == SFTP_MODE and options.element.includes_code:
        diff = env.diffstat()
        if diff:
            logger.debug("%s.%s has %d pending change(s)", name, env_id, len(diff))
            if options.changes is ChangesPolicy.COMMIT:
                if options.dry_run:
                    logger.info(
                        "Would commit pending changes in %s environment of %s site.",
                        env_id,
                        name,
                    )
                else:
                    logger.info(
                        "Start automatic backup commit for %s environment of %s site.",
                        env_id,
                        name,
                    )
                    env.commit()
                    outcome.committed = True
                    logger.info(
                        "End automatic backup commit for %s environment of %s site.",
                        env_id,
                        name,
                    )
            elif options.changes is ChangesPolicy.IGNORE:
                logger.warning(
                    "Automatic backup commit ignored for %s in %s environment of "
                    "%s site. Note there are still pending filesystem changes that "
                    "will not be included in the backup.",
                    element,
                    env_id,
                    name,
                )
            else:
                logger.info(
                    "Automatic backup commit skipped for %s in %s environment of "
                    "%s site. Note there are still pending filesystem changes and "
                    "the backup has been aborted.",
                    element,
                    env_id,
                    name,
                )
                backup = False

    if not backup:
        outcome.status = BackupStatus.SKIPPED
        return outcome

    if options.dry_run:
        logger.info(
            "Would back up %s in %s environment of %s site.", element, env_id, name
        )
        outcome.status = BackupStatus.PLANNED
        return outcome

    logger.info("Start backup for %s in %s environment of %s site.", element, env_id, name)
    workflow = env.backups.create(element, keep_for=options.keep_for)
    outcome.workflow_id = workflow.id
    logger.info("End backup for %s in %s environment of %s site.", element, env_id, name)
    return outcome


def backup_all(sites: Sites, options: BackupAllOptions, user_id: str) -> BackupAllReport:
    """Back up every site/environment pair the options select.

    Args:
        sites: Site collection for the current user
        options: Validated command options
        user_id: Current session user id

    Returns:
        Report with one outcome per attempted pair

    Raises:
        OptionError: If --env names no environment of the filtered sites
        ApiError: On the first remote failure, unless continue_on_error is set
    """
    if not options.cached:
        sites.rebuild_cache()

    matched = apply_filters(sites.all(), options, user_id)
    if not matched:
        logger.warning("You have no sites.")

    validate_env(options.env, matched)

    report = BackupAllReport(sites=[site.name for site in matched])
    for site in matched:
        if options.env == ALL:
            env_ids = site.environments.ids()
        elif options.env in site.environments.ids():
            env_ids = [options.env]
        else:
            logger.info("Site %s has no %s environment.", site.name, options.env)
            report.outcomes.append(
                BackupOutcome(
                    site=site.name,
                    env=options.env,
                    element=options.element.value,
                    status=BackupStatus.SKIPPED,
                )
            )
            continue

        for env_id in env_ids:
            try:
                outcome = backup_environment(sites, site.name, env_id, options)
            except ApiError as e:
                if not options.continue_on_error:
                    raise
                logger.error("Backup of %s.%s failed: %s", site.name, env_id, e)
                outcome = BackupOutcome(
                    site=site.name,
                    env=env_id,
                    element=options.element.value,
                    status=BackupStatus.FAILED,
                    error=str(e),
                )
            report.outcomes.append(outcome)

    return report
