"""Remote-object wrappers over the platform client.

Sites -> Site -> Environments -> Environment -> Backups mirrors how the
platform nests its resources. Each wrapper holds a record plus the client
used to fetch or mutate it.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from filelock import FileLock

from .client import ApiError, NotFoundError, PlatformClient
from .records import EnvironmentRecord, SiteRecord, Workflow

logger = logging.getLogger(__name__)

COMMIT_WORKFLOW = "commit_and_push_on_server_changes"
BACKUP_WORKFLOW = "do_export"
SECONDS_PER_DAY = 86400
DEFAULT_COMMIT_MESSAGE = "Automatic backup commit"


class Backups:
    """Backups of one environment."""

    def __init__(self, environment: "Environment") -> None:
        self.environment = environment

    def create(self, element: str = "all", keep_for: int = 365) -> Workflow:
        """Start a backup workflow for element ("all", "code", "database", "files").

        Args:
            element: Which part of the environment to back up
            keep_for: Days the platform should retain the backup

        Returns:
            The accepted workflow; completion is not awaited
        """
        params: dict[str, Any] = {
            "entry_type": "backup",
            "ttl": keep_for * SECONDS_PER_DAY,
        }
        for part in ("code", "database", "files"):
            params[part] = element in ("all", part)
        return self.environment.create_workflow(BACKUP_WORKFLOW, params)


class Environment:
    """One environment of a site."""

    def __init__(
        self, site: "Site", record: EnvironmentRecord, client: PlatformClient
    ) -> None:
        self.site = site
        self.record = record
        self.client = client
        self.backups = Backups(self)

    def __repr__(self) -> str:
        return f"<Environment {self.site.name}.{self.id}>"

    @property
    def id(self) -> str:
        return self.record.id

    def get(self, field: str) -> Any:
        """Return a record field: id or connection_mode."""
        try:
            return getattr(self.record, field)
        except AttributeError:
            raise KeyError(f"Environment has no field {field!r}") from None

    def info(self, key: str) -> Any:
        """Return an environment setting such as connection_mode."""
        return getattr(self.record, key, None)

    def diffstat(self) -> dict[str, Any]:
        """Uncommitted filesystem changes, keyed by path. Empty when clean."""
        return self.client.get_diffstat(self.site.id, self.id)

    def commit(self, message: str = DEFAULT_COMMIT_MESSAGE) -> Workflow:
        """Commit pending SFTP changes on the server."""
        return self.create_workflow(COMMIT_WORKFLOW, {"message": message})

    def create_workflow(self, workflow_type: str, params: dict[str, Any]) -> Workflow:
        data = self.client.create_workflow(self.site.id, self.id, workflow_type, params)
        workflow = Workflow.from_api(data)
        logger.debug(
            "Workflow %s (%s) created for %r", workflow.id, workflow.type, self
        )
        return workflow


class Environments:
    """The environments of one site, in the order the platform lists them."""

    def __init__(self, site: "Site", client: PlatformClient) -> None:
        self.site = site
        self.client = client
        self._models: Optional[dict[str, Environment]] = None

    def _fetch(self) -> dict[str, Environment]:
        if self._models is None:
            data = self.client.list_environments(self.site.id)
            self._models = {
                env_id: Environment(
                    self.site, EnvironmentRecord.from_api(env_id, info or {}), self.client
                )
                for env_id, info in data.items()
            }
        return self._models

    def all(self) -> list[Environment]:
        return list(self._fetch().values())

    def ids(self) -> list[str]:
        return list(self._fetch())

    def get(self, env_id: str) -> Environment:
        try:
            return self._fetch()[env_id]
        except KeyError:
            raise NotFoundError(
                f"Site {self.site.name} has no {env_id} environment"
            ) from None


class Site:
    """One site the current user can access."""

    def __init__(self, record: SiteRecord, client: PlatformClient) -> None:
        self.record = record
        self.client = client
        self._environments: Optional[Environments] = None

    def __repr__(self) -> str:
        return f"<Site {self.name}>"

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def name(self) -> str:
        return self.record.name

    def get(self, field: str) -> Any:
        """Return a record field: id, name, owner or memberships."""
        try:
            return getattr(self.record, field)
        except AttributeError:
            raise KeyError(f"Site has no field {field!r}") from None

    @property
    def environments(self) -> Environments:
        if self._environments is None:
            self._environments = Environments(self, self.client)
        return self._environments


class Sites:
    """All sites the current user can access.

    The site list is expensive to build, so it is kept in memory once
    fetched and, when a cache directory is configured, on disk as well.
    """

    def __init__(
        self,
        client: PlatformClient,
        user_id: str,
        cache_dir: Optional[str | Path] = None,
    ) -> None:
        self.client = client
        self.user_id = user_id
        self.cache_dir = Path(cache_dir).expanduser() if cache_dir else None
        self._models: Optional[dict[str, Site]] = None

    @property
    def cache_path(self) -> Optional[Path]:
        if self.cache_dir is None:
            return None
        return self.cache_dir / f"sites-{self.user_id}.json"

    def _build(self, records: list[SiteRecord]) -> dict[str, Site]:
        models: dict[str, Site] = {}
        for record in records:
            if record.name in models:
                logger.warning("Duplicate site name %s ignored", record.name)
                continue
            models[record.name] = Site(record, self.client)
        self._models = models
        return models

    def rebuild_cache(self) -> None:
        """Fetch a fresh site list and store it in the cache."""
        self._fetch()

    def _fetch(self) -> dict[str, Site]:
        logger.debug("Fetching site list for user %s", self.user_id)
        try:
            records = [SiteRecord.from_api(d) for d in self.client.list_sites(self.user_id)]
        except ValueError as e:
            raise ApiError(f"Malformed site list: {e}") from e
        models = self._build(records)

        cache_path = self.cache_path
        if cache_path is None:
            return models
        cache_path.parent.mkdir(parents=True, exist_ok=True)
        with FileLock(cache_path.with_suffix(".lock")):
            cache_path.write_text(
                json.dumps([r.to_dict() for r in records], indent=2),
                encoding="utf-8",
            )
        logger.debug("Cached %d site(s) in %s", len(records), cache_path)
        return models

    def _load_cache(self) -> Optional[dict[str, Site]]:
        cache_path = self.cache_path
        if cache_path is None or not cache_path.exists():
            return None
        try:
            with FileLock(cache_path.with_suffix(".lock")):
                data = json.loads(cache_path.read_text(encoding="utf-8"))
            records = [SiteRecord.from_api(d) for d in data]
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning("Ignoring unreadable site cache %s: %s", cache_path, e)
            return None
        models = self._build(records)
        logger.debug("Loaded %d site(s) from %s", len(records), cache_path)
        return models

    def _sites(self) -> dict[str, Site]:
        if self._models is not None:
            return self._models
        models = self._load_cache()
        if models is None:
            models = self._fetch()
        return models

    def all(self) -> list[Site]:
        return list(self._sites().values())

    def get(self, name: str) -> Site:
        try:
            return self._sites()[name]
        except KeyError:
            raise NotFoundError(f"Cannot find site named {name}") from None
