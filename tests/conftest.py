"""Pytest configuration and shared fixtures."""

import copy
import json

import pytest

from site_backup_ng.models.client import ApiError
from site_backup_ng.models.collections import BACKUP_WORKFLOW, COMMIT_WORKFLOW, Sites

USER_ID = "user-1"

SITES = [
    {
        "id": "site-alpha",
        "name": "alpha",
        "owner": "user-1",
        "memberships": [{"type": "team", "id": "user-1", "name": "Team"}],
    },
    {
        "id": "site-beta",
        "name": "beta",
        "owner": "user-2",
        "memberships": [{"type": "organization", "id": "org-1", "name": "Acme"}],
    },
    {
        "id": "site-gamma",
        "name": "gamma-blog",
        "owner": "user-1",
        "memberships": [
            {"type": "organization", "id": "org-2", "name": "Globex"},
            {"type": "team", "id": "user-1", "name": "Team"},
        ],
    },
    {
        "id": "site-delta",
        "name": "delta",
        "owner": "user-3",
        "memberships": [{"type": "team", "id": "user-3", "name": "Partner"}],
    },
]


def _envs(sftp_dev: bool = False, extra: tuple = ()) -> dict:
    envs = {
        "dev": {"on_server_development": sftp_dev},
        "test": {"on_server_development": False},
        "live": {"on_server_development": False},
    }
    for name in extra:
        envs[name] = {"connection_mode": "git"}
    return envs


ENVIRONMENTS = {
    "site-alpha": _envs(sftp_dev=True),
    "site-beta": _envs(),
    "site-gamma": _envs(extra=("feature",)),
    "site-delta": _envs(),
}


class FakePlatformClient:
    """In-memory PlatformClient that records every call."""

    def __init__(self, sites=None, environments=None, diffstats=None, fail_on=None):
        self.sites = copy.deepcopy(SITES if sites is None else sites)
        self.environments = copy.deepcopy(
            ENVIRONMENTS if environments is None else environments
        )
        self.diffstats = diffstats or {}
        self.fail_on = set(fail_on or ())
        self.calls: list[tuple] = []
        self.workflows: list[tuple] = []
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed = True

    def list_sites(self, user_id):
        self.calls.append(("list_sites", user_id))
        return copy.deepcopy(self.sites)

    def list_environments(self, site_id):
        self.calls.append(("list_environments", site_id))
        return copy.deepcopy(self.environments.get(site_id, {}))

    def get_diffstat(self, site_id, env_id):
        self.calls.append(("get_diffstat", site_id, env_id))
        return dict(self.diffstats.get((site_id, env_id), {}))

    def create_workflow(self, site_id, env_id, workflow_type, params):
        self.calls.append(("create_workflow", site_id, env_id, workflow_type))
        if (site_id, env_id) in self.fail_on:
            raise ApiError(f"workflow refused for {site_id}.{env_id}", 500)
        self.workflows.append((site_id, env_id, workflow_type, params))
        return {"id": f"wf-{len(self.workflows)}", "type": workflow_type}

    @property
    def backups(self) -> list[tuple]:
        return [w for w in self.workflows if w[2] == BACKUP_WORKFLOW]

    @property
    def commits(self) -> list[tuple]:
        return [w for w in self.workflows if w[2] == COMMIT_WORKFLOW]

    @property
    def remote_calls(self) -> int:
        return len(self.calls)


@pytest.fixture
def fake_client():
    """A fake client over the sample sites."""
    return FakePlatformClient()


@pytest.fixture
def sites(fake_client):
    """Uncached site collection over the fake client."""
    return Sites(fake_client, USER_ID)


@pytest.fixture
def tmp_config_dir(tmp_path):
    """Create a temporary config directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def sample_config_toml():
    """Return a sample valid TOML configuration string."""
    return """
[global]
cache_dir = "/tmp/site-backup-ng-test-cache"
log_file = "/tmp/site-backup-ng-test.log"

[api]
base_url = "https://api.example.test/api/"
timeout = 15
verify_ssl = true

[session]
file = "/tmp/session.json"

[backup]
element = "database"
changes = "skip"
env = "live"
keep_for = 30
"""


@pytest.fixture
def config_file(tmp_config_dir, sample_config_toml):
    """Create a temporary config file with sample content."""
    config_path = tmp_config_dir / "config.toml"
    config_path.write_text(sample_config_toml)
    return config_path


@pytest.fixture
def session_file(tmp_path):
    """Write a valid session file."""
    path = tmp_path / "session.json"
    path.write_text(json.dumps({"user_id": USER_ID, "session": "secret-token"}))
    return path
