"""Plain records for the objects the platform API returns."""

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class Membership:
    """A site's association with a team or an organization."""

    type: str
    id: str
    name: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Membership":
        return cls(
            type=str(data.get("type", "")),
            id=str(data.get("id", "")),
            name=str(data.get("name") or ""),
        )


@dataclass(frozen=True)
class SiteRecord:
    """One site as listed for the current user.

    Attributes:
        id: Site UUID
        name: Machine name, unique across the user's sites
        owner: UUID of the owning user
        memberships: Teams and organizations the site is reachable through
    """

    id: str
    name: str
    owner: str = ""
    memberships: tuple[Membership, ...] = field(default_factory=tuple)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "SiteRecord":
        if "name" not in data:
            raise ValueError(f"Site record without a name: {data!r}")
        return cls(
            id=str(data.get("id") or data["name"]),
            name=str(data["name"]),
            owner=str(data.get("owner") or ""),
            memberships=tuple(
                Membership.from_api(m) for m in data.get("memberships") or []
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to the API shape, used by the site list cache."""
        data = asdict(self)
        data["memberships"] = [asdict(m) for m in self.memberships]
        return data


@dataclass(frozen=True)
class EnvironmentRecord:
    """One environment of a site."""

    id: str
    connection_mode: str = "git"

    @classmethod
    def from_api(cls, env_id: str, data: dict[str, Any]) -> "EnvironmentRecord":
        mode = data.get("connection_mode")
        if not mode:
            mode = "sftp" if data.get("on_server_development") else "git"
        return cls(id=env_id, connection_mode=str(mode))


@dataclass(frozen=True)
class Workflow:
    """A long-running remote operation the platform accepted."""

    id: str
    type: str
    status: str = "pending"

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Workflow":
        return cls(
            id=str(data.get("id", "")),
            type=str(data.get("type", "")),
            status=str(data.get("result") or data.get("status") or "pending"),
        )
