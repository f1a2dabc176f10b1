"""Remote-object client layer for the hosting platform."""

from .client import ApiError, HttpPlatformClient, NotFoundError, PlatformClient
from .collections import Backups, Environment, Environments, Site, Sites
from .records import EnvironmentRecord, Membership, SiteRecord, Workflow

__all__ = [
    "ApiError",
    "NotFoundError",
    "PlatformClient",
    "HttpPlatformClient",
    "Backups",
    "Environment",
    "Environments",
    "Site",
    "Sites",
    "EnvironmentRecord",
    "Membership",
    "SiteRecord",
    "Workflow",
]
