"""Typed options for the backup-all command and their validation."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

ALL = "all"
OWNER_ME = "me"


class OptionError(Exception):
    """An option value outside its allowed vocabulary."""


class Element(Enum):
    """Which part of an environment a backup covers."""

    ALL = "all"
    CODE = "code"
    DATABASE = "database"
    FILES = "files"

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls)

    @property
    def includes_code(self) -> bool:
        """Whether pending filesystem changes matter for this element."""
        return self in (Element.ALL, Element.CODE)


class ChangesPolicy(Enum):
    """How to treat uncommitted SFTP changes before a backup."""

    COMMIT = "commit"
    IGNORE = "ignore"
    SKIP = "skip"

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls)


ELEMENT_ERROR = (
    "Invalid --element argument value. "
    "Allowed values are all, code, database or files."
)
CHANGES_ERROR = (
    "Invalid --changes argument value. Allowed values are commit, ignore or skip."
)
ENV_ERROR = (
    "Invalid --env argument value. "
    "Allowed values are dev, test, live or a valid multi-site environment."
)


def parse_element(value: Optional[str]) -> Element:
    """Return the Element for value, defaulting to all."""
    if value is None:
        return Element.ALL
    try:
        return Element(value)
    except ValueError:
        raise OptionError(ELEMENT_ERROR) from None


def parse_changes(value: Optional[str]) -> ChangesPolicy:
    """Return the ChangesPolicy for value, defaulting to commit."""
    if value is None:
        return ChangesPolicy.COMMIT
    try:
        return ChangesPolicy(value)
    except ValueError:
        raise OptionError(CHANGES_ERROR) from None


@dataclass(frozen=True)
class BackupAllOptions:
    """Everything backup-all was asked to do.

    Attributes:
        env: Environment id to back up, or "all"
        element: Part of each environment to back up
        changes: Policy for pending SFTP changes
        team: Only sites the user is a team member of
        owner: Only sites owned by this user id ("me" for the session user)
        org: Only sites reachable via this organization id/name ("all" for any)
        name: Only sites whose name matches this regular expression
        cached: Use the cached site list instead of refetching
        keep_for: Days to retain each backup
        dry_run: Log what would happen without committing or backing up
        continue_on_error: Keep going after a failed site/environment
    """

    env: str = ALL
    element: Element = Element.ALL
    changes: ChangesPolicy = ChangesPolicy.COMMIT
    team: bool = False
    owner: Optional[str] = None
    org: Optional[str] = None
    name: Optional[str] = None
    cached: bool = False
    keep_for: int = 365
    dry_run: bool = False
    continue_on_error: bool = False

    @classmethod
    def build(
        cls,
        *,
        env: Optional[str] = None,
        element: Optional[str] = None,
        changes: Optional[str] = None,
        name: Optional[str] = None,
        **kwargs,
    ) -> "BackupAllOptions":
        """Validate raw string values and build the options.

        Only checks what can be checked without talking to the platform;
        the environment id is checked later against the fetched sites.

        Raises:
            OptionError: If element, changes or name is invalid
        """
        if name is not None:
            try:
                re.compile(name)
            except re.error as e:
                raise OptionError(f"Invalid --name regular expression: {e}") from None

        return cls(
            env=ALL if env is None else env,
            element=parse_element(element),
            changes=parse_changes(changes),
            name=name,
            **kwargs,
        )


def validate_env(env: str, sites) -> None:
    """Check that env is "all" or exists on at least one of the sites.

    Raises:
        OptionError: If no site has an environment with that id
    """
    if env == ALL:
        return
    for site in sites:
        if env in site.environments.ids():
            return
    raise OptionError(ENV_ERROR)
