"""Site filters for backup-all.

Each filter takes a list of sites and returns a new, narrower list in the
same order. None of them touch the site records.
"""

import logging
import re
from typing import Optional

from .options import ALL, OWNER_ME, BackupAllOptions

logger = logging.getLogger(__name__)

TEAM_MEMBERSHIP_NAME = "Team"
ORGANIZATION_TYPE = "organization"


def filter_by_team_membership(sites: list) -> list:
    """Keep sites the user reaches through team membership."""
    return [
        site
        for site in sites
        if any(m.name == TEAM_MEMBERSHIP_NAME for m in site.get("memberships"))
    ]


def filter_by_organizational_membership(sites: list, org_id: str = ALL) -> list:
    """Keep sites reachable through an organization.

    With org_id "all", any organization membership counts; otherwise the
    membership id must equal org_id exactly.
    """

    def matches(site) -> bool:
        for membership in site.get("memberships"):
            if org_id == ALL and membership.type == ORGANIZATION_TYPE:
                return True
            if membership.id == org_id:
                return True
        return False

    return [site for site in sites if matches(site)]


def filter_by_name(sites: list, regex: str = "(.*)") -> list:
    """Keep sites whose name contains a match for regex (not anchored)."""
    pattern = re.compile(regex)
    return [site for site in sites if pattern.search(site.get("name"))]


def filter_by_owner(sites: list, owner_id: str) -> list:
    """Keep sites owned by owner_id."""
    return [site for site in sites if site.get("owner") == owner_id]


def resolve_org_id(sites: list, org: Optional[str]) -> str:
    """Turn an --org value into an organization id.

    No value means "all". A value naming one of the organizations the
    sites belong to maps to that organization's id; anything else is
    taken to be an id already.
    """
    if not org or org == ALL:
        return ALL
    for site in sites:
        for membership in site.get("memberships"):
            if membership.type != ORGANIZATION_TYPE:
                continue
            if membership.id == org:
                return org
            if membership.name == org:
                logger.debug("Organization %s resolved to %s", org, membership.id)
                return membership.id
    return org


def resolve_owner_id(owner: str, user_id: str) -> str:
    """Map "me" to the session user's id."""
    return user_id if owner == OWNER_ME else owner


def apply_filters(sites: list, options: BackupAllOptions, user_id: str) -> list:
    """Run the requested filters in order: team, org, name, owner.

    Args:
        sites: Sites to narrow, in collection order
        options: Which filters to apply and their values
        user_id: Current session user, used for --owner=me

    Returns:
        The surviving sites, in their original order
    """
    if options.team:
        sites = filter_by_team_membership(sites)
    if options.org is not None:
        sites = filter_by_organizational_membership(
            sites, resolve_org_id(sites, options.org)
        )
    if options.name is not None:
        sites = filter_by_name(sites, options.name)
    if options.owner is not None:
        sites = filter_by_owner(sites, resolve_owner_id(options.owner, user_id))
    return sites
