"""Platform role enum and the role hierarchy used for access checks."""

from enum import Enum as PyEnum
from types import MappingProxyType

from kingdom_access.core.exceptions import UnknownRoleError


class Role(str, PyEnum):
    """
    Platform roles with a strict total order.

    Role Hierarchy (highest to lowest):
    1. SUPER_ADMIN - Platform administrator, not bound to any tenant
    2. ORG_OWNER - Owns a church; manages its settings and staff
    3. ORG_ADMIN - Runs the church dashboards, manages members
    4. ORG_LEADER - Ministry leader; views results, manages placements
    5. PARTICIPANT - Church member taking assessments
    """

    SUPER_ADMIN = "SUPER_ADMIN"
    ORG_OWNER = "ORG_OWNER"
    ORG_ADMIN = "ORG_ADMIN"
    ORG_LEADER = "ORG_LEADER"
    PARTICIPANT = "PARTICIPANT"


ROLE_HIERARCHY = MappingProxyType(
    {
        Role.SUPER_ADMIN: 100,
        Role.ORG_OWNER: 90,
        Role.ORG_ADMIN: 70,
        Role.ORG_LEADER: 50,
        Role.PARTICIPANT: 10,
    }
)

TOP_ROLE = Role.SUPER_ADMIN


def parse_role(token: "Role | str") -> Role:
    """
    Turn a role token into a Role.

    Raises:
        UnknownRoleError: If the token names no role in the hierarchy
    """
    if isinstance(token, Role):
        return token
    try:
        return Role(token)
    except ValueError:
        raise UnknownRoleError(f"Unknown role: {token!r}") from None


def level(role: "Role | str") -> int:
    """Hierarchy level of a role. Only meaningful for >= comparisons."""
    return ROLE_HIERARCHY[parse_role(role)]


def at_least(role: "Role | str", minimum: "Role | str") -> bool:
    """Check if role meets or exceeds minimum in the hierarchy."""
    return level(role) >= level(minimum)
