"""Named capabilities and the static role -> permission table."""

from enum import Enum as PyEnum
from types import MappingProxyType

from kingdom_access.core.exceptions import UnknownPermissionError, UnknownRoleError
from kingdom_access.models.role import Role, TOP_ROLE, parse_role


class Permission(str, PyEnum):
    """Capabilities granted to roles. ALL is the top role's wildcard."""

    # Organization management
    ORG_MANAGE = "org_manage"
    ORG_VIEW = "org_view"

    # User management
    USERS_MANAGE = "users_manage"
    USERS_VIEW = "users_view"

    # Results and assessments
    RESULTS_MANAGE = "results_manage"
    RESULTS_VIEW = "results_view"

    # Placements
    PLACEMENTS_MANAGE = "placements_manage"
    PLACEMENTS_VIEW = "placements_view"

    # Data export
    EXPORT_DATA = "export_data"

    # Assessment taking
    ASSESSMENT_TAKE = "assessment_take"

    # Global wildcard
    ALL = "all"


_ORG_ADMIN_PERMISSIONS = frozenset(
    {
        Permission.ORG_VIEW,
        Permission.USERS_MANAGE,
        Permission.USERS_VIEW,
        Permission.RESULTS_MANAGE,
        Permission.RESULTS_VIEW,
        Permission.PLACEMENTS_MANAGE,
        Permission.PLACEMENTS_VIEW,
        Permission.EXPORT_DATA,
        Permission.ASSESSMENT_TAKE,
    }
)

ROLE_PERMISSIONS = MappingProxyType(
    {
        Role.SUPER_ADMIN: frozenset({Permission.ALL}),
        Role.ORG_OWNER: _ORG_ADMIN_PERMISSIONS | {Permission.ORG_MANAGE},
        Role.ORG_ADMIN: _ORG_ADMIN_PERMISSIONS,
        Role.ORG_LEADER: frozenset(
            {
                Permission.USERS_VIEW,
                Permission.RESULTS_VIEW,
                Permission.PLACEMENTS_VIEW,
                Permission.PLACEMENTS_MANAGE,
                Permission.ASSESSMENT_TAKE,
            }
        ),
        Role.PARTICIPANT: frozenset({Permission.ASSESSMENT_TAKE}),
    }
)


def parse_permission(token: "Permission | str") -> Permission:
    """
    Turn a permission token into a Permission.

    Raises:
        UnknownPermissionError: If the token is not a known capability
    """
    if isinstance(token, Permission):
        return token
    try:
        return Permission(token)
    except ValueError:
        raise UnknownPermissionError(f"Unknown permission: {token!r}") from None


def permissions_for(role: "Role | str") -> frozenset[Permission]:
    """
    Permissions held by a role.

    Roles missing from the table (or unknown tokens) hold nothing.
    """
    try:
        role = parse_role(role)
    except UnknownRoleError:
        return frozenset()
    return ROLE_PERMISSIONS.get(role, frozenset())


def has_permission(role: "Role | str", permission: "Permission | str") -> bool:
    """Check if role holds permission, directly or through the ALL wildcard."""
    granted = permissions_for(role)
    return parse_permission(permission) in granted or Permission.ALL in granted


def validate_permission_table(table=ROLE_PERMISSIONS) -> None:
    """
    Check the permission table at startup.

    Raises:
        UnknownRoleError: If the table names an unknown role or misses one
        UnknownPermissionError: If a permission token is unknown, or the
            ALL wildcard is granted below the top role
    """
    for role_token, permissions in table.items():
        role = parse_role(role_token)
        for token in permissions:
            permission = parse_permission(token)
            if permission == Permission.ALL and role != TOP_ROLE:
                raise UnknownPermissionError(
                    f"Wildcard permission granted to non-top role {role.value}"
                )

    missing = set(Role) - {parse_role(r) for r in table}
    if missing:
        names = ", ".join(sorted(r.value for r in missing))
        raise UnknownRoleError(f"Permission table missing roles: {names}")
