"""Authorization decisions over an effective identity."""

import logging

from kingdom_access.core.exceptions import ForbiddenException, UnauthenticatedException
from kingdom_access.models.effective_identity import EffectiveIdentity
from kingdom_access.models.permission import Permission, parse_permission
from kingdom_access.models.role import Role, at_least, parse_role
from kingdom_access.models.user import User

logger = logging.getLogger(__name__)


def authorize_role(identity: EffectiveIdentity | None, min_role: Role | str) -> EffectiveIdentity:
    """
    Structural gate: the effective role must be at least min_role.

    Raises:
        UnauthenticatedException: If there is no identity
        ForbiddenException: If the effective role is below min_role
    """
    required = parse_role(min_role)
    if identity is None:
        raise UnauthenticatedException("Authentication required")

    if not at_least(identity.role, required):
        logger.warning(
            "Role check failed: user=%s effective_role=%s required=%s impersonating=%s",
            identity.user_id,
            identity.role.value,
            required.value,
            identity.is_impersonating,
        )
        raise ForbiddenException(
            "Insufficient role permissions",
            reason="insufficient_role",
            required_role=required.value,
            user_role=identity.role.value,
        )
    return identity


def authorize_permission(
    identity: EffectiveIdentity | None, permission: Permission | str
) -> EffectiveIdentity:
    """
    Feature gate: the effective role must hold permission.

    Raises:
        UnauthenticatedException: If there is no identity
        ForbiddenException: If the effective role lacks permission
    """
    required = parse_permission(permission)
    if identity is None:
        raise UnauthenticatedException("Authentication required")

    if not identity.can(required):
        logger.warning(
            "Permission check failed: user=%s effective_role=%s required=%s",
            identity.user_id,
            identity.role.value,
            required.value,
        )
        raise ForbiddenException(
            "Insufficient permissions",
            reason="insufficient_permission",
            required_permission=required.value,
        )
    return identity


def can_manage_user(identity: EffectiveIdentity, target: User) -> bool:
    """
    Check if identity may change target's role or tenant.

    The top role manages anyone. Everyone else only manages users in their
    own tenant whose role is strictly below their own.
    """
    if identity.is_top_role:
        return True
    if identity.tenant_id is None or identity.tenant_id != target.tenant_id:
        return False
    return not at_least(target.role, identity.role)
