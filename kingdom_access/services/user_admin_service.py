import logging

from sqlalchemy.orm import Session

from kingdom_access.core.exceptions import (
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from kingdom_access.models.effective_identity import EffectiveIdentity
from kingdom_access.models.role import Role, TOP_ROLE, at_least, parse_role
from kingdom_access.models.tenant import Tenant, TenantStatus
from kingdom_access.models.user import User
from kingdom_access.repositories.tenant_repository import TenantRepository
from kingdom_access.repositories.user_repository import UserRepository
from kingdom_access.services.access_service import authorize_role, can_manage_user
from kingdom_access.services.tenant_gate import TenantQueryGate

logger = logging.getLogger(__name__)


class UserAdminService:
    """Service layer for role changes, tenant transfers and tenant status"""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository(db)
        self.tenant_repo = TenantRepository(db)
        self.gate = TenantQueryGate(db)

    def list_tenant_users(
        self, identity: EffectiveIdentity, tenant_id: str | None = None
    ) -> list[User]:
        """
        List active users of the tenant the gate resolves for identity.

        Args:
            identity: Effective identity of the request
            tenant_id: Tenant hint (honoured for the top role only)
        """
        scoped_tenant_id = self.gate.scoped_query(identity, explicit_tenant_id=tenant_id)
        return self.user_repo.get_by_tenant(scoped_tenant_id)

    def change_role(self, identity: EffectiveIdentity, user_id: str, new_role: Role | str) -> User:
        """
        Assign a new role to a user.

        Raises:
            NotFoundException: If the user is missing or outside the caller's tenant
            ForbiddenException: If the caller cannot manage the user or assign the role
            ValidationException: If a tenant role is assigned to a user without a tenant
        """
        role = parse_role(new_role)
        target = self._get_visible_user(identity, user_id)

        if target.id == identity.user_id:
            raise ForbiddenException("Cannot change your own role", reason="cannot_manage_user")

        if not can_manage_user(identity, target):
            raise ForbiddenException(
                "Cannot manage a user at or above your own role",
                reason="cannot_manage_user",
            )

        if not identity.is_top_role and at_least(role, identity.role):
            raise ForbiddenException(
                "Cannot assign a role at or above your own",
                reason="cannot_manage_user",
            )

        if role != TOP_ROLE and target.tenant_id is None:
            raise ValidationException("User must belong to an organization to hold this role")

        previous = target.role
        updated = self.user_repo.update_role(target, role)
        logger.info(
            "Role changed: user=%s %s -> %s by=%s real_role=%s effective_role=%s impersonating=%s",
            target.id,
            previous.value,
            role.value,
            identity.user_id,
            identity.real_role.value,
            identity.role.value,
            identity.is_impersonating,
        )
        return updated

    def transfer_tenant(self, identity: EffectiveIdentity, user_id: str, tenant_id: str) -> User:
        """
        Move a user to another tenant (top role only).

        Raises:
            ForbiddenException: If the caller is not the top role or cannot manage the user
            NotFoundException: If the user or destination tenant is missing
            ValidationException: If the destination tenant is inactive
        """
        authorize_role(identity, TOP_ROLE)

        target = self.user_repo.get_by_id(user_id)
        if target is None:
            raise NotFoundException("User not found")

        if target.id == identity.user_id or not can_manage_user(identity, target):
            raise ForbiddenException("Cannot transfer this user", reason="cannot_manage_user")

        destination = self.tenant_repo.get_by_id(tenant_id)
        if destination is None:
            raise NotFoundException("Organization not found")
        if destination.status != TenantStatus.ACTIVE:
            raise ValidationException("Cannot transfer users into an inactive organization")

        previous = target.tenant_id
        updated = self.user_repo.update_tenant(target, destination.id)
        logger.info(
            "Tenant transfer: user=%s %s -> %s by=%s real_role=%s effective_role=%s impersonating=%s",
            target.id,
            previous,
            destination.id,
            identity.user_id,
            identity.real_role.value,
            identity.role.value,
            identity.is_impersonating,
        )
        return updated

    def update_tenant_status(
        self, identity: EffectiveIdentity, tenant_id: str, status: TenantStatus | str
    ) -> Tenant:
        """
        Activate or deactivate a tenant (top role only).

        Raises:
            ForbiddenException: If the caller is not the top role
            NotFoundException: If the tenant is missing
            ValidationException: If status is not ACTIVE or INACTIVE
        """
        authorize_role(identity, TOP_ROLE)

        try:
            new_status = TenantStatus(status)
        except ValueError:
            raise ValidationException("Invalid status. Must be ACTIVE or INACTIVE") from None

        tenant = self.tenant_repo.get_by_id(tenant_id)
        if tenant is None:
            raise NotFoundException("Organization not found")

        updated = self.tenant_repo.update_status(tenant, new_status)
        logger.info(
            "Tenant status changed: tenant=%s status=%s by=%s impersonating=%s",
            tenant.id,
            new_status.value,
            identity.user_id,
            identity.is_impersonating,
        )
        return updated

    def _get_visible_user(self, identity: EffectiveIdentity, user_id: str) -> User:
        """Fetch a user the caller may see; other tenants' users read as missing."""
        target = self.user_repo.get_by_id(user_id)
        if target is None:
            raise NotFoundException("User not found")

        if not identity.is_top_role:
            scoped_tenant_id = self.gate.scoped_query(identity)
            if target.tenant_id != scoped_tenant_id:
                raise NotFoundException("User not found")
        return target
