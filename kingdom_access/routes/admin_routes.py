from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from kingdom_access.config import settings
from kingdom_access.database import get_db
from kingdom_access.dependencies import require_permission, require_role
from kingdom_access.models.effective_identity import EffectiveIdentity
from kingdom_access.models.permission import Permission
from kingdom_access.models.role import Role
from kingdom_access.schemas.metrics_schemas import TenantMetricsResponse
from kingdom_access.schemas.user_schemas import (
    UserResponse,
    UserRoleUpdate,
    UserTenantTransfer,
)
from kingdom_access.services.metrics_service import TenantMetricsService
from kingdom_access.services.tenant_gate import TenantQueryGate
from kingdom_access.services.user_admin_service import UserAdminService

router = APIRouter()


@router.get("/dashboard/metrics", response_model=TenantMetricsResponse)
async def get_dashboard_metrics(
    tenant_id: str | None = None,
    identity: EffectiveIdentity = Depends(require_role(Role.ORG_ADMIN)),
    db: Session = Depends(get_db),
):
    """
    Activity metrics for the caller's organization.

    - **Requires ORG_ADMIN or higher**
    - tenant_id is honoured for SUPER_ADMIN only; everyone else always
      gets their own organization
    """
    scoped_tenant_id = TenantQueryGate(db).scoped_query(identity, explicit_tenant_id=tenant_id)
    service = TenantMetricsService(db, active_window_days=settings.ACTIVE_WINDOW_DAYS)
    return service.compute(scoped_tenant_id)


@router.get("/dashboard/users", response_model=list[UserResponse])
async def get_dashboard_users(
    tenant_id: str | None = None,
    identity: EffectiveIdentity = Depends(require_permission(Permission.USERS_VIEW)),
    db: Session = Depends(get_db),
):
    """
    List active users of the caller's organization.

    - **Requires users_view**
    """
    service = UserAdminService(db)
    return service.list_tenant_users(identity, tenant_id)


@router.put("/users/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: str,
    role_update: UserRoleUpdate,
    identity: EffectiveIdentity = Depends(require_permission(Permission.USERS_MANAGE)),
    db: Session = Depends(get_db),
):
    """
    Change a user's role.

    - **Requires users_manage**
    - Target must be in your organization and below your role
    - Cannot assign a role at or above your own
    """
    service = UserAdminService(db)
    return service.change_role(identity, user_id, role_update.role)


@router.put("/users/{user_id}/tenant", response_model=UserResponse)
async def transfer_user_tenant(
    user_id: str,
    transfer: UserTenantTransfer,
    identity: EffectiveIdentity = Depends(require_role(Role.SUPER_ADMIN)),
    db: Session = Depends(get_db),
):
    """
    Move a user to another organization.

    - **Requires SUPER_ADMIN**
    - Destination organization must be active
    """
    service = UserAdminService(db)
    return service.transfer_tenant(identity, user_id, transfer.tenant_id)
