from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from kingdom_access.config import settings
from kingdom_access.database import get_db
from kingdom_access.dependencies import require_role
from kingdom_access.models.effective_identity import EffectiveIdentity
from kingdom_access.models.role import Role
from kingdom_access.repositories.tenant_repository import TenantRepository
from kingdom_access.schemas.metrics_schemas import PlatformMetricsResponse
from kingdom_access.schemas.tenant_schemas import (
    TenantOverviewResponse,
    TenantResponse,
    TenantStatusUpdate,
    TenantStatusUpdateResponse,
)
from kingdom_access.services.metrics_service import (
    PlatformMetricsAggregator,
    TenantMetricsService,
)
from kingdom_access.services.user_admin_service import UserAdminService

router = APIRouter()

require_super_admin = require_role(Role.SUPER_ADMIN)


def get_aggregator(db: Session = Depends(get_db)) -> PlatformMetricsAggregator:
    return PlatformMetricsAggregator(
        db,
        tenant_metrics=TenantMetricsService(db, active_window_days=settings.ACTIVE_WINDOW_DAYS),
        top_n=settings.TOP_TENANTS_LIMIT,
    )


@router.get("/platform-metrics", response_model=PlatformMetricsResponse)
async def platform_metrics(
    identity: EffectiveIdentity = Depends(require_super_admin),
    aggregator: PlatformMetricsAggregator = Depends(get_aggregator),
):
    """
    Platform-wide metrics across every organization.

    - **Requires SUPER_ADMIN** (not available while viewing as a lower role)
    - Organizations whose metrics fail are listed in failed_tenant_ids
    """
    return aggregator.aggregate(identity)


@router.get("/organizations", response_model=list[TenantResponse])
async def list_organizations(
    identity: EffectiveIdentity = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    """List all organizations on the platform."""
    return TenantRepository(db).get_all()


@router.get("/organizations/overview", response_model=list[TenantOverviewResponse])
async def organizations_overview(
    identity: EffectiveIdentity = Depends(require_super_admin),
    aggregator: PlatformMetricsAggregator = Depends(get_aggregator),
):
    """List all organizations with their activity metrics."""
    return [
        {
            "id": tenant.id,
            "name": tenant.name,
            "status": tenant.status,
            "created_at": tenant.created_at,
            "updated_at": tenant.updated_at,
            "metrics": metrics,
        }
        for tenant, metrics in aggregator.overview(identity)
    ]


@router.patch("/organizations/{tenant_id}/status", response_model=TenantStatusUpdateResponse)
async def update_organization_status(
    tenant_id: str,
    status_update: TenantStatusUpdate,
    identity: EffectiveIdentity = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    """
    Activate or deactivate an organization.

    - **Requires SUPER_ADMIN**
    """
    service = UserAdminService(db)
    tenant = service.update_tenant_status(identity, tenant_id, status_update.status)
    return {
        "success": True,
        "organization": tenant,
        "message": f"Organization {tenant.status.value.lower()} successfully",
    }
