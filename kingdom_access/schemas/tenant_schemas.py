from pydantic import BaseModel, Field
from datetime import datetime
from kingdom_access.models.tenant import TenantStatus
from kingdom_access.schemas.metrics_schemas import TenantMetricsResponse


class TenantResponse(BaseModel):
    """Tenant details response"""

    id: str
    name: str
    status: TenantStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TenantStatusUpdate(BaseModel):
    """Activate or deactivate a tenant (SUPER_ADMIN only)"""

    status: TenantStatus = Field(..., description="ACTIVE or INACTIVE")


class TenantStatusUpdateResponse(BaseModel):
    """Response after changing tenant status"""

    success: bool
    organization: TenantResponse
    message: str


class TenantOverviewResponse(TenantResponse):
    """Tenant details with its activity metrics"""

    metrics: TenantMetricsResponse
