from pydantic import BaseModel


class TenantMetricsResponse(BaseModel):
    """Activity metrics for a single tenant"""

    tenant_id: str
    total_users: int
    active_users: int
    role_distribution: dict[str, int]

    model_config = {"from_attributes": True}


class PlatformMetricsResponse(BaseModel):
    """Platform-wide rollup across all tenants"""

    total_tenants: int
    active_tenants: int
    reporting_tenants: int
    failed_tenant_ids: list[str]
    total_users: int
    active_users: int
    activity_rate: float
    role_distribution: dict[str, int]
    top_tenants: list[TenantMetricsResponse]

    model_config = {"from_attributes": True}
