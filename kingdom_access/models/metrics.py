"""Per-tenant and platform-wide activity metrics."""

from dataclasses import dataclass, field


@dataclass
class TenantMetrics:
    """Activity numbers computed inside a single tenant."""

    tenant_id: str
    total_users: int = 0
    active_users: int = 0
    role_distribution: dict[str, int] = field(default_factory=dict)

    @classmethod
    def zero(cls, tenant_id: str) -> "TenantMetrics":
        return cls(tenant_id=tenant_id)


@dataclass
class PlatformMetrics:
    """
    Rollup across every tenant.

    failed_tenant_ids lists tenants whose computation raised; they
    contribute zero to every other field.
    """

    total_tenants: int = 0
    active_tenants: int = 0
    reporting_tenants: int = 0
    failed_tenant_ids: list[str] = field(default_factory=list)
    total_users: int = 0
    active_users: int = 0
    activity_rate: float = 0.0
    role_distribution: dict[str, int] = field(default_factory=dict)
    top_tenants: list[TenantMetrics] = field(default_factory=list)
