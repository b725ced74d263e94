import logging
from datetime import timedelta

from sqlalchemy.orm import Session

from kingdom_access.models.base import utcnow
from kingdom_access.models.effective_identity import EffectiveIdentity
from kingdom_access.models.metrics import PlatformMetrics, TenantMetrics
from kingdom_access.models.role import Role, TOP_ROLE
from kingdom_access.models.tenant import Tenant, TenantStatus
from kingdom_access.repositories.tenant_repository import TenantRepository
from kingdom_access.repositories.user_repository import UserRepository
from kingdom_access.services.access_service import authorize_role
from kingdom_access.services.tenant_gate import TenantQueryGate

logger = logging.getLogger(__name__)


class TenantMetricsService:
    """Computes activity metrics for one tenant"""

    def __init__(self, db: Session, active_window_days: int = 30):
        self.user_repo = UserRepository(db)
        self.active_window_days = active_window_days

    def compute(self, tenant_id: str) -> TenantMetrics:
        """
        Count users, recently active users and users per role in a tenant.

        Args:
            tenant_id: Tenant resolved by the query gate

        Returns:
            TenantMetrics for the tenant
        """
        cutoff = utcnow() - timedelta(days=self.active_window_days)

        role_distribution = {role.value: 0 for role in Role}
        for role, count in self.user_repo.count_by_role(tenant_id).items():
            role_distribution[role.value] = count

        return TenantMetrics(
            tenant_id=tenant_id,
            total_users=sum(role_distribution.values()),
            active_users=self.user_repo.count_active_since(tenant_id, cutoff),
            role_distribution=role_distribution,
        )


class PlatformMetricsAggregator:
    """
    Folds per-tenant metrics into platform-wide numbers.

    Each tenant is queried separately through the tenant gate; there is
    never one unscoped query across tenants. A tenant whose computation
    fails is logged and counted as zero.
    """

    def __init__(
        self,
        db: Session,
        tenant_metrics: TenantMetricsService | None = None,
        top_n: int = 5,
    ):
        self.db = db
        self.tenant_repo = TenantRepository(db)
        self.gate = TenantQueryGate(db)
        self.tenant_metrics = tenant_metrics or TenantMetricsService(db)
        self.top_n = top_n

    def aggregate(self, identity: EffectiveIdentity) -> PlatformMetrics:
        """
        Compute platform metrics for a top-role caller.

        Raises:
            ForbiddenException: If the effective role is not the top role
        """
        authorize_role(identity, TOP_ROLE)

        tenants = self._tenants_in_scope(identity)
        results = self._collect(identity, tenants)

        metrics = PlatformMetrics(
            total_tenants=len(tenants),
            active_tenants=sum(1 for t in tenants if t.status == TenantStatus.ACTIVE),
            role_distribution={role.value: 0 for role in Role},
        )

        for tenant in sorted(tenants, key=lambda t: t.id):
            result = results.get(tenant.id)
            if result is None:
                metrics.failed_tenant_ids.append(tenant.id)
                continue

            metrics.reporting_tenants += 1
            metrics.total_users += result.total_users
            metrics.active_users += result.active_users
            for role, count in result.role_distribution.items():
                metrics.role_distribution[role] = metrics.role_distribution.get(role, 0) + count

        if metrics.total_users:
            metrics.activity_rate = round(metrics.active_users / metrics.total_users, 4)

        ranked = sorted(results.values(), key=lambda m: (-m.total_users, m.tenant_id))
        metrics.top_tenants = ranked[: self.top_n]
        return metrics

    def overview(self, identity: EffectiveIdentity) -> list[tuple[Tenant, TenantMetrics]]:
        """
        Per-tenant metrics for every tenant, for the organizations overview.

        Tenants whose computation fails are reported with zero metrics.
        """
        authorize_role(identity, TOP_ROLE)

        tenants = self._tenants_in_scope(identity)
        results = self._collect(identity, tenants)
        return [(tenant, results.get(tenant.id) or TenantMetrics.zero(tenant.id)) for tenant in tenants]

    def _tenants_in_scope(self, identity: EffectiveIdentity) -> list[Tenant]:
        """
        Tenants the aggregation covers.

        Every tenant when the gate grants a platform-wide view; only the
        selected tenant when the caller is scoped to one (e.g. viewing as
        SUPER_ADMIN inside an organization).
        """
        scope = self.gate.scoped_query(identity, allow_platform_wide=True)
        if scope is None:
            return self.tenant_repo.get_all()
        return [self.tenant_repo.get_by_id(scope)]

    def _collect(self, identity: EffectiveIdentity, tenants: list[Tenant]) -> dict[str, TenantMetrics]:
        results: dict[str, TenantMetrics] = {}
        for tenant_id in [tenant.id for tenant in tenants]:
            try:
                scoped_tenant_id = self.gate.scoped_query(identity, explicit_tenant_id=tenant_id)
                results[tenant_id] = self.tenant_metrics.compute(scoped_tenant_id)
            except Exception:
                logger.exception("Metrics computation failed for tenant %s", tenant_id)
                # A failed statement aborts the transaction on PostgreSQL
                self.db.rollback()
        return results
