import logging

from sqlalchemy.orm import Session

from kingdom_access.core.exceptions import NotFoundException, TenantRequiredError
from kingdom_access.models.effective_identity import EffectiveIdentity
from kingdom_access.repositories.tenant_repository import TenantRepository

logger = logging.getLogger(__name__)


class TenantQueryGate:
    """
    Decides which tenant id a data query must filter by.

    Tenant ids supplied in params, body or query are only a hint for the
    top role. Every other caller is clamped to their effective tenant.
    """

    def __init__(self, db: Session):
        self.tenant_repo = TenantRepository(db)

    def scoped_query(
        self,
        identity: EffectiveIdentity,
        explicit_tenant_id: str | None = None,
        allow_platform_wide: bool = False,
    ) -> str | None:
        """
        Resolve the tenant id for a query.

        Args:
            identity: Effective identity of the request
            explicit_tenant_id: Tenant requested by the caller, if any
            allow_platform_wide: Only the metrics aggregator passes True

        Returns:
            Tenant id to filter by, or None for a platform-wide query

        Raises:
            TenantRequiredError: If no tenant can be determined
            NotFoundException: If a top-role hint names no tenant
        """
        if identity.is_top_role:
            tenant_id = explicit_tenant_id or identity.tenant_id
            if tenant_id is None:
                if allow_platform_wide:
                    return None
                raise TenantRequiredError("Select an organization to continue")

            if self.tenant_repo.get_by_id(tenant_id) is None:
                raise NotFoundException("Organization not found")
            return tenant_id

        if explicit_tenant_id is not None and explicit_tenant_id != identity.tenant_id:
            logger.warning(
                "Ignoring tenant hint from user=%s scoped to its own tenant", identity.user_id
            )

        if identity.tenant_id is None:
            raise TenantRequiredError("No organization is associated with this account")
        return identity.tenant_id
