"""Repository for Tenant model operations."""

from sqlalchemy.orm import Session
from kingdom_access.models.tenant import Tenant, TenantStatus


class TenantRepository:
    """Repository for Tenant model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, tenant_id: str) -> Tenant | None:
        """
        Get tenant by ID.

        Args:
            tenant_id: Tenant ID

        Returns:
            Tenant object or None if not found
        """
        return self.db.query(Tenant).filter(Tenant.id == tenant_id).first()

    def get_all(self) -> list[Tenant]:
        """
        Get all tenants, ordered by id.

        Returns:
            List of all Tenant objects
        """
        return self.db.query(Tenant).order_by(Tenant.id).all()

    def update_status(self, tenant: Tenant, status: TenantStatus) -> Tenant:
        """
        Activate or deactivate a tenant.

        Args:
            tenant: Tenant object to update
            status: New status

        Returns:
            Updated Tenant object
        """
        tenant.status = status
        self.db.commit()
        self.db.refresh(tenant)
        return tenant
