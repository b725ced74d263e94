"""Tenant model for multi-tenant isolation."""

from enum import Enum as PyEnum
from sqlalchemy import String, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from kingdom_access.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from kingdom_access.models.user import User


class TenantStatus(str, PyEnum):
    """Tenant lifecycle status"""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class Tenant(Base, TimestampMixin):
    """
    Multi-tenant isolation boundary.

    A tenant is one church on the platform. Every user below the top role
    belongs to exactly one tenant, and every tenant-scoped query filters by
    the tenant id resolved for the caller.
    """

    __tablename__ = "tenants"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[TenantStatus] = mapped_column(
        Enum(TenantStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=TenantStatus.ACTIVE,
    )

    # Relationships
    users: Mapped[list["User"]] = relationship("User", back_populates="tenant")

    def __repr__(self) -> str:
        return f"<Tenant(id='{self.id}', name='{self.name}', status={self.status.value})>"
