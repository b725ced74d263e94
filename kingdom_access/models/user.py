from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import String, Enum, ForeignKey, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING, Optional

from kingdom_access.models.base import Base, TimestampMixin, utcnow
from kingdom_access.models.role import Role

if TYPE_CHECKING:
    from kingdom_access.models.tenant import Tenant


class UserStatus(str, PyEnum):
    """Soft-delete status; users are never physically removed"""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class User(Base, TimestampMixin):
    """
    Canonical user record.

    auth_user_id is the 'sub' claim issued by the identity provider and is
    the principal id every request is resolved from. tenant_id is null only
    for the top role.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    auth_user_id: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[Role] = mapped_column(
        Enum(Role, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=Role.PARTICIPANT,
    )
    tenant_id: Mapped[str | None] = mapped_column(
        String(64),
        ForeignKey("tenants.id"),
        nullable=True,
        index=True,  # Every tenant-scoped user listing filters on this
    )
    status: Mapped[UserStatus] = mapped_column(
        Enum(UserStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=UserStatus.ACTIVE,
    )
    last_active_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    # Relationships
    tenant: Mapped[Optional["Tenant"]] = relationship("Tenant", back_populates="users")

    def __repr__(self) -> str:
        return f"<User(id='{self.id}', role={self.role.value}, tenant_id={self.tenant_id!r})>"
