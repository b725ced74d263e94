"""Effective identity used for every authorization decision in a request."""

from dataclasses import dataclass, field

from kingdom_access.models.impersonation import ImpersonationContext
from kingdom_access.models.permission import Permission, has_permission, permissions_for
from kingdom_access.models.role import Role, TOP_ROLE, at_least


@dataclass(frozen=True)
class EffectiveIdentity:
    """
    Identity the request is authorized as.

    Equal to the real user's role and tenant unless a view-as context
    overrides them. The real values are kept for the audit trail only and
    must not feed authorization decisions.

    Attributes:
        user_id: Id of the real, authenticated user
        role: Effective role
        tenant_id: Effective tenant (None for the top role without a tenant)
        real_role: The user's own role
        real_tenant_id: The user's own tenant
        impersonation: Active view-as context, if any
    """

    user_id: str
    role: Role
    tenant_id: str | None
    real_role: Role
    real_tenant_id: str | None
    impersonation: ImpersonationContext | None = None
    permissions: frozenset[Permission] = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "permissions", permissions_for(self.role))

    @property
    def is_impersonating(self) -> bool:
        return self.impersonation is not None

    @property
    def is_top_role(self) -> bool:
        return self.role == TOP_ROLE

    def has_role(self, minimum: Role | str) -> bool:
        """Check if the effective role meets or exceeds minimum."""
        return at_least(self.role, minimum)

    def can(self, permission: Permission | str) -> bool:
        """Check if the effective role holds permission."""
        return has_permission(self.role, permission)

    def __repr__(self) -> str:
        return (
            f"<EffectiveIdentity(user_id='{self.user_id}', role={self.role.value}, "
            f"tenant_id={self.tenant_id!r}, impersonating={self.is_impersonating})>"
        )
