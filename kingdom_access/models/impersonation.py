"""View-as context stored in the caller's session."""

from dataclasses import dataclass, asdict
from datetime import datetime, timedelta

from kingdom_access.models.role import Role, parse_role


@dataclass(frozen=True)
class ImpersonationContext:
    """
    A top-role caller acting with another role's scope.

    Attributes:
        granted_by: Id of the real user who created the context
        effective_role: Role every authorization decision uses while active
        effective_tenant_id: Tenant to view, or None to keep the real tenant
        created_at: Naive UTC creation time
    """

    granted_by: str
    effective_role: Role
    effective_tenant_id: str | None
    created_at: datetime

    def is_expired(self, now: datetime, ttl_seconds: int) -> bool:
        """A ttl of 0 means the context lives as long as the session."""
        if ttl_seconds <= 0:
            return False
        return now - self.created_at > timedelta(seconds=ttl_seconds)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["effective_role"] = self.effective_role.value
        data["created_at"] = self.created_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ImpersonationContext":
        return cls(
            granted_by=data["granted_by"],
            effective_role=parse_role(data["effective_role"]),
            effective_tenant_id=data.get("effective_tenant_id"),
            created_at=datetime.fromisoformat(data["created_at"]),
        )
