from datetime import datetime
from sqlalchemy import func
from sqlalchemy.orm import Session
from kingdom_access.models.role import Role
from kingdom_access.models.user import User, UserStatus


class UserRepository:
    """Repository for User model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: str) -> User | None:
        """Get user by internal ID"""
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_auth_id(self, auth_user_id: str) -> User | None:
        """Get user by the identity provider's 'sub' claim"""
        return self.db.query(User).filter(User.auth_user_id == auth_user_id).first()

    def get_by_tenant(self, tenant_id: str) -> list[User]:
        """
        Get active users belonging to a tenant.

        Args:
            tenant_id: Tenant ID the rows must carry

        Returns:
            Users ordered by id
        """
        return (
            self.db.query(User)
            .filter(User.tenant_id == tenant_id, User.status == UserStatus.ACTIVE)
            .order_by(User.id)
            .all()
        )

    def count_by_role(self, tenant_id: str) -> dict[Role, int]:
        """Count a tenant's active users per role. Roles with no users are absent."""
        rows = (
            self.db.query(User.role, func.count(User.id))
            .filter(User.tenant_id == tenant_id, User.status == UserStatus.ACTIVE)
            .group_by(User.role)
            .all()
        )
        return {role: count for role, count in rows}

    def count_active_since(self, tenant_id: str, cutoff: datetime) -> int:
        """Count a tenant's active users seen at or after cutoff"""
        return (
            self.db.query(func.count(User.id))
            .filter(
                User.tenant_id == tenant_id,
                User.status == UserStatus.ACTIVE,
                User.last_active_at >= cutoff,
            )
            .scalar()
        )

    def update_role(self, user: User, role: Role) -> User:
        """Assign a new role"""
        user.role = role
        self.db.commit()
        self.db.refresh(user)
        return user

    def update_tenant(self, user: User, tenant_id: str | None) -> User:
        """Move user to another tenant"""
        user.tenant_id = tenant_id
        self.db.commit()
        self.db.refresh(user)
        return user
