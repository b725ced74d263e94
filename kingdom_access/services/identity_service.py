from sqlalchemy.orm import Session
from kingdom_access.models.user import User, UserStatus
from kingdom_access.repositories.user_repository import UserRepository


class IdentityResolver:
    """Resolves an authenticated principal id to its canonical user record"""

    def __init__(self, db: Session):
        self.user_repo = UserRepository(db)

    def resolve(self, principal_id: str) -> User | None:
        """
        Look up the user behind a principal id.

        Pure lookup with no side effects. Callers must treat None as
        unauthenticated. Soft-deleted (INACTIVE) users resolve to None.

        Args:
            principal_id: 'sub' claim from the bearer token

        Returns:
            Active User or None
        """
        user = self.user_repo.get_by_auth_id(principal_id)
        if user is None or user.status != UserStatus.ACTIVE:
            return None
        return user
