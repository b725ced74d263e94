import logging
from datetime import datetime
from typing import Callable

from kingdom_access.core.exceptions import ForbiddenException, NotFoundException
from kingdom_access.models.base import utcnow
from kingdom_access.models.effective_identity import EffectiveIdentity
from kingdom_access.models.impersonation import ImpersonationContext
from kingdom_access.models.role import Role, TOP_ROLE, parse_role
from kingdom_access.models.user import User
from kingdom_access.repositories.session_repository import SessionStore
from kingdom_access.repositories.tenant_repository import TenantRepository

logger = logging.getLogger(__name__)

VIEW_AS_SESSION_KEY = "view_as"


class ImpersonationStore:
    """
    Manages the view-as context attached to a caller's session.

    The session store is the only place the context lives; nothing here is
    cached between requests. current() is the single entry point for
    deciding which role and tenant a request is authorized as.
    """

    def __init__(
        self,
        sessions: SessionStore,
        tenant_repo: TenantRepository,
        ttl_seconds: int = 0,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.sessions = sessions
        self.tenant_repo = tenant_repo
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    def grant(
        self,
        session_id: str,
        real_user: User,
        effective_role: Role | str,
        effective_tenant_id: str | None = None,
    ) -> ImpersonationContext:
        """
        Start viewing as another role, optionally inside a specific tenant.

        Replaces any existing context for the session (last write wins).

        Raises:
            ForbiddenException: If the real user is not the top role
            UnknownRoleError: If effective_role is not a known role
            NotFoundException: If effective_tenant_id names no tenant
        """
        role = self.check_grant(real_user, effective_role, effective_tenant_id)

        context = ImpersonationContext(
            granted_by=real_user.id,
            effective_role=role,
            effective_tenant_id=effective_tenant_id,
            created_at=self.clock(),
        )
        self.sessions.set(session_id, VIEW_AS_SESSION_KEY, context.to_dict())

        logger.info(
            "View-as granted: user=%s effective_role=%s effective_tenant=%s",
            real_user.id,
            role.value,
            effective_tenant_id,
        )
        return context

    def check_grant(
        self,
        real_user: User,
        effective_role: Role | str,
        effective_tenant_id: str | None = None,
    ) -> Role:
        """
        Validate a view-as request without touching any session.

        Raises the same errors as grant().
        """
        if real_user.role != TOP_ROLE:
            logger.warning(
                "View-as denied: user=%s role=%s", real_user.id, real_user.role.value
            )
            raise ForbiddenException(
                "Only super admins can view as another role",
                reason="view_as_not_allowed",
                required_role=TOP_ROLE.value,
                user_role=real_user.role.value,
            )

        role = parse_role(effective_role)
        if effective_tenant_id is not None and self.tenant_repo.get_by_id(effective_tenant_id) is None:
            raise NotFoundException("Organization not found")
        return role

    def read(self, session_id: str | None) -> ImpersonationContext | None:
        """Get the session's live view-as context. Never modifies the session."""
        if session_id is None:
            return None

        raw = self.sessions.get(session_id, VIEW_AS_SESSION_KEY)
        if not raw:
            return None

        try:
            context = ImpersonationContext.from_dict(raw)
        except (KeyError, TypeError, ValueError):
            logger.warning("Ignoring malformed view-as context in session")
            return None

        if context.is_expired(self.clock(), self.ttl_seconds):
            return None
        return context

    def clear(self, session_id: str | None) -> bool:
        """
        Return to the real identity. Clearing an already clear session is a no-op.

        Returns:
            True if a context was removed
        """
        if session_id is None or self.sessions.load(session_id) is None:
            return False

        removed = self.sessions.delete(session_id, VIEW_AS_SESSION_KEY)
        if removed:
            logger.info("View-as cleared for session")
        return removed

    def current(self, session_id: str | None, real_user: User) -> EffectiveIdentity:
        """
        Resolve the identity the request is authorized as.

        A context that was not granted by this user, or whose granter no
        longer holds the top role, is ignored.
        """
        context = self.read(session_id)

        if context is not None and (
            context.granted_by != real_user.id or real_user.role != TOP_ROLE
        ):
            logger.warning("Ignoring view-as context not owned by user=%s", real_user.id)
            context = None

        if context is None:
            return EffectiveIdentity(
                user_id=real_user.id,
                role=real_user.role,
                tenant_id=real_user.tenant_id,
                real_role=real_user.role,
                real_tenant_id=real_user.tenant_id,
            )

        return EffectiveIdentity(
            user_id=real_user.id,
            role=context.effective_role,
            tenant_id=(
                context.effective_tenant_id
                if context.effective_tenant_id is not None
                else real_user.tenant_id
            ),
            real_role=real_user.role,
            real_tenant_id=real_user.tenant_id,
            impersonation=context,
        )
