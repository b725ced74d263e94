from fastapi import Depends, Request, Response
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from kingdom_access.config import settings
from kingdom_access.core.exceptions import UnauthenticatedException
from kingdom_access.core.security import extract_principal_id
from kingdom_access.database import get_db
from kingdom_access.models.effective_identity import EffectiveIdentity
from kingdom_access.models.permission import Permission, parse_permission
from kingdom_access.models.role import Role, parse_role
from kingdom_access.models.user import User
from kingdom_access.repositories.session_repository import SessionStore
from kingdom_access.repositories.tenant_repository import TenantRepository
from kingdom_access.services.access_service import authorize_permission, authorize_role
from kingdom_access.services.identity_service import IdentityResolver
from kingdom_access.services.impersonation_service import ImpersonationStore

# auto_error=False so a missing header surfaces as our own 401
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    FastAPI dependency resolving the real, authenticated user.

    Flow:
    1. Extract token from Authorization: Bearer <token>
    2. Validate JWT using shared SECRET_KEY
    3. Resolve the 'sub' claim to an active User record

    Raises:
        UnauthenticatedException: If the token is missing or invalid, or the
            principal resolves to no active user
    """
    if credentials is None:
        raise UnauthenticatedException("Authentication required")

    principal_id = extract_principal_id(credentials.credentials)
    user = IdentityResolver(db).resolve(principal_id)
    if user is None:
        raise UnauthenticatedException("User not found")
    return user


def get_session_store(db: Session = Depends(get_db)) -> SessionStore:
    return SessionStore(db, ttl_seconds=settings.SESSION_TTL_SECONDS)


async def get_session_id(
    request: Request,
    user: User = Depends(get_current_user),
    sessions: SessionStore = Depends(get_session_store),
) -> str | None:
    """
    Id of the caller's live session, or None.

    Read-only: a missing, expired or foreign session cookie yields None so
    view-as state never crosses from one principal to another. Sessions are
    only started by start_session.
    """
    session_id = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not session_id:
        return None

    record = sessions.load(session_id)
    if record is None or record.user_id != user.id:
        return None
    return record.id


def start_session(response: Response, user: User, sessions: SessionStore) -> str:
    """Create a session for user and hand its id to the client as a cookie."""
    record = sessions.create(user.id)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=record.id,
        max_age=settings.SESSION_TTL_SECONDS,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    return record.id


def get_impersonation_store(
    sessions: SessionStore = Depends(get_session_store),
    db: Session = Depends(get_db),
) -> ImpersonationStore:
    return ImpersonationStore(
        sessions,
        TenantRepository(db),
        ttl_seconds=settings.VIEW_AS_TTL_SECONDS,
    )


async def get_effective_identity(
    request: Request,
    user: User = Depends(get_current_user),
    session_id: str | None = Depends(get_session_id),
    store: ImpersonationStore = Depends(get_impersonation_store),
) -> EffectiveIdentity:
    """
    Resolve the identity this request is authorized as.

    Computed once per request and attached to request.state for handlers
    that don't declare it.
    """
    identity = store.current(session_id, user)
    request.state.effective_identity = identity
    return identity


def require_role(min_role: Role | str):
    """
    Route guard: effective role must be at least min_role.

    Unknown role tokens fail here, when the route module is imported.
    """
    required = parse_role(min_role)

    async def role_guard(
        identity: EffectiveIdentity = Depends(get_effective_identity),
    ) -> EffectiveIdentity:
        return authorize_role(identity, required)

    return role_guard


def require_permission(permission: Permission | str):
    """
    Route guard: effective role must hold permission.

    Unknown permission tokens fail here, when the route module is imported.
    """
    required = parse_permission(permission)

    async def permission_guard(
        identity: EffectiveIdentity = Depends(get_effective_identity),
    ) -> EffectiveIdentity:
        return authorize_permission(identity, required)

    return permission_guard
