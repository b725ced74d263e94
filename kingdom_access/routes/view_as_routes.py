from fastapi import APIRouter, Depends, Response

from kingdom_access.dependencies import (
    get_current_user,
    get_impersonation_store,
    get_session_id,
    start_session,
)
from kingdom_access.models.user import User
from kingdom_access.schemas.access_schemas import (
    CurrentViewContextResponse,
    ViewAsClearResponse,
    ViewAsRequest,
    ViewAsResponse,
)
from kingdom_access.services.impersonation_service import ImpersonationStore

router = APIRouter()


@router.post("/view-as", response_model=ViewAsResponse)
async def grant_view_as(
    request: ViewAsRequest,
    response: Response,
    user: User = Depends(get_current_user),
    session_id: str | None = Depends(get_session_id),
    store: ImpersonationStore = Depends(get_impersonation_store),
):
    """
    Start viewing the platform as another role.

    - **Requires the caller's real role to be SUPER_ADMIN** (an active
      view-as context does not lower this check)
    - Replaces any existing view-as context
    - target_tenant_id must name an existing organization
    - Starts a session (cookie) if the caller has none
    """
    store.check_grant(user, request.target_role, request.target_tenant_id)
    if session_id is None:
        session_id = start_session(response, user, store.sessions)

    context = store.grant(session_id, user, request.target_role, request.target_tenant_id)
    message = (
        "Now managing organization"
        if request.target_tenant_id
        else f"Now viewing as {request.target_role.value}"
    )
    return {"success": True, "view_context": context, "message": message}


@router.delete("/view-as", response_model=ViewAsClearResponse)
async def clear_view_as(
    user: User = Depends(get_current_user),
    session_id: str | None = Depends(get_session_id),
    store: ImpersonationStore = Depends(get_impersonation_store),
):
    """
    Return to the real identity.

    Available to any authenticated user; succeeds when nothing is active.
    """
    removed = store.clear(session_id)
    return {
        "success": True,
        "message": "Returned to admin view" if removed else "Already in admin view",
    }


@router.get("/view-context", response_model=CurrentViewContextResponse)
async def current_view_context(
    user: User = Depends(get_current_user),
    session_id: str | None = Depends(get_session_id),
    store: ImpersonationStore = Depends(get_impersonation_store),
):
    """Get the active view-as context, or null."""
    return {"view_context": store.read(session_id)}
