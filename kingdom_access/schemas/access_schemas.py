from pydantic import BaseModel, Field
from datetime import datetime
from kingdom_access.models.role import Role


class ViewContextResponse(BaseModel):
    """Active view-as context"""

    granted_by: str
    effective_role: Role
    effective_tenant_id: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class ViewAsRequest(BaseModel):
    """Start viewing the platform as another role"""

    target_role: Role = Field(..., description="Role to act as, e.g. ORG_ADMIN")
    target_tenant_id: str | None = Field(
        default=None, description="Organization to view (optional)"
    )


class ViewAsResponse(BaseModel):
    """Response after starting view-as"""

    success: bool
    view_context: ViewContextResponse
    message: str


class ViewAsClearResponse(BaseModel):
    """Response after returning to the real identity"""

    success: bool
    message: str


class CurrentViewContextResponse(BaseModel):
    """Current view-as context, or null when not impersonating"""

    view_context: ViewContextResponse | None


class AuthUserResponse(BaseModel):
    """
    Caller identity for the UI.

    role/tenant_id/permissions are the effective values; real_role and
    real_tenant_id let the UI offer "return to admin" while viewing as.
    """

    id: str
    email: str | None
    display_name: str | None
    role: Role
    tenant_id: str | None
    permissions: list[str]
    real_role: Role
    real_tenant_id: str | None
    is_viewing_as: bool
    view_context: ViewContextResponse | None
