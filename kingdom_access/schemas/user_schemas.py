from pydantic import BaseModel, Field
from datetime import datetime
from kingdom_access.models.role import Role
from kingdom_access.models.user import UserStatus


class UserResponse(BaseModel):
    """User details as seen by tenant administrators"""

    id: str
    email: str | None
    display_name: str | None
    role: Role
    tenant_id: str | None
    status: UserStatus
    last_active_at: datetime

    model_config = {"from_attributes": True}


class UserRoleUpdate(BaseModel):
    """Assign a new role to a user"""

    role: Role = Field(..., description="New role to assign")


class UserTenantTransfer(BaseModel):
    """Move a user to another tenant (SUPER_ADMIN only)"""

    tenant_id: str = Field(..., min_length=1, description="Destination tenant id")
