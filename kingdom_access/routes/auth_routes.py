from fastapi import APIRouter, Depends

from kingdom_access.dependencies import get_current_user, get_effective_identity
from kingdom_access.models.effective_identity import EffectiveIdentity
from kingdom_access.models.user import User
from kingdom_access.schemas.access_schemas import AuthUserResponse

router = APIRouter()


@router.get("/user", response_model=AuthUserResponse)
async def get_auth_user(
    user: User = Depends(get_current_user),
    identity: EffectiveIdentity = Depends(get_effective_identity),
):
    """
    Get the authenticated user with their effective role and tenant.

    While viewing as another role, role/tenant_id/permissions reflect the
    view-as context and real_role/real_tenant_id the actual account.
    """
    return {
        "id": user.id,
        "email": user.email,
        "display_name": user.display_name,
        "role": identity.role,
        "tenant_id": identity.tenant_id,
        "permissions": sorted(p.value for p in identity.permissions),
        "real_role": identity.real_role,
        "real_tenant_id": identity.real_tenant_id,
        "is_viewing_as": identity.is_impersonating,
        "view_context": identity.impersonation,
    }
