from typing import Any


class KingdomAccessException(Exception):
    """Base exception for the access-control core"""

    pass


class UnauthenticatedException(KingdomAccessException):
    """Raised when no identity can be resolved for the caller"""

    reason = "unauthenticated"


class ForbiddenException(KingdomAccessException):
    """
    Raised when the caller's identity lacks the role or permission required.

    Carries a machine-readable reason code and, for role failures, the
    caller's effective role and the role required.
    """

    def __init__(
        self,
        message: str,
        reason: str = "forbidden",
        required_role: str | None = None,
        user_role: str | None = None,
        required_permission: str | None = None,
    ):
        super().__init__(message)
        self.reason = reason
        self.required_role = required_role
        self.user_role = user_role
        self.required_permission = required_permission

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"detail": str(self), "reason": self.reason}
        if self.required_role is not None:
            body["required_role"] = self.required_role
            body["user_role"] = self.user_role
        if self.required_permission is not None:
            body["required_permission"] = self.required_permission
        return body


class TenantRequiredError(KingdomAccessException):
    """Raised when a tenant-scoped operation has no tenant to scope to"""

    reason = "no_tenant_context"


class NotFoundException(KingdomAccessException):
    """Raised when resource not found"""

    pass


class ValidationException(KingdomAccessException):
    """Raised for business logic validation errors"""

    pass


class SessionConflictError(KingdomAccessException):
    """Raised when a concurrent write to the same session wins the race"""

    reason = "session_conflict"


class UnknownRoleError(KingdomAccessException, ValueError):
    """Raised when a role token is absent from the role hierarchy"""

    pass


class UnknownPermissionError(KingdomAccessException, ValueError):
    """Raised when a permission token is absent from the permission table"""

    pass
