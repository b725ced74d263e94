from jose import JWTError, jwt
from kingdom_access.config import settings
from kingdom_access.core.exceptions import UnauthenticatedException


def decode_jwt(token: str) -> dict:
    """
    Decode and validate a bearer token using the shared SECRET_KEY.

    Args:
        token: JWT access token from Authorization header

    Returns:
        Decoded token payload with 'sub' (principal id), 'exp', etc.

    Raises:
        UnauthenticatedException: If token invalid, expired, or malformed
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise UnauthenticatedException(f"Invalid token: {str(e)}")

    # jose validates 'exp' when present but does not require it
    if payload.get("exp") is None:
        raise UnauthenticatedException("Token missing expiration")

    if not payload.get("sub"):
        raise UnauthenticatedException("Token missing user identifier")

    return payload


def extract_principal_id(token: str) -> str:
    """Extract the principal id ('sub' claim) from a bearer token"""
    payload = decode_jwt(token)
    return payload["sub"]
