"""FastAPI dependencies: get_current_identity / require_admin.

Usage in any protected router:
    from src.rw_gateway.auth.dependencies import get_current_identity

    @router.get("/protected")
    async def protected(identity: Identity = Depends(get_current_identity)):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.rw_common.errors import ForbiddenError
from src.rw_gateway.auth.jwt_handler import Identity, InvalidTokenError, decode_access_token

_bearer_scheme = HTTPBearer(auto_error=False)

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> Identity:
    """Validate the Bearer token and return the caller's identity.

    Raises HTTP 401 if the token is missing, invalid, or expired.
    """
    if credentials is None:
        raise _CREDENTIALS_EXCEPTION
    try:
        return decode_access_token(credentials.credentials)
    except InvalidTokenError:
        raise _CREDENTIALS_EXCEPTION from None


async def require_admin(
    identity: Identity = Depends(get_current_identity),
) -> Identity:
    """Guard for plan management and internal (order-service) endpoints."""
    if not identity.is_admin:
        raise ForbiddenError("Admin role required")
    return identity
