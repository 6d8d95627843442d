"""
Authentication Dependencies
JWT token handling, user authentication and permission checks
"""

from datetime import datetime, timedelta
from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from app.config import settings
from app.services.role_service import role_service

# Security scheme (token may also arrive in the "token" cookie)
security = HTTPBearer(auto_error=False)

TOKEN_COOKIE_NAME = "token"


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create JWT access token

    Args:
        data: Claims to encode in token
        expires_delta: Token expiration time

    Returns:
        Encoded JWT token
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(hours=settings.JWT_EXPIRATION_HOURS)

    to_encode.update({"exp": expire})

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )


def decode_access_token(token: str) -> dict:
    """
    Decode JWT access token

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> dict:
    """
    Get current authenticated user from the bearer token or the auth cookie

    Returns:
        {"user_id", "email"} taken from the token claims
    """
    token = credentials.credentials if credentials else request.cookies.get(TOKEN_COOKIE_NAME)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_access_token(token)
    user_id = payload.get("id")

    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials"
        )

    return {
        "user_id": str(user_id),
        "email": payload.get("email"),
    }


async def check_permission(
    current_user: dict,
    permission: str,
    organization_id: Optional[str] = None
) -> None:
    """
    Raise 403 unless the user holds `permission` globally or,
    when organization_id is given, through their role in that organization
    """
    allowed = await role_service.user_has_permission(
        current_user["user_id"],
        permission,
        str(organization_id) if organization_id else None
    )
    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Not authorized. '{permission}' permission required."
        )


def require_permission(permission: str):
    """
    Route dependency factory.

    The organization scope is read from the `organization_id` path parameter
    when the route has one.
    """

    async def dependency(request: Request, current_user: dict = Depends(get_current_user)) -> dict:
        organization_id = request.path_params.get("organization_id")
        await check_permission(current_user, permission, organization_id)
        return current_user

    return dependency
