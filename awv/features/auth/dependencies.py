from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
from awv.features.auth.models import User, UserRole
from awv.features.auth.service import AuthService
from awv.core.security import decode_token
from awv.core.logging import logger
from awv.shared.exceptions import CredentialsException, ForbiddenException


# HTTP Bearer security scheme
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> User:
    """
    Dependency to get current authenticated user.

    Args:
        credentials: HTTP Bearer credentials

    Returns:
        User: Current authenticated, active user

    Raises:
        CredentialsException: If credentials are missing or invalid
    """
    if credentials is None:
        raise CredentialsException("Not authenticated")

    # Decode token
    payload = decode_token(credentials.credentials)
    if payload is None:
        raise CredentialsException("Invalid authentication credentials")

    # Get user email from token
    email: str = payload.get("sub")
    if email is None:
        raise CredentialsException("Invalid authentication credentials")

    user = await AuthService.get_user_by_email(email)
    if user is None:
        raise CredentialsException("User not found")

    if not user.is_active:
        logger.warning(f"Token presented for {user.status} account {user.email}")
        raise CredentialsException("Inactive user")

    return user


def require_roles(*roles: UserRole):
    """
    Build a dependency that only admits users holding one of ``roles``.

    Usage::

        @router.delete("/{id}")
        async def delete(current_user: User = Depends(require_roles("admin"))):
            ...
    """

    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            logger.warning(
                f"User {current_user.email} ({current_user.role}) denied; requires one of {', '.join(roles)}"
            )
            raise ForbiddenException("You do not have permission to perform this action")
        return current_user

    return role_checker
