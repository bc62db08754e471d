"""FastAPI dependencies."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from dental_api.core.exceptions import ForbiddenException, UnauthorizedException
from dental_api.core.redis_client import CacheManager, get_redis_client
from dental_api.core.security import decode_access_token
from dental_api.database import get_db
from dental_api.schemas.auth import Principal, UserRole, UserStatus
from dental_api.services.user_service import UserService

# Security
security = HTTPBearer(auto_error=False)


def get_token_payload(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> dict:
    """
    Decode the bearer access token.

    Raises:
        UnauthorizedException: If the token is missing, invalid or expired
    """
    if credentials is None:
        raise UnauthorizedException("Not authenticated")

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise UnauthorizedException("Could not validate credentials")

    return payload


async def get_current_principal(
    payload: Annotated[dict, Depends(get_token_payload)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Principal:
    """
    Resolve the caller's user, clinic and role from the access token.

    Raises:
        UnauthorizedException: If the token lacks a user or clinic, or the user is gone
        ForbiddenException: If the account is not active
    """
    try:
        user_id = UUID(str(payload.get("sub")))
    except ValueError:
        raise UnauthorizedException("Invalid user ID format") from None

    tenant_claim = payload.get("tenant_id")
    if not tenant_claim:
        raise UnauthorizedException("Tenant not identified")

    try:
        tenant_id = UUID(str(tenant_claim))
    except ValueError:
        raise UnauthorizedException("Tenant not identified") from None

    user = await UserService().get_user_by_id(db, tenant_id, user_id)
    if not user:
        raise UnauthorizedException("User not found")

    if user["status"] != UserStatus.ACTIVE.value:
        raise ForbiddenException("User account is not active")

    return Principal(user_id=user_id, tenant_id=tenant_id, role=UserRole(user["role"]))


def require_admin(
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> Principal:
    """
    Allow only clinic administrators.

    Raises:
        ForbiddenException: If the caller is not an administrator
    """
    if not principal.is_admin:
        raise ForbiddenException("Administrator role required")
    return principal


def get_cache_manager() -> CacheManager | None:
    """Cache manager backed by the shared Redis client."""
    return CacheManager(get_redis_client())


# Type aliases for dependency injection
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
AdminPrincipal = Annotated[Principal, Depends(require_admin)]
Cache = Annotated[CacheManager | None, Depends(get_cache_manager)]
