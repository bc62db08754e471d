"""Authentication service for clinic staff."""

from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from dental_api.core.exceptions import (
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
)
from dental_api.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    verify_password,
)
from dental_api.schemas.auth import LoginRequest, LoginResponse, UserResponse, UserStatus
from dental_api.services.tenant_service import TenantService
from dental_api.services.user_service import UserService

logger = structlog.get_logger(__name__)


class AuthService:
    """Email/password login scoped to a clinic subdomain, plus token refresh."""

    def __init__(self, db: AsyncSession):
        """Initialize auth service with database session."""
        self.db = db
        self.users = UserService()

    @staticmethod
    def _claims(user: dict) -> dict:
        return {
            "sub": str(user["id"]),
            "tenant_id": str(user["tenant_id"]),
            "role": user["role"],
        }

    @staticmethod
    def _ensure_active(user: dict) -> None:
        if user["status"] != UserStatus.ACTIVE.value:
            raise ForbiddenException("User account is not active")

    async def login(self, credentials: LoginRequest) -> LoginResponse:
        """
        Authenticate a staff member and issue a token pair.

        Raises:
            UnauthorizedException: If the clinic, email or password is wrong
            ForbiddenException: If the account is inactive or suspended
        """
        try:
            tenant = await TenantService(self.db).get_active_by_subdomain(credentials.subdomain)
        except NotFoundException:
            logger.info("login_failed", reason="unknown_clinic", subdomain=credentials.subdomain)
            raise UnauthorizedException("Invalid credentials") from None

        user = await self.users.get_user_by_email(self.db, tenant["id"], credentials.email)
        if not user or not verify_password(credentials.password, user["password_hash"]):
            logger.info("login_failed", reason="bad_credentials", tenant_id=str(tenant["id"]))
            raise UnauthorizedException("Invalid credentials")

        self._ensure_active(user)
        await self.users.update_last_login(self.db, user["id"])

        claims = self._claims(user)
        logger.info("user_logged_in", user_id=claims["sub"], tenant_id=claims["tenant_id"])

        return LoginResponse(
            access_token=create_access_token(claims),
            refresh_token=create_refresh_token(claims),
            user=UserResponse.model_validate(user),
        )

    async def refresh(self, refresh_token: str) -> LoginResponse:
        """
        Exchange a refresh token for a new token pair.

        Raises:
            UnauthorizedException: If the token is invalid or the user is gone
        """
        payload = decode_refresh_token(refresh_token)
        if payload is None or not payload.get("sub") or not payload.get("tenant_id"):
            raise UnauthorizedException("Invalid refresh token")

        try:
            user_id = UUID(payload["sub"])
            tenant_id = UUID(payload["tenant_id"])
        except ValueError:
            raise UnauthorizedException("Invalid refresh token") from None

        user = await self.users.get_user_by_id(self.db, tenant_id, user_id)
        if not user:
            raise UnauthorizedException("Invalid refresh token")

        self._ensure_active(user)
        claims = self._claims(user)

        return LoginResponse(
            access_token=create_access_token(claims),
            refresh_token=create_refresh_token(claims),
            user=UserResponse.model_validate(user),
        )
