"""Staff user service for business logic."""

from datetime import UTC, datetime
from uuid import UUID

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from dental_api.core.exceptions import BadRequestException, NotFoundException
from dental_api.core.redis_client import CacheManager
from dental_api.core.security import get_password_hash
from dental_api.models.users import users
from dental_api.schemas.auth import PRACTITIONER_ROLES, UserAccessUpdate, UserRole, UserStatus

logger = structlog.get_logger(__name__)


class UserService:
    """Service for staff user operations. Every lookup is scoped to one clinic."""

    def __init__(self, cache_manager: CacheManager | None = None):
        """Initialize service with optional cache manager."""
        self.cache = cache_manager

    async def create_user(
        self,
        db: AsyncSession,
        tenant_id: UUID,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: UserRole = UserRole.DENTIST,
        status: UserStatus = UserStatus.ACTIVE,
    ) -> dict:
        """Create a staff account with a hashed password."""
        query = (
            users.insert()
            .values(
                tenant_id=tenant_id,
                email=email.lower(),
                password_hash=get_password_hash(password),
                first_name=first_name,
                last_name=last_name,
                role=role.value,
                status=status.value,
                created_at=datetime.now(UTC),
            )
            .returning(users)
        )

        result = await db.execute(query)
        user = result.mappings().first()
        await db.commit()

        if not user:
            raise ValueError("Failed to create user")

        return dict(user)

    async def get_user_by_id(self, db: AsyncSession, tenant_id: UUID, user_id: UUID) -> dict | None:
        """Get a staff user by ID within a clinic."""
        query = select(users).where(users.c.id == user_id, users.c.tenant_id == tenant_id)
        result = await db.execute(query)
        user = result.mappings().first()
        return dict(user) if user else None

    async def get_user_by_email(self, db: AsyncSession, tenant_id: UUID, email: str) -> dict | None:
        """Get a staff user by email within a clinic."""
        query = select(users).where(
            users.c.tenant_id == tenant_id,
            users.c.email == email.lower(),
        )
        result = await db.execute(query)
        user = result.mappings().first()
        return dict(user) if user else None

    async def get_practitioner(
        self, db: AsyncSession, tenant_id: UUID, practitioner_id: UUID
    ) -> dict:
        """
        Get an active staff member who can be booked for appointments.

        Raises:
            NotFoundException: If the user is missing, inactive or not a practitioner
        """
        user = await self.get_user_by_id(db, tenant_id, practitioner_id)

        if (
            not user
            or user["status"] != UserStatus.ACTIVE.value
            or user["role"] not in {role.value for role in PRACTITIONER_ROLES}
        ):
            raise NotFoundException("Practitioner not found")

        return user

    async def update_last_login(self, db: AsyncSession, user_id: UUID) -> None:
        """Update user's last login timestamp."""
        query = update(users).where(users.c.id == user_id).values(last_login_at=datetime.now(UTC))
        await db.execute(query)
        await db.commit()

    async def update_access(
        self,
        db: AsyncSession,
        tenant_id: UUID,
        user_id: UUID,
        data: UserAccessUpdate,
        changed_by: UUID | None = None,
    ) -> dict:
        """
        Change a staff member's role and/or account status.

        Consolidated clinic hours only count active dentists, so the clinic's
        cached schedule entries are dropped on every change.

        Raises:
            BadRequestException: If an administrator tries to change their own access
            NotFoundException: If the user does not belong to the clinic
        """
        if changed_by is not None and changed_by == user_id:
            raise BadRequestException("You cannot change your own role or status")

        values: dict = {"updated_at": datetime.now(UTC)}
        if data.role is not None:
            values["role"] = data.role.value
        if data.status is not None:
            values["status"] = data.status.value

        query = (
            update(users)
            .where(users.c.id == user_id, users.c.tenant_id == tenant_id)
            .values(**values)
            .returning(users)
        )
        result = await db.execute(query)
        user = result.mappings().first()

        if not user:
            await db.rollback()
            raise NotFoundException("User not found")

        await db.commit()

        if self.cache:
            self.cache.delete_pattern(f"schedule:{tenant_id}:*")

        logger.info(
            "user_access_updated",
            user_id=str(user_id),
            tenant_id=str(tenant_id),
            role=user["role"],
            status=user["status"],
        )
        return dict(user)
