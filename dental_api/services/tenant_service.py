"""Tenant (clinic) service."""

from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dental_api.core.exceptions import NotFoundException
from dental_api.models.tenants import tenants


class TenantService:
    """Service for clinic lookups and registration."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def create_tenant(
        self,
        name: str,
        subdomain: str,
        email: str,
        phone: str | None = None,
        address: str | None = None,
    ) -> dict:
        """Register a new clinic."""
        stmt = (
            tenants.insert()
            .values(
                name=name,
                subdomain=subdomain.lower(),
                email=email,
                phone=phone,
                address=address,
                is_active=True,
                created_at=datetime.now(UTC),
            )
            .returning(tenants)
        )
        result = await self.db.execute(stmt)
        tenant = result.mappings().one()
        await self.db.commit()
        return dict(tenant)

    async def get_active_by_subdomain(self, subdomain: str) -> dict:
        """
        Resolve an active clinic from its public subdomain.

        Raises:
            NotFoundException: If no active clinic uses the subdomain
        """
        stmt = select(tenants).where(
            tenants.c.subdomain == subdomain.strip().lower(),
            tenants.c.is_active.is_(True),
        )
        result = await self.db.execute(stmt)
        tenant = result.mappings().first()

        if not tenant:
            raise NotFoundException("Clinic not found")

        return dict(tenant)
