"""Free-slot lookup for a clinic day."""

from datetime import date, datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from dental_api.core.redis_client import CacheManager
from dental_api.core.scheduling import generate_slots
from dental_api.services.appointment_service import AppointmentService
from dental_api.services.schedule_config_service import ScheduleConfigService
from dental_api.services.tenant_service import TenantService
from dental_api.services.user_service import UserService

logger = structlog.get_logger(__name__)


class AvailabilityService:
    """Combines working hours with booked appointments into bookable start times."""

    def __init__(self, db: AsyncSession, cache_manager: CacheManager | None = None):
        """Initialize service with database session and optional cache."""
        self.db = db
        self.schedule = ScheduleConfigService(db, cache_manager)
        self.appointments = AppointmentService(db)

    async def get_available_slots(
        self,
        tenant_id: UUID,
        day: date,
        practitioner_id: UUID | None = None,
    ) -> list[datetime]:
        """
        Free slot start times for ``day``, in ascending order.

        Without a practitioner every active appointment in the clinic blocks
        its time; with one, only that practitioner's appointments do.

        Raises:
            NotFoundException: If the practitioner is unknown in this clinic
        """
        if practitioner_id is not None:
            await UserService().get_practitioner(self.db, tenant_id, practitioner_id)

        plan = await self.schedule.get_day_plan(tenant_id, day, practitioner_id)
        if plan.is_closed:
            logger.debug("availability_closed_day", tenant_id=str(tenant_id), day=day.isoformat())
            return []

        booked = await self.appointments.get_booked_intervals(tenant_id, day, practitioner_id)
        slots = generate_slots(day, plan, booked)

        logger.debug(
            "availability_computed",
            tenant_id=str(tenant_id),
            practitioner_id=str(practitioner_id) if practitioner_id else None,
            day=day.isoformat(),
            booked=len(booked),
            free=len(slots),
        )
        return slots

    async def get_public_available_slots(
        self,
        subdomain: str,
        day: date,
        practitioner_id: UUID | None = None,
    ) -> list[datetime]:
        """
        Free slots for an unauthenticated caller who knows the clinic's subdomain.

        Raises:
            NotFoundException: If no active clinic uses the subdomain
        """
        tenant = await TenantService(self.db).get_active_by_subdomain(subdomain)
        return await self.get_available_slots(tenant["id"], day, practitioner_id)
