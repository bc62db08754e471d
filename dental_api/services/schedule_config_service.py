"""Working-hours configuration service."""

from datetime import UTC, date, datetime, time
from uuid import UUID

import structlog
from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from dental_api.config import settings
from dental_api.core.redis_client import CacheManager
from dental_api.core.scheduling import (
    DayPlan,
    consolidate_work_hours,
    day_of_week,
    day_plan_from_config,
    default_day_plan,
)
from dental_api.models.schedule_configs import schedule_configs
from dental_api.models.users import users
from dental_api.schemas.auth import UserRole, UserStatus
from dental_api.schemas.schedule_config import ScheduleConfigResponse, ScheduleConfigUpsertItem
from dental_api.services.user_service import UserService

logger = structlog.get_logger(__name__)


def _owner_clause(practitioner_id: UUID | None):
    if practitioner_id is None:
        return schedule_configs.c.practitioner_id.is_(None)
    return schedule_configs.c.practitioner_id == practitioner_id


class ScheduleConfigService:
    """Reads and replaces per-day working hours for a clinic or one practitioner."""

    def __init__(self, db: AsyncSession, cache_manager: CacheManager | None = None):
        """Initialize service with database session and optional cache."""
        self.db = db
        self.cache = cache_manager

    @staticmethod
    def _work_hours_cache_key(tenant_id: UUID) -> str:
        return f"schedule:{tenant_id}:work_hours"

    @staticmethod
    def _rows_cache_key(tenant_id: UUID, practitioner_id: UUID | None) -> str:
        return f"schedule:{tenant_id}:rows:{practitioner_id or 'clinic'}"

    async def get_schedule(
        self, tenant_id: UUID, practitioner_id: UUID | None = None
    ) -> list[ScheduleConfigResponse]:
        """Active working-hours rows for one practitioner (or the clinic), by weekday."""
        cache_key = self._rows_cache_key(tenant_id, practitioner_id)
        if self.cache:
            cached = self.cache.get_json(cache_key)
            if cached is not None:
                return [ScheduleConfigResponse.model_validate(row) for row in cached]

        stmt = (
            select(schedule_configs)
            .where(
                schedule_configs.c.tenant_id == tenant_id,
                schedule_configs.c.is_active.is_(True),
                _owner_clause(practitioner_id),
            )
            .order_by(schedule_configs.c.day_of_week)
        )
        result = await self.db.execute(stmt)
        rows = [ScheduleConfigResponse.model_validate(dict(row)) for row in result.mappings()]

        if self.cache:
            self.cache.set_json(
                cache_key,
                [row.model_dump(mode="json") for row in rows],
                ttl=settings.schedule_cache_ttl,
            )

        return rows

    async def upsert_schedule(
        self,
        tenant_id: UUID,
        practitioner_id: UUID | None,
        configurations: list[ScheduleConfigUpsertItem],
    ) -> list[ScheduleConfigResponse]:
        """
        Replace the listed weekdays' working hours in one transaction.

        Days not present in ``configurations`` keep their current rows.

        Raises:
            NotFoundException: If the practitioner does not belong to the clinic
        """
        if practitioner_id is not None:
            await UserService().get_practitioner(self.db, tenant_id, practitioner_id)

        now = datetime.now(UTC)

        try:
            existing_stmt = select(schedule_configs.c.id, schedule_configs.c.day_of_week).where(
                schedule_configs.c.tenant_id == tenant_id,
                schedule_configs.c.is_active.is_(True),
                _owner_clause(practitioner_id),
            )
            existing = {
                row.day_of_week: row.id for row in (await self.db.execute(existing_stmt)).all()
            }

            for item in configurations:
                values = {
                    "is_working_day": item.is_working_day,
                    "morning_start_time": item.morning_start_time,
                    "morning_end_time": item.morning_end_time,
                    "afternoon_start_time": item.afternoon_start_time,
                    "afternoon_end_time": item.afternoon_end_time,
                    "appointment_duration": item.appointment_duration,
                }

                config_id = existing.get(item.day_of_week)
                if config_id is not None:
                    await self.db.execute(
                        schedule_configs.update()
                        .where(schedule_configs.c.id == config_id)
                        .values(**values, updated_at=now)
                    )
                else:
                    await self.db.execute(
                        schedule_configs.insert().values(
                            tenant_id=tenant_id,
                            practitioner_id=practitioner_id,
                            day_of_week=item.day_of_week,
                            is_active=True,
                            created_at=now,
                            **values,
                        )
                    )

            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(
                "schedule_upsert_failed",
                tenant_id=str(tenant_id),
                practitioner_id=str(practitioner_id) if practitioner_id else None,
                error=str(e),
            )
            raise

        if self.cache:
            self.cache.delete_pattern(f"schedule:{tenant_id}:*")

        logger.info(
            "schedule_upserted",
            tenant_id=str(tenant_id),
            practitioner_id=str(practitioner_id) if practitioner_id else None,
            days=sorted(item.day_of_week for item in configurations),
        )

        return await self.get_schedule(tenant_id, practitioner_id)

    async def get_consolidated_work_hours(self, tenant_id: UUID) -> tuple[time, time]:
        """
        Earliest opening and latest closing across the clinic's active dentists.

        Only working-day rows of active dentists count. Falls back to the
        configured default day when nothing is configured.
        """
        cache_key = self._work_hours_cache_key(tenant_id)
        if self.cache:
            cached = self.cache.get_json(cache_key)
            if cached:
                return time.fromisoformat(cached["start"]), time.fromisoformat(cached["end"])

        stmt = (
            select(
                schedule_configs.c.morning_start_time,
                schedule_configs.c.morning_end_time,
                schedule_configs.c.afternoon_end_time,
            )
            .select_from(
                schedule_configs.join(users, users.c.id == schedule_configs.c.practitioner_id)
            )
            .where(
                schedule_configs.c.tenant_id == tenant_id,
                schedule_configs.c.is_active.is_(True),
                schedule_configs.c.is_working_day.is_(True),
                users.c.role == UserRole.DENTIST.value,
                users.c.status == UserStatus.ACTIVE.value,
            )
        )
        result = await self.db.execute(stmt)
        start, end = consolidate_work_hours(
            result.mappings().all(),
            settings.default_day_start,
            settings.default_day_end,
        )

        if self.cache:
            self.cache.set_json(
                cache_key,
                {"start": start.isoformat(), "end": end.isoformat()},
                ttl=settings.schedule_cache_ttl,
            )

        return start, end

    async def get_day_plan(
        self, tenant_id: UUID, day: date, practitioner_id: UUID | None = None
    ) -> DayPlan:
        """
        Bookable windows for one date.

        A practitioner's own row for the weekday wins over the clinic-wide row;
        with neither, the default day applies.
        """
        owner = (
            or_(
                schedule_configs.c.practitioner_id == practitioner_id,
                schedule_configs.c.practitioner_id.is_(None),
            )
            if practitioner_id is not None
            else schedule_configs.c.practitioner_id.is_(None)
        )
        stmt = select(schedule_configs).where(
            and_(
                schedule_configs.c.tenant_id == tenant_id,
                schedule_configs.c.is_active.is_(True),
                schedule_configs.c.day_of_week == day_of_week(day),
                owner,
            )
        )
        rows = (await self.db.execute(stmt)).mappings().all()

        own = [row for row in rows if row["practitioner_id"] is not None]
        clinic = [row for row in rows if row["practitioner_id"] is None]

        if own:
            return day_plan_from_config(own[0])
        if clinic:
            return day_plan_from_config(clinic[0])

        return default_day_plan(
            settings.default_day_start,
            settings.default_day_end,
            settings.default_slot_minutes,
        )
