"""Appointment service for business logic."""

from datetime import UTC, date, datetime, time, timedelta
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from dental_api.core.exceptions import (
    BadRequestException,
    InvalidTransitionException,
    NotFoundException,
    SchedulingConflictException,
)
from dental_api.core.scheduling import add_minutes, can_transition
from dental_api.models.appointments import appointments
from dental_api.models.patients import patients
from dental_api.models.users import users
from dental_api.schemas.appointments import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentStatus,
    AppointmentUpdate,
)
from dental_api.schemas.auth import Principal
from dental_api.services.patient_service import PatientService
from dental_api.services.user_service import UserService

logger = structlog.get_logger(__name__)

# Statuses the no-show sweep may close
OPEN_STATUSES = (AppointmentStatus.SCHEDULED.value, AppointmentStatus.CONFIRMED.value)


def active_for_scheduling():
    """Rows that still hold their time: not cancelled and not deleted."""
    return and_(
        appointments.c.deleted_at.is_(None),
        appointments.c.status != AppointmentStatus.CANCELLED.value,
    )


def _end_time(start_time: time, duration_minutes: int) -> time:
    try:
        return add_minutes(start_time, duration_minutes)
    except ValueError as e:
        raise BadRequestException(str(e)) from e


class AppointmentService:
    """Service for booking, rescheduling and moving appointments through their lifecycle."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db
        self.users = UserService()

    async def has_conflict(
        self,
        tenant_id: UUID,
        appointment_date: date,
        start_time: time,
        end_time: time,
        practitioner_id: UUID | None = None,
        patient_id: UUID | None = None,
        exclude_appointment_id: UUID | None = None,
    ) -> bool:
        """
        Whether ``[start_time, end_time)`` overlaps an active appointment.

        Restricts the search to the given practitioner and/or patient; with
        both, only their shared appointments count. Intervals that only touch
        do not conflict.

        Raises:
            ValueError: If neither a practitioner nor a patient is given
        """
        if practitioner_id is None and patient_id is None:
            raise ValueError("A practitioner or a patient is required to check conflicts")

        conditions = [
            appointments.c.tenant_id == tenant_id,
            appointments.c.appointment_date == appointment_date,
            active_for_scheduling(),
            appointments.c.start_time < end_time,
            appointments.c.end_time > start_time,
        ]

        if practitioner_id is not None:
            conditions.append(appointments.c.practitioner_id == practitioner_id)
        if patient_id is not None:
            conditions.append(appointments.c.patient_id == patient_id)

        if exclude_appointment_id is not None:
            conditions.append(appointments.c.id != exclude_appointment_id)

        stmt = select(appointments.c.id).where(and_(*conditions)).limit(1)
        result = await self.db.execute(stmt)
        return result.first() is not None

    async def get_booked_intervals(
        self,
        tenant_id: UUID,
        appointment_date: date,
        practitioner_id: UUID | None = None,
    ) -> list[tuple[time, time]]:
        """Active reserved intervals on a date, for one practitioner or the whole clinic."""
        conditions = [
            appointments.c.tenant_id == tenant_id,
            appointments.c.appointment_date == appointment_date,
            active_for_scheduling(),
        ]
        if practitioner_id is not None:
            conditions.append(appointments.c.practitioner_id == practitioner_id)

        stmt = (
            select(appointments.c.start_time, appointments.c.end_time)
            .where(and_(*conditions))
            .order_by(appointments.c.start_time)
        )
        result = await self.db.execute(stmt)
        return [(row.start_time, row.end_time) for row in result]

    async def _lock_booking_keys(
        self,
        tenant_id: UUID,
        appointment_date: date,
        practitioner_id: UUID,
        patient_id: UUID,
    ) -> None:
        """
        Serialize bookings touching the same practitioner-day or patient-day.

        Uses transaction-scoped advisory locks on PostgreSQL; they are released
        on commit or rollback. Keys are taken in sorted order so two writers
        never wait on each other in opposite orders.
        """
        if self.db.get_bind().dialect.name != "postgresql":
            return

        keys = sorted(
            {
                f"practitioner:{tenant_id}:{practitioner_id}:{appointment_date.isoformat()}",
                f"patient:{tenant_id}:{patient_id}:{appointment_date.isoformat()}",
            }
        )
        for key in keys:
            await self.db.execute(
                select(func.pg_advisory_xact_lock(func.hashtextextended(key, 0)))
            )

    async def _ensure_no_conflicts(
        self,
        tenant_id: UUID,
        appointment_date: date,
        start_time: time,
        end_time: time,
        patient_id: UUID,
        practitioner_id: UUID,
        exclude_appointment_id: UUID | None = None,
    ) -> None:
        """Raise for the first party that is already booked, patient first."""
        for party, kwargs in (
            ("patient", {"patient_id": patient_id}),
            ("practitioner", {"practitioner_id": practitioner_id}),
        ):
            if await self.has_conflict(
                tenant_id,
                appointment_date,
                start_time,
                end_time,
                exclude_appointment_id=exclude_appointment_id,
                **kwargs,
            ):
                await self.db.rollback()
                logger.info(
                    "appointment_conflict",
                    tenant_id=str(tenant_id),
                    party=party,
                    appointment_date=appointment_date.isoformat(),
                    start_time=start_time.isoformat(),
                )
                raise SchedulingConflictException(party)

    @staticmethod
    def _select_with_names():
        """Appointment columns plus patient and practitioner display names."""
        return select(
            appointments,
            (patients.c.first_name + " " + patients.c.last_name).label("patient_name"),
            (users.c.first_name + " " + users.c.last_name).label("practitioner_name"),
        ).select_from(
            appointments.join(patients, patients.c.id == appointments.c.patient_id).join(
                users, users.c.id == appointments.c.practitioner_id
            )
        )

    async def _fetch(self, conditions: list[Any], *order_by: Any) -> list[AppointmentResponse]:
        stmt = self._select_with_names().where(and_(*conditions)).order_by(*order_by)
        result = await self.db.execute(stmt)
        return [AppointmentResponse.model_validate(dict(row)) for row in result.mappings()]

    async def _get_row(self, tenant_id: UUID, appointment_id: UUID) -> dict:
        stmt = select(appointments).where(
            appointments.c.id == appointment_id,
            appointments.c.tenant_id == tenant_id,
            appointments.c.deleted_at.is_(None),
        )
        result = await self.db.execute(stmt)
        row = result.mappings().first()

        if not row:
            raise NotFoundException("Appointment not found")

        return dict(row)

    async def get_appointment(self, tenant_id: UUID, appointment_id: UUID) -> AppointmentResponse:
        """
        Get an appointment of the clinic.

        Raises:
            NotFoundException: If it does not exist in this clinic or was deleted
        """
        items = await self._fetch(
            [
                appointments.c.id == appointment_id,
                appointments.c.tenant_id == tenant_id,
                appointments.c.deleted_at.is_(None),
            ]
        )
        if not items:
            raise NotFoundException("Appointment not found")
        return items[0]

    async def list_appointments(
        self,
        principal: Principal,
        status: AppointmentStatus | None = None,
    ) -> list[AppointmentResponse]:
        """
        List appointments, newest first.

        Administrators see the whole clinic; everyone else sees the
        appointments booked with them.
        """
        conditions = [
            appointments.c.tenant_id == principal.tenant_id,
            appointments.c.deleted_at.is_(None),
        ]
        if not principal.is_admin:
            conditions.append(appointments.c.practitioner_id == principal.user_id)
        if status is not None:
            conditions.append(appointments.c.status == status.value)

        return await self._fetch(
            conditions, appointments.c.appointment_date.desc(), appointments.c.start_time.desc()
        )

    async def list_by_date_range(
        self,
        tenant_id: UUID,
        start_date: date,
        end_date: date,
        practitioner_id: UUID | None = None,
    ) -> list[AppointmentResponse]:
        """Appointments between two dates (inclusive), in chronological order."""
        if start_date > end_date:
            raise BadRequestException("Start date must be on or before end date")

        conditions = [
            appointments.c.tenant_id == tenant_id,
            appointments.c.deleted_at.is_(None),
            appointments.c.appointment_date >= start_date,
            appointments.c.appointment_date <= end_date,
        ]
        if practitioner_id is not None:
            conditions.append(appointments.c.practitioner_id == practitioner_id)

        return await self._fetch(
            conditions, appointments.c.appointment_date, appointments.c.start_time
        )

    async def list_by_patient(
        self, tenant_id: UUID, patient_id: UUID
    ) -> list[AppointmentResponse]:
        """A patient's appointment history, newest first."""
        await PatientService(self.db).get_patient(tenant_id, patient_id)

        return await self._fetch(
            [
                appointments.c.tenant_id == tenant_id,
                appointments.c.patient_id == patient_id,
                appointments.c.deleted_at.is_(None),
            ],
            appointments.c.appointment_date.desc(),
            appointments.c.start_time.desc(),
        )

    async def create_appointment(
        self, tenant_id: UUID, data: AppointmentCreate
    ) -> AppointmentResponse:
        """
        Book a new appointment in ``scheduled`` status.

        Raises:
            NotFoundException: If the patient or practitioner is unknown in this clinic
            BadRequestException: If the interval crosses midnight
            SchedulingConflictException: If the patient or practitioner is already booked
        """
        await PatientService(self.db).get_patient(tenant_id, data.patient_id)
        await self.users.get_practitioner(self.db, tenant_id, data.practitioner_id)

        end_time = _end_time(data.start_time, data.duration_minutes)

        await self._lock_booking_keys(
            tenant_id, data.appointment_date, data.practitioner_id, data.patient_id
        )
        await self._ensure_no_conflicts(
            tenant_id,
            data.appointment_date,
            data.start_time,
            end_time,
            data.patient_id,
            data.practitioner_id,
        )

        stmt = (
            appointments.insert()
            .values(
                tenant_id=tenant_id,
                patient_id=data.patient_id,
                practitioner_id=data.practitioner_id,
                appointment_date=data.appointment_date,
                start_time=data.start_time,
                end_time=end_time,
                duration_minutes=data.duration_minutes,
                status=AppointmentStatus.SCHEDULED.value,
                reason=data.reason,
                notes=data.notes,
                notification_sent=False,
                reminder_sent=False,
                created_at=datetime.now(UTC),
            )
            .returning(appointments.c.id)
        )
        result = await self.db.execute(stmt)
        appointment_id = result.scalar_one()
        await self.db.commit()

        logger.info(
            "appointment_created",
            appointment_id=str(appointment_id),
            tenant_id=str(tenant_id),
            practitioner_id=str(data.practitioner_id),
            appointment_date=data.appointment_date.isoformat(),
            start_time=data.start_time.isoformat(),
        )

        return await self.get_appointment(tenant_id, appointment_id)

    async def update_appointment(
        self,
        tenant_id: UUID,
        appointment_id: UUID,
        data: AppointmentUpdate,
    ) -> AppointmentResponse:
        """
        Replace an appointment's booking details.

        Conflicts are re-checked, excluding the appointment itself, only when
        the time or the people involved change.

        Raises:
            NotFoundException: If the appointment is unknown or deleted
            BadRequestException: If the appointment is cancelled
            SchedulingConflictException: If the new interval is taken
        """
        current = await self._get_row(tenant_id, appointment_id)

        if current["status"] == AppointmentStatus.CANCELLED.value:
            raise BadRequestException("A cancelled appointment cannot be modified")

        await PatientService(self.db).get_patient(tenant_id, data.patient_id)
        await self.users.get_practitioner(self.db, tenant_id, data.practitioner_id)

        end_time = _end_time(data.start_time, data.duration_minutes)

        moved = (
            current["appointment_date"] != data.appointment_date
            or current["start_time"] != data.start_time
            or current["duration_minutes"] != data.duration_minutes
            or current["practitioner_id"] != data.practitioner_id
            or current["patient_id"] != data.patient_id
        )

        if moved:
            await self._lock_booking_keys(
                tenant_id, data.appointment_date, data.practitioner_id, data.patient_id
            )
            await self._ensure_no_conflicts(
                tenant_id,
                data.appointment_date,
                data.start_time,
                end_time,
                data.patient_id,
                data.practitioner_id,
                exclude_appointment_id=appointment_id,
            )

        stmt = (
            update(appointments)
            .where(appointments.c.id == appointment_id)
            .values(
                patient_id=data.patient_id,
                practitioner_id=data.practitioner_id,
                appointment_date=data.appointment_date,
                start_time=data.start_time,
                end_time=end_time,
                duration_minutes=data.duration_minutes,
                reason=data.reason,
                notes=data.notes,
                updated_at=datetime.now(UTC),
            )
        )
        await self.db.execute(stmt)
        await self.db.commit()

        logger.info(
            "appointment_updated",
            appointment_id=str(appointment_id),
            tenant_id=str(tenant_id),
            rescheduled=moved,
        )

        return await self.get_appointment(tenant_id, appointment_id)

    async def _change_status(
        self,
        tenant_id: UUID,
        appointment_id: UUID,
        target: AppointmentStatus,
        **extra_values: Any,
    ) -> AppointmentStatus:
        current_row = await self._get_row(tenant_id, appointment_id)
        current = AppointmentStatus(current_row["status"])

        if not can_transition(current, target):
            raise InvalidTransitionException(current.value, target.value)

        if current == target:
            return current

        stmt = (
            update(appointments)
            .where(appointments.c.id == appointment_id)
            .values(status=target.value, updated_at=datetime.now(UTC), **extra_values)
        )
        await self.db.execute(stmt)
        await self.db.commit()

        logger.info(
            "appointment_status_changed",
            appointment_id=str(appointment_id),
            tenant_id=str(tenant_id),
            old_status=current.value,
            new_status=target.value,
        )
        return target

    async def confirm_appointment(
        self, tenant_id: UUID, appointment_id: UUID
    ) -> AppointmentStatus:
        """Mark a scheduled appointment as confirmed. Confirming twice is a no-op."""
        return await self._change_status(tenant_id, appointment_id, AppointmentStatus.CONFIRMED)

    async def cancel_appointment(
        self,
        tenant_id: UUID,
        appointment_id: UUID,
        reason: str | None = None,
    ) -> AppointmentStatus:
        """Cancel an appointment, freeing its time. Cancelling twice is a no-op."""
        return await self._change_status(
            tenant_id,
            appointment_id,
            AppointmentStatus.CANCELLED,
            cancelled_at=datetime.now(UTC),
            cancellation_reason=reason,
        )

    async def complete_appointment(
        self, tenant_id: UUID, appointment_id: UUID
    ) -> AppointmentStatus:
        """Mark an appointment as attended."""
        return await self._change_status(tenant_id, appointment_id, AppointmentStatus.COMPLETED)

    async def delete_appointment(self, tenant_id: UUID, appointment_id: UUID) -> None:
        """
        Soft delete an appointment. Its time becomes bookable again.

        Raises:
            NotFoundException: If the appointment is unknown or already deleted
        """
        await self._get_row(tenant_id, appointment_id)

        now = datetime.now(UTC)
        stmt = (
            update(appointments)
            .where(appointments.c.id == appointment_id)
            .values(deleted_at=now, updated_at=now)
        )
        await self.db.execute(stmt)
        await self.db.commit()

        logger.info(
            "appointment_deleted", appointment_id=str(appointment_id), tenant_id=str(tenant_id)
        )

    async def mark_no_shows(self, now: datetime, grace_minutes: int) -> int:
        """
        Close open appointments whose start passed more than ``grace_minutes`` ago.

        Runs across every clinic. ``now`` is clinic-local wall-clock time.

        Returns:
            Number of appointments moved to ``no_show``
        """
        threshold = now - timedelta(minutes=grace_minutes)
        threshold_date = threshold.date()
        threshold_time = threshold.time().replace(tzinfo=None)

        stmt = (
            update(appointments)
            .where(
                appointments.c.status.in_(OPEN_STATUSES),
                appointments.c.deleted_at.is_(None),
                or_(
                    appointments.c.appointment_date < threshold_date,
                    and_(
                        appointments.c.appointment_date == threshold_date,
                        appointments.c.start_time < threshold_time,
                    ),
                ),
            )
            .values(status=AppointmentStatus.NO_SHOW.value, updated_at=datetime.now(UTC))
        )
        result = await self.db.execute(stmt)
        await self.db.commit()

        return result.rowcount  # type: ignore[attr-defined]
