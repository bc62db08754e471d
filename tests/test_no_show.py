"""Tests for no-show marking and the background sweeper."""

import asyncio
from datetime import date, datetime, time, timedelta

import pytest
from conftest import appointment_payload

from dental_api.schemas.appointments import AppointmentCreate, AppointmentStatus
from dental_api.services.appointment_service import AppointmentService
from dental_api.services.no_show_service import NoShowSweeper


async def _book(db, tenant, patient, practitioner, day: date, start: str, duration: int = 30):
    payload = appointment_payload(patient, practitioner, day, start, duration=duration)
    return await AppointmentService(db).create_appointment(
        tenant["id"], AppointmentCreate.model_validate(payload)
    )


@pytest.mark.asyncio
async def test_mark_no_shows_respects_grace_period(
    db_session, tenant, dentist_p, patient_x, booking_day
) -> None:
    overdue = await _book(db_session, tenant, patient_x, dentist_p, booking_day, "10:00", 10)
    recent = await _book(db_session, tenant, patient_x, dentist_p, booking_day, "10:10", 10)
    later = await _book(db_session, tenant, patient_x, dentist_p, booking_day, "11:00")

    service = AppointmentService(db_session)
    marked = await service.mark_no_shows(datetime.combine(booking_day, time(10, 20)), 15)

    assert marked == 1
    statuses = {
        item.id: item.status
        for item in await service.list_by_date_range(tenant["id"], booking_day, booking_day)
    }
    assert statuses[overdue.id] == AppointmentStatus.NO_SHOW
    assert statuses[recent.id] == AppointmentStatus.SCHEDULED
    assert statuses[later.id] == AppointmentStatus.SCHEDULED


@pytest.mark.asyncio
async def test_mark_no_shows_only_touches_open_appointments(
    db_session, tenant, dentist_p, patient_x, booking_day
) -> None:
    service = AppointmentService(db_session)
    confirmed = await _book(db_session, tenant, patient_x, dentist_p, booking_day, "09:00")
    cancelled = await _book(db_session, tenant, patient_x, dentist_p, booking_day, "09:30")
    completed = await _book(db_session, tenant, patient_x, dentist_p, booking_day, "10:00")
    deleted = await _book(db_session, tenant, patient_x, dentist_p, booking_day, "10:30")

    await service.confirm_appointment(tenant["id"], confirmed.id)
    await service.cancel_appointment(tenant["id"], cancelled.id)
    await service.complete_appointment(tenant["id"], completed.id)
    await service.delete_appointment(tenant["id"], deleted.id)

    # Sweeping the next day covers every appointment on booking_day
    marked = await service.mark_no_shows(
        datetime.combine(booking_day + timedelta(days=1), time(8, 0)), 15
    )

    assert marked == 1
    statuses = {
        item.id: item.status
        for item in await service.list_by_date_range(tenant["id"], booking_day, booking_day)
    }
    assert statuses == {
        confirmed.id: AppointmentStatus.NO_SHOW,
        cancelled.id: AppointmentStatus.CANCELLED,
        completed.id: AppointmentStatus.COMPLETED,
    }


@pytest.mark.asyncio
async def test_no_show_is_terminal(db_session, tenant, dentist_p, patient_x, booking_day) -> None:
    from dental_api.core.exceptions import InvalidTransitionException

    service = AppointmentService(db_session)
    booked = await _book(db_session, tenant, patient_x, dentist_p, booking_day, "10:00")
    await service.mark_no_shows(datetime.combine(booking_day, time(12, 0)), 15)

    with pytest.raises(InvalidTransitionException):
        await service.confirm_appointment(tenant["id"], booked.id)


@pytest.mark.asyncio
async def test_sweeper_run_once_uses_clock(
    session_factory, tenant, dentist_p, patient_x, booking_day, db_session
) -> None:
    booked = await _book(db_session, tenant, patient_x, dentist_p, booking_day, "10:00")
    sweeper = NoShowSweeper(
        session_factory,
        grace_minutes=15,
        clock=lambda: datetime.combine(booking_day, time(10, 16)),
    )

    assert await sweeper.run_once() == 1
    assert await sweeper.run_once() == 0

    appointment = await AppointmentService(db_session).get_appointment(tenant["id"], booked.id)
    assert appointment.status == AppointmentStatus.NO_SHOW


@pytest.mark.asyncio
async def test_sweeper_keeps_running_after_failures() -> None:
    calls = 0

    def failing_factory():
        nonlocal calls
        calls += 1
        raise RuntimeError("database unavailable")

    sweeper = NoShowSweeper(failing_factory, interval=0.01, initial_delay=0)  # type: ignore[arg-type]
    sweeper.start()

    for _ in range(100):
        if calls >= 3:
            break
        await asyncio.sleep(0.01)

    assert sweeper.running
    await asyncio.wait_for(sweeper.stop(), timeout=2)

    assert calls >= 3
    assert not sweeper.running


@pytest.mark.asyncio
async def test_sweeper_stops_promptly_while_sleeping() -> None:
    sweeper = NoShowSweeper(lambda: None, interval=3600, initial_delay=3600)  # type: ignore[arg-type]
    task = sweeper.start()
    await asyncio.sleep(0)

    await asyncio.wait_for(sweeper.stop(), timeout=1)

    assert task.done()
    assert task.exception() is None
