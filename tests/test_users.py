"""Tests for staff role and status changes."""

from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from conftest import appointment_payload
from httpx import AsyncClient

from dental_api.core.exceptions import NotFoundException
from dental_api.schemas.auth import UserAccessUpdate, UserRole, UserStatus
from dental_api.services.user_service import UserService


async def set_access(client: AsyncClient, headers: dict, user: dict, **body):
    return await client.patch(f"/api/v1/usuarios/{user['id']}/acceso", json=body, headers=headers)


@pytest.mark.asyncio
async def test_deactivated_dentist_leaves_work_hours_and_bookings(
    client: AsyncClient,
    admin_headers: dict,
    dentist_q: dict,
    patient_x: dict,
    booking_day,
) -> None:
    await client.post(
        "/api/v1/scheduleconfig/upsert",
        json={
            "usuarioId": str(dentist_q["id"]),
            "configurations": [
                {
                    "dayOfWeek": 1,
                    "isWorkingDay": True,
                    "morningStartTime": "07:00",
                    "morningEndTime": "12:00",
                    "afternoonStartTime": "14:00",
                    "afternoonEndTime": "20:00",
                }
            ],
        },
        headers=admin_headers,
    )
    hours = await client.get("/api/v1/scheduleconfig/work-hours", headers=admin_headers)
    assert hours.json() == {"workDayStart": "07:00", "workDayEnd": "20:00"}

    response = await set_access(client, admin_headers, dentist_q, status="inactive")

    assert response.status_code == 200
    assert response.json()["status"] == "inactive"

    hours = await client.get("/api/v1/scheduleconfig/work-hours", headers=admin_headers)
    assert hours.json() == {"workDayStart": "09:00", "workDayEnd": "18:00"}

    booking = await client.post(
        "/api/v1/citas",
        json=appointment_payload(patient_x, dentist_q, booking_day, "10:00"),
        headers=admin_headers,
    )
    assert booking.status_code == 404


@pytest.mark.asyncio
async def test_role_change(client: AsyncClient, admin_headers: dict, receptionist: dict) -> None:
    response = await set_access(client, admin_headers, receptionist, role="dentist")

    assert response.status_code == 200
    assert response.json()["role"] == "dentist"


@pytest.mark.asyncio
async def test_access_change_rules(
    client: AsyncClient,
    admin_user: dict,
    admin_headers: dict,
    dentist_headers: dict,
    dentist_q: dict,
    other_admin: dict,
) -> None:
    cases = [
        (dentist_headers, dentist_q, {"status": "suspended"}, 403),
        (admin_headers, admin_user, {"status": "inactive"}, 400),
        (admin_headers, other_admin, {"status": "inactive"}, 404),
        (admin_headers, dentist_q, {}, 422),
        (admin_headers, dentist_q, {"role": "owner"}, 422),
    ]
    for headers, user, body, expected in cases:
        response = await set_access(client, headers, user, **body)
        assert response.status_code == expected, body


@pytest.mark.asyncio
async def test_update_access_clears_clinic_schedule_cache(db_session, tenant, dentist_p) -> None:
    cache = MagicMock()
    service = UserService(cache)

    user = await service.update_access(
        db_session,
        tenant["id"],
        dentist_p["id"],
        UserAccessUpdate(status=UserStatus.SUSPENDED, role=UserRole.ASSISTANT),
    )

    assert user["status"] == "suspended"
    assert user["role"] == "assistant"
    cache.delete_pattern.assert_called_once_with(f"schedule:{tenant['id']}:*")


@pytest.mark.asyncio
async def test_update_access_unknown_user_keeps_cache(db_session, tenant) -> None:
    cache = MagicMock()

    with pytest.raises(NotFoundException):
        await UserService(cache).update_access(
            db_session, tenant["id"], uuid4(), UserAccessUpdate(status=UserStatus.INACTIVE)
        )

    cache.delete_pattern.assert_not_called()
