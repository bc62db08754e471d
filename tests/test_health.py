"""Tests for health checks and the public booking endpoint."""

from unittest.mock import AsyncMock, patch

import pytest
from conftest import appointment_payload
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_ping(client: AsyncClient) -> None:
    response = await client.get("/api/v1/ping")
    assert response.json() == {"message": "pong"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "db_ok,redis_ok,expected",
    [(True, True, "healthy"), (True, False, "degraded"), (False, True, "degraded")],
)
async def test_detailed_health(client: AsyncClient, db_ok, redis_ok, expected) -> None:
    with (
        patch(
            "dental_api.api.v1.endpoints.health.check_database_connection",
            AsyncMock(return_value=db_ok),
        ),
        patch(
            "dental_api.api.v1.endpoints.health.check_redis_connection",
            AsyncMock(return_value=redis_ok),
        ),
    ):
        response = await client.get("/api/v1/health/detailed")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == expected
    assert data["no_show_sweeper"] == "disabled"


@pytest.mark.asyncio
async def test_public_slots_by_subdomain(
    client: AsyncClient,
    admin_headers: dict,
    dentist_p: dict,
    patient_x: dict,
    booking_day,
) -> None:
    await client.post(
        "/api/v1/citas",
        json=appointment_payload(patient_x, dentist_p, booking_day, "09:00"),
        headers=admin_headers,
    )

    response = await client.get(
        "/api/v1/public/horarios-disponibles",
        params={"subdomain": "sonrisa", "fecha": booking_day.isoformat()},
    )

    assert response.status_code == 200
    times = [value[11:16] for value in response.json()]
    assert len(times) == 17
    assert "09:00" not in times


@pytest.mark.asyncio
async def test_public_slots_unknown_clinic(client: AsyncClient, tenant: dict, booking_day) -> None:
    response = await client.get(
        "/api/v1/public/horarios-disponibles",
        params={"subdomain": "inexistente", "fecha": booking_day.isoformat()},
    )

    assert response.status_code == 404
    assert response.json()["message"] == "Clinic not found"
