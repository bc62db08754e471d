"""Tests for staff authentication."""

import pytest
from conftest import TEST_PASSWORD
from httpx import AsyncClient
from sqlalchemy import update

from dental_api.core.security import decode_access_token
from dental_api.models.users import users


async def login(client: AsyncClient, email: str, password: str, subdomain: str = "sonrisa"):
    return await client.post(
        "/api/v1/auth/login",
        json={"email": email, "password": password, "subdomain": subdomain},
    )


@pytest.mark.asyncio
async def test_login_returns_tenant_scoped_tokens(
    client: AsyncClient, tenant: dict, dentist_p: dict
) -> None:
    response = await login(client, "pedro@sonrisa.com", TEST_PASSWORD)

    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["user"]["role"] == "dentist"

    claims = decode_access_token(data["access_token"])
    assert claims["sub"] == str(dentist_p["id"])
    assert claims["tenant_id"] == str(tenant["id"])
    assert claims["role"] == "dentist"

    me = await client.get(
        "/api/v1/citas", headers={"Authorization": f"Bearer {data['access_token']}"}
    )
    assert me.status_code == 200


@pytest.mark.asyncio
async def test_login_is_case_insensitive_on_email(client: AsyncClient, dentist_p: dict) -> None:
    response = await login(client, "Pedro@Sonrisa.com", TEST_PASSWORD, subdomain="SONRISA")
    assert response.status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "email,password,subdomain",
    [
        ("pedro@sonrisa.com", "wrong-password", "sonrisa"),
        ("nadie@sonrisa.com", TEST_PASSWORD, "sonrisa"),
        ("pedro@sonrisa.com", TEST_PASSWORD, "norte"),
        ("pedro@sonrisa.com", TEST_PASSWORD, "unknown"),
    ],
)
async def test_login_rejects_bad_credentials(
    client: AsyncClient, dentist_p: dict, other_tenant: dict, email, password, subdomain
) -> None:
    response = await login(client, email, password, subdomain)

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_suspended_user_cannot_login_or_call_api(
    client: AsyncClient, db_session, dentist_p: dict, dentist_headers: dict
) -> None:
    await db_session.execute(
        update(users).where(users.c.id == dentist_p["id"]).values(status="suspended")
    )
    await db_session.commit()

    assert (await login(client, "pedro@sonrisa.com", TEST_PASSWORD)).status_code == 403
    assert (await client.get("/api/v1/citas", headers=dentist_headers)).status_code == 403


@pytest.mark.asyncio
async def test_refresh_issues_new_tokens(client: AsyncClient, dentist_p: dict) -> None:
    tokens = (await login(client, "pedro@sonrisa.com", TEST_PASSWORD)).json()

    response = await client.post(
        "/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]}
    )

    assert response.status_code == 200
    claims = decode_access_token(response.json()["access_token"])
    assert claims["sub"] == str(dentist_p["id"])


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(client: AsyncClient, dentist_p: dict) -> None:
    tokens = (await login(client, "pedro@sonrisa.com", TEST_PASSWORD)).json()

    response = await client.post(
        "/api/v1/auth/refresh", json={"refresh_token": tokens["access_token"]}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_invalid_bearer_token(client: AsyncClient) -> None:
    response = await client.get(
        "/api/v1/citas", headers={"Authorization": "Bearer not-a-real-token"}
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Could not validate credentials"
