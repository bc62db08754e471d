import os
from collections.abc import AsyncGenerator
from datetime import date, timedelta

# Tests run against in-memory SQLite; never point them at a real database
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-dental-api")
os.environ["NO_SHOW_SWEEP_ENABLED"] = "false"
os.environ.setdefault("LOG_FORMAT", "console")

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Load any remaining variables from .env without overriding the ones above
load_dotenv()

from dental_api.core.scheduling import day_of_week
from dental_api.core.security import create_access_token
from dental_api.database import get_db
from dental_api.dependencies import get_cache_manager
from dental_api.main import app
from dental_api.models import metadata
from dental_api.schemas.auth import UserRole, UserStatus
from dental_api.schemas.patients import PatientCreate
from dental_api.services.patient_service import PatientService
from dental_api.services.tenant_service import TenantService
from dental_api.services.user_service import UserService

TEST_DATABASE_URL = "sqlite+aiosqlite://"

# One shared in-memory connection so every session sees the same tables
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    poolclass=StaticPool,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

TEST_PASSWORD = "Secret123!"


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
        await conn.run_sync(metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)


@pytest.fixture
def session_factory(db_session: AsyncSession) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database (tables already created)."""
    return TestSessionLocal


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client with the cache disabled."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache_manager] = lambda: None

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def tenant(db_session: AsyncSession) -> dict:
    """The clinic most tests run in."""
    return await TenantService(db_session).create_tenant(
        name="Clinica Sonrisa", subdomain="sonrisa", email="contacto@sonrisa.com"
    )


@pytest_asyncio.fixture
async def other_tenant(db_session: AsyncSession) -> dict:
    """A second clinic, for isolation checks."""
    return await TenantService(db_session).create_tenant(
        name="Dental Norte", subdomain="norte", email="info@dentalnorte.com"
    )


async def _create_user(
    db: AsyncSession,
    tenant: dict,
    email: str,
    first_name: str,
    last_name: str,
    role: UserRole,
    status: UserStatus = UserStatus.ACTIVE,
) -> dict:
    return await UserService().create_user(
        db,
        tenant_id=tenant["id"],
        email=email,
        password=TEST_PASSWORD,
        first_name=first_name,
        last_name=last_name,
        role=role,
        status=status,
    )


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession, tenant: dict) -> dict:
    return await _create_user(
        db_session, tenant, "admin@sonrisa.com", "Ana", "Admin", UserRole.TENANT_ADMIN
    )


@pytest_asyncio.fixture
async def dentist_p(db_session: AsyncSession, tenant: dict) -> dict:
    return await _create_user(
        db_session, tenant, "pedro@sonrisa.com", "Pedro", "Paredes", UserRole.DENTIST
    )


@pytest_asyncio.fixture
async def dentist_q(db_session: AsyncSession, tenant: dict) -> dict:
    return await _create_user(
        db_session, tenant, "quispe@sonrisa.com", "Lucia", "Quispe", UserRole.DENTIST
    )


@pytest_asyncio.fixture
async def receptionist(db_session: AsyncSession, tenant: dict) -> dict:
    return await _create_user(
        db_session, tenant, "recepcion@sonrisa.com", "Rosa", "Ramos", UserRole.RECEPTIONIST
    )


@pytest_asyncio.fixture
async def other_admin(db_session: AsyncSession, other_tenant: dict) -> dict:
    return await _create_user(
        db_session, other_tenant, "admin@dentalnorte.com", "Nico", "Norte", UserRole.TENANT_ADMIN
    )


async def _create_patient(
    db: AsyncSession, tenant: dict, first_name: str, document_number: str
) -> dict:
    patient = await PatientService(db).create_patient(
        tenant["id"],
        PatientCreate(
            first_name=first_name,
            last_name="Paciente",
            document_number=document_number,
            phone="987 654 321",
        ),
    )
    return patient.model_dump()


@pytest_asyncio.fixture
async def patient_x(db_session: AsyncSession, tenant: dict) -> dict:
    return await _create_patient(db_session, tenant, "Ximena", "40000001")


@pytest_asyncio.fixture
async def patient_y(db_session: AsyncSession, tenant: dict) -> dict:
    return await _create_patient(db_session, tenant, "Yolanda", "40000002")


def make_auth_headers(user: dict) -> dict:
    """Bearer header for a user row, with the claims the API expects."""
    token = create_access_token(
        data={
            "sub": str(user["id"]),
            "tenant_id": str(user["tenant_id"]),
            "role": user["role"],
        },
        expires_delta=timedelta(minutes=30),
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user: dict) -> dict:
    return make_auth_headers(admin_user)


@pytest.fixture
def dentist_headers(dentist_p: dict) -> dict:
    return make_auth_headers(dentist_p)


@pytest.fixture
def booking_day() -> date:
    """A future date on which bookings are accepted."""
    return date.today() + timedelta(days=7)


def next_weekday(day_index: int, after: date | None = None) -> date:
    """First future date whose day index (0 = Sunday) is ``day_index``."""
    current = (after or date.today()) + timedelta(days=1)
    while day_of_week(current) != day_index:
        current += timedelta(days=1)
    return current


def appointment_payload(
    patient: dict,
    practitioner: dict,
    day: date,
    start: str,
    duration: int = 30,
    reason: str = "Control",
) -> dict:
    """Request body for POST/PUT /citas."""
    return {
        "pacienteId": str(patient["id"]),
        "usuarioId": str(practitioner["id"]),
        "appointmentDate": day.isoformat(),
        "startTime": start,
        "duracionMinutos": duration,
        "motivo": reason,
    }
