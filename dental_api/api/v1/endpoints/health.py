"""Health check endpoints."""

from fastapi import APIRouter, Request, status
from pydantic import BaseModel

from dental_api.config import settings
from dental_api.core.redis_client import check_redis_connection
from dental_api.database import check_database_connection

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    environment: str


class DetailedHealthResponse(BaseModel):
    """Detailed health check response model."""

    status: str
    version: str
    environment: str
    database: str
    redis: str
    no_show_sweeper: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
)
async def health_check() -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment,
    )


@router.get(
    "/health/detailed",
    response_model=DetailedHealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Detailed health check",
)
async def detailed_health_check(request: Request) -> DetailedHealthResponse:
    """
    Detailed health check with database, Redis and background sweep status.

    Redis only backs the working-hours cache, so an outage degrades the
    report without failing it.
    """
    db_healthy = await check_database_connection()
    redis_healthy = await check_redis_connection()

    sweeper = getattr(request.app.state, "no_show_sweeper", None)
    if sweeper is None:
        sweeper_state = "disabled"
    else:
        sweeper_state = "running" if sweeper.running else "stopped"

    return DetailedHealthResponse(
        status="healthy" if db_healthy and redis_healthy else "degraded",
        version=settings.app_version,
        environment=settings.environment,
        database="healthy" if db_healthy else "unhealthy",
        redis="healthy" if redis_healthy else "unhealthy",
        no_show_sweeper=sweeper_state,
    )


@router.get(
    "/ping",
    status_code=status.HTTP_200_OK,
    summary="Simple ping",
)
async def ping() -> dict[str, str]:
    """Simple ping endpoint."""
    return {"message": "pong"}
