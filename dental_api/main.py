"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from dental_api.api.v1.router import api_router
from dental_api.config import settings
from dental_api.core.redis_client import close_redis_connection, get_redis_client
from dental_api.database import AsyncSessionLocal, check_database_connection, engine
from dental_api.middleware.error_handler import register_exception_handlers
from dental_api.middleware.logging import LoggingMiddleware, configure_logging
from dental_api.services.no_show_service import NoShowSweeper

configure_logging()
logger = structlog.get_logger("dental_api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Checks backing services on startup and runs the no-show sweep for the
    lifetime of the process.
    """
    # Startup
    logger.info("application_startup", environment=settings.environment)

    if await check_database_connection():
        logger.info("database_connected")
    else:
        logger.error("database_connection_failed")

    # Redis only backs the working-hours cache; scheduling works without it
    try:
        get_redis_client().ping()
        logger.info("redis_connected")
    except Exception as e:
        logger.warning("redis_connection_failed", error=str(e))

    sweeper: NoShowSweeper | None = None
    if settings.no_show_sweep_enabled:
        sweeper = NoShowSweeper(
            AsyncSessionLocal,
            interval=settings.no_show_interval_seconds,
            initial_delay=settings.no_show_initial_delay_seconds,
            grace_minutes=settings.no_show_grace_minutes,
        )
        sweeper.start()
    app.state.no_show_sweeper = sweeper

    yield

    # Shutdown
    logger.info("application_shutdown")

    if sweeper is not None:
        await sweeper.stop()

    await engine.dispose()
    logger.info("database_connections_closed")

    close_redis_connection()
    logger.info("redis_connection_closed")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Multi-tenant appointment scheduling backend for dental clinics",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(LoggingMiddleware)

register_exception_handlers(app)

app.include_router(api_router, prefix=settings.api_v1_prefix)

# Request metrics; health checks and docs are not instrumented
Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=False,
    should_instrument_requests_inprogress=True,
    excluded_handlers=[
        "/docs",
        "/redoc",
        "/openapi.json",
        "/metrics",
        f"{settings.api_v1_prefix}/health.*",
        f"{settings.api_v1_prefix}/ping",
    ],
    inprogress_name="http_requests_inprogress",
    inprogress_labels=True,
).instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "dental_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )
