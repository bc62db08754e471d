"""Database configuration and connection management."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from dental_api.config import settings


def _engine_options(url: str) -> dict[str, Any]:
    """Pooling options for the configured backend."""
    if url.startswith("sqlite"):
        return {}

    return {
        "pool_pre_ping": True,
        "pool_size": settings.database_pool_size,
        "max_overflow": settings.database_max_overflow,
        "pool_recycle": 3600,
        "connect_args": {
            "server_settings": {
                "application_name": settings.app_name,
            },
        },
    }


# Create async engine with connection pooling
engine: AsyncEngine = create_async_engine(
    settings.async_database_url,
    echo=settings.debug,
    **_engine_options(settings.async_database_url),
)

# Async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def check_database_connection() -> bool:
    """Check if database connection is healthy."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
