"""Structured logging setup and per-request logging middleware."""

import logging
import sys
import time
import uuid
from collections.abc import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from dental_api.config import settings

# Health checks and metric scrapes are logged at debug level only
QUIET_PATHS = frozenset({"/metrics", "/api/v1/health", "/api/v1/ping"})


def configure_logging() -> None:
    """Configure structlog on top of stdlib logging.

    ``LOG_FORMAT=json`` renders one JSON object per line for log shipping;
    anything else uses the console renderer.
    """
    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    # LoggingMiddleware already records every request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    if not settings.debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with a request id bound to the structlog context."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        logger = structlog.get_logger("dental_api.request")
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        path = request.url.path
        log = logger.debug if path in QUIET_PATHS else logger.info

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        started = time.perf_counter()
        log(
            "request_started",
            method=request.method,
            path=path,
            client=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                method=request.method,
                path=path,
                error=str(e),
                duration=round(time.perf_counter() - started, 4),
            )
            raise

        duration = time.perf_counter() - started
        log(
            "request_completed",
            method=request.method,
            path=path,
            status_code=response.status_code,
            duration=round(duration, 4),
        )

        response.headers["X-Process-Time"] = f"{duration:.4f}"
        response.headers["X-Request-ID"] = request_id
        return response
