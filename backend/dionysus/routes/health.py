"""
Dionysus Backend — Health Check Route
=======================================

What:  GET /health for Docker health checks and load balancer probes.
How:   SELECT 1 against the database plus the notification channel state.

Status levels:
    - healthy:   database reachable
    - unhealthy: database unreachable (HTTP 200 body, status flag for monitoring)

    Disabled notifications do not degrade health: running without
    RESEND_API_KEY is a supported configuration.
"""

import logging
import time

from fastapi import APIRouter
from sqlalchemy import text

from dionysus import __version__
from dionysus.database import engine
from dionysus.schemas.auth import HealthResponse
from dionysus.services.auth_notification import auth_notification_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check() -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        notifications="enabled" if auth_notification_service.is_enabled else "disabled",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
