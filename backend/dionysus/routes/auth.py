"""
Dionysus Backend — Auth Sync Route
====================================

What:  POST /api/auth/sync, called by the frontend right after the identity
       provider finishes a sign-in or sign-up.
How:   1. Upsert the User row (new row → signup, existing row → login)
       2. Build an AuthEvent from the profile and request headers
       3. Dispatch the notification with retry
       4. Return the sync result whatever happened to the notification

Failure tolerance:
    The alert is a side channel. A NotificationError after all retries is
    logged and reported as notification="failed"; the sync still returns 200.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from dionysus.database import get_db_session
from dionysus.exceptions import NotificationError
from dionysus.schemas.auth import (
    AuthEvent,
    AuthEventType,
    ErrorResponse,
    SyncUserRequest,
    SyncUserResponse,
)
from dionysus.services.auth_notification import auth_notification_service
from dionysus.services.user_service import resolve_primary_email, user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def client_ip_from_headers(request: Request) -> Optional[str]:
    """First hop of X-Forwarded-For, or None when the header is absent or blank."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if not forwarded_for:
        return None
    first = forwarded_for.split(",")[0].strip()
    return first or None


@router.post(
    "/sync",
    response_model=SyncUserResponse,
    responses={500: {"description": "Database error", "model": ErrorResponse}},
    summary="Sync the signed-in user and send an auth alert",
)
async def sync_user(
    profile: SyncUserRequest,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> SyncUserResponse:
    user, created = await user_service.sync_user(db, profile)

    event = AuthEvent(
        event_type=AuthEventType.SIGNUP if created else AuthEventType.LOGIN,
        name=user.name,
        email=resolve_primary_email(profile),
        user_id=user.id,
        occurred_at=datetime.now(timezone.utc),
        ip_address=client_ip_from_headers(request),
        user_agent=request.headers.get("user-agent"),
    )

    try:
        delivered = await auth_notification_service.send_auth_notification_with_retry(event)
        notification = "sent" if delivered else "skipped"
    except NotificationError as e:
        logger.error(
            "Auth notification failed for user %s: %s | Context: %s",
            user.id,
            e.message,
            e.context,
        )
        notification = "failed"

    return SyncUserResponse(
        user_id=user.id,
        name=user.name,
        event_type=event.event_type,
        notification=notification,
    )
