"""
Dionysus Backend — User Sync Service
======================================

What:  Upserts the local User row after an identity-provider sign-in and
       reports whether the user is new.
Why:   "New row" vs "existing row" is what decides between a signup and a
       login notification.
Who:   Called by POST /api/auth/sync before the notification is dispatched.
"""

import logging
from datetime import datetime, timezone
from typing import Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dionysus.exceptions import DatabaseError
from dionysus.models.user import User
from dionysus.schemas.auth import SyncUserRequest

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_NAME = "User"
UNKNOWN_EMAIL = "unknown@email.com"


def resolve_display_name(profile: SyncUserRequest) -> str:
    """
    Full name, else username, else first email, else "User".

    Blank name parts are dropped so "Ada" + None gives "Ada", not "Ada ".
    """
    parts = [p.strip() for p in (profile.first_name, profile.last_name) if p and p.strip()]
    full_name = " ".join(parts)
    if full_name:
        return full_name
    if profile.username:
        return profile.username
    if profile.email_addresses:
        return profile.email_addresses[0]
    return DEFAULT_DISPLAY_NAME


def resolve_primary_email(profile: SyncUserRequest) -> str:
    if profile.email_addresses:
        return profile.email_addresses[0]
    return UNKNOWN_EMAIL


class UserService:
    """Stateless; receives the session per call."""

    async def sync_user(
        self, db: AsyncSession, profile: SyncUserRequest
    ) -> Tuple[User, bool]:
        """
        Create or refresh the user row.

        Returns:
            (user, created): created is True when the row did not exist.

        Raises:
            DatabaseError: the lookup or write failed
        """
        name = resolve_display_name(profile)
        email = profile.email_addresses[0] if profile.email_addresses else None
        now = datetime.now(timezone.utc)

        try:
            result = await db.execute(select(User).where(User.id == profile.user_id))
            user = result.scalar_one_or_none()

            created = user is None
            if created:
                user = User(
                    id=profile.user_id,
                    name=name,
                    email=email,
                    created_at=now,
                    updated_at=now,
                )
                db.add(user)
            else:
                user.name = name
                user.email = email
                user.updated_at = now

            await db.flush()
        except SQLAlchemyError as e:
            logger.error("User sync failed for %s: %s", profile.user_id, str(e), exc_info=True)
            raise DatabaseError(
                context={"user_id": profile.user_id, "original_error": type(e).__name__},
            ) from e

        logger.info(
            "User %s synced (%s)", profile.user_id, "created" if created else "updated"
        )
        return user, created


user_service = UserService()
