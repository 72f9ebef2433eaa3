"""
Dionysus Backend — User SQLAlchemy Model
==========================================

What:  ORM model for the `users` table.
Why:   The sync flow needs to know whether a user has been seen before to
       tell a sign-up from a sign-in.
How:   The primary key is the identity provider's user ID (a string like
       "user_2abc..."), so the upsert is a lookup by primary key.

Table Design:
    - id: provider user ID; no surrogate key, the provider already guarantees uniqueness
    - name: display name as last resolved from the provider profile
    - email: primary email at last sync (nullable: some providers allow phone-only accounts)
    - created_at / updated_at: UTC, timezone-aware
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, text
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from dionysus.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    A person who has signed in at least once.

    Lifecycle:
        1. Created on the first sync after sign-up
        2. name/email/updated_at refreshed on every later sync
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(191),
        primary_key=True,
        comment="Identity provider user ID",
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Display name resolved from the provider profile",
    )

    email: Mapped[Optional[str]] = mapped_column(
        String(320),
        nullable=True,
        comment="Primary email address at last sync",
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="First sync (UTC)",
    )

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="Most recent sync (UTC)",
    )

    def __repr__(self) -> str:
        return f"<User(id='{self.id}', name='{self.name}')>"
