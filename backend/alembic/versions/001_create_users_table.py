"""Create users table

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Creates the `users` table used by the auth sync flow.
How:   String primary key holding the identity provider's user ID.

Rollback: downgrade() drops the table (destructive).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Columns mirror dionysus/models/user.py."""
    op.create_table(
        "users",
        sa.Column(
            "id",
            sa.String(191),
            nullable=False,
            comment="Identity provider user ID",
        ),
        sa.Column(
            "name",
            sa.String(255),
            nullable=False,
            comment="Display name resolved from the provider profile",
        ),
        sa.Column(
            "email",
            sa.String(320),
            nullable=True,
            comment="Primary email address at last sync",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="First sync (UTC)",
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="Most recent sync (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("users")
