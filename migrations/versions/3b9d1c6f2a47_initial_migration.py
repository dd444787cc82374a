"""Initial migration

Revision ID: 3b9d1c6f2a47
Revises:
Create Date: 2026-10-19 10:00:00.000000
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3b9d1c6f2a47"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


# Constants for frequently used values
UUID_GEN = "uuid_generate_v4()"
TIMESTAMP_NOW = "now()"


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text(TIMESTAMP_NOW), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text(TIMESTAMP_NOW), nullable=False),
    ]


def upgrade() -> None:
    """Create users, professionals, health events, notifications and reports."""
    # Enable UUID extension
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(), server_default=sa.text(UUID_GEN), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text(TIMESTAMP_NOW), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "professionals",
        sa.Column("id", postgresql.UUID(), server_default=sa.text(UUID_GEN), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("specialty", sa.String(), nullable=True),
        sa.Column("user_id", postgresql.UUID(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text(TIMESTAMP_NOW), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_professionals_user_id", "professionals", ["user_id"], unique=False)

    op.create_table(
        "health_events",
        sa.Column("id", postgresql.UUID(), server_default=sa.text(UUID_GEN), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("observation", sa.String(), nullable=True),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("start_time", sa.String(5), nullable=False),
        sa.Column("end_time", sa.String(5), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("user_id", postgresql.UUID(), nullable=False),
        sa.Column("professional_id", postgresql.UUID(), nullable=False),
        sa.Column("files", sa.JSON(), server_default=sa.text("'[]'"), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["professional_id"], ["professionals.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_health_events_user_id", "health_events", ["user_id"], unique=False)
    op.create_index("idx_health_events_professional_date", "health_events", ["professional_id", "date"], unique=False)

    op.create_table(
        "notifications",
        sa.Column("id", postgresql.UUID(), server_default=sa.text(UUID_GEN), nullable=False),
        sa.Column("user_id", postgresql.UUID(), nullable=False),
        sa.Column("status", sa.String(20), server_default="UNREAD", nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"], unique=False)

    op.create_table(
        "reports",
        sa.Column("id", postgresql.UUID(), server_default=sa.text(UUID_GEN), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("protocol", sa.String(50), nullable=False),
        sa.Column("status", sa.String(20), server_default="SENT", nullable=False),
        sa.Column("viewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text(TIMESTAMP_NOW), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # Create health check function
    op.execute("""
    CREATE OR REPLACE FUNCTION health_check()
    RETURNS boolean AS $$
    BEGIN
      RETURN TRUE;
    END;
    $$ LANGUAGE plpgsql;
    """)


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_table("reports")
    op.drop_table("notifications")
    op.drop_table("health_events")
    op.drop_table("professionals")
    op.drop_table("users")

    op.execute("DROP FUNCTION IF EXISTS health_check()")
