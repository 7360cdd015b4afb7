"""Initial schema for the gradebook

Revision ID: 001_initial
Revises:
Create Date: 2026-10-17

"""

import typing as t

from alembic import op
from sqlalchemy import func as f
from sqlalchemy.schema import Column, ForeignKey, Index
from sqlalchemy.types import Boolean, Date, DateTime, String, Text

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | t.Sequence[str] | None = None
depends_on: str | t.Sequence[str] | None = None


def _timestamps() -> list[Column[t.Any]]:
    return [
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
    ]


def upgrade() -> None:
    # Schools
    op.create_table(
        "schools",
        Column("school_id", String(22), primary_key=True),
        Column("name", String, nullable=False),
        Column("slug", String, unique=True, nullable=False),
        *_timestamps(),
    )

    # Users
    op.create_table(
        "users",
        Column("user_id", String(22), primary_key=True),
        Column("email", String, unique=True, nullable=False),
        Column("name", String, nullable=False),
        Column("password_hash", String, nullable=True),
        *_timestamps(),
    )

    # School Memberships
    op.create_table(
        "school_memberships",
        Column("user_id", String(22), ForeignKey("users.user_id"), primary_key=True),
        Column("school_id", String(22), ForeignKey("schools.school_id"), primary_key=True),
        Column("role", String(32), nullable=False),
        *_timestamps(),
    )

    # Courses
    op.create_table(
        "courses",
        Column("course_id", String(22), primary_key=True),
        Column("school_id", String(22), ForeignKey("schools.school_id"), nullable=False),
        Column("name", String, nullable=False),
        *_timestamps(),
    )

    # Evaluations
    op.create_table(
        "evaluations",
        Column("evaluation_id", String(22), primary_key=True),
        Column("school_id", String(22), ForeignKey("schools.school_id"), nullable=False),
        Column("course_id", String(22), ForeignKey("courses.course_id"), nullable=False),
        Column("owner_id", String(22), ForeignKey("users.user_id"), nullable=False),
        Column("title", String, nullable=False),
        Column("date", Date, nullable=False),
        Column("description", Text, nullable=False, server_default=""),
        *_timestamps(),
    )
    op.create_index("ix_evaluations_course_id", "evaluations", ["course_id"])

    # Notifications
    op.create_table(
        "notifications",
        Column("notification_id", String(22), primary_key=True),
        Column("school_id", String(22), ForeignKey("schools.school_id"), nullable=False),
        Column("recipient_id", String(22), ForeignKey("users.user_id"), nullable=False),
        Column("title", Text, nullable=False),
        Column("content", Text, nullable=False),
        Column("is_read", Boolean, nullable=False, server_default="false"),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
    )
    op.create_index("ix_notifications_recipient_id_create_time", "notifications", ["recipient_id", "create_time"])

    # Unlock Requests
    op.create_table(
        "unlock_requests",
        Column("unlock_request_id", String(22), primary_key=True),
        Column(
            "evaluation_id",
            String(22),
            ForeignKey("evaluations.evaluation_id", ondelete="CASCADE"),
            nullable=False,
        ),
        Column("requester_id", String(22), ForeignKey("users.user_id"), nullable=False),
        Column("school_id", String(22), ForeignKey("schools.school_id"), nullable=False),
        Column("status", String(32), nullable=False, server_default="pending"),
        Column("comment", Text, nullable=True),
        Column("reason", Text, nullable=True),
        Column("resolved_by", String(22), ForeignKey("users.user_id"), nullable=True),
        Column("resolve_time", DateTime(timezone=True), nullable=True),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
    )
    op.create_index("ix_unlock_requests_evaluation_id_status", "unlock_requests", ["evaluation_id", "status"])


def downgrade() -> None:
    op.drop_table("unlock_requests")
    op.drop_table("notifications")
    op.drop_table("evaluations")
    op.drop_table("courses")
    op.drop_table("school_memberships")
    op.drop_table("users")
    op.drop_table("schools")
