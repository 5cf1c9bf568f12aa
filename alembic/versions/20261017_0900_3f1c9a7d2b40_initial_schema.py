"""Initial schema: tenancy, academics, schedule, notifications, conversations

Revision ID: 3f1c9a7d2b40
Revises:
Create Date: 2026-10-17 09:00:00.000000+00:00

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c9a7d2b40"  # pragma: allowlist secret
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _id() -> sa.Column:
    return sa.Column("id", sa.Uuid(), nullable=False, comment="UUID primary key")


def _timestamps(updated: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
            comment="Creation timestamp (UTC)",
        )
    ]
    if updated:
        columns.append(
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                server_default=sa.text("now()"),
                nullable=False,
                comment="Last update timestamp (UTC)",
            )
        )
    return columns


def upgrade() -> None:
    op.create_table(
        "institutions",
        _id(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code"),
    )

    op.create_table(
        "users",
        _id(),
        sa.Column("institution_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("phone", sa.String(length=30), nullable=True),
        sa.Column("timezone", sa.String(length=50), nullable=False),
        sa.Column("student_number", sa.String(length=50), nullable=True),
        sa.Column("employee_number", sa.String(length=50), nullable=True),
        sa.Column("department", sa.String(length=100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("role IN ('student', 'teacher', 'admin')", name="check_user_role"),
        sa.ForeignKeyConstraint(["institution_id"], ["institutions.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("idx_users_institution", "users", ["institution_id"])

    op.create_table(
        "subjects",
        _id(),
        sa.Column("institution_id", sa.Uuid(), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("credits", sa.SmallInteger(), nullable=False),
        sa.Column("department", sa.String(length=100), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["institution_id"], ["institutions.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("institution_id", "code", name="uq_subject_code"),
    )

    op.create_table(
        "classes",
        _id(),
        sa.Column("institution_id", sa.Uuid(), nullable=False),
        sa.Column("subject_id", sa.Uuid(), nullable=False),
        sa.Column("teacher_id", sa.Uuid(), nullable=False),
        sa.Column("section_name", sa.String(length=50), nullable=False),
        sa.Column("room", sa.String(length=100), nullable=True),
        sa.Column("schedule_pattern", sa.JSON(), nullable=True),
        sa.Column("max_students", sa.SmallInteger(), nullable=False, comment="Capacity"),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["institution_id"], ["institutions.id"]),
        sa.ForeignKeyConstraint(["subject_id"], ["subjects.id"]),
        sa.ForeignKeyConstraint(["teacher_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_classes_teacher", "classes", ["teacher_id"])
    op.create_index("idx_classes_institution", "classes", ["institution_id"])

    op.create_table(
        "enrollments",
        _id(),
        sa.Column("student_id", sa.Uuid(), nullable=False),
        sa.Column("class_id", sa.Uuid(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("enrolled_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('active', 'dropped', 'completed', 'withdrawn')",
            name="check_enrollment_status",
        ),
        sa.ForeignKeyConstraint(["student_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["class_id"], ["classes.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("student_id", "class_id", name="uq_enrollment_student_class"),
    )
    op.create_index("idx_enrollments_student_status", "enrollments", ["student_id", "status"])

    op.create_table(
        "schedule_events",
        _id(),
        sa.Column("institution_id", sa.Uuid(), nullable=False),
        sa.Column("class_id", sa.Uuid(), nullable=True),
        sa.Column("creator_id", sa.Uuid(), nullable=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("event_type", sa.String(length=20), nullable=False),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("location", sa.String(length=200), nullable=True),
        sa.Column("is_cancelled", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "event_type IN ('class', 'exam', 'assignment', 'meeting', 'holiday', 'custom')",
            name="check_event_type",
        ),
        sa.CheckConstraint("end_at >= start_at", name="check_event_time_order"),
        sa.ForeignKeyConstraint(["institution_id"], ["institutions.id"]),
        sa.ForeignKeyConstraint(["class_id"], ["classes.id"]),
        sa.ForeignKeyConstraint(["creator_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_events_institution_start", "schedule_events", ["institution_id", "start_at"]
    )
    op.create_index("idx_events_class", "schedule_events", ["class_id"])
    op.create_index("idx_events_creator", "schedule_events", ["creator_id"])

    op.create_table(
        "notifications",
        _id(),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(length=30), nullable=False),
        sa.Column("priority", sa.String(length=10), nullable=False),
        sa.Column("action_url", sa.String(length=500), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(updated=False),
        sa.CheckConstraint(
            "priority IN ('urgent', 'high', 'medium', 'low')", name="check_priority"
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_notifications_user_created", "notifications", ["user_id", "created_at"])

    op.create_table(
        "conversations",
        _id(),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("context", sa.JSON(), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_conversations_user", "conversations", ["user_id"])

    op.create_table(
        "conversation_turns",
        _id(),
        sa.Column("conversation_id", sa.Uuid(), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False, comment="1-based append position"),
        sa.Column("sender", sa.String(length=20), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("kind", sa.String(length=20), nullable=False),
        *_timestamps(updated=False),
        sa.CheckConstraint("sender IN ('user', 'assistant')", name="check_turn_sender"),
        sa.ForeignKeyConstraint(["conversation_id"], ["conversations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("conversation_id", "sequence", name="uq_turn_conversation_sequence"),
    )
    op.create_index(
        "idx_turns_conversation_order",
        "conversation_turns",
        ["conversation_id", "created_at", "sequence"],
    )


def downgrade() -> None:
    # Reverse dependency order
    op.drop_index("idx_turns_conversation_order", table_name="conversation_turns")
    op.drop_table("conversation_turns")
    op.drop_index("idx_conversations_user", table_name="conversations")
    op.drop_table("conversations")
    op.drop_index("idx_notifications_user_created", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("idx_events_creator", table_name="schedule_events")
    op.drop_index("idx_events_class", table_name="schedule_events")
    op.drop_index("idx_events_institution_start", table_name="schedule_events")
    op.drop_table("schedule_events")
    op.drop_index("idx_enrollments_student_status", table_name="enrollments")
    op.drop_table("enrollments")
    op.drop_index("idx_classes_institution", table_name="classes")
    op.drop_index("idx_classes_teacher", table_name="classes")
    op.drop_table("classes")
    op.drop_table("subjects")
    op.drop_index("idx_users_institution", table_name="users")
    op.drop_table("users")
    op.drop_table("institutions")
