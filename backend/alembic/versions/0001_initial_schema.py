"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18

Creates all tables for TutorHub:
users, students, classes, class_enrollments, class_requests, notifications.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(36), primary_key=True),
        sa.Column("full_name", sa.String(150), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="student"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- students ---
    op.create_table(
        "students",
        sa.Column("student_id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False, unique=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("selected_grade", sa.String(50), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- classes ---
    op.create_table(
        "classes",
        sa.Column("class_id", sa.String(36), primary_key=True),
        sa.Column("grade", sa.String(50), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("class_type", sa.String(50), nullable=False, server_default="Normal"),
        sa.Column("venue", sa.String(255), nullable=True),
        sa.Column("schedule", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("capacity", sa.Integer, nullable=False),
        sa.Column("enrolled_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("enrolled_count >= 0", name="ck_classes_enrolled_count_nonnegative"),
        sa.CheckConstraint("enrolled_count <= capacity", name="ck_classes_enrolled_count_capacity"),
    )

    # --- class_enrollments ---
    op.create_table(
        "class_enrollments",
        sa.Column("class_id", sa.String(36), sa.ForeignKey("classes.class_id"), primary_key=True),
        sa.Column("student_id", sa.String(36), sa.ForeignKey("students.student_id"), primary_key=True),
        sa.Column("enrolled_at", sa.DateTime(timezone=True), nullable=False),
    )

    # --- class_requests ---
    op.create_table(
        "class_requests",
        sa.Column("request_id", sa.String(36), primary_key=True),
        sa.Column("student_id", sa.String(36), sa.ForeignKey("students.student_id"), nullable=False),
        sa.Column("class_id", sa.String(36), sa.ForeignKey("classes.class_id"), nullable=False),
        sa.Column("reason", sa.Text, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("acted_by_user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=True),
        sa.Column("acted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("admin_note", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "uq_class_requests_pending_pair",
        "class_requests",
        ["student_id", "class_id"],
        unique=True,
        sqlite_where=sa.text("status = 'pending'"),
        postgresql_where=sa.text("status = 'pending'"),
    )

    # --- notifications ---
    op.create_table(
        "notifications",
        sa.Column("notification_id", sa.String(36), primary_key=True),
        sa.Column("recipient_user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("data", sa.JSON, nullable=True),
        sa.Column("is_read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_notifications_recipient_user_id", "notifications", ["recipient_user_id"])


def downgrade() -> None:
    op.drop_index("ix_notifications_recipient_user_id", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("uq_class_requests_pending_pair", table_name="class_requests")
    op.drop_table("class_requests")
    op.drop_table("class_enrollments")
    op.drop_table("classes")
    op.drop_table("students")
    op.drop_table("users")
