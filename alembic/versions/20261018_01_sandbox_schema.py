"""Learning-platform tables written by the sandbox seeder."""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "20261018_01_sandbox_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("raw_user_meta_data", sa.JSON(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "teacher_profiles",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=128), nullable=True),
        sa.Column("last_name", sa.String(length=128), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_teacher_profiles_email", "teacher_profiles", ["email"], unique=True)

    op.create_table(
        "student_profiles",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("first_name", sa.String(length=128), nullable=True),
        sa.Column("last_name", sa.String(length=128), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_student_profiles_email", "student_profiles", ["email"])

    op.create_table(
        "groups",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("group_name", sa.String(length=255), nullable=False),
        sa.Column("group_code", sa.String(length=32), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "enrollments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("student_profile_id", sa.String(length=36), sa.ForeignKey("student_profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("group_id", sa.Integer(), sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="active"),
        *_timestamps(),
        sa.UniqueConstraint("student_profile_id", "group_id", name="uq_enrollment_student_group"),
    )
    op.create_index("ix_enrollments_group", "enrollments", ["group_id"])

    op.create_table(
        "modules",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(length=36), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "assignments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(length=36), nullable=True),
        sa.Column("state", sa.String(length=32), nullable=False, server_default="active"),
        sa.Column("config", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_assignments_title", "assignments", ["title"])

    op.create_table(
        "assigned_assignments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("assignment_id", sa.Integer(), sa.ForeignKey("assignments.id"), nullable=False),
        sa.Column("group_id", sa.Integer(), sa.ForeignKey("groups.id"), nullable=False),
        sa.Column("launch_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_assigned_assignments_assignment_id", "assigned_assignments", ["assignment_id"])

    op.create_table(
        "assignment_modules",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("assignment_id", sa.Integer(), sa.ForeignKey("assignments.id"), nullable=False),
        sa.Column("module_id", sa.Integer(), sa.ForeignKey("modules.id"), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.UniqueConstraint("assignment_id", "module_id", name="uq_assignment_module"),
    )

    op.create_table(
        "assignment_prerequisites",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("assignment_id", sa.Integer(), sa.ForeignKey("assignments.id"), nullable=False),
        sa.Column("type", sa.String(length=64), nullable=False),
        sa.Column("prereq_assignment_id", sa.Integer(), sa.ForeignKey("assignments.id"), nullable=False),
        sa.UniqueConstraint("assignment_id", "prereq_assignment_id", name="uq_assignment_prerequisite"),
    )

    op.create_table(
        "knowledge_components",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("original_question_id", sa.Integer(), nullable=True),
        sa.Column("active_in_personal_review", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "questions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("question_content", sa.JSON(), nullable=False),
        sa.Column("created_by", sa.String(length=36), nullable=True),
        sa.Column("state", sa.String(length=32), nullable=False, server_default="active"),
        sa.Column("config", sa.JSON(), nullable=False),
        sa.Column("knowledge_component_id", sa.Integer(), sa.ForeignKey("knowledge_components.id"), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "assignment_questions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("assignment_id", sa.Integer(), sa.ForeignKey("assignments.id"), nullable=False),
        sa.Column("question_id", sa.Integer(), sa.ForeignKey("questions.id"), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_assignment_questions_assignment", "assignment_questions", ["assignment_id"])

    op.create_table(
        "responses",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("enrollment_id", sa.Integer(), sa.ForeignKey("enrollments.id"), nullable=False),
        sa.Column("question_id", sa.Integer(), sa.ForeignKey("questions.id"), nullable=False),
        sa.Column("is_correct", sa.Boolean(), nullable=False),
        sa.Column("response_content", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_responses_enrollment", "responses", ["enrollment_id"])

    op.create_table(
        "assignment_question_responses",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("response_id", sa.Integer(), sa.ForeignKey("responses.id"), nullable=False),
        sa.Column("assignment_question_id", sa.Integer(), sa.ForeignKey("assignment_questions.id"), nullable=False),
        sa.Column("assigned_assignment_id", sa.Integer(), sa.ForeignKey("assigned_assignments.id"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("response_id", "assignment_question_id", name="uq_aq_response"),
    )

    op.create_table(
        "events",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("type", sa.String(length=64), nullable=False),
        sa.Column("data", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_events_type_created", "events", ["type", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_events_type_created", table_name="events")
    op.drop_table("events")
    op.drop_table("assignment_question_responses")
    op.drop_index("ix_responses_enrollment", table_name="responses")
    op.drop_table("responses")
    op.drop_index("ix_assignment_questions_assignment", table_name="assignment_questions")
    op.drop_table("assignment_questions")
    op.drop_table("questions")
    op.drop_table("knowledge_components")
    op.drop_table("assignment_prerequisites")
    op.drop_table("assignment_modules")
    op.drop_index("ix_assigned_assignments_assignment_id", table_name="assigned_assignments")
    op.drop_table("assigned_assignments")
    op.drop_index("ix_assignments_title", table_name="assignments")
    op.drop_table("assignments")
    op.drop_table("modules")
    op.drop_index("ix_enrollments_group", table_name="enrollments")
    op.drop_table("enrollments")
    op.drop_table("groups")
    op.drop_index("ix_student_profiles_email", table_name="student_profiles")
    op.drop_table("student_profiles")
    op.drop_index("ix_teacher_profiles_email", table_name="teacher_profiles")
    op.drop_table("teacher_profiles")
    op.drop_table("users")
