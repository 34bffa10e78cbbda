"""ORM models for the learning-platform tables the seeder writes into."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import JSON

from .base import Base, TimestampMixin

JSONType = JSON


class UserModel(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    raw_user_meta_data: Mapped[dict] = mapped_column(JSONType, default=dict, nullable=False)


class TeacherProfileModel(TimestampMixin, Base):
    __tablename__ = "teacher_profiles"
    __table_args__ = (Index("ix_teacher_profiles_email", "email", unique=True),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(128))
    last_name: Mapped[str | None] = mapped_column(String(128))


class StudentProfileModel(TimestampMixin, Base):
    __tablename__ = "student_profiles"
    __table_args__ = (Index("ix_student_profiles_email", "email"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    first_name: Mapped[str | None] = mapped_column(String(128))
    last_name: Mapped[str | None] = mapped_column(String(128))
    email: Mapped[str] = mapped_column(String(255), nullable=False)

    enrollments: Mapped[list["EnrollmentModel"]] = relationship(back_populates="student_profile")


class GroupModel(TimestampMixin, Base):
    __tablename__ = "groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    group_name: Mapped[str] = mapped_column(String(255), nullable=False)
    group_code: Mapped[str | None] = mapped_column(String(32))


class EnrollmentModel(TimestampMixin, Base):
    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("student_profile_id", "group_id", name="uq_enrollment_student_group"),
        Index("ix_enrollments_group", "group_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_profile_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("student_profiles.id", ondelete="CASCADE"), nullable=False
    )
    group_id: Mapped[int] = mapped_column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False)
    status: Mapped[str] = mapped_column(String(32), default="active", nullable=False)

    student_profile: Mapped[StudentProfileModel] = relationship(back_populates="enrollments")


class ModuleModel(TimestampMixin, Base):
    __tablename__ = "modules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    created_by: Mapped[str | None] = mapped_column(String(36))


class AssignmentModel(TimestampMixin, Base):
    __tablename__ = "assignments"
    __table_args__ = (Index("ix_assignments_title", "title"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    created_by: Mapped[str | None] = mapped_column(String(36))
    state: Mapped[str] = mapped_column(String(32), default="active", nullable=False)
    config: Mapped[dict[str, Any]] = mapped_column(JSONType, default=dict, nullable=False)


class AssignedAssignmentModel(TimestampMixin, Base):
    __tablename__ = "assigned_assignments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    assignment_id: Mapped[int] = mapped_column(Integer, ForeignKey("assignments.id"), nullable=False, index=True)
    group_id: Mapped[int] = mapped_column(Integer, ForeignKey("groups.id"), nullable=False)
    launch_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class AssignmentModuleModel(Base):
    __tablename__ = "assignment_modules"
    __table_args__ = (UniqueConstraint("assignment_id", "module_id", name="uq_assignment_module"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    assignment_id: Mapped[int] = mapped_column(Integer, ForeignKey("assignments.id"), nullable=False)
    module_id: Mapped[int] = mapped_column(Integer, ForeignKey("modules.id"), nullable=False)
    order: Mapped[int] = mapped_column("order", Integer, nullable=False)


class AssignmentPrerequisiteModel(Base):
    __tablename__ = "assignment_prerequisites"
    __table_args__ = (
        UniqueConstraint("assignment_id", "prereq_assignment_id", name="uq_assignment_prerequisite"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    assignment_id: Mapped[int] = mapped_column(Integer, ForeignKey("assignments.id"), nullable=False)
    type: Mapped[str] = mapped_column(String(64), nullable=False)
    prereq_assignment_id: Mapped[int] = mapped_column(Integer, ForeignKey("assignments.id"), nullable=False)


class KnowledgeComponentModel(TimestampMixin, Base):
    __tablename__ = "knowledge_components"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    original_question_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    active_in_personal_review: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class QuestionModel(TimestampMixin, Base):
    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    question_content: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False)
    created_by: Mapped[str | None] = mapped_column(String(36))
    state: Mapped[str] = mapped_column(String(32), default="active", nullable=False)
    config: Mapped[dict[str, Any]] = mapped_column(JSONType, default=dict, nullable=False)
    knowledge_component_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("knowledge_components.id"), nullable=True
    )


class AssignmentQuestionModel(TimestampMixin, Base):
    __tablename__ = "assignment_questions"
    __table_args__ = (Index("ix_assignment_questions_assignment", "assignment_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    assignment_id: Mapped[int] = mapped_column(Integer, ForeignKey("assignments.id"), nullable=False)
    question_id: Mapped[int] = mapped_column(Integer, ForeignKey("questions.id"), nullable=False)
    order: Mapped[int] = mapped_column("order", Integer, nullable=False)


class ResponseModel(TimestampMixin, Base):
    __tablename__ = "responses"
    __table_args__ = (Index("ix_responses_enrollment", "enrollment_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    enrollment_id: Mapped[int] = mapped_column(Integer, ForeignKey("enrollments.id"), nullable=False)
    question_id: Mapped[int] = mapped_column(Integer, ForeignKey("questions.id"), nullable=False)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False)
    response_content: Mapped[dict[str, Any]] = mapped_column(JSONType, default=dict, nullable=False)


class AssignmentQuestionResponseModel(TimestampMixin, Base):
    __tablename__ = "assignment_question_responses"
    __table_args__ = (UniqueConstraint("response_id", "assignment_question_id", name="uq_aq_response"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    response_id: Mapped[int] = mapped_column(Integer, ForeignKey("responses.id"), nullable=False)
    assignment_question_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("assignment_questions.id"), nullable=False
    )
    assigned_assignment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("assigned_assignments.id"), nullable=False
    )


class EventModel(TimestampMixin, Base):
    __tablename__ = "events"
    __table_args__ = (Index("ix_events_type_created", "type", "created_at"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    type: Mapped[str] = mapped_column(String(64), nullable=False)
    data: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False)


__all__ = [
    "AssignedAssignmentModel",
    "AssignmentModel",
    "AssignmentModuleModel",
    "AssignmentPrerequisiteModel",
    "AssignmentQuestionModel",
    "AssignmentQuestionResponseModel",
    "EnrollmentModel",
    "EventModel",
    "GroupModel",
    "KnowledgeComponentModel",
    "ModuleModel",
    "QuestionModel",
    "ResponseModel",
    "StudentProfileModel",
    "TeacherProfileModel",
    "UserModel",
]
