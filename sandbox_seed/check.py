"""Read-only overview of what a local database already holds."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from .db.models import (
    AssignmentModel,
    AssignmentModuleModel,
    EnrollmentModel,
    GroupModel,
    ModuleModel,
    TeacherProfileModel,
)

TEACHER_LIMIT = 5


@dataclass
class DataReport:
    groups: List[Tuple[int, str, str | None]] = field(default_factory=list)
    modules: List[Tuple[int, str]] = field(default_factory=list)
    enrollments: List[Tuple[int, str, int]] = field(default_factory=list)
    assignments: List[Tuple[int, str, int, str, str | None]] = field(default_factory=list)
    teachers: List[Tuple[str, str | None, str | None]] = field(default_factory=list)


def collect_report(session: Session) -> DataReport:
    report = DataReport()
    for group in session.execute(select(GroupModel).order_by(GroupModel.id)).scalars():
        report.groups.append((group.id, group.group_name, group.group_code))

    for module in session.execute(select(ModuleModel).order_by(ModuleModel.id)).scalars():
        report.modules.append((module.id, module.name))

    enrollment_stmt = (
        select(GroupModel.id, GroupModel.group_name, func.count(EnrollmentModel.id))
        .outerjoin(
            EnrollmentModel,
            and_(EnrollmentModel.group_id == GroupModel.id, EnrollmentModel.status == "active"),
        )
        .group_by(GroupModel.id, GroupModel.group_name)
        .order_by(GroupModel.id)
    )
    report.enrollments = [(row[0], row[1], row[2]) for row in session.execute(enrollment_stmt)]

    assignment_stmt = (
        select(ModuleModel.id, ModuleModel.name, AssignmentModel.id, AssignmentModel.title, AssignmentModel.config)
        .join(AssignmentModuleModel, AssignmentModuleModel.module_id == ModuleModel.id)
        .join(AssignmentModel, AssignmentModel.id == AssignmentModuleModel.assignment_id)
        .order_by(ModuleModel.id, AssignmentModuleModel.order)
    )
    for module_id, module_name, assignment_id, title, config in session.execute(assignment_stmt):
        report.assignments.append((module_id, module_name, assignment_id, title, (config or {}).get("mode")))

    teacher_stmt = select(TeacherProfileModel).order_by(TeacherProfileModel.id).limit(TEACHER_LIMIT)
    for teacher in session.execute(teacher_stmt).scalars():
        report.teachers.append((teacher.email, teacher.first_name, teacher.last_name))
    return report


def format_report(report: DataReport) -> List[str]:
    lines = ["=== Groups ==="]
    if not report.groups:
        lines.append("   No groups found.")
    lines.extend(f"   ID: {group_id} | {name} ({code})" for group_id, name, code in report.groups)

    lines.append("")
    lines.append("=== Modules ===")
    if not report.modules:
        lines.append("   No modules found.")
    lines.extend(f"   ID: {module_id} | {name}" for module_id, name in report.modules)

    lines.append("")
    lines.append("=== Enrollments by Group ===")
    lines.extend(f"   Group {group_id} ({name}): {count} students" for group_id, name, count in report.enrollments)

    lines.append("")
    lines.append("=== Assignments by Module ===")
    current_module = None
    for module_id, module_name, assignment_id, title, mode in report.assignments:
        if module_id != current_module:
            lines.append(f"   Module {module_id}: {module_name}")
            current_module = module_id
        label = " [ASSESSMENT]" if mode == "assessment" else ""
        lines.append(f"      - ID {assignment_id}: {title}{label}")

    lines.append("")
    lines.append("=== Teacher Profiles ===")
    lines.extend(f"   {email} ({first} {last})" for email, first, last in report.teachers)
    return lines


__all__ = ["DataReport", "collect_report", "format_report"]
