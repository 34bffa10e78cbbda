"""Remove rows left behind by earlier seed runs.

Deletes run child tables first so the cleanup works against schemas that
enforce foreign keys without cascades.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence

from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session

from .constants import SEED_EMAIL_PATTERN, SEEDED_ASSESSMENT_PATTERN, SEEDED_ASSIGNMENT_PATTERNS, SEEDED_KC_PATTERNS
from .db.models import (
    AssignedAssignmentModel,
    AssignmentModel,
    AssignmentModuleModel,
    AssignmentPrerequisiteModel,
    AssignmentQuestionModel,
    AssignmentQuestionResponseModel,
    EnrollmentModel,
    EventModel,
    KnowledgeComponentModel,
    QuestionModel,
    ResponseModel,
    StudentProfileModel,
    UserModel,
)
from .sinks import EventType

logger = logging.getLogger(__name__)

GROUP_EVENT_TYPES = (
    EventType.QUESTION_SHOWN,
    EventType.QUESTION_ANSWERED,
    EventType.LESSON_COMPLETED,
    EventType.MASTERY_CHECK_COMPLETED,
    EventType.ATTENDANCE_MARKED,
)


@dataclass
class CleanupReport:
    events: int = 0
    students: int = 0
    assignments: int = 0
    knowledge_components: int = 0
    assessments: int = 0


def cleanup_events(session: Session, group_ids: Sequence[int]) -> int:
    """Delete progress and attendance events whose payload names one of ``group_ids``."""
    wanted = {str(group_id) for group_id in group_ids}
    stmt = select(EventModel).where(EventModel.type.in_([event_type.value for event_type in GROUP_EVENT_TYPES]))
    doomed = [event.id for event in session.execute(stmt).scalars() if str((event.data or {}).get("groupId")) in wanted]
    if doomed:
        session.execute(delete(EventModel).where(EventModel.id.in_(doomed)))
    logger.info("Deleted %d events for groups %s", len(doomed), ", ".join(sorted(wanted)))
    return len(doomed)


def _delete_responses(session: Session, response_filter) -> None:
    response_ids = select(ResponseModel.id).where(response_filter)
    session.execute(
        delete(AssignmentQuestionResponseModel).where(AssignmentQuestionResponseModel.response_id.in_(response_ids))
    )
    session.execute(delete(ResponseModel).where(response_filter))


def cleanup_seed_students(session: Session, group_ids: Sequence[int]) -> int:
    """Delete seed students (``sandbox.*@test.local``) in every group they joined."""
    stmt = (
        select(EnrollmentModel.student_profile_id)
        .join(StudentProfileModel, EnrollmentModel.student_profile_id == StudentProfileModel.id)
        .where(EnrollmentModel.group_id.in_(list(group_ids)), StudentProfileModel.email.like(SEED_EMAIL_PATTERN))
        .distinct()
    )
    student_ids: List[str] = list(session.execute(stmt).scalars())
    if not student_ids:
        return 0

    enrollment_ids = select(EnrollmentModel.id).where(EnrollmentModel.student_profile_id.in_(student_ids))
    _delete_responses(session, ResponseModel.enrollment_id.in_(enrollment_ids))

    points = select(EventModel).where(EventModel.type == EventType.POINTS_UPDATED.value)
    wanted = set(student_ids)
    stale_points = [
        event.id for event in session.execute(points).scalars() if (event.data or {}).get("studentProfileId") in wanted
    ]
    if stale_points:
        session.execute(delete(EventModel).where(EventModel.id.in_(stale_points)))

    session.execute(delete(EnrollmentModel).where(EnrollmentModel.student_profile_id.in_(student_ids)))
    session.execute(delete(StudentProfileModel).where(StudentProfileModel.id.in_(student_ids)))
    session.execute(delete(UserModel).where(UserModel.id.in_(student_ids)))
    logger.info("Deleted %d seed students", len(student_ids))
    return len(student_ids)


def _delete_assignments(session: Session, assignment_ids: List[int]) -> None:
    assigned_ids = select(AssignedAssignmentModel.id).where(AssignedAssignmentModel.assignment_id.in_(assignment_ids))
    session.execute(
        delete(AssignmentQuestionResponseModel).where(
            AssignmentQuestionResponseModel.assigned_assignment_id.in_(assigned_ids)
        )
    )
    session.execute(delete(AssignedAssignmentModel).where(AssignedAssignmentModel.assignment_id.in_(assignment_ids)))
    session.execute(
        delete(AssignmentPrerequisiteModel).where(
            or_(
                AssignmentPrerequisiteModel.assignment_id.in_(assignment_ids),
                AssignmentPrerequisiteModel.prereq_assignment_id.in_(assignment_ids),
            )
        )
    )
    session.execute(delete(AssignmentModuleModel).where(AssignmentModuleModel.assignment_id.in_(assignment_ids)))

    question_ids = list(
        session.execute(
            select(AssignmentQuestionModel.question_id).where(AssignmentQuestionModel.assignment_id.in_(assignment_ids))
        ).scalars()
    )
    session.execute(delete(AssignmentQuestionModel).where(AssignmentQuestionModel.assignment_id.in_(assignment_ids)))
    if question_ids:
        # Questions without a knowledge component are only reachable through their assignment.
        _delete_responses(session, ResponseModel.question_id.in_(question_ids))
        session.execute(
            delete(QuestionModel).where(
                QuestionModel.id.in_(question_ids),
                QuestionModel.knowledge_component_id.is_(None),
            )
        )
    session.execute(delete(AssignmentModel).where(AssignmentModel.id.in_(assignment_ids)))


def cleanup_seed_assignments(session: Session) -> int:
    stmt = select(AssignmentModel.id).where(or_(*[AssignmentModel.title.like(p) for p in SEEDED_ASSIGNMENT_PATTERNS]))
    assignment_ids = list(session.execute(stmt).scalars())
    if assignment_ids:
        _delete_assignments(session, assignment_ids)
    logger.info("Deleted %d old seed assignments", len(assignment_ids))
    return len(assignment_ids)


def cleanup_seed_knowledge_components(session: Session) -> int:
    """Delete seed knowledge components with their questions, links and responses."""
    kc_filter = or_(*[KnowledgeComponentModel.name.like(p) for p in SEEDED_KC_PATTERNS])
    kc_ids = list(session.execute(select(KnowledgeComponentModel.id).where(kc_filter)).scalars())
    if not kc_ids:
        return 0

    question_ids = select(QuestionModel.id).where(QuestionModel.knowledge_component_id.in_(kc_ids))
    _delete_responses(session, ResponseModel.question_id.in_(question_ids))
    session.execute(delete(AssignmentQuestionModel).where(AssignmentQuestionModel.question_id.in_(question_ids)))
    session.execute(delete(QuestionModel).where(QuestionModel.knowledge_component_id.in_(kc_ids)))
    session.execute(delete(KnowledgeComponentModel).where(KnowledgeComponentModel.id.in_(kc_ids)))
    logger.info("Deleted %d seed knowledge components and their questions", len(kc_ids))
    return len(kc_ids)


def cleanup_assessments(session: Session) -> int:
    stmt = select(AssignmentModel.id).where(AssignmentModel.title.like(SEEDED_ASSESSMENT_PATTERN))
    assessment_ids = list(session.execute(stmt).scalars())
    if assessment_ids:
        _delete_assignments(session, assessment_ids)
    logger.info("Deleted %d old assessment assignments", len(assessment_ids))
    return len(assessment_ids)


def cleanup_sandbox_data(session: Session, group_ids: Sequence[int]) -> CleanupReport:
    logger.info("Cleaning up existing sandbox data")
    report = CleanupReport()
    report.events = cleanup_events(session, group_ids)
    report.students = cleanup_seed_students(session, group_ids)
    report.assignments = cleanup_seed_assignments(session)
    report.knowledge_components = cleanup_seed_knowledge_components(session)
    report.assessments = cleanup_assessments(session)
    session.flush()
    return report


__all__ = [
    "CleanupReport",
    "cleanup_assessments",
    "cleanup_events",
    "cleanup_sandbox_data",
    "cleanup_seed_assignments",
    "cleanup_seed_knowledge_components",
    "cleanup_seed_students",
]
