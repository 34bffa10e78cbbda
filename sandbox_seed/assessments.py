"""Unit assessments and simulated multiple-choice responses."""

from __future__ import annotations

import logging
import random
import uuid
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from .constants import EXPLANATION_GRADINGS
from .db.models import AssignmentQuestionResponseModel, ResponseModel
from .lessons import LessonFactory, multiple_choice
from .models import Assessment, AssessmentQuestion, Enrollment

logger = logging.getLogger(__name__)

UPDATE_BATCH_LIMIT = 100
CORRECT_PROBABILITY_CUTOFF = 0.4


def _analysis(grading: str) -> dict:
    return {"explanationGrading": grading, "feedback": f"Your explanation was {grading}."}


def create_assessment(
    factory: LessonFactory,
    *,
    group_id: int,
    module_id: int,
    module_index: int,
    question_count: int,
    module_order_offset: int,
    index: int = 0,
) -> Assessment:
    """One assessment per module, titled by unit number starting at Unit 3."""
    title = f"Unit {module_index + 3} Assessment"
    assignment = factory.create_assignment(
        title,
        "Auto-generated assessment",
        {"mode": "assessment", "isOptional": False, "maxAnswerAttempts": 1},
    )
    factory.link_to_module(assignment.id, module_id, module_order_offset + index + 1)
    assigned_id = factory.assign_to_group(assignment.id, group_id)

    questions: List[AssessmentQuestion] = []
    for q in range(question_count):
        content = multiple_choice(
            f"Assessment {index + 1}, Question {q + 1}: Solve this problem.",
            "This is the explanation for the correct answer.",
            [
                ("Correct Answer", True),
                ("Wrong Answer A", False),
                ("Wrong Answer B", False),
                ("Wrong Answer C", False),
            ],
        )
        spec = factory.create_question(assignment.id, q + 1, content)
        questions.append(
            AssessmentQuestion(
                id=spec.id,
                assignment_question_id=spec.assignment_question_id,
                correct_choice_id=content["answerChoices"][0]["id"],
            )
        )

    logger.info("Created %s (%d questions)", title, len(questions))
    return Assessment(id=assignment.id, assigned_id=assigned_id, title=title, questions=questions)


def assign_assessment_to_group(factory: LessonFactory, assessment: Assessment, group_id: int) -> Assessment:
    assigned_id = factory.assign_to_group(assessment.id, group_id)
    logger.info("%s assigned to group %s (assigned_id: %s)", assessment.title, group_id, assigned_id)
    return assessment.model_copy(update={"assigned_id": assigned_id})


def assessment_day_offset(days_to_seed: int, module_index: int, total_modules: int) -> int:
    """Assessments land in the last fifth of each module's slice of the window."""
    days_per_module = days_to_seed // max(1, total_modules)
    module_start = days_to_seed - (module_index + 1) * days_per_module
    return module_start + int(days_per_module * 0.8)


def record_response(
    session: Session,
    *,
    enrollment_id: int,
    question_id: int,
    assignment_question_id: int,
    assigned_id: int,
    is_correct: bool,
    content: dict,
    timestamp: datetime,
) -> ResponseModel:
    response = ResponseModel(
        enrollment_id=enrollment_id,
        question_id=question_id,
        is_correct=is_correct,
        response_content=content,
        created_at=timestamp,
        updated_at=timestamp,
    )
    session.add(response)
    session.flush()
    session.add(
        AssignmentQuestionResponseModel(
            response_id=response.id,
            assignment_question_id=assignment_question_id,
            assigned_assignment_id=assigned_id,
            created_at=timestamp,
            updated_at=timestamp,
        )
    )
    return response


def seed_assessment_responses(
    session: Session,
    factory: LessonFactory,
    enrollments: Sequence[Enrollment],
    assessments: Sequence[Assessment],
    *,
    module_index: int,
    total_modules: int,
    days_to_seed: int,
    rng: Optional[random.Random] = None,
) -> int:
    """Students answer with rates 0, 1/3, 2/3 and 1 by ``index % 4``; about 60% correct."""
    if not assessments:
        return 0
    rng = rng or random.Random()
    assessment_day = assessment_day_offset(days_to_seed, module_index, total_modules)

    created = 0
    for student_index, enrollment in enumerate(enrollments):
        response_rate = (student_index % 4) / 3
        if response_rate == 0:
            logger.debug("%s: no assessment responses", enrollment.display_name)
            continue

        for assessment_index, assessment in enumerate(assessments):
            base_day = max(0, assessment_day - assessment_index)
            for q, question in enumerate(assessment.questions):
                if rng.random() > response_rate:
                    continue
                is_correct = rng.random() > CORRECT_PROBABILITY_CUTOFF
                grading = rng.choice(EXPLANATION_GRADINGS)
                selected = question.correct_choice_id if is_correct else str(uuid.uuid4())
                record_response(
                    session,
                    enrollment_id=enrollment.id,
                    question_id=question.id,
                    assignment_question_id=question.assignment_question_id,
                    assigned_id=assessment.assigned_id,
                    is_correct=is_correct,
                    content={
                        "type": "multiple_choice",
                        "selectedChoiceIds": [selected],
                        "aiAnalysis": _analysis(grading),
                    },
                    timestamp=factory.clock.timestamp_days_ago(base_day, q),
                )
                created += 1

    session.flush()
    logger.info("Created %d assessment responses for module %d", created, module_index + 1)
    return created


def update_existing_responses(
    session: Session,
    *,
    limit: int = UPDATE_BATCH_LIMIT,
    rng: Optional[random.Random] = None,
) -> int:
    """Backfill an explanation grading on responses that lack one."""
    rng = rng or random.Random()
    updated = 0
    for response in session.execute(select(ResponseModel).order_by(ResponseModel.id)).scalars().all():
        if updated >= limit:
            break
        content = dict(response.response_content or {})
        analysis = content.get("aiAnalysis")
        if isinstance(analysis, dict) and analysis.get("explanationGrading") is not None:
            continue
        content["aiAnalysis"] = _analysis(rng.choice(EXPLANATION_GRADINGS))
        response.response_content = content
        updated += 1

    session.flush()
    logger.info("Updated %d existing responses", updated)
    return updated


__all__ = [
    "assessment_day_offset",
    "assign_assessment_to_group",
    "create_assessment",
    "record_response",
    "seed_assessment_responses",
    "update_existing_responses",
]
