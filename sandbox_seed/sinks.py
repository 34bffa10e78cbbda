"""Append-only destinations for seeded events."""

from __future__ import annotations

import logging
import uuid
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from .db.models import AssignmentQuestionModel, AssignmentQuestionResponseModel, EventModel, ResponseModel

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Event kinds, valued by the ``events.type`` string the dashboards read."""

    QUESTION_SHOWN = "LESSON_QUESTION_SHOWN"
    QUESTION_ANSWERED = "QUESTION_ANSWERED"
    LESSON_COMPLETED = "LESSON_COMPLETED"
    MASTERY_CHECK_COMPLETED = "ASSIGNMENT_COMPLETED"
    POINTS_UPDATED = "POINTS_UPDATED"
    ATTENDANCE_MARKED = "STUDENT_MARKED_PRESENT"


class EventSink(Protocol):
    def append(self, event_type: EventType, payload: Dict[str, Any], timestamp: datetime) -> None:
        """Durably append one event or raise."""


@dataclass(frozen=True)
class EmittedEvent:
    id: str
    event_type: EventType
    payload: Dict[str, Any]
    timestamp: datetime


class InMemoryEventSink:
    """Keeps events in append order. Used for dry runs and tests."""

    def __init__(self) -> None:
        self.events: List[EmittedEvent] = []

    def append(self, event_type: EventType, payload: Dict[str, Any], timestamp: datetime) -> None:
        self.events.append(
            EmittedEvent(id=str(uuid.uuid4()), event_type=event_type, payload=dict(payload), timestamp=timestamp)
        )

    def of_type(self, event_type: EventType) -> List[EmittedEvent]:
        return [event for event in self.events if event.event_type is event_type]

    def __len__(self) -> int:
        return len(self.events)


class DatabaseEventSink:
    """Writes each event as an ``events`` row inside the caller's session.

    A mastery-check completion also records the student's response to the
    mastery check's first question, which the velocity views count by
    ``DATE(created_at)``.
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        self.counts: Counter[EventType] = Counter()
        self._mastery_questions: Dict[int, Optional[AssignmentQuestionModel]] = {}

    def append(self, event_type: EventType, payload: Dict[str, Any], timestamp: datetime) -> None:
        if event_type is EventType.MASTERY_CHECK_COMPLETED:
            self._record_mastery_response(payload, timestamp)

        self._session.add(
            EventModel(
                id=str(uuid.uuid4()),
                type=event_type.value,
                data=payload,
                created_at=timestamp,
                updated_at=timestamp,
            )
        )
        self._session.flush()
        self.counts[event_type] += 1

    def _mastery_question(self, assignment_id: int) -> Optional[AssignmentQuestionModel]:
        if assignment_id not in self._mastery_questions:
            stmt = (
                select(AssignmentQuestionModel)
                .where(AssignmentQuestionModel.assignment_id == assignment_id)
                .order_by(AssignmentQuestionModel.order, AssignmentQuestionModel.id)
                .limit(1)
            )
            self._mastery_questions[assignment_id] = self._session.execute(stmt).scalar_one_or_none()
        return self._mastery_questions[assignment_id]

    def _record_mastery_response(self, payload: Dict[str, Any], timestamp: datetime) -> None:
        assignment_question = self._mastery_question(payload["assignmentId"])
        if assignment_question is None:
            logger.debug("Mastery check %s has no questions; skipping response", payload["assignmentId"])
            return

        response = ResponseModel(
            enrollment_id=payload["enrollmentId"],
            question_id=assignment_question.question_id,
            is_correct=True,
            response_content={"type": "multiple_choice", "selectedChoiceIds": [str(uuid.uuid4())]},
            created_at=timestamp,
            updated_at=timestamp,
        )
        self._session.add(response)
        self._session.flush()

        assigned_id = payload.get("assignedAssignmentId")
        if assigned_id is None:
            return
        self._session.add(
            AssignmentQuestionResponseModel(
                response_id=response.id,
                assignment_question_id=assignment_question.id,
                assigned_assignment_id=assigned_id,
                created_at=timestamp,
                updated_at=timestamp,
            )
        )


__all__ = [
    "DatabaseEventSink",
    "EmittedEvent",
    "EventSink",
    "EventType",
    "InMemoryEventSink",
]
