"""Payload builders shared by every generator that writes lesson activity."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any, Dict

from .models import Enrollment, LessonSpec, QuestionSpec
from .sinks import EventSink, EventType

CORRECT_ANSWER = ["Correct Answer"]


class LessonEventWriter:
    """Builds event payloads for one group and appends them to a sink."""

    def __init__(self, sink: EventSink, group_id: int) -> None:
        self.sink = sink
        self.group_id = group_id

    def _append(self, event_type: EventType, payload: Dict[str, Any], timestamp: datetime) -> None:
        self.sink.append(event_type, payload, timestamp)

    def question(
        self,
        enrollment: Enrollment,
        lesson: LessonSpec,
        question: QuestionSpec,
        question_index: int,
        timestamp: datetime,
    ) -> None:
        """Shown (when the question has a knowledge component) then answered, same instant."""
        if question.knowledge_component_id:
            self._append(
                EventType.QUESTION_SHOWN,
                {
                    "enrollmentId": enrollment.id,
                    "studentProfileId": enrollment.student_profile_id,
                    "assignmentId": lesson.lesson_id,
                    "groupId": self.group_id,
                    "questionId": question.id,
                    "knowledgeComponentId": question.knowledge_component_id,
                    "action": "next",
                },
                timestamp,
            )
        self._append(
            EventType.QUESTION_ANSWERED,
            {
                "questionAttemptId": str(uuid.uuid4()),
                "questionId": question.id,
                "studentProfileId": enrollment.student_profile_id,
                "groupId": self.group_id,
                "responseId": 0,
                "isCorrect": True,
                "answer": list(CORRECT_ANSWER),
                "answerText": list(CORRECT_ANSWER),
                "questionText": f"Q{question_index + 1}",
                "correctAnswers": list(CORRECT_ANSWER),
                "timestamp": timestamp.isoformat(),
                "enrollmentId": enrollment.id,
                "assignmentId": lesson.lesson_id,
                "assignmentQuestionId": question.assignment_question_id,
                "mode": "lesson",
            },
            timestamp,
        )

    def lesson_completed(self, enrollment: Enrollment, lesson: LessonSpec, timestamp: datetime) -> None:
        self._append(
            EventType.LESSON_COMPLETED,
            {
                "enrollmentId": enrollment.id,
                "assignedAssignmentId": lesson.assigned_lesson_id,
                "assignmentId": lesson.lesson_id,
                "studentProfileId": enrollment.student_profile_id,
                "groupId": self.group_id,
                "timestamp": timestamp.isoformat(),
            },
            timestamp,
        )

    def mastery_check_completed(self, enrollment: Enrollment, lesson: LessonSpec, timestamp: datetime) -> None:
        self._append(
            EventType.MASTERY_CHECK_COMPLETED,
            {
                "enrollmentId": enrollment.id,
                "assignedAssignmentId": lesson.assigned_mastery_id,
                "assignmentId": lesson.mastery_check_id,
                "studentProfileId": enrollment.student_profile_id,
                "groupId": self.group_id,
                "timestamp": timestamp.isoformat(),
            },
            timestamp,
        )

    def points_updated(self, enrollment: Enrollment, amount: int, description: str, timestamp: datetime) -> None:
        self._append(
            EventType.POINTS_UPDATED,
            {
                "studentProfileId": enrollment.student_profile_id,
                "enrollmentId": enrollment.id,
                "amount": amount,
                "description": description,
            },
            timestamp,
        )

    def marked_present(self, enrollment: Enrollment, day: date, timestamp: datetime) -> None:
        self._append(
            EventType.ATTENDANCE_MARKED,
            {
                "groupId": self.group_id,
                "enrollmentId": enrollment.id,
                "studentProfileId": enrollment.student_profile_id,
                "date": day.isoformat(),
                "source": "podsie",
                "sourceDetail": "question-viewed",
            },
            timestamp,
        )


__all__ = ["LessonEventWriter"]
