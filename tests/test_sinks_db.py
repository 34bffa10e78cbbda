from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import func, select

from sandbox_seed.db.models import (
    AssignmentModel,
    AssignmentQuestionModel,
    AssignmentQuestionResponseModel,
    EventModel,
    QuestionModel,
    ResponseModel,
)
from sandbox_seed.db.session import session_scope
from sandbox_seed.sinks import DatabaseEventSink, EventType

TIMESTAMP = datetime(2026, 10, 15, 11, tzinfo=timezone.utc)


def _mastery_check(session, *, with_question: bool) -> int:
    assignment = AssignmentModel(title="Lesson 1: Mastery", config={"mode": "sequential"})
    session.add(assignment)
    session.flush()
    if with_question:
        question = QuestionModel(question_content={"type": "MULTIPLE_CHOICE"}, config={})
        session.add(question)
        session.flush()
        session.add(AssignmentQuestionModel(assignment_id=assignment.id, question_id=question.id, order=1))
        session.flush()
    return assignment.id


def _count(session, model) -> int:
    return session.execute(select(func.count()).select_from(model)).scalar_one()


def test_events_are_stored_with_their_timestamp(database) -> None:
    with session_scope() as session:
        sink = DatabaseEventSink(session)
        sink.append(EventType.LESSON_COMPLETED, {"groupId": 1, "assignmentId": 5}, TIMESTAMP)
        sink.append(EventType.QUESTION_ANSWERED, {"groupId": 1, "assignmentId": 5}, TIMESTAMP)
        assert sink.counts[EventType.LESSON_COMPLETED] == 1
        assert sink.counts[EventType.QUESTION_ANSWERED] == 1

    with session_scope(commit=False) as session:
        stored = session.execute(select(EventModel).order_by(EventModel.type)).scalars().all()
        assert [event.type for event in stored] == ["LESSON_COMPLETED", "QUESTION_ANSWERED"]
        assert stored[0].data == {"groupId": 1, "assignmentId": 5}
        assert stored[0].created_at.replace(tzinfo=None) == TIMESTAMP.replace(tzinfo=None)


def test_mastery_check_completion_records_a_response(database) -> None:
    with session_scope() as session:
        assignment_id = _mastery_check(session, with_question=True)
        sink = DatabaseEventSink(session)
        payload = {"enrollmentId": 7, "assignmentId": assignment_id, "assignedAssignmentId": 3, "groupId": 1}
        sink.append(EventType.MASTERY_CHECK_COMPLETED, payload, TIMESTAMP)
        sink.append(EventType.MASTERY_CHECK_COMPLETED, payload, TIMESTAMP)

    with session_scope(commit=False) as session:
        responses = session.execute(select(ResponseModel)).scalars().all()
        assert len(responses) == 2
        assert all(response.is_correct for response in responses)
        assert responses[0].response_content["type"] == "multiple_choice"
        assert _count(session, AssignmentQuestionResponseModel) == 2
        events = session.execute(select(EventModel)).scalars().all()
        assert {event.type for event in events} == {"ASSIGNMENT_COMPLETED"}


def test_mastery_check_without_questions_only_writes_the_event(database) -> None:
    with session_scope() as session:
        assignment_id = _mastery_check(session, with_question=False)
        sink = DatabaseEventSink(session)
        sink.append(
            EventType.MASTERY_CHECK_COMPLETED,
            {"enrollmentId": 7, "assignmentId": assignment_id, "assignedAssignmentId": 3},
            TIMESTAMP,
        )

    with session_scope(commit=False) as session:
        assert _count(session, ResponseModel) == 0
        assert _count(session, EventModel) == 1
