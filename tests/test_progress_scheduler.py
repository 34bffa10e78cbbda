from __future__ import annotations

from collections import defaultdict
from datetime import date
from zoneinfo import ZoneInfo

import pytest

from sandbox_seed.errors import SchedulingInvariantError
from sandbox_seed.models import Enrollment, LessonSpec, QuestionSpec
from sandbox_seed.module_windows import ModuleWindow
from sandbox_seed.progress_scheduler import (
    PartialLessonContinuation,
    ProgressScheduler,
    ScheduleResult,
    seed_progress_events,
)
from sandbox_seed.sinks import EventType, InMemoryEventSink
from sandbox_seed.telemetry import register_listener
from sandbox_seed.working_days import SeedClock

CLOCK = SeedClock(tz=ZoneInfo("UTC"), today=date(2026, 10, 16))
GROUP_ID = 42


def make_lesson(
    lesson_id: int,
    question_count: int,
    *,
    paired: bool = True,
    with_knowledge_components: bool = True,
) -> LessonSpec:
    questions = [
        QuestionSpec(
            id=lesson_id * 100 + q,
            assignment_question_id=lesson_id * 1000 + q,
            knowledge_component_id=lesson_id * 10 + q + 1 if with_knowledge_components else None,
        )
        for q in range(question_count)
    ]
    return LessonSpec(
        lesson_id=lesson_id,
        title=f"Lesson {lesson_id}: Sample",
        assigned_lesson_id=lesson_id + 500,
        mastery_check_id=lesson_id + 900 if paired else None,
        mastery_check_title=f"Lesson {lesson_id}: Sample" if paired else None,
        assigned_mastery_id=lesson_id + 1500 if paired else None,
        questions=questions,
    )


def _enrollments(count: int) -> list[Enrollment]:
    return [
        Enrollment(id=index + 1, student_profile_id=f"student-{index}", display_name=f"Student {index}")
        for index in range(count)
    ]


def _run(enrollments, lessons_by_module, days):
    sink = InMemoryEventSink()
    scheduler = ProgressScheduler(sink, group_id=GROUP_ID, clock=CLOCK)
    result = scheduler.schedule(enrollments, lessons_by_module, days)
    return sink, scheduler, result


def _timestamps(sink, event_type, assignment_id):
    return [event.timestamp for event in sink.of_type(event_type) if event.payload["assignmentId"] == assignment_id]


def test_split_lessons_and_deferred_mastery_checks_end_to_end() -> None:
    first, second = make_lesson(1, 2), make_lesson(2, 2)
    sink, scheduler, result = _run(_enrollments(2), [[first, second]], [3, 2, 1])

    # Every lesson was split, so nothing completes before reconciliation.
    assert len(result.continuations) == 4
    assert len(sink.of_type(EventType.QUESTION_ANSWERED)) == 4
    assert sink.of_type(EventType.LESSON_COMPLETED) == []

    scheduler.reconcile(result)

    assert len(sink.of_type(EventType.QUESTION_SHOWN)) == 8
    assert len(sink.of_type(EventType.QUESTION_ANSWERED)) == 8
    assert len(sink.of_type(EventType.LESSON_COMPLETED)) == 4
    assert len(sink.of_type(EventType.MASTERY_CHECK_COMPLETED)) == 4
    assert len(result.pending_mastery_checks) == 2

    # First lesson resumes on day 2; its mastery check slips to day 1 at 12:00.
    assert _timestamps(sink, EventType.LESSON_COMPLETED, 1) == [CLOCK.timestamp_days_ago(2, 1)] * 2
    assert _timestamps(sink, EventType.MASTERY_CHECK_COMPLETED, 901) == [CLOCK.timestamp_days_ago(1, 2)] * 2

    # Second lesson resumes on day 1; nothing is left to defer to, so the check is immediate.
    assert _timestamps(sink, EventType.LESSON_COMPLETED, 2) == [CLOCK.timestamp_days_ago(1, 1)] * 2
    assert _timestamps(sink, EventType.MASTERY_CHECK_COMPLETED, 902) == [CLOCK.timestamp_days_ago(1, 1)] * 2

    totals = result.totals
    assert (totals.completions, totals.questions, totals.mastery_checks) == (4, 8, 4)
    assert result.daily_stats[CLOCK.date_days_ago(3).isoformat()].questions == 2
    assert result.daily_stats[CLOCK.date_days_ago(1).isoformat()].mastery_checks == 4


def test_events_per_student_follow_lesson_order() -> None:
    first, second = make_lesson(1, 2), make_lesson(2, 2)
    sink, scheduler, result = _run(_enrollments(2), [[first, second]], [3, 2, 1])
    scheduler.reconcile(result)

    answered = defaultdict(list)
    for event in sink.of_type(EventType.QUESTION_ANSWERED):
        answered[(event.payload["enrollmentId"], event.payload["assignmentId"])].append(event.timestamp)
    completed = {
        (event.payload["enrollmentId"], event.payload["assignmentId"]): event.timestamp
        for event in sink.of_type(EventType.LESSON_COMPLETED)
    }
    mastery = {
        (event.payload["enrollmentId"], event.payload["assignmentId"] - 900): event.timestamp
        for event in sink.of_type(EventType.MASTERY_CHECK_COMPLETED)
    }

    for key, completed_at in completed.items():
        assert max(answered[key]) <= completed_at
        assert completed_at <= mastery[key]
    for enrollment_id in (1, 2):
        assert completed[(enrollment_id, 1)] <= completed[(enrollment_id, 2)]


def test_shown_event_requires_knowledge_component() -> None:
    lesson = make_lesson(1, 1, with_knowledge_components=False)
    sink, scheduler, result = _run(_enrollments(1), [[lesson]], [2, 1])
    scheduler.reconcile(result)

    assert sink.of_type(EventType.QUESTION_SHOWN) == []
    assert len(sink.of_type(EventType.QUESTION_ANSWERED)) == 1


def test_payloads_carry_group_and_assignment_ids() -> None:
    lesson = make_lesson(3, 1)
    sink, scheduler, result = _run(_enrollments(1), [[lesson]], [2, 1])
    scheduler.reconcile(result)

    completed = sink.of_type(EventType.LESSON_COMPLETED)[0]
    assert completed.payload == {
        "enrollmentId": 1,
        "assignedAssignmentId": 503,
        "assignmentId": 3,
        "studentProfileId": "student-0",
        "groupId": GROUP_ID,
        "timestamp": completed.timestamp.isoformat(),
    }
    answered = sink.of_type(EventType.QUESTION_ANSWERED)[0]
    assert answered.payload["assignmentQuestionId"] == 3000
    assert answered.payload["questionText"] == "Q1"
    assert answered.payload["mode"] == "lesson"


def test_module_without_lessons_is_skipped() -> None:
    lesson = make_lesson(1, 1, paired=False)
    sink, scheduler, result = _run(_enrollments(2), [[], [lesson]], [5, 4, 3, 2, 1])
    scheduler.reconcile(result)

    assert result.windows[0].is_empty
    assert len(sink.of_type(EventType.LESSON_COMPLETED)) == 2
    assert sink.of_type(EventType.MASTERY_CHECK_COMPLETED) == []


def test_completion_rate_limits_lessons_per_student() -> None:
    lessons = [make_lesson(index + 1, 1, paired=False) for index in range(5)]
    sink, scheduler, result = _run(_enrollments(5), [lessons], list(range(10, 0, -1)))
    scheduler.reconcile(result)

    per_student = defaultdict(int)
    for event in sink.of_type(EventType.LESSON_COMPLETED):
        per_student[event.payload["enrollmentId"]] += 1
    assert [per_student[enrollment_id] for enrollment_id in range(1, 6)] == [5, 4, 3, 2, 1]


def test_students_complete_lessons_in_order() -> None:
    lessons = [make_lesson(index + 1, 1, paired=False) for index in range(5)]
    sink, scheduler, result = _run(_enrollments(2), [lessons], list(range(10, 0, -1)))
    scheduler.reconcile(result)

    for enrollment_id in (1, 2):
        events = [e for e in sink.of_type(EventType.LESSON_COMPLETED) if e.payload["enrollmentId"] == enrollment_id]
        assert [e.payload["assignmentId"] for e in events] == sorted(e.payload["assignmentId"] for e in events)
        stamps = [e.timestamp for e in events]
        assert stamps == sorted(stamps)


def test_no_working_days_produces_no_events() -> None:
    sink, scheduler, result = _run(_enrollments(3), [[make_lesson(1, 2)]], [])
    scheduler.reconcile(result)
    assert len(sink) == 0


def test_reconcile_runs_once() -> None:
    sink, scheduler, result = _run(_enrollments(1), [[make_lesson(1, 1)]], [2, 1])
    scheduler.reconcile(result)
    with pytest.raises(SchedulingInvariantError):
        scheduler.reconcile(result)


def test_continuation_past_last_question_is_rejected() -> None:
    lesson = make_lesson(1, 2)
    enrollment = _enrollments(1)[0]
    result = ScheduleResult(
        working_days=[2, 1],
        windows=[ModuleWindow(module_index=0, working_day_offsets=[2, 1])],
        continuations=[
            PartialLessonContinuation(
                enrollment=enrollment,
                lesson=lesson,
                questions_completed=2,
                scheduled_day_offset=1,
                module_index=0,
                lesson_index=0,
            )
        ],
    )
    scheduler = ProgressScheduler(InMemoryEventSink(), group_id=GROUP_ID, clock=CLOCK)
    with pytest.raises(SchedulingInvariantError):
        scheduler.reconcile(result)


def test_seed_progress_events_reports_totals() -> None:
    events = []
    register_listener(events.append)
    sink = InMemoryEventSink()

    result = seed_progress_events(
        sink,
        group_id=GROUP_ID,
        group_name="Period 1",
        enrollments=_enrollments(2),
        lessons_by_module=[[make_lesson(1, 2), make_lesson(2, 2)]],
        days_to_seed=5,
        clock=CLOCK,
    )

    # 2026-10-11 is a Sunday, so only four of the five days are working days.
    assert result.working_days == [4, 3, 2, 1]
    assert result.reconciled
    seeded = [event for event in events if event.name == "progress_events_seeded"]
    assert len(seeded) == 1
    assert seeded[0].payload["group_id"] == GROUP_ID
    assert seeded[0].payload["lessons_completed"] == len(sink.of_type(EventType.LESSON_COMPLETED))
    assert seeded[0].payload["split_lessons"] == len(result.continuations)
    day_summaries = [event for event in events if event.name == "seed_day_summary"]
    assert sum(event.payload["questions_answered"] for event in day_summaries) == result.totals.questions
