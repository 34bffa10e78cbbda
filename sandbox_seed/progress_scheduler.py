"""Pacing scheduler for lesson progress events.

Students work through modules strictly in order. Each student gets a completion
archetype, a staggered start inside every module's day window and a fixed
cadence of days per lesson. Some lessons are split over two days and some
mastery checks slip to the next working day; both are queued during the main
pass and materialised afterwards by :meth:`ProgressScheduler.reconcile`.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from .errors import SchedulingInvariantError
from .learner_types import (
    completion_rate,
    lessons_to_complete,
    should_delay_mastery_check,
    should_split_lesson,
)
from .lesson_events import LessonEventWriter
from .models import Enrollment, LessonSpec, QuestionSpec
from .module_windows import ModuleWindow, allocate_module_windows
from .sinks import EventSink
from .telemetry import emit_event
from .working_days import SeedClock, next_working_day, working_days

logger = logging.getLogger(__name__)

START_STAGGER_FRACTION = 0.3
SPLIT_DAY_SPAN = 2
DEFERRED_MASTERY_HOUR = 2


@dataclass(frozen=True)
class PendingMasteryCheck:
    enrollment: Enrollment
    lesson: LessonSpec
    scheduled_day_offset: int
    module_index: int


@dataclass(frozen=True)
class PartialLessonContinuation:
    enrollment: Enrollment
    lesson: LessonSpec
    questions_completed: int
    scheduled_day_offset: int
    module_index: int
    lesson_index: int


@dataclass
class DailyStats:
    module: int
    completions: int = 0
    questions: int = 0
    mastery_checks: int = 0

    @property
    def has_activity(self) -> bool:
        return bool(self.completions or self.questions or self.mastery_checks)


@dataclass
class ScheduleResult:
    """Everything one scheduling run produced, including its deferred work."""

    working_days: List[int]
    windows: List[ModuleWindow]
    continuations: List[PartialLessonContinuation] = field(default_factory=list)
    pending_mastery_checks: List[PendingMasteryCheck] = field(default_factory=list)
    daily_stats: Dict[str, DailyStats] = field(default_factory=dict)
    reconciled: bool = False

    def stats_for(self, date_key: str, module_index: int) -> DailyStats:
        stats = self.daily_stats.get(date_key)
        if stats is None:
            stats = DailyStats(module=module_index + 1)
            self.daily_stats[date_key] = stats
        return stats

    @property
    def totals(self) -> DailyStats:
        total = DailyStats(module=0)
        for stats in self.daily_stats.values():
            total.completions += stats.completions
            total.questions += stats.questions
            total.mastery_checks += stats.mastery_checks
        return total


class ProgressScheduler:
    """Turns enrollments and module lessons into timestamped progress events."""

    def __init__(self, sink: EventSink, *, group_id: int, clock: Optional[SeedClock] = None) -> None:
        self.clock = clock or SeedClock()
        self.writer = LessonEventWriter(sink, group_id)

    def schedule(
        self,
        enrollments: Sequence[Enrollment],
        lessons_by_module: Sequence[Sequence[LessonSpec]],
        working_day_offsets: Sequence[int],
    ) -> ScheduleResult:
        """Main pass: emit same-day events and queue the deferred ones."""
        days = list(working_day_offsets)
        windows = allocate_module_windows([len(lessons) for lessons in lessons_by_module], days)
        result = ScheduleResult(working_days=days, windows=windows)

        for student_index, enrollment in enumerate(enrollments):
            rate = completion_rate(student_index)
            for module_index, lessons in enumerate(lessons_by_module):
                self._schedule_module(
                    result,
                    enrollment,
                    student_index=student_index,
                    student_count=len(enrollments),
                    module_index=module_index,
                    lessons=lessons,
                    rate=rate,
                )
        return result

    def _schedule_module(
        self,
        result: ScheduleResult,
        enrollment: Enrollment,
        *,
        student_index: int,
        student_count: int,
        module_index: int,
        lessons: Sequence[LessonSpec],
        rate: float,
    ) -> None:
        window = result.windows[module_index].working_day_offsets
        if not window:
            return
        lesson_count = lessons_to_complete(len(lessons), rate)
        if lesson_count == 0:
            return

        start_index = math.floor((student_index / student_count) * (len(window) * START_STAGGER_FRACTION))
        available = window[start_index:]
        if not available:
            return
        days_per_lesson = max(1, len(available) // lesson_count)

        cursor = 0
        for lesson_index in range(lesson_count):
            lesson = lessons[lesson_index]
            question_count = len(lesson.questions)
            day = available[min(cursor, len(available) - 1)]
            stats = result.stats_for(self._date_key(day), module_index)

            if should_split_lesson(student_index, lesson_index, module_index, question_count):
                answered = question_count // 2
                for q in range(answered):
                    self._answer(enrollment, lesson, q, self.clock.timestamp_days_ago(day, q))
                    stats.questions += 1
                result.continuations.append(
                    PartialLessonContinuation(
                        enrollment=enrollment,
                        lesson=lesson,
                        questions_completed=answered,
                        scheduled_day_offset=next_working_day(day, available),
                        module_index=module_index,
                        lesson_index=lesson_index,
                    )
                )
                cursor += SPLIT_DAY_SPAN
                continue

            for q in range(question_count):
                self._answer(enrollment, lesson, q, self.clock.timestamp_days_ago(day, q))
                stats.questions += 1

            completed_at = self.clock.timestamp_days_ago(day, question_count)
            self.writer.lesson_completed(enrollment, lesson, completed_at)
            stats.completions += 1

            self._finish_mastery_check(
                result,
                enrollment,
                lesson,
                delay=should_delay_mastery_check(student_index, lesson_index, module_index),
                day=day,
                module_index=module_index,
                completed_at=completed_at,
                stats=stats,
            )
            cursor += days_per_lesson

    def reconcile(self, result: ScheduleResult) -> None:
        """Drain split-lesson continuations, then every pending mastery check."""
        if result.reconciled:
            raise SchedulingInvariantError("Deferred work for this schedule was already reconciled.")

        for continuation in result.continuations:
            self._resume_lesson(result, continuation)

        for pending in result.pending_mastery_checks:
            timestamp = self.clock.timestamp_days_ago(pending.scheduled_day_offset, DEFERRED_MASTERY_HOUR)
            stats = result.stats_for(self._date_key(pending.scheduled_day_offset), pending.module_index)
            self.writer.mastery_check_completed(pending.enrollment, pending.lesson, timestamp)
            stats.mastery_checks += 1

        result.reconciled = True

    def _resume_lesson(self, result: ScheduleResult, continuation: PartialLessonContinuation) -> None:
        lesson = continuation.lesson
        done = continuation.questions_completed
        day = continuation.scheduled_day_offset
        question_count = len(lesson.questions)
        if done >= question_count:
            raise SchedulingInvariantError(
                f"Lesson {lesson.lesson_id} continuation starts at question {done + 1} "
                f"but the lesson has {question_count} questions."
            )

        stats = result.stats_for(self._date_key(day), continuation.module_index)
        for q in range(done, question_count):
            self._answer(continuation.enrollment, lesson, q, self.clock.timestamp_days_ago(day, q - done))
            stats.questions += 1

        completed_at = self.clock.timestamp_days_ago(day, question_count - done)
        self.writer.lesson_completed(continuation.enrollment, lesson, completed_at)
        stats.completions += 1

        # Continuations decide the delay from lesson and module alone.
        self._finish_mastery_check(
            result,
            continuation.enrollment,
            lesson,
            delay=should_delay_mastery_check(0, continuation.lesson_index, continuation.module_index),
            day=day,
            module_index=continuation.module_index,
            completed_at=completed_at,
            stats=stats,
        )

    def _finish_mastery_check(
        self,
        result: ScheduleResult,
        enrollment: Enrollment,
        lesson: LessonSpec,
        *,
        delay: bool,
        day: int,
        module_index: int,
        completed_at: datetime,
        stats: DailyStats,
    ) -> None:
        if lesson.mastery_check_id is None:
            return
        if delay and day > 1:
            window = result.windows[module_index].working_day_offsets
            result.pending_mastery_checks.append(
                PendingMasteryCheck(
                    enrollment=enrollment,
                    lesson=lesson,
                    scheduled_day_offset=next_working_day(day, window),
                    module_index=module_index,
                )
            )
            return
        self.writer.mastery_check_completed(enrollment, lesson, completed_at)
        stats.mastery_checks += 1

    def _answer(self, enrollment: Enrollment, lesson: LessonSpec, index: int, timestamp: datetime) -> None:
        self.writer.question(enrollment, lesson, _question_at(lesson, index), index, timestamp)

    def _date_key(self, day_offset: int) -> str:
        return self.clock.date_days_ago(day_offset).isoformat()


def _question_at(lesson: LessonSpec, index: int) -> QuestionSpec:
    try:
        return lesson.questions[index]
    except IndexError:
        raise SchedulingInvariantError(
            f"Lesson {lesson.lesson_id} has no question at index {index}."
        ) from None


def log_daily_stats(result: ScheduleResult) -> None:
    """Log per-day activity, with a marker whenever the module changes."""
    last_module = 0
    for date_key in sorted(result.daily_stats):
        stats = result.daily_stats[date_key]
        if not stats.has_activity:
            continue
        if stats.module != last_module:
            logger.info("--- Module %d ---", stats.module)
            last_module = stats.module
        logger.info(
            "%s: %d lessons, %d mastery checks, %d questions",
            date_key,
            stats.completions,
            stats.mastery_checks,
            stats.questions,
        )
        emit_event(
            "seed_day_summary",
            date=date_key,
            module=stats.module,
            lessons_completed=stats.completions,
            mastery_checks=stats.mastery_checks,
            questions_answered=stats.questions,
        )


def seed_progress_events(
    sink: EventSink,
    *,
    group_id: int,
    group_name: str,
    enrollments: Sequence[Enrollment],
    lessons_by_module: Sequence[Sequence[LessonSpec]],
    days_to_seed: int,
    clock: Optional[SeedClock] = None,
) -> ScheduleResult:
    """Schedule, reconcile and report progress events for one group."""
    scheduler = ProgressScheduler(sink, group_id=group_id, clock=clock)
    days = working_days(days_to_seed, scheduler.clock.current_date)
    total_lessons = sum(len(lessons) for lessons in lessons_by_module)
    logger.info(
        "Creating progress events for %s: %d modules, %d lessons, %d students, %d working days",
        group_name,
        len(lessons_by_module),
        total_lessons,
        len(enrollments),
        len(days),
    )

    result = scheduler.schedule(enrollments, lessons_by_module, days)
    scheduler.reconcile(result)
    log_daily_stats(result)

    totals = result.totals
    emit_event(
        "progress_events_seeded",
        group_id=group_id,
        lessons_completed=totals.completions,
        questions_answered=totals.questions,
        mastery_checks=totals.mastery_checks,
        deferred_mastery_checks=len(result.pending_mastery_checks),
        split_lessons=len(result.continuations),
    )
    return result


__all__ = [
    "DailyStats",
    "PartialLessonContinuation",
    "PendingMasteryCheck",
    "ProgressScheduler",
    "ScheduleResult",
    "log_daily_stats",
    "seed_progress_events",
]
