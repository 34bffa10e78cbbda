"""Event generators outside the pacing scheduler: ramp-up lessons, recent work, points, attendance."""

from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta
from typing import Literal, Optional, Sequence

from .constants import POINT_DESCRIPTIONS
from .lesson_events import LessonEventWriter
from .models import Enrollment, LessonSpec
from .working_days import SeedClock

logger = logging.getLogger(__name__)

Period = Literal["today", "yesterday", "earlier"]

POINT_TRANSACTIONS = (8, 6, 5, 4, 3)
POINT_MAX_AMOUNTS = (50, 40, 30, 25, 15)
POINT_MIN_AMOUNT = 5
QUESTION_SPACING = timedelta(minutes=15)
COMPLETION_GAP = timedelta(minutes=5)
RECENT_ARCHETYPES = 7


def seed_standalone_lesson_events(
    writer: LessonEventWriter,
    enrollments: Sequence[Enrollment],
    standalone_lessons_by_module: Sequence[Sequence[LessonSpec]],
    *,
    days_to_seed: int,
    clock: SeedClock,
) -> int:
    """Every student completes every ramp-up lesson near the start of its module."""
    completed = 0
    for module_index, lessons in enumerate(standalone_lessons_by_module):
        for lesson_index, lesson in enumerate(lessons):
            base_day = days_to_seed - module_index * (days_to_seed // 2) - lesson_index
            for student_index, enrollment in enumerate(enrollments):
                day = max(1, base_day - student_index // 4)
                hour = student_index % 4
                for q, question in enumerate(lesson.questions):
                    writer.question(enrollment, lesson, question, q, clock.timestamp_days_ago(day, hour + q))
                writer.lesson_completed(
                    enrollment, lesson, clock.timestamp_days_ago(day, hour + len(lesson.questions))
                )
                completed += 1
            logger.info("%s: all %d students completed", lesson.title, len(enrollments))
    return completed


def period_timestamp(period: Period, now: datetime, rng: random.Random) -> datetime:
    if period == "today":
        return now - timedelta(hours=8) * rng.random()
    if period == "yesterday":
        return now - timedelta(days=1) - timedelta(hours=8) * rng.random()
    return now - timedelta(days=2 + rng.randrange(5))


def seed_recent_lesson_progress(
    writer: LessonEventWriter,
    enrollments: Sequence[Enrollment],
    lesson: LessonSpec,
    *,
    clock: SeedClock,
    rng: Optional[random.Random] = None,
) -> None:
    """Spread the most recent lesson over today, yesterday and earlier.

    Students cycle through seven archetypes: not started, one question today,
    a few questions earlier, lesson done yesterday with the mastery check still
    pending, lesson yesterday with the mastery check today, both yesterday and
    both today.
    """
    rng = rng or random.Random()
    now = clock.now()
    question_count = len(lesson.questions)

    for student_index, enrollment in enumerate(enrollments):
        archetype = student_index % RECENT_ARCHETYPES
        if archetype == 0:
            logger.debug("%s: not started", enrollment.display_name)
            continue

        period: Period = "today"
        lesson_done = archetype >= 3
        mastery_done = archetype >= 4
        if archetype == 1:
            answered = 1
        elif archetype == 2:
            answered = 2 + student_index % 2
            period = "earlier"
        else:
            answered = question_count
            if archetype in (3, 4, 5):
                period = "yesterday"
        answered = min(answered, question_count)

        base = period_timestamp(period, now, rng)
        for q in range(answered):
            writer.question(enrollment, lesson, lesson.questions[q], q, base + QUESTION_SPACING * q)

        if not lesson_done:
            continue
        lesson_ts = base + QUESTION_SPACING * answered + COMPLETION_GAP
        writer.lesson_completed(enrollment, lesson, lesson_ts)

        if mastery_done and lesson.mastery_check_id is not None:
            if archetype == 4:
                mastery_ts = period_timestamp("today", now, rng)
            else:
                mastery_ts = lesson_ts + COMPLETION_GAP
            writer.mastery_check_completed(enrollment, lesson, mastery_ts)


def seed_points_events(
    writer: LessonEventWriter,
    enrollments: Sequence[Enrollment],
    *,
    days_to_seed: int,
    clock: SeedClock,
) -> int:
    """Higher-performing archetypes earn more and larger point awards."""
    total = 0
    for student_index, enrollment in enumerate(enrollments):
        learner_type = student_index % len(POINT_TRANSACTIONS)
        transactions = POINT_TRANSACTIONS[learner_type]
        max_amount = POINT_MAX_AMOUNTS[learner_type]
        for t in range(transactions):
            days_ago = (t * days_to_seed) // transactions + 1
            amount = POINT_MIN_AMOUNT + ((student_index + t) * 7) % (max_amount - POINT_MIN_AMOUNT + 1)
            description = POINT_DESCRIPTIONS[(student_index + t) % len(POINT_DESCRIPTIONS)]
            writer.points_updated(enrollment, amount, description, clock.timestamp_days_ago(days_ago, t % 6))
            total += 1
    logger.info("Created %d point transactions", total)
    return total


def seed_attendance_events(
    writer: LessonEventWriter,
    enrollments: Sequence[Enrollment],
    *,
    clock: SeedClock,
) -> int:
    """Mark students present today; every fourth student is absent."""
    today = clock.current_date
    present = 0
    for student_index, enrollment in enumerate(enrollments):
        if student_index % 4 == 3:
            continue
        writer.marked_present(enrollment, today, clock.now())
        present += 1
    logger.info("Marked %d/%d students present for %s", present, len(enrollments), today.isoformat())
    return present


__all__ = [
    "period_timestamp",
    "seed_attendance_events",
    "seed_points_events",
    "seed_recent_lesson_progress",
    "seed_standalone_lesson_events",
]
