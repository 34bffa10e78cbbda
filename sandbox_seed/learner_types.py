"""Deterministic learner archetypes.

Every decision here is modular arithmetic over stable indices so reruns with the
same enrollment order produce the same dataset.
"""

from __future__ import annotations

import math

COMPLETION_RATES = (1.0, 0.8, 0.6, 0.4, 0.2)
SPLIT_MODULUS = 10
SPLIT_THRESHOLD = 3
DELAY_MODULUS = 5
DELAY_THRESHOLD = 2


def completion_rate(student_index: int) -> float:
    return COMPLETION_RATES[student_index % len(COMPLETION_RATES)]


def should_split_lesson(
    student_index: int,
    lesson_index: int,
    module_index: int,
    question_count: int,
) -> bool:
    """Spread a lesson's questions over two days (about 30% of lessons)."""
    if question_count < 2:
        return False
    return (student_index + lesson_index + module_index) % SPLIT_MODULUS < SPLIT_THRESHOLD


def should_delay_mastery_check(student_index: int, lesson_index: int, module_index: int) -> bool:
    """Push the mastery check to the next working day (about 40% of lessons)."""
    return (student_index + lesson_index + module_index) % DELAY_MODULUS < DELAY_THRESHOLD


def lessons_to_complete(lesson_count: int, rate: float) -> int:
    # Round off float noise before taking the ceiling.
    scheduled = math.ceil(round(lesson_count * rate, 6))
    return max(0, min(lesson_count, scheduled))


__all__ = [
    "COMPLETION_RATES",
    "completion_rate",
    "lessons_to_complete",
    "should_delay_mastery_check",
    "should_split_lesson",
]
