from __future__ import annotations

from sandbox_seed.learner_types import (
    completion_rate,
    lessons_to_complete,
    should_delay_mastery_check,
    should_split_lesson,
)


def test_completion_rate_cycles_every_five_students() -> None:
    assert [completion_rate(i) for i in range(7)] == [1.0, 0.8, 0.6, 0.4, 0.2, 1.0, 0.8]


def test_lessons_to_complete_rounds_up() -> None:
    assert lessons_to_complete(5, 0.2) == 1
    assert lessons_to_complete(3, 0.6) == 2
    assert lessons_to_complete(10, 0.8) == 8
    assert lessons_to_complete(0, 1.0) == 0


def test_lessons_to_complete_on_exact_multiples() -> None:
    assert lessons_to_complete(5, 0.6) == 3
    assert lessons_to_complete(15, 0.2) == 3
    assert lessons_to_complete(10, 0.4) == 4


def test_lessons_to_complete_is_clamped() -> None:
    assert lessons_to_complete(4, 1.5) == 4
    assert lessons_to_complete(4, 0.0) == 0


def test_split_needs_at_least_two_questions() -> None:
    assert should_split_lesson(0, 0, 0, 2)
    assert not should_split_lesson(0, 0, 0, 1)
    assert not should_split_lesson(0, 0, 0, 0)


def test_split_applies_to_three_in_ten_combinations() -> None:
    splits = sum(should_split_lesson(s, l, 0, 4) for s in range(10) for l in range(10))
    assert splits == 30
    assert should_split_lesson(9, 1, 0, 4)
    assert not should_split_lesson(1, 1, 1, 4)


def test_delay_applies_to_two_in_five_combinations() -> None:
    assert should_delay_mastery_check(0, 0, 0)
    assert should_delay_mastery_check(3, 3, 0)
    assert not should_delay_mastery_check(0, 2, 0)
    delays = sum(should_delay_mastery_check(s, l, 0) for s in range(5) for l in range(5))
    assert delays == 10
