from __future__ import annotations

import random
from datetime import date
from zoneinfo import ZoneInfo

from sqlalchemy import func, select

from sandbox_seed.config import get_settings
from sandbox_seed.db.models import (
    AssignmentModel,
    EventModel,
    GroupModel,
    ModuleModel,
    StudentProfileModel,
    TeacherProfileModel,
)
from sandbox_seed.db.session import session_scope
from sandbox_seed.runner import run_seed
from sandbox_seed.sinks import EventType
from sandbox_seed.working_days import SeedClock

CLOCK = SeedClock(tz=ZoneInfo("UTC"), today=date(2026, 10, 16))


def _populate() -> None:
    with session_scope() as session:
        session.add(TeacherProfileModel(email="teacher@example.com", first_name="Tess", last_name="Teacher"))
        session.add(GroupModel(id=1, group_name="Period 1", group_code="0000"))
        session.add(GroupModel(id=3, group_name="Period 3", group_code="6704"))
        session.add(ModuleModel(id=10, name="Old name"))


def _settings():
    return get_settings().model_copy(
        update={
            "module_ids": [10, None],
            "students_to_create": 5,
            "lessons_to_create": 2,
            "questions_per_lesson": 2,
            "days_to_seed": 10,
            "pacing_api_key": None,
        }
    )


def _count(session, model) -> int:
    return session.execute(select(func.count()).select_from(model)).scalar_one()


def test_seed_run_populates_every_dataset(database) -> None:
    _populate()

    summary = run_seed(_settings(), clock=CLOCK, rng=random.Random(7))

    assert [group.group_code for group in summary.groups] == ["6035", "6704"]
    assert summary.module_ids[0] == 10 and len(summary.module_ids) == 2
    assert summary.students_per_group == {1: 5, 3: 5}
    # Every fourth student is absent; point transactions run 8, 6, 5, 4, 3 by archetype.
    assert summary.events[EventType.ATTENDANCE_MARKED] == 8
    assert summary.events[EventType.POINTS_UPDATED] == 52
    assert summary.events[EventType.LESSON_COMPLETED] > 0
    assert summary.events[EventType.MASTERY_CHECK_COMPLETED] > 0
    assert summary.canvas_responses > 0
    assert summary.pacing_configs_created == 0
    assert summary.run_id
    assert summary.steps == [
        "verify_and_cleanup",
        "group_seeded",
        "group_seeded",
        "assessments_seeded",
        "canvas_feedback_seeded",
    ]

    with session_scope(commit=False) as session:
        assert session.get(ModuleModel, 10).name == "Alg 1 Unit 8.3"
        assert _count(session, StudentProfileModel) == 10
        assert _count(session, EventModel) == sum(summary.events.values())
        titles = set(session.execute(select(AssignmentModel.title)).scalars())
        assert {"Unit 3 Assessment", "Unit 4 Assessment", "Canvas Practice 1"} <= titles


def test_second_run_replaces_previous_seed_data(database) -> None:
    _populate()
    first = run_seed(_settings(), clock=CLOCK, rng=random.Random(7))
    with session_scope(commit=False) as session:
        events_after_first = _count(session, EventModel)

    second = run_seed(_settings(), clock=CLOCK, rng=random.Random(7))

    assert second.events == first.events
    with session_scope(commit=False) as session:
        assert _count(session, StudentProfileModel) == 10
        assert _count(session, EventModel) == events_after_first
