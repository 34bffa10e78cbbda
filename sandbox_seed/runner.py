"""End-to-end seed run: verify, clean up, then generate every dashboard dataset."""

from __future__ import annotations

import logging
import random
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from .activity import (
    seed_attendance_events,
    seed_points_events,
    seed_recent_lesson_progress,
    seed_standalone_lesson_events,
)
from .assessments import (
    assign_assessment_to_group,
    create_assessment,
    seed_assessment_responses,
    update_existing_responses,
)
from .canvas_feedback import create_canvas_assignments, seed_canvas_responses
from .cleanup import cleanup_sandbox_data
from .config import Settings
from .db.session import ensure_local_database, session_scope
from .errors import PacingApiError
from .lesson_events import LessonEventWriter
from .lessons import LessonFactory
from .models import Assessment, Enrollment, Group, ModuleLessonData
from .pacing_api import PacingApiClient
from .progress_scheduler import seed_progress_events
from .sinks import DatabaseEventSink
from .students import seed_students_for_group
from .telemetry import EventCollector, emit_event, register_listener, remove_listener, start_run
from .verify import verify_groups, verify_or_create_modules, verify_teacher
from .working_days import SeedClock

logger = logging.getLogger(__name__)


@dataclass
class SeedSummary:
    groups: List[Group] = field(default_factory=list)
    module_ids: List[int] = field(default_factory=list)
    students_per_group: Dict[int, int] = field(default_factory=dict)
    events: Counter = field(default_factory=Counter)
    assessment_responses: int = 0
    canvas_responses: int = 0
    pacing_configs_created: int = 0
    run_id: Optional[str] = None
    steps: List[str] = field(default_factory=list)


def _step(name: str, **fields) -> None:
    emit_event("seed_step_completed", step=name, **fields)


def run_seed(
    settings: Settings,
    *,
    clock: Optional[SeedClock] = None,
    pacing_client: Optional[PacingApiClient] = None,
    rng: Optional[random.Random] = None,
) -> SeedSummary:
    ensure_local_database(settings.database_url, allow_remote=settings.allow_remote_database)
    clock = clock or SeedClock.from_settings(settings.seed_timezone)
    rng = rng or random.Random(settings.random_seed)
    pacing = pacing_client or PacingApiClient(settings)
    summary = SeedSummary(run_id=start_run())
    logger.info("Starting seed run %s", summary.run_id)

    collector = EventCollector()
    register_listener(collector)
    try:
        _seed_all(settings, summary, clock, pacing, rng)
    finally:
        remove_listener(collector)
    summary.steps = collector.steps()

    log_summary(summary, settings)
    return summary


def _seed_all(
    settings: Settings,
    summary: SeedSummary,
    clock: SeedClock,
    pacing: PacingApiClient,
    rng: random.Random,
) -> None:
    days = settings.days_to_seed

    with session_scope() as session:
        teacher = verify_teacher(session, settings.teacher_email)
        summary.groups = verify_groups(session, settings.group_ids, settings.group_codes)
        summary.module_ids = verify_or_create_modules(session, settings.module_ids, teacher)
        cleanup_sandbox_data(session, settings.group_ids)
    _step("verify_and_cleanup", module_ids=summary.module_ids)

    try:
        pacing.cleanup(settings.group_ids, summary.module_ids)
    except PacingApiError as exc:
        logger.warning("Pacing cleanup skipped: %s", exc)

    lessons_by_group: Dict[int, List[ModuleLessonData]] = {}
    enrollments_by_group: Dict[int, List[Enrollment]] = {}

    for group_index, group in enumerate(summary.groups):
        logger.info("Processing group: %s (ID: %s)", group.group_name, group.id)
        with session_scope() as session:
            enrollments = seed_students_for_group(session, group, group_index, settings.students_to_create)
            factory = LessonFactory(session, teacher, clock, days_to_seed=days)
            module_data = [
                factory.create_all_lessons_for_module(
                    group_id=group.id,
                    module_id=module_id,
                    standalone_count=settings.standalone_lessons_to_create,
                    paired_count=settings.lessons_to_create,
                    questions_per_lesson=settings.questions_per_lesson,
                )
                for module_id in summary.module_ids
            ]

            sink = DatabaseEventSink(session)
            writer = LessonEventWriter(sink, group.id)
            seed_standalone_lesson_events(
                writer,
                enrollments,
                [data.standalone_lessons for data in module_data],
                days_to_seed=days,
                clock=clock,
            )

            paired_by_module = [data.paired_lessons for data in module_data]
            seed_progress_events(
                sink,
                group_id=group.id,
                group_name=group.group_name,
                enrollments=enrollments,
                lessons_by_module=paired_by_module,
                days_to_seed=days,
                clock=clock,
            )

            if paired_by_module and paired_by_module[-1]:
                seed_recent_lesson_progress(writer, enrollments, paired_by_module[-1][-1], clock=clock, rng=rng)
            seed_points_events(writer, enrollments, days_to_seed=days, clock=clock)
            seed_attendance_events(writer, enrollments, clock=clock)

        summary.events.update(sink.counts)
        summary.students_per_group[group.id] = len(enrollments)
        lessons_by_group[group.id] = module_data
        enrollments_by_group[group.id] = enrollments
        _step("group_seeded", group_id=group.id, students=len(enrollments))

    if summary.groups:
        reference = lessons_by_group[summary.groups[0].id]
        group_ids = [group.id for group in summary.groups]
        for module_id, data in zip(summary.module_ids, reference):
            try:
                summary.pacing_configs_created += pacing.create_configs(
                    group_ids,
                    module_id,
                    data.standalone_lessons + data.paired_lessons,
                    module_start_date=clock.date_days_ago(days),
                )
            except PacingApiError as exc:
                logger.warning("Pacing config creation skipped for module %s: %s", module_id, exc)

    with session_scope() as session:
        factory = LessonFactory(session, teacher, clock, days_to_seed=days)
        summary.assessment_responses = _seed_assessments(session, factory, settings, summary, enrollments_by_group, rng)
        _step("assessments_seeded", responses=summary.assessment_responses)

        for group in summary.groups:
            for module_index, module_id in enumerate(summary.module_ids):
                canvas = create_canvas_assignments(
                    factory,
                    group_id=group.id,
                    module_id=module_id,
                    standalone_count=settings.standalone_lessons_to_create,
                    paired_count=settings.lessons_to_create,
                )
                summary.canvas_responses += seed_canvas_responses(
                    session,
                    factory,
                    enrollments_by_group[group.id],
                    canvas,
                    module_index=module_index,
                    days_to_seed=days,
                    rng=rng,
                )
        _step("canvas_feedback_seeded", responses=summary.canvas_responses)

        update_existing_responses(session, rng=rng)


def _seed_assessments(
    session: Session,
    factory: LessonFactory,
    settings: Settings,
    summary: SeedSummary,
    enrollments_by_group: Dict[int, List[Enrollment]],
    rng: random.Random,
) -> int:
    """Create one assessment per module for the first group and share it with the others."""
    if not summary.groups or settings.assessments_to_create == 0:
        return 0
    first, *others = summary.groups
    total_modules = len(summary.module_ids)
    created: List[List[Assessment]] = []
    responses = 0

    for module_index, module_id in enumerate(summary.module_ids):
        assessments = [
            create_assessment(
                factory,
                group_id=first.id,
                module_id=module_id,
                module_index=module_index,
                question_count=settings.questions_per_assessment,
                module_order_offset=settings.lessons_to_create,
            )
        ]
        created.append(assessments)
        responses += seed_assessment_responses(
            session,
            factory,
            enrollments_by_group[first.id],
            assessments,
            module_index=module_index,
            total_modules=total_modules,
            days_to_seed=settings.days_to_seed,
            rng=rng,
        )

    for group in others:
        for module_index, assessments in enumerate(created):
            shared = [assign_assessment_to_group(factory, assessment, group.id) for assessment in assessments]
            responses += seed_assessment_responses(
                session,
                factory,
                enrollments_by_group[group.id],
                shared,
                module_index=module_index,
                total_modules=total_modules,
                days_to_seed=settings.days_to_seed,
                rng=rng,
            )
    return responses


def log_summary(summary: SeedSummary, settings: Settings) -> None:
    group_ids = ",".join(str(group.id) for group in summary.groups)
    logger.info("Sandbox data seed complete (run %s)", summary.run_id)
    logger.info("Steps: %s", ", ".join(summary.steps))
    logger.info("Groups: %s", ", ".join(group.group_name for group in summary.groups))
    logger.info("Module IDs: %s", ", ".join(str(module_id) for module_id in summary.module_ids))
    logger.info("Students per group: %s", settings.students_to_create)
    logger.info("Standalone lessons per module: %s", settings.standalone_lessons_to_create)
    logger.info("Paired lessons per module: %s (each with mastery check)", settings.lessons_to_create)
    logger.info("Questions per lesson: %s", settings.questions_per_lesson)
    logger.info("Days of data: %s", settings.days_to_seed)
    for event_type, count in sorted(summary.events.items(), key=lambda item: item[0].value):
        logger.info("  %s: %d", event_type.value, count)
    logger.info("View velocity at: /teacher/sandbox/velocity?groupIds=%s", group_ids)
    emit_event(
        "seed_completed",
        groups=[group.id for group in summary.groups],
        module_ids=summary.module_ids,
        assessment_responses=summary.assessment_responses,
        canvas_responses=summary.canvas_responses,
        pacing_configs_created=summary.pacing_configs_created,
    )


__all__ = ["SeedSummary", "log_summary", "run_seed"]
