from __future__ import annotations

from datetime import date, datetime, timezone

from sandbox_seed.telemetry import (
    EventCollector,
    TelemetryEvent,
    current_run_id,
    emit_event,
    register_listener,
    remove_listener,
    start_run,
)


def test_emit_event_serialises_dates() -> None:
    events: list[TelemetryEvent] = []
    register_listener(events.append)

    emit_event(
        "seed_step_completed",
        step="verify",
        at=datetime(2026, 10, 16, 10, tzinfo=timezone.utc),
        day=date(2026, 10, 16),
    )

    assert len(events) == 1
    assert events[0].name == "seed_step_completed"
    assert events[0].payload == {"step": "verify", "at": "2026-10-16T10:00:00+00:00", "day": "2026-10-16"}


def test_failing_listener_does_not_block_others() -> None:
    events: list[TelemetryEvent] = []

    def broken(_: TelemetryEvent) -> None:
        raise RuntimeError("boom")

    register_listener(broken)
    register_listener(events.append)
    emit_event("pacing_config_created", group_id=1, module_id=2)

    assert [event.payload for event in events] == [{"group_id": 1, "module_id": 2}]


def test_events_carry_the_current_run_id() -> None:
    collector = EventCollector()
    register_listener(collector)

    emit_event("seed_step_completed", step="before")
    run_id = start_run("run-1")
    emit_event("seed_step_completed", step="verify_and_cleanup")
    emit_event("seed_day_summary", lessons_completed=3)

    assert current_run_id() == "run-1"
    assert [event.run_id for event in collector.events] == [None, run_id, run_id]
    assert collector.steps() == ["before", "verify_and_cleanup"]
    assert [event.payload for event in collector.named("seed_day_summary")] == [{"lessons_completed": 3}]


def test_removed_listener_stops_receiving_events() -> None:
    collector = EventCollector()
    register_listener(collector)
    emit_event("seed_completed")
    remove_listener(collector)
    emit_event("seed_completed")

    assert len(collector.events) == 1
