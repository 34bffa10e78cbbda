"""Structured progress events emitted while a seed run is in flight.

Every event is stamped with the id of the current run (see :func:`start_run`)
so listeners can tell consecutive runs in one process apart.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from threading import RLock
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger("sandbox_seed.telemetry")


@dataclass(frozen=True)
class TelemetryEvent:
    name: str
    payload: Dict[str, Any]
    run_id: Optional[str] = None
    emitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


Listener = Callable[[TelemetryEvent], None]

_listeners: List[Listener] = []
_lock = RLock()
_run_id: Optional[str] = None


def start_run(run_id: Optional[str] = None) -> str:
    """Begin a new seed run; later events carry the returned id."""
    global _run_id
    with _lock:
        _run_id = run_id or uuid.uuid4().hex[:12]
        return _run_id


def current_run_id() -> Optional[str]:
    return _run_id


def register_listener(listener: Listener) -> None:
    with _lock:
        _listeners.append(listener)


def remove_listener(listener: Listener) -> None:
    with _lock:
        if listener in _listeners:
            _listeners.remove(listener)


def clear_listeners() -> None:
    """Drop every listener and forget the current run. Used to reset test state."""
    global _run_id
    with _lock:
        _listeners.clear()
        _run_id = None


def emit_event(name: str, **fields: Any) -> None:
    """Fan a run event out to listeners, then log it at DEBUG."""
    event = TelemetryEvent(name=name, payload=_sanitize(fields), run_id=_run_id)

    with _lock:
        listeners = list(_listeners)

    for listener in listeners:
        try:
            listener(event)
        except Exception:  # noqa: BLE001
            logger.exception("Telemetry listener failed for %s", name)

    structured = {"event": name, "run": event.run_id, **event.payload}
    logger.debug("TELEMETRY %s", json.dumps(structured, default=_json_default))


class EventCollector:
    """Listener that keeps every event of a run in memory."""

    def __init__(self) -> None:
        self.events: List[TelemetryEvent] = []

    def __call__(self, event: TelemetryEvent) -> None:
        self.events.append(event)

    def named(self, name: str) -> List[TelemetryEvent]:
        return [event for event in self.events if event.name == name]

    def steps(self) -> List[str]:
        return [str(event.payload.get("step")) for event in self.named("seed_step_completed")]


def _sanitize(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value.isoformat() if isinstance(value, (datetime, date)) else value for key, value in fields.items()}


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


__all__ = [
    "EventCollector",
    "TelemetryEvent",
    "clear_listeners",
    "current_run_id",
    "emit_event",
    "register_listener",
    "remove_listener",
    "start_run",
]
