from __future__ import annotations

import json
from datetime import date

import httpx
import pytest

from sandbox_seed.config import Settings
from sandbox_seed.errors import PacingApiError
from sandbox_seed.models import LessonSpec
from sandbox_seed.pacing_api import PacingApiClient, build_pacing_assignments
from sandbox_seed.telemetry import register_listener

PAIRED = LessonSpec(lesson_id=11, title="Lesson 1: Slope", mastery_check_id=12, mastery_check_title="Lesson 1: Slope")
STANDALONE = LessonSpec(lesson_id=10, title="Ramp Up 1: Review")


def _settings(api_key: str | None = "secret") -> Settings:
    return Settings(
        SOLVES_COACHING_API_KEY=api_key,
        SOLVES_COACHING_BASE_URL="https://coach.test/",
    )


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_lessons_and_mastery_checks_share_a_section() -> None:
    entries = build_pacing_assignments([STANDALONE, PAIRED])
    assert [(e.podsie_assignment_id, e.group_number, e.order_index) for e in entries] == [
        (10, 1, 0),
        (11, 2, 0),
        (12, 2, 1),
    ]
    assert entries[2].group_label == "Lesson 2"


def test_create_config_posts_camel_case_payload() -> None:
    requests: list[httpx.Request] = []
    created = []
    register_listener(created.append)

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(201, json={"ok": True})

    api = PacingApiClient(_settings(), client=_client(handler))
    assert api.create_config(1, 20, [STANDALONE, PAIRED], module_start_date=date(2026, 9, 1))

    request = requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://coach.test/api/podsie/lesson-progress"
    assert request.headers["Authorization"] == "Bearer secret"
    body = json.loads(request.content)
    assert body["podsieGroupId"] == 1
    assert body["podsieModuleId"] == 20
    assert body["moduleStartDate"] == "2026-09-01"
    assert body["completedSections"] == []
    assert body["assignments"][0] == {
        "podsieAssignmentId": 10,
        "groupNumber": 1,
        "groupLabel": "Lesson 1",
        "orderIndex": 0,
        "assignmentTitle": "Ramp Up 1: Review",
    }
    assert [event.name for event in created] == ["pacing_config_created"]


def test_delete_treats_not_found_as_nothing_to_delete() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "DELETE"
        if request.url.params["groupId"] == "1":
            return httpx.Response(200)
        return httpx.Response(404)

    api = PacingApiClient(_settings(), client=_client(handler))
    assert api.delete_config(1, 10)
    assert not api.delete_config(3, 10)
    assert api.cleanup([1, 3], [10]) == 1


def test_calls_are_skipped_without_api_key() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    api = PacingApiClient(_settings(api_key=None), client=_client(handler))
    assert not api.enabled
    assert api.cleanup([1], [10]) == 0
    assert api.create_configs([1], 10, [PAIRED], module_start_date=date(2026, 9, 1)) == 0


def test_transport_errors_raise_pacing_api_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    api = PacingApiClient(_settings(), client=_client(handler))
    with pytest.raises(PacingApiError):
        api.delete_config(1, 10)
