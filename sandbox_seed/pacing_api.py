"""Client for the coaching platform's lesson-progress pacing endpoint."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import BaseModel, Field

from .config import Settings
from .errors import PacingApiError
from .models import LessonSpec
from .telemetry import emit_event

logger = logging.getLogger(__name__)

LESSON_PROGRESS_PATH = "/api/podsie/lesson-progress"


class PacingAssignment(BaseModel):
    podsie_assignment_id: int = Field(serialization_alias="podsieAssignmentId")
    group_number: int = Field(serialization_alias="groupNumber")
    group_label: str = Field(serialization_alias="groupLabel")
    order_index: int = Field(serialization_alias="orderIndex")
    assignment_title: str = Field(serialization_alias="assignmentTitle")


class PacingConfigPayload(BaseModel):
    podsie_group_id: int = Field(serialization_alias="podsieGroupId")
    podsie_module_id: int = Field(serialization_alias="podsieModuleId")
    module_start_date: date = Field(serialization_alias="moduleStartDate")
    points_reward_goal: int = Field(serialization_alias="pointsRewardGoal")
    points_reward_description: str = Field(serialization_alias="pointsRewardDescription")
    student_points_target: int = Field(serialization_alias="studentPointsTarget")
    assignments: List[PacingAssignment] = Field(default_factory=list)
    completed_sections: List[Any] = Field(default_factory=list, serialization_alias="completedSections")


def build_pacing_assignments(lessons: Sequence[LessonSpec]) -> List[PacingAssignment]:
    """Each lesson and its mastery check share one ``Lesson N`` section."""
    entries: List[PacingAssignment] = []
    for index, lesson in enumerate(lessons):
        label = f"Lesson {index + 1}"
        entries.append(
            PacingAssignment(
                podsie_assignment_id=lesson.lesson_id,
                group_number=index + 1,
                group_label=label,
                order_index=0,
                assignment_title=lesson.title,
            )
        )
        if lesson.mastery_check_id:
            entries.append(
                PacingAssignment(
                    podsie_assignment_id=lesson.mastery_check_id,
                    group_number=index + 1,
                    group_label=label,
                    order_index=1,
                    assignment_title=lesson.mastery_check_title or "Mastery Check",
                )
            )
    return entries


class PacingApiClient:
    """Deletes and recreates pacing configs. Without an API key every call is skipped."""

    def __init__(self, settings: Settings, *, client: Optional[httpx.Client] = None) -> None:
        self._settings = settings
        self._base_url = settings.pacing_api_url.rstrip("/")
        self._api_key = settings.pacing_api_key or ""
        self._client = client

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}"}

    def _request(self, method: str, *, params: Optional[Dict[str, Any]] = None, json: Any = None) -> httpx.Response:
        local_client = self._client or httpx.Client(timeout=self._settings.pacing_api_timeout_seconds)
        close_client = self._client is None
        try:
            return local_client.request(
                method,
                f"{self._base_url}{LESSON_PROGRESS_PATH}",
                params=params,
                json=json,
                headers=self._headers(),
            )
        except httpx.HTTPError as exc:
            raise PacingApiError(f"Pacing API {method} failed: {exc}") from exc
        finally:
            if close_client:
                local_client.close()

    def delete_config(self, group_id: int, module_id: int) -> bool:
        """True when a config was deleted; a 404 means there was nothing to delete."""
        if not self.enabled:
            logger.warning("No SOLVES_COACHING_API_KEY set, skipping pacing cleanup")
            return False
        response = self._request("DELETE", params={"groupId": group_id, "moduleId": module_id})
        if response.is_success:
            return True
        if response.status_code == 404:
            return False
        logger.warning(
            "Failed to delete pacing for group %s, module %s: %s",
            group_id,
            module_id,
            response.text,
        )
        return False

    def create_config(
        self,
        group_id: int,
        module_id: int,
        lessons: Sequence[LessonSpec],
        *,
        module_start_date: date,
    ) -> bool:
        if not self.enabled:
            return False
        payload = PacingConfigPayload(
            podsie_group_id=group_id,
            podsie_module_id=module_id,
            module_start_date=module_start_date,
            points_reward_goal=self._settings.points_reward_goal,
            points_reward_description=self._settings.points_reward_description,
            student_points_target=self._settings.student_points_target,
            assignments=build_pacing_assignments(lessons),
        )
        response = self._request("POST", json=payload.model_dump(mode="json", by_alias=True))
        if response.is_success:
            emit_event("pacing_config_created", group_id=group_id, module_id=module_id)
            return True
        logger.warning(
            "Failed to create pacing for group %s, module %s: %s",
            group_id,
            module_id,
            response.text,
        )
        return False

    def cleanup(self, group_ids: Sequence[int], module_ids: Sequence[int]) -> int:
        if not self.enabled:
            logger.info("Skipping pacing cleanup (no API key configured)")
            return 0
        deleted = 0
        for group_id in group_ids:
            for module_id in module_ids:
                if self.delete_config(group_id, module_id):
                    deleted += 1
                    logger.info("Deleted pacing config for group %s, module %s", group_id, module_id)
        if deleted == 0:
            logger.info("No existing pacing configs found to delete")
        return deleted

    def create_configs(
        self,
        group_ids: Sequence[int],
        module_id: int,
        lessons: Sequence[LessonSpec],
        *,
        module_start_date: date,
    ) -> int:
        if not self.enabled:
            logger.info("Skipping pacing creation (no API key configured)")
            return 0
        created = 0
        for group_id in group_ids:
            if self.create_config(group_id, module_id, lessons, module_start_date=module_start_date):
                created += 1
                logger.info("Created pacing config for group %s, module %s", group_id, module_id)
        return created


__all__ = [
    "PacingApiClient",
    "PacingAssignment",
    "PacingConfigPayload",
    "build_pacing_assignments",
]
