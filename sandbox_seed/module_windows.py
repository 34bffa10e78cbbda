"""Partition the working days among sequential content modules."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModuleWindow:
    module_index: int
    working_day_offsets: List[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.working_day_offsets)

    @property
    def is_empty(self) -> bool:
        return not self.working_day_offsets


def allocate_module_windows(
    module_lesson_counts: Sequence[int],
    working_days: Sequence[int],
) -> List[ModuleWindow]:
    """Give each module ``ceil(count / total * days)`` days, in module order.

    Days left over after the last module are appended to the last window. With no
    lessons at all every window is empty.
    """
    total_lessons = sum(module_lesson_counts)
    total_days = len(working_days)
    if not module_lesson_counts:
        return []
    if total_lessons == 0:
        logger.info("No lessons to schedule across %d modules", len(module_lesson_counts))
        return [ModuleWindow(module_index=index) for index in range(len(module_lesson_counts))]

    slices: List[List[int]] = []
    day_index = 0
    for count in module_lesson_counts:
        day_count = -(-count * total_days // total_lessons)
        end_index = min(day_index + day_count, total_days)
        slices.append(list(working_days[day_index:end_index]))
        day_index = end_index

    if day_index < total_days:
        slices[-1].extend(working_days[day_index:])

    return [ModuleWindow(module_index=index, working_day_offsets=days) for index, days in enumerate(slices)]


__all__ = ["ModuleWindow", "allocate_module_windows"]
