from __future__ import annotations

from sandbox_seed.module_windows import ModuleWindow, allocate_module_windows


def test_windows_are_proportional_and_sequential() -> None:
    windows = allocate_module_windows([1, 3], [10, 9, 8, 7, 6, 5, 4, 3])
    assert [w.working_day_offsets for w in windows] == [[10, 9], [8, 7, 6, 5, 4, 3]]
    assert [w.module_index for w in windows] == [0, 1]


def test_ceiling_can_leave_the_last_module_short() -> None:
    windows = allocate_module_windows([2, 2], [5, 4, 3, 2, 1])
    assert [w.working_day_offsets for w in windows] == [[5, 4, 3], [2, 1]]


def test_module_without_lessons_gets_no_days() -> None:
    windows = allocate_module_windows([0, 2], [3, 2, 1])
    assert windows[0].is_empty
    assert windows[1].working_day_offsets == [3, 2, 1]
    assert len(windows[1]) == 3


def test_no_modules_or_no_lessons() -> None:
    assert allocate_module_windows([], [3, 2, 1]) == []
    windows = allocate_module_windows([0, 0], [3, 2, 1])
    assert windows == [ModuleWindow(module_index=0), ModuleWindow(module_index=1)]


def test_windows_never_overlap_and_cover_every_day() -> None:
    days = list(range(30, 0, -1))
    windows = allocate_module_windows([3, 5, 2], days)
    flattened = [day for window in windows for day in window.working_day_offsets]
    assert flattened == days
