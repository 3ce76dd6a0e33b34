# tightrope/drag.py
"""Build the single override a bar gesture hands to `reflow`.

All inputs are calendar days; pixel snapping is the caller's business.
"""

from __future__ import annotations

from typing import Any

from tightrope.graph import DependencyGraph
from tightrope.model import ScheduleOverride, Task
from tightrope.util.days import add_days, coerce_day, span_days

DRAG_KINDS = ("move", "resize-start", "resize-end")


def move_override(task: Task, new_start: Any) -> ScheduleOverride:
    return ScheduleOverride(task_id=task.id, start_date=coerce_day(new_start, field="new_start"))


def resize_start_override(task: Task, new_start: Any) -> ScheduleOverride:
    """Drag the left handle: the end stays put, the bar is at least one day."""
    start = coerce_day(new_start, field="new_start")
    if start > task.end_date:
        start = task.end_date
    return ScheduleOverride(task_id=task.id, start_date=start, duration=span_days(start, task.end_date))


def resize_end_override(task: Task, new_end: Any) -> ScheduleOverride:
    end = coerce_day(new_end, field="new_end")
    return ScheduleOverride(task_id=task.id, duration=max(1, span_days(task.start_date, end)))


def nudge_override(task: Task, delta_days: int) -> ScheduleOverride:
    return move_override(task, add_days(task.start_date, int(delta_days)))


def override_for_drag(task: Task, kind: str, delta_days: int) -> ScheduleOverride:
    kind = kind.lower().strip()
    if kind == "move":
        return nudge_override(task, delta_days)
    if kind == "resize-start":
        return resize_start_override(task, add_days(task.start_date, int(delta_days)))
    if kind == "resize-end":
        return resize_end_override(task, add_days(task.end_date, int(delta_days)))
    raise ValueError(f"Unknown drag kind: {kind} (want one of {', '.join(DRAG_KINDS)})")


def is_chained(task_id: str, graph: DependencyGraph) -> bool:
    """Tasks with a predecessor take their start from the chain, not from a drag."""
    return bool(graph.predecessors_of(task_id))


def changes_start(override: ScheduleOverride, task: Task) -> bool:
    return override.start_date is not None and override.start_date != task.start_date


__all__ = [
    "DRAG_KINDS",
    "changes_start",
    "is_chained",
    "move_override",
    "nudge_override",
    "override_for_drag",
    "resize_end_override",
    "resize_start_override",
]
