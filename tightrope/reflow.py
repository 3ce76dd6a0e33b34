# tightrope/reflow.py
"""Dependency-aware reflow (tight finish-to-start scheduling).

Successors always start the day after their latest predecessor ends; any slack
on a recomputed task is collapsed. Only the overridden task may change length,
every cascaded task is translated in time with its own duration.
"""

from __future__ import annotations

import datetime as dt
import logging
from collections import deque
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from tightrope.errors import CyclicDependencyError, InvalidScheduleError, UnknownTaskError
from tightrope.graph import DependencyGraph, build_graph, find_cycle
from tightrope.model import CascadedUpdate, Dependency, ScheduleOverride, Task
from tightrope.util.days import add_days, end_from_duration, span_days

logger = logging.getLogger(__name__)

Span = Tuple[dt.date, dt.date]


def index_tasks(tasks: Iterable[Task]) -> Dict[str, Task]:
    out: Dict[str, Task] = {}
    for i, t in enumerate(tasks):
        if not isinstance(t, Task):
            raise InvalidScheduleError(f"tasks[{i}] must be Task; got {type(t).__name__}")
        if t.id in out:
            raise InvalidScheduleError(f"duplicate task id: {t.id!r}")
        out[t.id] = t
    return out


def proposed_schedule(task: Task, override: ScheduleOverride) -> Span:
    """Apply an override patch to `task`; durations below one day become one day."""
    start = override.start_date if override.start_date is not None else task.start_date

    if override.duration is not None:
        dur = int(override.duration)
        if override.end_date is not None and span_days(start, override.end_date) != dur:
            raise InvalidScheduleError(
                f"override for {task.id} has duration {dur} but end_date {override.end_date.isoformat()}"
            )
    elif override.end_date is not None:
        dur = span_days(start, override.end_date)
    else:
        dur = task.duration

    if dur < 1:
        dur = 1
    return start, end_from_duration(start, dur)


def _earliest_start(
    task_id: str,
    graph: DependencyGraph,
    final: Dict[str, Span],
    by_id: Dict[str, Task],
) -> Optional[dt.date]:
    """Day after the latest predecessor end; None for a root."""
    latest: Optional[dt.date] = None
    for p in graph.predecessors_of(task_id):
        end = final[p][1] if p in final else by_id[p].end_date
        if latest is None or end > latest:
            latest = end
    return add_days(latest, 1) if latest is not None else None


def _raise_cycle(graph: DependencyGraph, start: Optional[str], stuck: Iterable[str]) -> None:
    cycle = find_cycle(graph, start) or sorted(stuck)
    raise CyclicDependencyError(cycle)


def reflow(
    tasks: Sequence[Task],
    dependencies: Sequence[Dependency],
    override: ScheduleOverride,
) -> List[CascadedUpdate]:
    """Compute the cascade caused by one override.

    Returns updates (target first, then downstream tasks in dependency order)
    for every task whose schedule differs from the stored one. An override that
    changes nothing yields [].

    Raises:
      UnknownTaskError: the override or a dependency names an unknown id.
      InvalidScheduleError: duplicate ids or a self-contradicting override.
      CyclicDependencyError: the tasks downstream of the override form a cycle.
    """
    by_id = index_tasks(tasks)
    if override.task_id not in by_id:
        raise UnknownTaskError(override.task_id, where="override")
    graph = build_graph(by_id.keys(), dependencies, strict=True)
    target = by_id[override.task_id]

    downstream = graph.reachable_from(target.id)
    if target.id in downstream:
        _raise_cycle(graph, target.id, downstream)

    affected = {target.id, *downstream}
    pending = {u: sum(1 for p in graph.predecessors_of(u) if p in affected) for u in affected}
    pending[target.id] = 0

    final: Dict[str, Span] = {}
    changed: set[str] = set()
    updates: List[CascadedUpdate] = []
    queue: deque[str] = deque([target.id])

    while queue:
        u = queue.popleft()
        cur = by_id[u]

        if u == target.id:
            start, end = proposed_schedule(cur, override)
            floor = _earliest_start(u, graph, final, by_id)
            if floor is not None and (override.start_date is not None or start < floor):
                # a chained task's start follows its predecessors, never the drag
                end = end_from_duration(floor, span_days(start, end))
                start = floor
        elif any(p in changed for p in graph.predecessors_of(u)):
            floor = _earliest_start(u, graph, final, by_id)
            start = floor if floor is not None else cur.start_date
            end = end_from_duration(start, cur.duration)
        else:
            start, end = cur.start_date, cur.end_date

        if start != cur.start_date or end != cur.end_date:
            changed.add(u)
            updates.append(CascadedUpdate(id=u, start_date=start, end_date=end))
        final[u] = (start, end)

        for s in graph.successors_of(u):
            pending[s] -= 1
            if pending[s] == 0:
                queue.append(s)

    if len(final) < len(affected):
        _raise_cycle(graph, target.id, affected - set(final))

    logger.debug("reflow %s: %d affected, %d changed", target.id, len(affected), len(updates))
    return updates


def reflow_project(tasks: Sequence[Task], dependencies: Sequence[Dependency]) -> List[CascadedUpdate]:
    """Re-tighten a whole task set.

    Roots keep their start; every chained task starts the day after its latest
    predecessor ends. Durations are preserved. Returns changed tasks in
    dependency order.
    """
    by_id = index_tasks(tasks)
    graph = build_graph(by_id.keys(), dependencies, strict=True)

    pending = {u: len(graph.predecessors_of(u)) for u in graph.task_ids}
    queue: deque[str] = deque(u for u in graph.task_ids if pending[u] == 0)
    final: Dict[str, Span] = {}
    updates: List[CascadedUpdate] = []

    while queue:
        u = queue.popleft()
        cur = by_id[u]
        floor = _earliest_start(u, graph, final, by_id)
        start = floor if floor is not None else cur.start_date
        end = end_from_duration(start, cur.duration)
        if start != cur.start_date or end != cur.end_date:
            updates.append(CascadedUpdate(id=u, start_date=start, end_date=end))
        final[u] = (start, end)
        for s in graph.successors_of(u):
            pending[s] -= 1
            if pending[s] == 0:
                queue.append(s)

    if len(final) < len(by_id):
        _raise_cycle(graph, None, set(by_id) - set(final))

    logger.debug("reflow_project: %d tasks, %d changed", len(by_id), len(updates))
    return updates


def apply_updates(tasks: Sequence[Task], updates: Sequence[CascadedUpdate]) -> List[Task]:
    """Return a new task list with `updates` applied; input order is kept."""
    by_id = index_tasks(tasks)
    patch: Dict[str, CascadedUpdate] = {}
    for up in updates:
        if up.id not in by_id:
            raise UnknownTaskError(up.id, where="updates")
        patch[up.id] = up

    out: List[Task] = []
    for t in tasks:
        up = patch.get(t.id)
        out.append(t.with_dates(up.start_date, up.end_date) if up else t)
    return out


__all__ = [
    "apply_updates",
    "index_tasks",
    "proposed_schedule",
    "reflow",
    "reflow_project",
]
