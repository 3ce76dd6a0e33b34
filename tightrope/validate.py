"""Schedule validation helpers (library-facing)."""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from tightrope.errors import (
    CyclicDependencyError,
    InvalidScheduleError,
    ReflowError,
    UnknownTaskError,
)
from tightrope.graph import build_graph, find_cycle
from tightrope.model import Dependency, Task


def _require(cond: bool, msg: str, errs: List[str]) -> None:
    if not cond:
        errs.append(msg)


def validate_tasks(tasks: Sequence[Any], *, label: str = "tasks") -> List[str]:
    errs: List[str] = []
    seen: Dict[str, int] = {}
    for i, t in enumerate(tasks):
        if not isinstance(t, Task):
            errs.append(f"{label}[{i}] must be Task")
            continue
        if t.id in seen:
            errs.append(f"{label}[{i}].id duplicates {label}[{seen[t.id]}]: {t.id!r}")
            continue
        seen[t.id] = i
        _require(
            t.sort_order is None or (isinstance(t.sort_order, int) and not isinstance(t.sort_order, bool)),
            f"{label}[{i}] ({t.id}) sort_order must be int or null",
            errs,
        )
    return errs


def validate_dependencies(
    tasks: Sequence[Task],
    dependencies: Sequence[Any],
    *,
    label: str = "dependencies",
) -> List[str]:
    """Unknown ids, self-loops and cycles."""
    errs: List[str] = []
    ids = {t.id for t in tasks if isinstance(t, Task)}
    for i, d in enumerate(dependencies):
        if not isinstance(d, Dependency):
            errs.append(f"{label}[{i}] must be Dependency")
            continue
        _require(d.predecessor_id in ids, f"{label}[{i}] unknown predecessor_id: {d.predecessor_id!r}", errs)
        _require(d.successor_id in ids, f"{label}[{i}] unknown successor_id: {d.successor_id!r}", errs)
        _require(d.predecessor_id != d.successor_id, f"{label}[{i}] is a self-dependency: {d.predecessor_id!r}", errs)

    graph = build_graph(
        [t.id for t in tasks if isinstance(t, Task)],
        [d for d in dependencies if isinstance(d, Dependency)],
    )
    cycle = find_cycle(graph)
    if cycle:
        errs.append(f"{label}: cycle {' -> '.join(cycle)}")
    return errs


def check_precedence(tasks: Sequence[Task], dependencies: Sequence[Dependency]) -> List[str]:
    """Every successor must start after its predecessor ends."""
    by_id = {t.id: t for t in tasks}
    errs: List[str] = []
    for d in dependencies:
        p = by_id.get(d.predecessor_id)
        s = by_id.get(d.successor_id)
        if p is None or s is None or p is s:
            continue
        if s.start_date <= p.end_date:
            errs.append(
                f"{s.id} starts {s.start_date.isoformat()} but predecessor {p.id} ends {p.end_date.isoformat()}"
            )
    return errs


def assert_valid_schedule(tasks: Sequence[Any], dependencies: Sequence[Any]) -> None:
    errs = validate_tasks(tasks)
    if errs:
        raise InvalidScheduleError(errs[0])
    errs = validate_dependencies(tasks, dependencies)
    if errs:
        raise InvalidScheduleError(errs[0])


__all__ = [
    "CyclicDependencyError",
    "InvalidScheduleError",
    "ReflowError",
    "UnknownTaskError",
    "assert_valid_schedule",
    "check_precedence",
    "validate_dependencies",
    "validate_tasks",
]
