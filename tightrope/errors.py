"""Error taxonomy for schedule computations.

Every error is a ValueError so callers that already guard parsing with
`except ValueError` keep working.
"""

from __future__ import annotations

from typing import Sequence, Tuple


class ReflowError(ValueError):
    """Base class: the inputs of a reflow/ordering call are inconsistent."""


class UnknownTaskError(ReflowError):
    """An override, dependency or update references an id missing from the task set."""

    def __init__(self, task_id: str, where: str = "input") -> None:
        super().__init__(f"unknown task id in {where}: {task_id!r}")
        self.task_id = task_id
        self.where = where


class InvalidScheduleError(ReflowError):
    """Malformed dates, end before start, duplicate ids or a self-contradicting override."""


class CyclicDependencyError(ReflowError):
    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle: Tuple[str, ...] = tuple(cycle)
        super().__init__("dependency cycle: " + " -> ".join(self.cycle))


__all__ = [
    "ReflowError",
    "UnknownTaskError",
    "InvalidScheduleError",
    "CyclicDependencyError",
]
