# tightrope/model.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, Dict, Optional

from tightrope.errors import InvalidScheduleError
from tightrope.util.days import coerce_day, end_from_duration, iso_day, span_days


@dataclass(frozen=True)
class Task:
    """A schedulable bar (a milestone or feature in the roadmap UI).

    Dates are inclusive calendar days. `duration` is derived from them and is
    never stored on its own.
    """

    id: str
    start_date: dt.date
    end_date: dt.date
    sort_order: Optional[int] = None

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise InvalidScheduleError(f"task id must be a non-empty string; got {self.id!r}")
        start = coerce_day(self.start_date, field=f"task {self.id} start_date")
        end = coerce_day(self.end_date, field=f"task {self.id} end_date")
        if end < start:
            raise InvalidScheduleError(
                f"task {self.id} ends before it starts ({iso_day(end)} < {iso_day(start)})"
            )
        object.__setattr__(self, "start_date", start)
        object.__setattr__(self, "end_date", end)

    @property
    def duration(self) -> int:
        return span_days(self.start_date, self.end_date)

    @classmethod
    def from_duration(cls, id: str, start_date: Any, duration: int, sort_order: Optional[int] = None) -> "Task":
        start = coerce_day(start_date, field=f"task {id} start_date")
        if not isinstance(duration, int) or isinstance(duration, bool) or duration < 1:
            raise InvalidScheduleError(f"task {id} duration must be a positive int; got {duration!r}")
        return cls(id=id, start_date=start, end_date=end_from_duration(start, duration), sort_order=sort_order)

    def with_dates(self, start_date: dt.date, end_date: dt.date) -> "Task":
        return Task(id=self.id, start_date=start_date, end_date=end_date, sort_order=self.sort_order)


@dataclass(frozen=True)
class Dependency:
    """Finish-to-start edge: the successor may start the day after the predecessor ends."""

    predecessor_id: str
    successor_id: str


@dataclass(frozen=True)
class ScheduleOverride:
    """The user's direct manipulation of one task.

    move:         start_date
    resize-start: start_date + duration
    resize-end:   duration (or end_date)
    """

    task_id: str
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    duration: Optional[int] = None

    def __post_init__(self) -> None:
        if self.start_date is not None:
            object.__setattr__(self, "start_date", coerce_day(self.start_date, field="override start_date"))
        if self.end_date is not None:
            object.__setattr__(self, "end_date", coerce_day(self.end_date, field="override end_date"))
        if self.duration is not None and (not isinstance(self.duration, int) or isinstance(self.duration, bool)):
            raise InvalidScheduleError(f"override duration must be int; got {self.duration!r}")


@dataclass(frozen=True)
class CascadedUpdate:
    """New schedule for a task whose dates changed in a reflow."""

    id: str
    start_date: dt.date
    end_date: dt.date

    @property
    def duration(self) -> int:
        return span_days(self.start_date, self.end_date)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "start_date": iso_day(self.start_date),
            "end_date": iso_day(self.end_date),
            "duration": self.duration,
        }


@dataclass(frozen=True)
class TeamTrack:
    """Per-team duration of a task (a sub-bar drawn under the task)."""

    task_id: str
    team_id: str
    duration: int


@dataclass(frozen=True)
class TeamTrackDates:
    task_id: str
    team_id: str
    start_date: dt.date
    end_date: dt.date


@dataclass(frozen=True)
class DurationExpansion:
    id: str
    old_duration: int
    new_duration: int


__all__ = [
    "Task",
    "Dependency",
    "ScheduleOverride",
    "CascadedUpdate",
    "TeamTrack",
    "TeamTrackDates",
    "DurationExpansion",
]
