# tightrope/teams.py
"""Team tracks: per-team durations drawn under a task bar.

A task is never shorter than its longest team track, and every track starts
with its task.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from tightrope.errors import InvalidScheduleError, UnknownTaskError
from tightrope.model import (
    CascadedUpdate,
    Dependency,
    DurationExpansion,
    ScheduleOverride,
    Task,
    TeamTrack,
    TeamTrackDates,
)
from tightrope.reflow import apply_updates, index_tasks, reflow
from tightrope.util.days import end_from_duration


def max_team_durations(tracks: Sequence[TeamTrack]) -> Dict[str, int]:
    out: Dict[str, int] = {}
    for tr in tracks:
        if not isinstance(tr.duration, int) or tr.duration < 1:
            raise InvalidScheduleError(f"team track {tr.task_id}/{tr.team_id} duration must be a positive int")
        if tr.duration > out.get(tr.task_id, 0):
            out[tr.task_id] = tr.duration
    return out


def expand_durations_from_team_tracks(
    tasks: Sequence[Task],
    tracks: Sequence[TeamTrack],
) -> Tuple[List[Task], List[DurationExpansion]]:
    """Stretch tasks (start fixed, end moved) to cover their longest team track.

    Returns the new task list (input order) and one expansion per stretched task.
    Run `reflow_project` afterwards to push successors of stretched tasks.
    """
    by_id = index_tasks(tasks)
    longest = max_team_durations(tracks)
    for task_id in longest:
        if task_id not in by_id:
            raise UnknownTaskError(task_id, where="team tracks")

    out: List[Task] = []
    expansions: List[DurationExpansion] = []
    for t in tasks:
        want = longest.get(t.id, 0)
        if want > t.duration:
            expansions.append(DurationExpansion(id=t.id, old_duration=t.duration, new_duration=want))
            t = t.with_dates(t.start_date, end_from_duration(t.start_date, want))
        out.append(t)
    return out, expansions


def derive_team_track_dates(tasks: Sequence[Task], tracks: Sequence[TeamTrack]) -> List[TeamTrackDates]:
    by_id = index_tasks(tasks)
    out: List[TeamTrackDates] = []
    for tr in tracks:
        t = by_id.get(tr.task_id)
        if t is None:
            raise UnknownTaskError(tr.task_id, where="team tracks")
        out.append(
            TeamTrackDates(
                task_id=tr.task_id,
                team_id=tr.team_id,
                start_date=t.start_date,
                end_date=end_from_duration(t.start_date, max(1, int(tr.duration))),
            )
        )
    return out


def unified_reflow(
    tasks: Sequence[Task],
    dependencies: Sequence[Dependency],
    tracks: Sequence[TeamTrack],
    override: Optional[ScheduleOverride] = None,
) -> Tuple[List[CascadedUpdate], List[DurationExpansion], List[TeamTrackDates]]:
    """Stretch tasks to their team tracks, cascade, then date the tracks.

    Every expansion is reflowed as a duration change (successors of a
    stretched task are pushed), then `override` runs on the expanded schedule.

    Returns (updates, expansions, team_dates). `updates` holds every task whose
    final dates differ from the input, in the order they were first touched,
    so a stretched task nothing else moved is still reported. `team_dates`
    are derived from the final dates.
    """
    original = index_tasks(tasks)
    _, expansions = expand_durations_from_team_tracks(tasks, tracks)

    passes = [ScheduleOverride(e.id, duration=e.new_duration) for e in expansions]
    if override is not None:
        passes.append(override)

    current: List[Task] = list(tasks)
    touched: List[str] = []
    for ov in passes:
        step = reflow(current, dependencies, ov)
        for up in step:
            if up.id not in touched:
                touched.append(up.id)
        current = apply_updates(current, step)

    final = index_tasks(current)
    updates: List[CascadedUpdate] = []
    for task_id in touched:
        t, orig = final[task_id], original[task_id]
        if (t.start_date, t.end_date) != (orig.start_date, orig.end_date):
            updates.append(CascadedUpdate(id=task_id, start_date=t.start_date, end_date=t.end_date))

    return updates, expansions, derive_team_track_dates(current, tracks)


__all__ = [
    "derive_team_track_dates",
    "expand_durations_from_team_tracks",
    "max_team_durations",
    "unified_reflow",
]
