"""tightrope.api

Stable *library* entrypoint for TIGHTROPE.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

from tightrope.drag import (
    is_chained,
    move_override,
    nudge_override,
    override_for_drag,
    resize_end_override,
    resize_start_override,
)
from tightrope.errors import CyclicDependencyError, InvalidScheduleError, ReflowError, UnknownTaskError
from tightrope.graph import DependencyGraph, build_graph, find_cycle, would_create_cycle
from tightrope.io import load_payload, parse_payload
from tightrope.model import (
    CascadedUpdate,
    Dependency,
    DurationExpansion,
    ScheduleOverride,
    Task,
    TeamTrack,
    TeamTrackDates,
)
from tightrope.reflow import apply_updates, reflow, reflow_project
from tightrope.teams import derive_team_track_dates, expand_durations_from_team_tracks, unified_reflow
from tightrope.topo import topo_sort
from tightrope.validate import check_precedence, validate_dependencies, validate_tasks

__all__ = [
    "CascadedUpdate",
    "CyclicDependencyError",
    "Dependency",
    "DependencyGraph",
    "DurationExpansion",
    "InvalidScheduleError",
    "ReflowError",
    "ScheduleOverride",
    "Task",
    "TeamTrack",
    "TeamTrackDates",
    "UnknownTaskError",
    "apply_updates",
    "build_graph",
    "check_precedence",
    "derive_team_track_dates",
    "expand_durations_from_team_tracks",
    "find_cycle",
    "is_chained",
    "load_payload",
    "move_override",
    "nudge_override",
    "override_for_drag",
    "parse_payload",
    "reflow",
    "reflow_project",
    "resize_end_override",
    "resize_start_override",
    "topo_sort",
    "unified_reflow",
    "validate_dependencies",
    "validate_tasks",
    "would_create_cycle",
]
