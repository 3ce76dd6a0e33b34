"""JSON payload I/O (tasks, dependencies, optional override)."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from tightrope.errors import InvalidScheduleError
from tightrope.model import CascadedUpdate, Dependency, ScheduleOverride, Task
from tightrope.util.days import coerce_day, span_days

JsonDict = Dict[str, Any]


@dataclass(frozen=True)
class SchedulePayload:
    tasks: Tuple[Task, ...]
    dependencies: Tuple[Dependency, ...]
    override: Optional[ScheduleOverride] = None


def _pick(raw: JsonDict, snake: str, camel: str) -> Any:
    v = raw.get(snake)
    if v is None:
        v = raw.get(camel)
    return v


def _as_int(v: Any) -> Optional[int]:
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, int):
        return v
    return None


def _as_id(v: Any, what: str) -> str:
    if isinstance(v, (str, int)) and not isinstance(v, bool) and str(v).strip():
        return str(v).strip()
    raise InvalidScheduleError(f"{what} must be a non-empty string")


def task_from_dict(raw: Any, *, label: str = "task") -> Task:
    """Accepts start_date + (end_date and/or duration); camelCase keys too."""
    if not isinstance(raw, dict):
        raise InvalidScheduleError(f"{label} must be an object")
    tid = _as_id(raw.get("id"), f"{label}.id")

    start_raw = _pick(raw, "start_date", "startDate")
    if start_raw is None:
        raise InvalidScheduleError(f"{label} ({tid}) missing start_date")
    start = coerce_day(start_raw, field=f"{label} ({tid}) start_date")

    sort_raw = _pick(raw, "sort_order", "sortOrder")
    sort_order = _as_int(sort_raw)
    if sort_raw is not None and sort_order is None:
        raise InvalidScheduleError(f"{label} ({tid}) sort_order must be int")

    dur_raw = raw.get("duration")
    duration = _as_int(dur_raw)
    if dur_raw is not None and (duration is None or duration < 1):
        raise InvalidScheduleError(f"{label} ({tid}) duration must be a positive int")

    end_raw = _pick(raw, "end_date", "endDate")
    if end_raw is None:
        if duration is None:
            raise InvalidScheduleError(f"{label} ({tid}) needs end_date or duration")
        return Task.from_duration(tid, start, duration, sort_order=sort_order)

    end = coerce_day(end_raw, field=f"{label} ({tid}) end_date")
    if duration is not None and end >= start and span_days(start, end) != duration:
        raise InvalidScheduleError(
            f"{label} ({tid}) duration {duration} != end_date - start_date + 1 ({span_days(start, end)})"
        )
    return Task(id=tid, start_date=start, end_date=end, sort_order=sort_order)


def dependency_from_dict(raw: Any, *, label: str = "dependency") -> Dependency:
    if isinstance(raw, (list, tuple)) and len(raw) == 2:
        return Dependency(_as_id(raw[0], f"{label}[0]"), _as_id(raw[1], f"{label}[1]"))
    if not isinstance(raw, dict):
        raise InvalidScheduleError(f"{label} must be an object or [predecessor, successor] pair")
    return Dependency(
        predecessor_id=_as_id(_pick(raw, "predecessor_id", "predecessorId"), f"{label}.predecessor_id"),
        successor_id=_as_id(_pick(raw, "successor_id", "successorId"), f"{label}.successor_id"),
    )


def override_from_dict(raw: Any, *, label: str = "override") -> ScheduleOverride:
    if not isinstance(raw, dict):
        raise InvalidScheduleError(f"{label} must be an object")
    tid = _as_id(_pick(raw, "task_id", "taskId") or raw.get("id"), f"{label}.task_id")

    start_raw = _pick(raw, "start_date", "startDate")
    end_raw = _pick(raw, "end_date", "endDate")
    dur_raw = raw.get("duration")
    duration = _as_int(dur_raw)
    if dur_raw is not None and duration is None:
        raise InvalidScheduleError(f"{label} ({tid}) duration must be int")
    return ScheduleOverride(
        task_id=tid,
        start_date=coerce_day(start_raw, field=f"{label} start_date") if start_raw is not None else None,
        end_date=coerce_day(end_raw, field=f"{label} end_date") if end_raw is not None else None,
        duration=duration,
    )


def parse_payload(obj: Any) -> SchedulePayload:
    if not isinstance(obj, dict):
        raise InvalidScheduleError(f"payload must be a JSON object; got {type(obj).__name__}")
    tasks_raw = obj.get("tasks")
    deps_raw = obj.get("dependencies", [])
    if not isinstance(tasks_raw, list):
        raise InvalidScheduleError("payload.tasks must be a list")
    if not isinstance(deps_raw, list):
        raise InvalidScheduleError("payload.dependencies must be a list")

    tasks = tuple(task_from_dict(t, label=f"tasks[{i}]") for i, t in enumerate(tasks_raw))
    deps = tuple(dependency_from_dict(d, label=f"dependencies[{i}]") for i, d in enumerate(deps_raw))
    ov_raw = obj.get("override")
    override = override_from_dict(ov_raw) if ov_raw is not None else None
    return SchedulePayload(tasks=tasks, dependencies=deps, override=override)


def load_payload(path: Path) -> SchedulePayload:
    obj = json.loads(Path(path).read_text(encoding="utf-8", errors="replace"))
    return parse_payload(obj)


def task_to_dict(t: Task) -> JsonDict:
    out: JsonDict = {
        "id": t.id,
        "start_date": t.start_date.isoformat(),
        "end_date": t.end_date.isoformat(),
        "duration": t.duration,
    }
    if t.sort_order is not None:
        out["sort_order"] = t.sort_order
    return out


def updates_to_json(updates: Sequence[CascadedUpdate]) -> List[JsonDict]:
    return [u.as_dict() for u in updates]


def dump_json(obj: Any, *, indent: Optional[int] = 2) -> str:
    return json.dumps(obj, indent=indent, sort_keys=True) + "\n"


__all__ = [
    "SchedulePayload",
    "dependency_from_dict",
    "dump_json",
    "load_payload",
    "override_from_dict",
    "parse_payload",
    "task_from_dict",
    "task_to_dict",
    "updates_to_json",
]
