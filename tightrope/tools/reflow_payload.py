#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List

from tightrope.drag import changes_start, is_chained, nudge_override
from tightrope.errors import ReflowError
from tightrope.graph import build_graph
from tightrope.io import dump_json, load_payload, updates_to_json
from tightrope.model import ScheduleOverride
from tightrope.reflow import reflow, reflow_project
from tightrope.util.days import coerce_day

from ._cli import die, emit, json_indent, setup_logging

PROG = "tightrope-reflow"

logger = logging.getLogger(__name__)


def _override_from_args(ns: argparse.Namespace, payload) -> ScheduleOverride | None:
    if not ns.task:
        return payload.override
    if ns.nudge is not None:
        task = next((t for t in payload.tasks if t.id == ns.task), None)
        if task is None:
            raise ReflowError(f"unknown task id in --task: {ns.task!r}")
        return nudge_override(task, int(ns.nudge))
    return ScheduleOverride(
        task_id=ns.task,
        start_date=coerce_day(ns.start, field="--start") if ns.start else None,
        end_date=coerce_day(ns.end, field="--end") if ns.end else None,
        duration=ns.duration,
    )


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog=PROG,
        description="Compute the dependency cascade of one schedule change in a payload JSON.",
    )
    ap.add_argument("--in", dest="in_json", required=True, help="Input payload JSON path")
    ap.add_argument("--out", default=None, help="Write cascade JSON to this path (default: stdout)")
    ap.add_argument("--task", default=None, help="Task id to override (default: payload 'override')")
    ap.add_argument("--start", default=None, help="New start date YYYY-MM-DD (move / resize-start)")
    ap.add_argument("--end", default=None, help="New end date YYYY-MM-DD (resize-end)")
    ap.add_argument("--duration", type=int, default=None, help="New duration in days")
    ap.add_argument("--nudge", type=int, default=None, help="Move the task by N days")
    ap.add_argument("--project", action="store_true", help="Re-tighten the whole payload instead of one override")
    ap.add_argument(
        "--allow-chained",
        action="store_true",
        help="Allow start changes on tasks that have predecessors (predecessor-derived start still wins)",
    )
    ap.add_argument("--verbose", action="store_true", help="Debug logging to stderr")
    ns = ap.parse_args(argv)

    setup_logging(ns.verbose)

    change_flags = (("--start", ns.start), ("--end", ns.end), ("--duration", ns.duration), ("--nudge", ns.nudge))
    given = [flag for flag, v in change_flags if v is not None]
    if given and not ns.task:
        return die(PROG, f"{', '.join(given)} require --task")
    if given and ns.project:
        return die(PROG, f"--project does not take {', '.join(given)}")

    in_path = Path(ns.in_json)
    if not in_path.exists():
        return die(PROG, f"Missing input JSON: {in_path}")

    try:
        payload = load_payload(in_path)
    except Exception as e:
        return die(PROG, f"Failed to load JSON: {in_path} ({e})")

    try:
        if ns.project:
            updates = reflow_project(payload.tasks, payload.dependencies)
        else:
            override = _override_from_args(ns, payload)
            if override is None:
                return die(PROG, "no override: pass --task ... or include 'override' in the payload, or use --project")
            target = next((t for t in payload.tasks if t.id == override.task_id), None)
            if target is not None and not ns.allow_chained and changes_start(override, target):
                graph = build_graph([t.id for t in payload.tasks], payload.dependencies)
                if is_chained(target.id, graph):
                    return die(PROG, f"task {target.id} has predecessors; its start follows the chain")
            updates = reflow(payload.tasks, payload.dependencies, override)
    except ReflowError as e:
        return die(PROG, str(e), rc=3)

    logger.debug("%d update(s)", len(updates))
    emit(dump_json(updates_to_json(updates), indent=json_indent()), ns.out)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
