#!/usr/bin/env python3
from __future__ import annotations

import argparse
from pathlib import Path
from typing import List

from tightrope.io import dump_json, load_payload, task_to_dict
from tightrope.topo import topo_sort

from ._cli import die, emit, json_indent, setup_logging

PROG = "tightrope-order"


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog=PROG,
        description="Print payload tasks in dependency (top-to-bottom display) order.",
    )
    ap.add_argument("--in", dest="in_json", required=True, help="Input payload JSON path")
    ap.add_argument("--out", default=None, help="Write ordered tasks JSON to this path")
    ap.add_argument("--ids", action="store_true", help="Print one id per line instead of JSON")
    ap.add_argument("--verbose", action="store_true", help="Debug logging to stderr")
    ns = ap.parse_args(argv)

    setup_logging(ns.verbose)

    in_path = Path(ns.in_json)
    if not in_path.exists():
        return die(PROG, f"Missing input JSON: {in_path}")

    try:
        payload = load_payload(in_path)
    except Exception as e:
        return die(PROG, f"Failed to load JSON: {in_path} ({e})")

    ordered = topo_sort(payload.tasks, payload.dependencies)
    if ns.ids:
        emit("".join(f"{t.id}\n" for t in ordered), ns.out)
    else:
        emit(dump_json([task_to_dict(t) for t in ordered], indent=json_indent()), ns.out)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
