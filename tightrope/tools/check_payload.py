#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List

from tightrope.io import load_payload
from tightrope.validate import check_precedence, validate_dependencies, validate_tasks

from ._cli import die, setup_logging

PROG = "tightrope-check"


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog=PROG,
        description="Validate a payload JSON: ids, dependencies, cycles and precedence.",
    )
    ap.add_argument("--in", dest="in_json", required=True, help="Input payload JSON path")
    ap.add_argument("--no-precedence", action="store_true", help="Skip the successor-after-predecessor check")
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

    errs = validate_tasks(payload.tasks) + validate_dependencies(payload.tasks, payload.dependencies)
    if not ns.no_precedence:
        errs += check_precedence(payload.tasks, payload.dependencies)
    if errs:
        for e in errs[:50]:
            print(f"[{PROG}] ERROR: {e}", file=sys.stderr)
        return 3

    print(f"[{PROG}] OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
