from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional


def die(prog: str, msg: str, rc: int = 2) -> int:
    print(f"[{prog}] ERROR: {msg}", file=sys.stderr)
    return rc


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def json_indent() -> Optional[int]:
    """Indent for JSON output: env TIGHTROPE_INDENT (default 2; 0 or "none" means compact)."""
    raw = os.getenv("TIGHTROPE_INDENT", "2").strip().lower()
    if raw in ("", "none", "0"):
        return None
    try:
        return max(0, int(raw))
    except ValueError:
        return 2


def emit(text: str, out: Optional[str]) -> None:
    if out:
        out_path = Path(out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text, encoding="utf-8")
        print(str(out_path))
    else:
        sys.stdout.write(text)
