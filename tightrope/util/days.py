# tightrope/util/days.py
from __future__ import annotations

import datetime as dt
import re
from typing import Any

from tightrope.errors import InvalidScheduleError

_DAY_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")


def parse_date_yyyy_mm_dd(s: str) -> dt.date:
    """Parse `YYYY-MM-DD`; a trailing time part (ISO timestamp) is ignored.

    The calendar part is taken as written, never shifted through a timezone,
    so "2024-01-03T23:30:00-05:00" is still the 3rd.
    """
    m = _DAY_RE.match(s.strip())
    if not m:
        raise InvalidScheduleError(f"Invalid date (want YYYY-MM-DD): {s!r}")
    try:
        return dt.date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError as ex:
        raise InvalidScheduleError(f"Invalid date: {s!r} ({ex})") from ex


def coerce_day(value: Any, *, field: str = "date") -> dt.date:
    """Normalize a date-like value to a calendar day.

    Accepts:
      - dt.date -> unchanged
      - dt.datetime -> its calendar part (time and tzinfo are dropped)
      - "YYYY-MM-DD" strings, optionally followed by a time part
    """
    # datetime is a date subclass; check it first.
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        return parse_date_yyyy_mm_dd(value)
    raise InvalidScheduleError(f"{field} must be a date or YYYY-MM-DD string; got {type(value).__name__}")


def add_days(d: dt.date, n: int) -> dt.date:
    return d + dt.timedelta(days=int(n))


def span_days(start: dt.date, end: dt.date) -> int:
    """Inclusive day count of [start, end]; 1 for a single-day bar."""
    return (end - start).days + 1


def end_from_duration(start: dt.date, duration: int) -> dt.date:
    return add_days(start, int(duration) - 1)


def iso_day(d: dt.date) -> str:
    return d.isoformat()
