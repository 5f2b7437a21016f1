from __future__ import annotations

import datetime as dt
import re
from typing import Tuple

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_hhmm(s: str) -> Tuple[int, int]:
    m = _HHMM_RE.match(s.strip())
    if not m:
        raise ValueError(f"Invalid HH:MM: {s!r}")
    hh = int(m.group(1))
    mm = int(m.group(2))
    if not (0 <= hh <= 23 and 0 <= mm <= 59):
        raise ValueError(f"Invalid HH:MM: {s!r}")
    return hh, mm


def parse_hhmm_minutes(s: str) -> int:
    hh, mm = parse_hhmm(s)
    return hh * 60 + mm


def format_hhmm(minutes: int) -> str:
    hh, mm = divmod(int(minutes) % 1440, 60)
    return f"{hh:02d}:{mm:02d}"


def parse_date_yyyy_mm_dd(s: str) -> dt.date:
    return dt.datetime.strptime(s.strip(), "%Y-%m-%d").date()


def parse_month_yyyy_mm(s: str) -> Tuple[int, int]:
    d = dt.datetime.strptime(s.strip(), "%Y-%m")
    return d.year, d.month
