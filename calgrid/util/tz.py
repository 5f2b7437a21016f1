# calgrid/util/tz.py
from __future__ import annotations

import datetime as dt
import re
from typing import Optional

try:
    from zoneinfo import ZoneInfo  # py3.9+
except Exception:  # pragma: no cover
    ZoneInfo = None  # type: ignore

_OFFSET_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")

DAY_MS = 24 * 60 * 60 * 1000
MIN_MS = 60_000


def normalize_tz_name(name: Optional[str]) -> str:
    """Normalize a timezone identifier.

    Supported forms:
      - None/"" -> "local"
      - "local" / "system" -> "local" (resolve to the machine's local timezone)
      - "UTC" / "Z" / "GMT" -> "UTC"
      - IANA names, e.g. "Europe/Bucharest"
      - Fixed offsets: "+02:00", "+0200", "-05:00"
    """
    if name is None:
        return "local"
    s = str(name).strip()
    if not s:
        return "local"

    low = s.lower()
    if low in {"local", "system", "native"}:
        return "local"
    if low in {"utc", "z", "gmt", "utc0", "utc+0"}:
        return "UTC"
    return s


def resolve_tz(name: Optional[str]) -> dt.tzinfo:
    """Resolve a timezone name into a tzinfo.

    Raises ValueError for invalid timezone identifiers.
    """
    tz_name = normalize_tz_name(name)

    if tz_name == "UTC":
        return dt.timezone.utc

    if tz_name == "local":
        tz = dt.datetime.now().astimezone().tzinfo
        return tz or dt.timezone.utc

    m = _OFFSET_RE.match(tz_name)
    if m:
        sign_s, hh_s, mm_s = m.groups()
        hh = int(hh_s)
        mm = int(mm_s)
        if hh > 23 or mm > 59:
            raise ValueError(f"Invalid timezone offset: {tz_name!r}")
        sign = 1 if sign_s == "+" else -1
        return dt.timezone(dt.timedelta(minutes=sign * (hh * 60 + mm)))

    if ZoneInfo is not None:
        try:
            return ZoneInfo(tz_name)  # type: ignore[misc]
        except Exception as ex:
            raise ValueError(f"Invalid timezone identifier: {tz_name!r}") from ex

    raise ValueError(f"Invalid timezone identifier: {tz_name!r} (zoneinfo unavailable)")


def today_date(tz: dt.tzinfo) -> dt.date:
    return dt.datetime.now(tz=tz).date()


def local_ms(d: dt.date, minutes: int, tz: dt.tzinfo) -> int:
    """Epoch ms for `minutes` past local midnight of `d` (wall-clock minutes)."""
    hh, mm = divmod(int(minutes), 60)
    extra_days, hh = divmod(hh, 24)
    day = d + dt.timedelta(days=extra_days)
    aware = dt.datetime(day.year, day.month, day.day, hh, mm, tzinfo=tz)
    return int(aware.timestamp() * 1000)


def midnight_epoch_ms(d: dt.date, tz: dt.tzinfo) -> int:
    return local_ms(d, 0, tz)


def end_of_day_ms(d: dt.date, tz: dt.tzinfo) -> int:
    """Last millisecond of local day `d` (23:59:59.999)."""
    return midnight_epoch_ms(d + dt.timedelta(days=1), tz) - 1


def date_from_ms(ms: int, tz: dt.tzinfo) -> dt.date:
    return dt.datetime.fromtimestamp(int(ms) / 1000.0, tz=tz).date()


def minutes_of_day(ms: int, tz: dt.tzinfo) -> int:
    t = dt.datetime.fromtimestamp(int(ms) / 1000.0, tz=tz)
    return t.hour * 60 + t.minute
