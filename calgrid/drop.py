# calgrid/drop.py
from __future__ import annotations

import datetime as dt
import math
from dataclasses import replace
from typing import Iterable, Optional, Tuple

from .config import CalendarConfig, normalize_cfg
from .geometry import DEFAULT_METRICS, GridMetrics
from .model import DropResult, Event, RescheduleRequest
from .util.console import eprint, obs_enabled
from .util.tz import DAY_MS, MIN_MS, date_from_ms, end_of_day_ms, local_ms, midnight_epoch_ms, minutes_of_day


def _info(msg: str) -> None:
    if obs_enabled():
        eprint(f"[calgrid.drop] INFO: {msg}")


def is_date_range(event: Event, *, tz: dt.tzinfo) -> bool:
    """Multi-day event spanning whole days (not an overnight timed block)."""
    if not event.is_multi_day:
        return False
    return event.is_all_day or event.end_ms == end_of_day_ms(date_from_ms(event.end_ms, tz), tz)


def drop_times(
    event: Event,
    drop: DropResult,
    *,
    tz: dt.tzinfo,
    cfg: Optional[CalendarConfig] = None,
) -> Tuple[int, int, bool]:
    """New (start_ms, end_ms, is_all_day) for `event` dropped on `drop`.

    - date-range event: same day span starting on the target day, whatever
      the lane.
    - all-day lane: the whole target day; duration is not kept.
    - timed: target time (or the event's own time of day); all-day -> 1h and
      zero-length -> 30min defaults, otherwise the exact original duration.
      Overnight timed events land here too.
    """
    c = normalize_cfg(cfg)
    target = drop.target_date

    if is_date_range(event, tz=tz):
        last = target + dt.timedelta(days=event.day_span - 1)
        return midnight_epoch_ms(target, tz), end_of_day_ms(last, tz), event.is_all_day

    if drop.is_all_day:
        return midnight_epoch_ms(target, tz), end_of_day_ms(target, tz), True

    if drop.target_time is not None:
        hh, mm = drop.target_time
        start_min = hh * 60 + mm
    else:
        start_min = minutes_of_day(event.start_ms, tz)
    start = local_ms(target, start_min, tz)

    duration = event.duration_ms
    if event.is_all_day and duration <= DAY_MS:
        duration = int(c["all_day_default_min"]) * MIN_MS
    elif duration == 0:
        duration = int(c["zero_duration_default_min"]) * MIN_MS
    return start, start + duration, False


def shift_by_offset(
    event: Event,
    start_y_px: float,
    current_y_px: float,
    metrics: GridMetrics = DEFAULT_METRICS,
    snap_min: int = 15,
) -> Tuple[int, int]:
    """Move `event` by a vertical pointer delta, snapped; duration is kept."""
    moved = (current_y_px - start_y_px) / metrics.hour_height_px * 60
    if snap_min > 1:
        moved = math.floor(moved / snap_min + 0.5) * snap_min
    start = event.start_ms + int(moved * MIN_MS)
    return start, start + event.duration_ms


def is_same_placement(event: Event, drop: DropResult, *, tz: dt.tzinfo) -> bool:
    if date_from_ms(event.start_ms, tz) != drop.target_date:
        return False
    if is_date_range(event, tz=tz):
        return True
    if bool(drop.is_all_day) != event.is_all_day:
        return False
    if drop.target_time is None or event.is_all_day:
        return True
    hh, mm = drop.target_time
    return hh * 60 + mm == minutes_of_day(event.start_ms, tz)


def timed_conflicts(
    event_id: str,
    start_ms: int,
    end_ms: int,
    events: Iterable[Event],
    *,
    tz: dt.tzinfo,
) -> list[Event]:
    """Timed events on the same start day overlapping [start_ms, end_ms)."""
    day = date_from_ms(start_ms, tz)
    out = []
    for other in events:
        if other.id == event_id or other.is_all_day:
            continue
        if date_from_ms(other.start_ms, tz) != day:
            continue
        if start_ms < other.end_ms and end_ms > other.start_ms:
            out.append(other)
    return out


def check_drop(
    event: Event,
    drop: DropResult,
    events: Iterable[Event],
    *,
    tz: dt.tzinfo,
    cfg: Optional[CalendarConfig] = None,
) -> Optional[str]:
    """Rejection reason for the drop, or None when it is acceptable."""
    if is_same_placement(event, drop, tz=tz):
        return "same position"
    start, end, all_day = drop_times(event, drop, tz=tz, cfg=cfg)
    if all_day:
        return None
    clashes = timed_conflicts(event.id, start, end, events, tz=tz)
    if clashes:
        return "overlaps " + ",".join(sorted(e.id for e in clashes))
    return None


def validate_drop(
    event: Event,
    drop: DropResult,
    events: Iterable[Event],
    *,
    tz: dt.tzinfo,
    cfg: Optional[CalendarConfig] = None,
) -> bool:
    return check_drop(event, drop, events, tz=tz, cfg=cfg) is None


def validate_move(
    event: Event,
    new_start_ms: int,
    new_end_ms: int,
    events: Iterable[Event],
    *,
    allow_overlap: bool = False,
) -> bool:
    """Interval-level check for pointer moves and resizes (any other event, any day)."""
    if new_end_ms <= new_start_ms:
        return False
    if allow_overlap:
        return True
    for other in events:
        if other.id == event.id:
            continue
        if new_start_ms < other.end_ms and new_end_ms > other.start_ms:
            return False
    return True


def resolve_drop(
    event: Event,
    drop: DropResult,
    events: Iterable[Event],
    *,
    tz: dt.tzinfo,
    cfg: Optional[CalendarConfig] = None,
    preserve_lane: bool = False,
    duplicate: bool = False,
) -> Optional[RescheduleRequest]:
    """Accepted reschedule for a completed drop, or None when rejected.

    preserve_lane keeps the event's all-day status (month view cells).
    duplicate (copy-drag) skips validation: the original stays in place.
    """
    if preserve_lane:
        drop = replace(drop, is_all_day=event.is_all_day)
    if not duplicate:
        reason = check_drop(event, drop, events, tz=tz, cfg=cfg)
        if reason is not None:
            _info(f"drop rejected id={event.id!r}: {reason}")
            return None
    start, end, all_day = drop_times(event, drop, tz=tz, cfg=cfg)
    return RescheduleRequest(event_id=event.id, start_ms=start, end_ms=end, is_all_day=all_day)


def resize_event(
    event: Event,
    edge: str,
    new_ms: int,
    events: Iterable[Event] = (),
    *,
    allow_overlap: bool = True,
) -> Optional[RescheduleRequest]:
    """Move the top (start) or bottom (end) edge of a timed event."""
    if edge == "top":
        start, end = int(new_ms), event.end_ms
    elif edge == "bottom":
        start, end = event.start_ms, int(new_ms)
    else:
        raise ValueError(f"edge must be 'top' or 'bottom', got {edge!r}")
    if not validate_move(event, start, end, events, allow_overlap=allow_overlap):
        _info(f"resize rejected id={event.id!r}")
        return None
    return RescheduleRequest(event_id=event.id, start_ms=start, end_ms=end, is_all_day=event.is_all_day)
