# calgrid/rows.py
"""Row assignment for all-day lanes.

Two-phase greedy packing: multi-day events first (start ascending, longer
span first on ties), then single-day events gap-filled into the lowest row
free on their day. Greedy, not globally row-minimal; the ordering is part of
the visual contract and must not change.
"""

from __future__ import annotations

import datetime as dt
from typing import Dict, Iterable, List, Optional, Tuple

from .config import CalendarConfig, normalize_cfg
from .convert import event_dates
from .model import Event, MultiDayPlacement, RangeLayout, SingleDayPlacement
from .occupancy import RowArena
from .util.tz import resolve_tz


def multi_day_sort_key(event: Event) -> Tuple[int, int]:
    return (event.start_ms, -event.day_span)


def single_day_sort_key(event: Event) -> Tuple[int, int]:
    # All-day before timed; timed by start.
    return (0, 0) if event.is_all_day else (1, event.start_ms)


def _day_bounds(event: Event, range_start: dt.date, tz: dt.tzinfo) -> Tuple[int, int]:
    first, last = event_dates(event, tz)
    return (first - range_start).days, (last - range_start).days


def place_multi_day_events(
    arena: RowArena,
    events: Iterable[Event],
    range_start: dt.date,
    tz: dt.tzinfo,
) -> List[MultiDayPlacement]:
    """Phase one: first-fit multi-day events into `arena` (days clamped to the grid)."""
    visible: List[Tuple[Event, int, int]] = []
    for ev in events:
        if not ev.is_multi_day:
            continue
        first, last = _day_bounds(ev, range_start, tz)
        if last < 0 or first >= arena.n_days:
            continue
        visible.append((ev, max(0, first), min(arena.n_days - 1, last)))

    # sort() is stable: equal (start, span) keep input order.
    visible.sort(key=lambda item: multi_day_sort_key(item[0]))

    out: List[MultiDayPlacement] = []
    for ev, first, last in visible:
        mask = arena.span_mask(first, last)
        row = arena.first_fit(mask)
        arena.place_multi_day(row, mask, ev)
        out.append(MultiDayPlacement(event=ev, row=row, left=first, width=last - first + 1))
    return out


def group_single_day_events(
    events: Iterable[Event],
    range_start: dt.date,
    n_days: int,
    tz: dt.tzinfo,
) -> Dict[int, List[Event]]:
    """Single-day events keyed by day index, each day in placement order."""
    by_day: Dict[int, List[Event]] = {}
    for ev in events:
        if ev.is_multi_day:
            continue
        day, _ = _day_bounds(ev, range_start, tz)
        if 0 <= day < n_days:
            by_day.setdefault(day, []).append(ev)
    for evs in by_day.values():
        evs.sort(key=single_day_sort_key)
    return dict(sorted(by_day.items()))


def place_single_day_events(
    arena: RowArena,
    events: Iterable[Event],
    range_start: dt.date,
    tz: dt.tzinfo,
) -> List[SingleDayPlacement]:
    """Phase two: gap-fill single-day events into the lowest row free on their day."""
    out: List[SingleDayPlacement] = []
    for day, evs in group_single_day_events(events, range_start, arena.n_days, tz).items():
        for ev in evs:
            row = arena.first_fit(1 << day)
            arena.place_single_day(row, day, ev)
            out.append(SingleDayPlacement(event=ev, row=row, day_index=day))
    return out


def assign_rows(
    events: Iterable[Event],
    range_start: dt.date,
    range_end: dt.date,
    *,
    tz: dt.tzinfo,
) -> RangeLayout:
    """Pack events into rows for the inclusive day range [range_start, range_end].

    No two events sharing a day index share a row. Events with no day inside
    the range are left out. range_end >= range_start is a caller precondition.
    """
    evs = list(events)
    n_days = (range_end - range_start).days + 1
    arena = RowArena(n_days)

    multi = place_multi_day_events(arena, evs, range_start, tz)
    single = place_single_day_events(arena, evs, range_start, tz)

    return RangeLayout(
        range_start=range_start,
        range_end=range_end,
        multi_day=tuple(multi),
        single_day=tuple(single),
        total_rows=len(arena),
        occupation=arena.snapshot(),
    )


def layout_range(
    events: Iterable[Event],
    range_start: dt.date,
    range_end: dt.date,
    cfg: Optional[CalendarConfig] = None,
    *,
    all_day_only: bool = False,
) -> RangeLayout:
    """Config-driven wrapper around assign_rows (week view all-day lane: all_day_only=True)."""
    c = normalize_cfg(cfg)
    tz = resolve_tz(c["tz"])
    evs = [e for e in events if e.is_all_day or not all_day_only]
    return assign_rows(evs, range_start, range_end, tz=tz)
