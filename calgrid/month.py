# calgrid/month.py
from __future__ import annotations

import datetime as dt
from typing import Iterable, List, Optional

from .config import CalendarConfig, normalize_cfg
from .model import CellPlacement, Event, MonthCell, MonthLayout, MonthMultiDayPlacement, WeekSegment
from .occupancy import RowArena
from .rows import group_single_day_events, place_multi_day_events
from .util.tz import resolve_tz

GRID_WEEKS = 6
GRID_DAYS = GRID_WEEKS * 7


def month_grid_start(year: int, month: int, week_start: int = 0) -> dt.date:
    """First cell of the 6x7 grid: the week_start day on/before the 1st (0=Monday)."""
    first = dt.date(year, month, 1)
    return first - dt.timedelta(days=(first.weekday() - week_start) % 7)


def month_grid_days(year: int, month: int, week_start: int = 0) -> List[dt.date]:
    start = month_grid_start(year, month, week_start)
    return [start + dt.timedelta(days=i) for i in range(GRID_DAYS)]


def week_segments(first: int, last: int) -> tuple[WeekSegment, ...]:
    """Split grid day indices first..last into per-week column ranges."""
    segs: List[WeekSegment] = []
    for week in range(first // 7, last // 7 + 1):
        lo = max(first, week * 7)
        hi = min(last, week * 7 + 6)
        segs.append(
            WeekSegment(
                week=week,
                start_column=lo - week * 7,
                end_column=hi - week * 7,
                continues_before=lo > first,
                continues_after=hi < last,
            )
        )
    return tuple(segs)


def _first_free_row(taken: int) -> int:
    row = 0
    while taken >> row & 1:
        row += 1
    return row


def layout_month_grid(events: Iterable[Event], grid_start: dt.date, *, tz: dt.tzinfo) -> MonthLayout:
    """Lay out a 42-day grid starting at grid_start.

    Multi-day events are packed once across the whole grid so each keeps one
    row in every week it touches; single-day events fill each cell's lowest
    rows not taken by a multi-day event on that day.
    """
    evs = list(events)
    arena = RowArena(GRID_DAYS)
    placed = place_multi_day_events(arena, evs, grid_start, tz)

    multi = tuple(
        MonthMultiDayPlacement(event=p.event, row=p.row, segments=week_segments(p.left, p.left + p.width - 1))
        for p in placed
    )

    singles = group_single_day_events(evs, grid_start, GRID_DAYS, tz)
    cells: List[MonthCell] = []
    week_rows = [0] * GRID_WEEKS
    for day in range(GRID_DAYS):
        seeded = arena.rows_occupied_on(day)
        taken = 0
        for r in seeded:
            taken |= 1 << r
        cell_events: List[CellPlacement] = []
        for ev in singles.get(day, ()):
            row = _first_free_row(taken)
            taken |= 1 << row
            cell_events.append(CellPlacement(event=ev, row=row))
        total = taken.bit_length()
        week, column = divmod(day, 7)
        week_rows[week] = max(week_rows[week], total)
        cells.append(
            MonthCell(
                date=grid_start + dt.timedelta(days=day),
                day_index=day,
                week=week,
                column=column,
                events=tuple(cell_events),
                multi_day_rows=frozenset(seeded),
                total_rows=total,
            )
        )

    return MonthLayout(
        grid_start=grid_start,
        multi_day=multi,
        cells=tuple(cells),
        week_rows=tuple(week_rows),
        total_rows=max(week_rows),
    )


def layout_month(
    events: Iterable[Event],
    year: int,
    month: int,
    cfg: Optional[CalendarConfig] = None,
) -> MonthLayout:
    c = normalize_cfg(cfg)
    tz = resolve_tz(c["tz"])
    return layout_month_grid(events, month_grid_start(year, month, int(c["week_start"])), tz=tz)
