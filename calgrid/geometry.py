# calgrid/geometry.py
"""Pixel contract shared by the lane layout and the drag engine.

Row r in a month/all-day lane sits at  base_offset + r * (row_height + row_spacing).
Both multi-day overlays and single-day cell events use the same formula, so
rows produced by either pass line up.
"""

from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass
from typing import Optional

from .config import CalendarConfig, normalize_cfg
from .convert import display_duration_min
from .model import Event, WeekSegment
from .util.tz import date_from_ms, minutes_of_day


@dataclass(frozen=True)
class GridMetrics:
    base_offset_px: int = 30
    row_height_px: int = 20
    row_spacing_px: int = 2
    cell_padding_px: int = 4
    week_height_px: int = 140
    hour_height_px: int = 60
    min_block_min: int = 30

    @property
    def row_pitch_px(self) -> int:
        return self.row_height_px + self.row_spacing_px

    @property
    def px_per_min(self) -> float:
        return self.hour_height_px / 60.0

    @classmethod
    def from_cfg(cls, cfg: Optional[CalendarConfig] = None) -> "GridMetrics":
        c = normalize_cfg(cfg)
        return cls(
            base_offset_px=int(c["base_offset_px"]),
            row_height_px=int(c["row_height_px"]),
            row_spacing_px=int(c["row_spacing_px"]),
            cell_padding_px=int(c["cell_padding_px"]),
            week_height_px=int(c["week_height_px"]),
            hour_height_px=int(c["hour_height_px"]),
            min_block_min=int(c["min_block_min"]),
        )


DEFAULT_METRICS = GridMetrics()


@dataclass(frozen=True)
class Box:
    left: float
    top: float
    width: float
    height: float


def row_top_px(row: int, metrics: GridMetrics = DEFAULT_METRICS) -> int:
    return metrics.base_offset_px + row * metrics.row_pitch_px


def week_row_top_px(week: int, row: int, metrics: GridMetrics = DEFAULT_METRICS) -> int:
    """Absolute top of `row` inside `week` of the month grid (fixed week height)."""
    return week * metrics.week_height_px + row_top_px(row, metrics)


def segment_box(segment: WeekSegment, row: int, cell_width_px: float, metrics: GridMetrics = DEFAULT_METRICS) -> Box:
    pad = metrics.cell_padding_px
    return Box(
        left=segment.start_column * cell_width_px + pad,
        top=week_row_top_px(segment.week, row, metrics),
        width=segment.columns * cell_width_px - 2 * pad,
        height=metrics.row_height_px,
    )


def cell_event_box(
    week: int,
    column: int,
    row: int,
    cell_width_px: float,
    metrics: GridMetrics = DEFAULT_METRICS,
) -> Box:
    """Single-day event inside a month cell; same row formula as segment_box."""
    return segment_box(WeekSegment(week=week, start_column=column, end_column=column), row, cell_width_px, metrics)


def visible_rows(available_height_px: float, metrics: GridMetrics = DEFAULT_METRICS) -> int:
    return max(0, int(available_height_px // metrics.row_pitch_px))


def time_block_box(event: Event, day: dt.date, *, tz: dt.tzinfo, metrics: GridMetrics = DEFAULT_METRICS) -> Box:
    """Vertical placement of a timed event in a day column (left/width are fractions of the column)."""
    start_min = minutes_of_day(event.start_ms, tz) if date_from_ms(event.start_ms, tz) == day else 0
    minutes = display_duration_min(event, metrics.min_block_min)
    return Box(left=0.0, top=start_min * metrics.px_per_min, width=1.0, height=minutes * metrics.px_per_min)


def offset_to_minutes(y_px: float, metrics: GridMetrics = DEFAULT_METRICS, snap_min: int = 15) -> int:
    """Minutes past midnight for a vertical offset in the time grid, snapped to the nearest `snap_min`."""
    minutes = math.floor(y_px / metrics.px_per_min)
    if snap_min > 1:
        minutes = math.floor(minutes / snap_min + 0.5) * snap_min
    return max(0, min(24 * 60, minutes))


def minutes_to_offset(minutes: float, metrics: GridMetrics = DEFAULT_METRICS) -> float:
    return minutes * metrics.px_per_min
