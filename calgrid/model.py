# calgrid/model.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Optional, Tuple

from .config import DEFAULT_COLOR, CalendarConfig

# Source-facing types (lightweight)
Task = Dict[str, Any]
Project = Dict[str, Any]


@dataclass(frozen=True)
class Event:
    """Uniform schedulable item (UTC epoch milliseconds).

    is_multi_day/display_*_ms/day_span are derived; build instances through
    `calgrid.convert.make_event` so they stay consistent with start/end.
    """

    id: str
    start_ms: int
    end_ms: int
    is_all_day: bool = False
    is_multi_day: bool = False
    display_start_ms: Optional[int] = None
    display_end_ms: Optional[int] = None
    day_span: int = 1

    title: str = ""
    description: str = ""
    color: str = DEFAULT_COLOR
    is_task: bool = False
    is_completed: bool = False
    source_ref: Optional[str] = None

    @property
    def duration_ms(self) -> int:
        return self.end_ms - self.start_ms


@dataclass(frozen=True)
class RowOccupation:
    """Snapshot of one row of the occupation arena."""

    occupied_days: FrozenSet[int]
    available_days: FrozenSet[int]
    multi_day_events: Tuple[Event, ...]
    single_day_events: Dict[int, Tuple[Event, ...]]


@dataclass(frozen=True)
class MultiDayPlacement:
    event: Event
    row: int
    left: int   # first day index inside the range
    width: int  # number of visible days


@dataclass(frozen=True)
class SingleDayPlacement:
    event: Event
    row: int
    day_index: int


@dataclass(frozen=True)
class RangeLayout:
    range_start: dt.date
    range_end: dt.date
    multi_day: Tuple[MultiDayPlacement, ...]
    single_day: Tuple[SingleDayPlacement, ...]
    total_rows: int
    occupation: Dict[int, RowOccupation]

    def row_of(self, event_id: str) -> Optional[int]:
        for p in self.multi_day:
            if p.event.id == event_id:
                return p.row
        for s in self.single_day:
            if s.event.id == event_id:
                return s.row
        return None


@dataclass(frozen=True)
class WeekSegment:
    week: int
    start_column: int  # 0-6
    end_column: int    # 0-6, inclusive
    continues_before: bool = False
    continues_after: bool = False

    @property
    def columns(self) -> int:
        return self.end_column - self.start_column + 1


@dataclass(frozen=True)
class MonthMultiDayPlacement:
    event: Event
    row: int
    segments: Tuple[WeekSegment, ...]


@dataclass(frozen=True)
class CellPlacement:
    event: Event
    row: int


@dataclass(frozen=True)
class MonthCell:
    date: dt.date
    day_index: int
    week: int
    column: int
    events: Tuple[CellPlacement, ...]
    multi_day_rows: FrozenSet[int]
    total_rows: int


@dataclass(frozen=True)
class MonthLayout:
    grid_start: dt.date
    multi_day: Tuple[MonthMultiDayPlacement, ...]
    cells: Tuple[MonthCell, ...]
    week_rows: Tuple[int, ...]
    total_rows: int


@dataclass(frozen=True)
class DropResult:
    """Resolved target of a completed drag gesture.

    target_time is (hour, minute) or None to keep the event's own time of day.
    """

    target_date: dt.date
    target_time: Optional[Tuple[int, int]] = None
    is_all_day: bool = False


@dataclass(frozen=True)
class RescheduleRequest:
    """Accepted mutation handed to the persistence collaborator."""

    event_id: str
    start_ms: int
    end_ms: int
    is_all_day: bool


@dataclass(frozen=True)
class DragIndicator:
    """Ephemeral in-gesture state; never an Event."""

    start_ms: int
    end_ms: int
    day: dt.date
    top_px: float
    height_px: float
    color: str = DEFAULT_COLOR


@dataclass(frozen=True)
class DragCreateRequest:
    start_ms: int
    end_ms: int
    color: str = DEFAULT_COLOR


__all__ = [
    "Task",
    "Project",
    "CalendarConfig",
    "Event",
    "RowOccupation",
    "MultiDayPlacement",
    "SingleDayPlacement",
    "RangeLayout",
    "WeekSegment",
    "MonthMultiDayPlacement",
    "CellPlacement",
    "MonthCell",
    "MonthLayout",
    "DropResult",
    "RescheduleRequest",
    "DragIndicator",
    "DragCreateRequest",
]
