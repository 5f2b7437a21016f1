"""calgrid.api

Stable *library* entrypoint for calgrid.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

from calgrid.config import DEFAULT_CFG, DEFAULT_COLOR, CalendarConfig, normalize_cfg
from calgrid.convert import (
    actual_duration_min,
    calendar_event_from_dict,
    display_duration_min,
    event_to_task_fields,
    events_for_day,
    make_event,
    merge_events_and_tasks,
    task_to_event,
    task_update_for_reschedule,
    tasks_to_events,
)
from calgrid.drag import DragSession, GestureError, resolve_indicator_color
from calgrid.drop import (
    check_drop,
    drop_times,
    resize_event,
    resolve_drop,
    shift_by_offset,
    validate_drop,
    validate_move,
)
from calgrid.geometry import (
    GridMetrics,
    cell_event_box,
    offset_to_minutes,
    row_top_px,
    segment_box,
    time_block_box,
    visible_rows,
    week_row_top_px,
)
from calgrid.model import (
    DragCreateRequest,
    DragIndicator,
    DropResult,
    Event,
    MonthLayout,
    RangeLayout,
    RescheduleRequest,
    WeekSegment,
)
from calgrid.month import layout_month, layout_month_grid, month_grid_days, month_grid_start
from calgrid.rows import assign_rows, layout_range

# --- Public API exports -------------------------------------------------------
_PUBLIC_EXPORTS = (
    "CalendarConfig",
    "DEFAULT_CFG",
    "DEFAULT_COLOR",
    "DragCreateRequest",
    "DragIndicator",
    "DragSession",
    "DropResult",
    "Event",
    "GestureError",
    "GridMetrics",
    "MonthLayout",
    "RangeLayout",
    "RescheduleRequest",
    "WeekSegment",
    "actual_duration_min",
    "assign_rows",
    "calendar_event_from_dict",
    "cell_event_box",
    "check_drop",
    "display_duration_min",
    "drop_times",
    "event_to_task_fields",
    "events_for_day",
    "layout_month",
    "layout_month_grid",
    "layout_range",
    "make_event",
    "merge_events_and_tasks",
    "month_grid_days",
    "month_grid_start",
    "normalize_cfg",
    "offset_to_minutes",
    "resize_event",
    "resolve_drop",
    "resolve_indicator_color",
    "row_top_px",
    "segment_box",
    "shift_by_offset",
    "task_to_event",
    "task_update_for_reschedule",
    "tasks_to_events",
    "time_block_box",
    "validate_drop",
    "validate_move",
    "visible_rows",
    "week_row_top_px",
)

__all__ = [n for n in _PUBLIC_EXPORTS if n in globals()]
# --- /Public API exports --------------------------------------------------
