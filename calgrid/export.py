# calgrid/export.py
"""JSON-ready dicts for layout records (what the renderer consumes)."""

from __future__ import annotations

from typing import Any, Dict

from .model import Event, MonthLayout, RangeLayout


def event_to_dict(ev: Event) -> Dict[str, Any]:
    return {
        "id": ev.id,
        "title": ev.title,
        "start_ms": ev.start_ms,
        "end_ms": ev.end_ms,
        "is_all_day": ev.is_all_day,
        "is_multi_day": ev.is_multi_day,
        "day_span": ev.day_span,
        "color": ev.color,
    }


def range_layout_to_dict(layout: RangeLayout) -> Dict[str, Any]:
    records = []
    for p in layout.multi_day:
        records.append({"id": p.event.id, "row": p.row, "left": p.left, "width": p.width})
    for s in layout.single_day:
        records.append({"id": s.event.id, "row": s.row, "day_index": s.day_index})
    return {
        "range_start": layout.range_start.isoformat(),
        "range_end": layout.range_end.isoformat(),
        "total_rows": layout.total_rows,
        "records": records,
        "events": [event_to_dict(p.event) for p in layout.multi_day]
        + [event_to_dict(s.event) for s in layout.single_day],
    }


def month_layout_to_dict(layout: MonthLayout) -> Dict[str, Any]:
    multi = [
        {
            "id": p.event.id,
            "row": p.row,
            "segments": [
                {"week": s.week, "start_column": s.start_column, "end_column": s.end_column} for s in p.segments
            ],
        }
        for p in layout.multi_day
    ]
    cells = [
        {
            "date": c.date.isoformat(),
            "week": c.week,
            "column": c.column,
            "total_rows": c.total_rows,
            "events": [{"id": cp.event.id, "row": cp.row} for cp in c.events],
        }
        for c in layout.cells
    ]
    return {
        "grid_start": layout.grid_start.isoformat(),
        "total_rows": layout.total_rows,
        "week_rows": list(layout.week_rows),
        "multi_day": multi,
        "cells": cells,
    }
