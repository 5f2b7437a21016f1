# calgrid/drag.py
"""Drag-to-create gesture state machine.

States: idle -> dragging -> (committing | cancelled). Only one gesture can be
in flight; the indicator lives until the gesture is cancelled or the
committed request has been handled (`complete()`).
"""

from __future__ import annotations

import datetime as dt
from typing import Iterable, Optional

from .config import DEFAULT_COLOR, CalendarConfig, normalize_cfg
from .geometry import GridMetrics, offset_to_minutes
from .model import DragCreateRequest, DragIndicator, Project
from .util.console import eprint, obs_enabled
from .util.tz import MIN_MS, local_ms, resolve_tz

IDLE = "idle"
DRAGGING = "dragging"
COMMITTING = "committing"
CANCELLED = "cancelled"


class GestureError(RuntimeError):
    """Raised when a gesture call does not match the session state."""


def resolve_indicator_color(
    projects: Iterable[Project],
    last_used_project_id: Optional[str],
    default: str = DEFAULT_COLOR,
) -> str:
    """Colour of the last used project, or `default` when unknown."""
    if not last_used_project_id:
        return default
    for p in projects:
        if isinstance(p, dict) and str(p.get("id")) == str(last_used_project_id):
            color = p.get("color")
            if isinstance(color, str) and color:
                return color
    return default


class DragSession:
    def __init__(self, cfg: Optional[CalendarConfig] = None) -> None:
        c = normalize_cfg(cfg)
        self.tz = resolve_tz(c["tz"])
        self.metrics = GridMetrics.from_cfg(c)
        self.snap_min = int(c["snap_min"])
        self.min_drag_ms = int(c["min_drag_min"]) * MIN_MS

        self.state = IDLE
        self.indicator: Optional[DragIndicator] = None
        self.pending: Optional[DragCreateRequest] = None

        self._anchor_ms = 0
        self._anchor_raw_ms = 0
        self._anchor_y = 0.0
        self._candidate_raw_ms = 0
        self._color = DEFAULT_COLOR

    def _snapped_ms(self, day: dt.date, y_px: float) -> int:
        return local_ms(day, offset_to_minutes(y_px, self.metrics, self.snap_min), self.tz)

    def _raw_ms(self, day: dt.date, y_px: float) -> int:
        return local_ms(day, 0, self.tz) + int(y_px / self.metrics.px_per_min * MIN_MS)

    def begin(self, day: dt.date, y_px: float, *, color: str = DEFAULT_COLOR) -> DragIndicator:
        if self.state == DRAGGING:
            raise GestureError("a drag gesture is already in progress")
        self._anchor_ms = self._snapped_ms(day, y_px)
        self._anchor_raw_ms = self._raw_ms(day, y_px)
        self._candidate_raw_ms = self._anchor_raw_ms
        self._anchor_y = float(y_px)
        self._color = color
        self.pending = None
        self.state = DRAGGING
        self.indicator = DragIndicator(
            start_ms=self._anchor_ms,
            end_ms=self._anchor_ms,
            day=day,
            top_px=float(y_px),
            height_px=1.0,
            color=color,
        )
        return self.indicator

    def move(self, day: dt.date, y_px: float) -> DragIndicator:
        if self.state != DRAGGING:
            raise GestureError(f"move() while {self.state}")
        candidate = self._snapped_ms(day, y_px)
        self._candidate_raw_ms = self._raw_ms(day, y_px)
        min_height = self.metrics.min_block_min * self.metrics.px_per_min
        self.indicator = DragIndicator(
            start_ms=min(self._anchor_ms, candidate),
            end_ms=max(self._anchor_ms, candidate),
            day=day,
            top_px=min(self._anchor_y, float(y_px)),
            height_px=max(abs(float(y_px) - self._anchor_y), min_height),
            color=self._color,
        )
        return self.indicator

    def end(self) -> Optional[DragCreateRequest]:
        """Finish the gesture; a span shorter than min_drag_min is a click and cancels."""
        if self.state != DRAGGING or self.indicator is None:
            raise GestureError(f"end() while {self.state}")
        if abs(self._candidate_raw_ms - self._anchor_raw_ms) < self.min_drag_ms:
            if obs_enabled():
                eprint("[calgrid.drag] INFO: gesture below minimum duration; cancelled")
            self.cancel()
            return None
        ind = self.indicator
        self.state = COMMITTING
        self.pending = DragCreateRequest(start_ms=ind.start_ms, end_ms=ind.end_ms, color=ind.color)
        return self.pending

    def complete(self) -> None:
        """Called once the committed request has been handled externally."""
        if self.state != COMMITTING:
            raise GestureError(f"complete() while {self.state}")
        self.indicator = None
        self.pending = None
        self.state = IDLE

    def cancel(self) -> None:
        self.indicator = None
        self.pending = None
        self.state = CANCELLED
