# calgrid/convert.py
from __future__ import annotations

import datetime as dt
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .config import DEFAULT_COLOR
from .model import Event, Project, RescheduleRequest, Task
from .util.console import eprint, obs_enabled
from .util.timeparse import format_hhmm, parse_date_yyyy_mm_dd, parse_hhmm_minutes
from .util.tz import MIN_MS, date_from_ms, end_of_day_ms, local_ms, midnight_epoch_ms, minutes_of_day, today_date


def _warn(msg: str) -> None:
    if obs_enabled():
        eprint(f"[calgrid.convert] WARN: {msg}")


def make_event(
    event_id: str,
    start_ms: int,
    end_ms: int,
    *,
    tz: dt.tzinfo,
    is_all_day: bool = False,
    title: str = "",
    description: str = "",
    color: str = DEFAULT_COLOR,
    is_task: bool = False,
    is_completed: bool = False,
    source_ref: Optional[str] = None,
) -> Event:
    """Build an Event with its derived multi-day fields.

    Multi-day iff the local dates of start and end differ; display bounds are
    then clamped to 00:00:00.000 / 23:59:59.999 and day_span is inclusive.
    """
    start_ms = int(start_ms)
    end_ms = int(end_ms)
    if end_ms < start_ms:
        raise ValueError(f"event {event_id!r}: end_ms < start_ms")

    start_day = date_from_ms(start_ms, tz)
    end_day = date_from_ms(end_ms, tz)
    multi = start_day != end_day

    return Event(
        id=str(event_id),
        start_ms=start_ms,
        end_ms=end_ms,
        is_all_day=bool(is_all_day),
        is_multi_day=multi,
        display_start_ms=midnight_epoch_ms(start_day, tz) if multi else None,
        display_end_ms=end_of_day_ms(end_day, tz) if multi else None,
        day_span=(end_day - start_day).days + 1 if multi else 1,
        title=title,
        description=description,
        color=color,
        is_task=is_task,
        is_completed=is_completed,
        source_ref=source_ref,
    )


def event_dates(event: Event, tz: dt.tzinfo) -> tuple[dt.date, dt.date]:
    """Inclusive (first_day, last_day) the event occupies on the grid."""
    if event.is_multi_day and event.display_start_ms is not None and event.display_end_ms is not None:
        return date_from_ms(event.display_start_ms, tz), date_from_ms(event.display_end_ms, tz)
    d = date_from_ms(event.start_ms, tz)
    return d, d


def task_to_event(task: Task, project: Optional[Project] = None, *, tz: dt.tzinfo) -> Optional[Event]:
    """Convert a task dict into an Event, or None when it carries no schedule.

    Recognised keys: id, title, description, scheduled_date (YYYY-MM-DD),
    scheduled_end_date, include_time, scheduled_start_time / scheduled_end_time
    (HH:MM), completed.
    """
    if not isinstance(task, dict):
        return None
    task_id = str(task.get("id") or "").strip()
    raw_date = task.get("scheduled_date")
    if not task_id or not raw_date:
        return None

    try:
        base = parse_date_yyyy_mm_dd(str(raw_date))
    except ValueError:
        _warn(f"invalid scheduled_date id={task_id!r} value={raw_date!r}")
        return None

    start_raw = task.get("scheduled_start_time")
    end_raw = task.get("scheduled_end_time")
    timed = bool(task.get("include_time")) and bool(start_raw) and bool(end_raw)

    if timed:
        try:
            start_min = parse_hhmm_minutes(str(start_raw))
            end_min = parse_hhmm_minutes(str(end_raw))
        except ValueError:
            _warn(f"invalid scheduled time id={task_id!r} start={start_raw!r} end={end_raw!r}")
            return None
        start_ms = local_ms(base, start_min, tz)
        end_ms = local_ms(base, end_min, tz)
        if end_ms < start_ms:
            # Overnight span.
            end_ms = local_ms(base, end_min + 1440, tz)
    else:
        start_ms = midnight_epoch_ms(base, tz)
        end_ms = end_of_day_ms(base, tz)

    raw_end_date = task.get("scheduled_end_date")
    if raw_end_date and raw_end_date != raw_date:
        try:
            end_date = parse_date_yyyy_mm_dd(str(raw_end_date))
        except ValueError:
            end_date = None
            _warn(f"invalid scheduled_end_date id={task_id!r} value={raw_end_date!r}")
        if end_date is not None and end_date > base:
            end_ms = end_of_day_ms(end_date, tz)
        elif end_date is not None:
            _warn(f"scheduled_end_date before scheduled_date id={task_id!r}; ignoring end date")

    color = DEFAULT_COLOR
    if isinstance(project, dict) and isinstance(project.get("color"), str) and project["color"]:
        color = project["color"]

    return make_event(
        task_id,
        start_ms,
        end_ms,
        tz=tz,
        is_all_day=not timed,
        title=str(task.get("title") or ""),
        description=str(task.get("description") or ""),
        color=color,
        is_task=True,
        is_completed=bool(task.get("completed")),
        source_ref=task_id,
    )


def _coerce_ms(v: Any, tz: dt.tzinfo) -> Optional[int]:
    if isinstance(v, bool):
        return None
    if isinstance(v, int):
        return v
    if isinstance(v, str) and v.strip():
        try:
            d = dt.datetime.fromisoformat(v.strip())
        except ValueError:
            return None
        if d.tzinfo is None:
            d = d.replace(tzinfo=tz)
        return int(d.timestamp() * 1000)
    return None


def calendar_event_from_dict(d: Dict[str, Any], *, tz: dt.tzinfo) -> Optional[Event]:
    """Free-standing calendar event: id, start/end (epoch ms or ISO-8601), is_all_day."""
    if not isinstance(d, dict):
        return None
    event_id = str(d.get("id") or "").strip()
    if not event_id:
        return None
    start_ms = _coerce_ms(d.get("start_ms", d.get("start")), tz)
    end_ms = _coerce_ms(d.get("end_ms", d.get("end")), tz)
    if start_ms is None or end_ms is None:
        _warn(f"calendar event without usable start/end id={event_id!r}")
        return None
    if end_ms < start_ms:
        _warn(f"calendar event ends before it starts id={event_id!r}")
        return None
    color = d.get("color")
    return make_event(
        event_id,
        start_ms,
        end_ms,
        tz=tz,
        is_all_day=bool(d.get("is_all_day")),
        title=str(d.get("title") or ""),
        description=str(d.get("description") or ""),
        color=color if isinstance(color, str) and color else DEFAULT_COLOR,
    )


def tasks_to_events(tasks: Iterable[Task], projects: Sequence[Project], *, tz: dt.tzinfo) -> List[Event]:
    by_id = {str(p.get("id")): p for p in projects if isinstance(p, dict) and p.get("id") is not None}
    out: List[Event] = []
    for t in tasks:
        if not isinstance(t, dict) or not t.get("scheduled_date"):
            continue
        ev = task_to_event(t, by_id.get(str(t.get("project_id"))), tz=tz)
        if ev is not None:
            out.append(ev)
    return out


def merge_events_and_tasks(
    tasks: Iterable[Task],
    projects: Sequence[Project],
    calendar_events: Iterable[Dict[str, Any]] = (),
    *,
    tz: dt.tzinfo,
) -> List[Event]:
    """Task-derived events first, then free-standing calendar events."""
    out = tasks_to_events(tasks, projects, tz=tz)
    for d in calendar_events:
        ev = calendar_event_from_dict(d, tz=tz)
        if ev is not None:
            out.append(ev)
    return out


def events_for_day(events: Iterable[Event], day: dt.date, *, tz: dt.tzinfo, all_day_only: bool = False) -> List[Event]:
    out: List[Event] = []
    for ev in events:
        if all_day_only and not ev.is_all_day:
            continue
        first, last = event_dates(ev, tz)
        if first <= day <= last:
            out.append(ev)
    return out


def actual_duration_min(event: Event) -> int:
    return int(round(event.duration_ms / MIN_MS))


def display_duration_min(event: Event, min_block_min: int = 30) -> int:
    """Layout duration: zero-length events render as a fixed block."""
    minutes = event.duration_ms / MIN_MS
    if minutes == 0:
        return int(min_block_min)
    return int(max(minutes, min_block_min))


def event_to_task_fields(event: Event, *, tz: dt.tzinfo) -> Dict[str, Any]:
    """Scheduling fields of the task that `task_to_event` maps back onto `event`."""
    start_day = date_from_ms(event.start_ms, tz)
    end_day = date_from_ms(event.end_ms, tz)

    fields: Dict[str, Any] = {
        "scheduled_date": start_day.isoformat(),
        "scheduled_end_date": None,
        "include_time": not event.is_all_day,
        "scheduled_start_time": None,
        "scheduled_end_time": None,
    }
    range_end = event.is_multi_day and event.end_ms == end_of_day_ms(end_day, tz)
    if range_end:
        fields["scheduled_end_date"] = end_day.isoformat()
    if not event.is_all_day:
        fields["scheduled_start_time"] = format_hhmm(minutes_of_day(event.start_ms, tz))
        fields["scheduled_end_time"] = format_hhmm(minutes_of_day(event.end_ms, tz))
    return fields


def task_update_for_reschedule(
    task: Task,
    request: RescheduleRequest,
    *,
    tz: dt.tzinfo,
    today: Optional[dt.date] = None,
    view: str = "week",
) -> Dict[str, Any]:
    """Patch the persistence layer applies to `task` for an accepted reschedule.

    Status follows the day: todo -> pomodoro when moved onto today; pomodoro ->
    todo when moved off today from the week or month view.
    """
    if today is None:
        today = today_date(tz)
    ev = make_event(request.event_id, request.start_ms, request.end_ms, tz=tz, is_all_day=request.is_all_day)
    patch = event_to_task_fields(ev, tz=tz)

    new_day = date_from_ms(request.start_ms, tz)
    status = task.get("status")
    old_day = None
    if task.get("scheduled_date"):
        try:
            old_day = parse_date_yyyy_mm_dd(str(task["scheduled_date"]))
        except ValueError:
            old_day = None

    if new_day == today and status == "todo":
        patch["status"] = "pomodoro"
    elif old_day == today and new_day != today and view in ("week", "month") and status == "pomodoro":
        patch["status"] = "todo"
    return patch
