from __future__ import annotations

import copy
import datetime as dt
import unittest

from calgrid.convert import (
    calendar_event_from_dict,
    display_duration_min,
    event_to_task_fields,
    events_for_day,
    make_event,
    task_to_event,
    task_update_for_reschedule,
    tasks_to_events,
)
from calgrid.model import RescheduleRequest

UTC = dt.timezone.utc


def ms(y: int, m: int, d: int, hh: int = 0, mm: int = 0) -> int:
    return int(dt.datetime(y, m, d, hh, mm, tzinfo=UTC).timestamp() * 1000)


def eod(y: int, m: int, d: int) -> int:
    return ms(y, m, d) + 24 * 3600 * 1000 - 1


class TestConvertContract(unittest.TestCase):
    def test_unscheduled_and_invalid_tasks_are_skipped(self) -> None:
        self.assertIsNone(task_to_event({"id": "t1", "title": "x"}, tz=UTC))
        self.assertIsNone(task_to_event({"id": "t1", "scheduled_date": "2024-13-40"}, tz=UTC))
        self.assertIsNone(task_to_event({"scheduled_date": "2024-06-10"}, tz=UTC))
        bad_time = {
            "id": "t2",
            "scheduled_date": "2024-06-10",
            "include_time": True,
            "scheduled_start_time": "25:00",
            "scheduled_end_time": "26:00",
        }
        self.assertIsNone(task_to_event(bad_time, tz=UTC))

        tasks = [{"id": "a"}, {"id": "b", "scheduled_date": "2024-06-10"}, "junk"]
        events = tasks_to_events(tasks, [], tz=UTC)  # type: ignore[list-item]
        self.assertEqual([e.id for e in events], ["b"])

    def test_all_day_task(self) -> None:
        ev = task_to_event({"id": "t", "scheduled_date": "2024-06-10"}, tz=UTC)
        assert ev is not None
        self.assertTrue(ev.is_all_day)
        self.assertFalse(ev.is_multi_day)
        self.assertEqual(ev.start_ms, ms(2024, 6, 10))
        self.assertEqual(ev.end_ms, eod(2024, 6, 10))
        self.assertEqual(ev.day_span, 1)
        self.assertEqual(ev.color, "#EF4444")
        self.assertEqual(ev.source_ref, "t")

    def test_timed_task(self) -> None:
        task = {
            "id": "t",
            "scheduled_date": "2024-06-10",
            "include_time": True,
            "scheduled_start_time": "09:00",
            "scheduled_end_time": "10:30",
        }
        ev = task_to_event(task, tz=UTC)
        assert ev is not None
        self.assertFalse(ev.is_all_day)
        self.assertEqual(ev.start_ms, ms(2024, 6, 10, 9))
        self.assertEqual(ev.end_ms, ms(2024, 6, 10, 10, 30))

    def test_overnight_task_pushes_end_to_next_day(self) -> None:
        task = {
            "id": "t",
            "scheduled_date": "2024-06-10",
            "include_time": True,
            "scheduled_start_time": "22:00",
            "scheduled_end_time": "02:00",
        }
        ev = task_to_event(task, tz=UTC)
        assert ev is not None
        self.assertEqual(ev.end_ms, ms(2024, 6, 11, 2))
        self.assertTrue(ev.is_multi_day)
        self.assertEqual(ev.day_span, 2)
        self.assertEqual(ev.display_start_ms, ms(2024, 6, 10))
        self.assertEqual(ev.display_end_ms, eod(2024, 6, 11))

    def test_date_range_task_is_multi_day(self) -> None:
        ev = task_to_event(
            {"id": "t", "scheduled_date": "2024-06-10", "scheduled_end_date": "2024-06-12"},
            tz=UTC,
        )
        assert ev is not None
        self.assertTrue(ev.is_multi_day)
        self.assertEqual(ev.day_span, 3)
        self.assertEqual(ev.display_start_ms, ms(2024, 6, 10))
        self.assertEqual(ev.display_end_ms, eod(2024, 6, 12))

        timed = task_to_event(
            {
                "id": "t2",
                "scheduled_date": "2024-06-10",
                "scheduled_end_date": "2024-06-12",
                "include_time": True,
                "scheduled_start_time": "09:00",
                "scheduled_end_time": "10:00",
            },
            tz=UTC,
        )
        assert timed is not None
        self.assertEqual(timed.start_ms, ms(2024, 6, 10, 9))
        self.assertEqual(timed.end_ms, eod(2024, 6, 12))
        self.assertEqual(timed.display_start_ms, ms(2024, 6, 10))

    def test_end_date_before_start_is_ignored(self) -> None:
        ev = task_to_event({"id": "t", "scheduled_date": "2024-06-10", "scheduled_end_date": "2024-06-01"}, tz=UTC)
        assert ev is not None
        self.assertFalse(ev.is_multi_day)

    def test_conversion_is_pure(self) -> None:
        task = {"id": "t", "scheduled_date": "2024-06-10", "scheduled_end_date": "2024-06-12", "project_id": "p"}
        before = copy.deepcopy(task)
        a = task_to_event(task, tz=UTC)
        b = task_to_event(task, tz=UTC)
        self.assertEqual(a, b)
        self.assertEqual(task, before)

    def test_project_color_lookup(self) -> None:
        tasks = [
            {"id": "a", "scheduled_date": "2024-06-10", "project_id": "p1"},
            {"id": "b", "scheduled_date": "2024-06-10", "project_id": "missing"},
        ]
        events = tasks_to_events(tasks, [{"id": "p1", "color": "#3B82F6"}], tz=UTC)
        self.assertEqual([e.color for e in events], ["#3B82F6", "#EF4444"])

    def test_round_trip_through_task_fields(self) -> None:
        tasks = [
            {"scheduled_date": "2024-06-10"},
            {"scheduled_date": "2024-06-10", "scheduled_end_date": "2024-06-13"},
            {"scheduled_date": "2024-06-10", "include_time": True, "scheduled_start_time": "09:15", "scheduled_end_time": "11:00"},
            {"scheduled_date": "2024-06-10", "include_time": True, "scheduled_start_time": "22:00", "scheduled_end_time": "01:30"},
            {
                "scheduled_date": "2024-06-10",
                "scheduled_end_date": "2024-06-11",
                "include_time": True,
                "scheduled_start_time": "08:00",
                "scheduled_end_time": "09:00",
            },
            {"scheduled_date": "2024-06-10", "include_time": True, "scheduled_start_time": "09:00", "scheduled_end_time": "09:00"},
        ]
        for i, t in enumerate(tasks):
            ev = task_to_event({"id": f"t{i}", "title": "x", **t}, tz=UTC)
            assert ev is not None
            back = {"id": ev.id, "title": ev.title, "description": ev.description, **event_to_task_fields(ev, tz=UTC)}
            self.assertEqual(task_to_event(back, tz=UTC), ev, f"round trip failed for {t}")

    def test_make_event_rejects_negative_duration(self) -> None:
        with self.assertRaises(ValueError):
            make_event("x", ms(2024, 6, 10, 10), ms(2024, 6, 10, 9), tz=UTC)

    def test_zero_duration_displays_as_half_hour(self) -> None:
        zero = make_event("z", ms(2024, 6, 10, 9), ms(2024, 6, 10, 9), tz=UTC)
        short = make_event("s", ms(2024, 6, 10, 9), ms(2024, 6, 10, 9, 10), tz=UTC)
        long = make_event("l", ms(2024, 6, 10, 9), ms(2024, 6, 10, 10, 30), tz=UTC)
        self.assertEqual(zero.start_ms, zero.end_ms)
        self.assertEqual(display_duration_min(zero), 30)
        self.assertEqual(display_duration_min(short), 30)
        self.assertEqual(display_duration_min(long), 90)

    def test_events_for_day(self) -> None:
        multi = make_event("m", ms(2024, 6, 10), eod(2024, 6, 12), tz=UTC, is_all_day=True)
        timed = make_event("t", ms(2024, 6, 11, 9), ms(2024, 6, 11, 10), tz=UTC)
        day = dt.date(2024, 6, 11)
        self.assertEqual([e.id for e in events_for_day([multi, timed], day, tz=UTC)], ["m", "t"])
        self.assertEqual([e.id for e in events_for_day([multi, timed], day, tz=UTC, all_day_only=True)], ["m"])
        self.assertEqual(events_for_day([multi, timed], dt.date(2024, 6, 13), tz=UTC), [])

    def test_calendar_event_from_dict(self) -> None:
        ev = calendar_event_from_dict(
            {"id": "c1", "start": "2024-06-10T09:00:00", "end": "2024-06-10T10:00:00", "color": "#84CC16"},
            tz=UTC,
        )
        assert ev is not None
        self.assertEqual(ev.start_ms, ms(2024, 6, 10, 9))
        self.assertEqual(ev.color, "#84CC16")
        self.assertFalse(ev.is_task)

        self.assertIsNone(calendar_event_from_dict({"id": "c2", "start_ms": 10, "end_ms": 5}, tz=UTC))
        self.assertIsNone(calendar_event_from_dict({"id": "c3", "start_ms": 10}, tz=UTC))

    def test_task_update_for_reschedule_status_rules(self) -> None:
        today = dt.date(2024, 6, 10)
        req = RescheduleRequest(event_id="t", start_ms=ms(2024, 6, 10, 9), end_ms=ms(2024, 6, 10, 10), is_all_day=False)
        patch = task_update_for_reschedule(
            {"id": "t", "status": "todo", "scheduled_date": "2024-06-09"}, req, tz=UTC, today=today
        )
        self.assertEqual(patch["scheduled_date"], "2024-06-10")
        self.assertTrue(patch["include_time"])
        self.assertEqual((patch["scheduled_start_time"], patch["scheduled_end_time"]), ("09:00", "10:00"))
        self.assertEqual(patch["status"], "pomodoro")

        away = RescheduleRequest(event_id="t", start_ms=ms(2024, 6, 12), end_ms=eod(2024, 6, 12), is_all_day=True)
        task = {"id": "t", "status": "pomodoro", "scheduled_date": "2024-06-10"}
        patch = task_update_for_reschedule(task, away, tz=UTC, today=today, view="month")
        self.assertEqual(patch["status"], "todo")
        self.assertIsNone(patch["scheduled_start_time"])
        self.assertFalse(patch["include_time"])

        patch = task_update_for_reschedule(task, away, tz=UTC, today=today, view="day")
        self.assertNotIn("status", patch)


if __name__ == "__main__":
    unittest.main(verbosity=2)
