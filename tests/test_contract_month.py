from __future__ import annotations

import datetime as dt
import unittest

from calgrid.model import WeekSegment
from calgrid.month import layout_month, layout_month_grid, month_grid_days, month_grid_start, week_segments

from tests._factories import UTC, all_day, span, timed


class TestMonthGridContract(unittest.TestCase):
    def test_grid_start_and_size(self) -> None:
        # 2024-06-01 is a Saturday.
        self.assertEqual(month_grid_start(2024, 6), dt.date(2024, 5, 27))
        self.assertEqual(month_grid_start(2024, 6, week_start=6), dt.date(2024, 5, 26))
        # 2024-04-01 is a Monday: no leading days.
        self.assertEqual(month_grid_start(2024, 4), dt.date(2024, 4, 1))

        days = month_grid_days(2024, 6)
        self.assertEqual(len(days), 42)
        self.assertEqual(days[-1], dt.date(2024, 7, 7))

    def test_week_segments(self) -> None:
        self.assertEqual(
            week_segments(11, 15),
            (
                WeekSegment(week=1, start_column=4, end_column=6, continues_before=False, continues_after=True),
                WeekSegment(week=2, start_column=0, end_column=1, continues_before=True, continues_after=False),
            ),
        )
        (single,) = week_segments(3, 3)
        self.assertEqual(single.columns, 1)

    def test_multi_day_keeps_one_row_across_weeks(self) -> None:
        events = [
            span("a", dt.date(2024, 6, 3), dt.date(2024, 6, 20)),
            span("b", dt.date(2024, 6, 5), dt.date(2024, 6, 6)),
            span("c", dt.date(2024, 6, 19), dt.date(2024, 6, 25)),
        ]
        layout = layout_month(events, 2024, 6, {"tz": "UTC"})
        rows = {p.event.id: p for p in layout.multi_day}

        self.assertEqual(rows["a"].row, 0)
        self.assertEqual(rows["b"].row, 1)
        self.assertEqual(rows["c"].row, 1)
        self.assertEqual([s.week for s in rows["a"].segments], [1, 2, 3])
        self.assertEqual([s.week for s in rows["c"].segments], [3, 4])
        self.assertEqual(rows["c"].segments[0].start_column, 2)
        self.assertEqual(rows["c"].segments[-1].end_column, 1)

    def test_single_day_events_fill_around_multi_day_rows(self) -> None:
        events = [
            span("m", dt.date(2024, 6, 7), dt.date(2024, 6, 11)),
            all_day("s1", dt.date(2024, 6, 10)),
            timed("t1", dt.date(2024, 6, 10), (9, 0), (10, 0)),
            all_day("s2", dt.date(2024, 6, 12)),
        ]
        layout = layout_month_grid(events, dt.date(2024, 5, 27), tz=UTC)
        (m,) = layout.multi_day
        self.assertEqual(m.row, 0)
        self.assertEqual(
            [(s.week, s.start_column, s.end_column) for s in m.segments],
            [(1, 4, 6), (2, 0, 1)],
        )

        cells = {c.date: c for c in layout.cells}
        june10 = cells[dt.date(2024, 6, 10)]
        self.assertEqual(june10.multi_day_rows, frozenset({0}))
        self.assertEqual([(p.event.id, p.row) for p in june10.events], [("s1", 1), ("t1", 2)])
        self.assertEqual(june10.total_rows, 3)
        self.assertEqual((june10.week, june10.column), (2, 0))

        june12 = cells[dt.date(2024, 6, 12)]
        self.assertEqual([(p.event.id, p.row) for p in june12.events], [("s2", 0)])

        self.assertEqual(layout.week_rows[1], 1)
        self.assertEqual(layout.week_rows[2], 3)
        self.assertEqual(layout.total_rows, 3)

    def test_month_layout_is_deterministic(self) -> None:
        events = [
            span("a", dt.date(2024, 6, 3), dt.date(2024, 6, 9)),
            span("b", dt.date(2024, 6, 3), dt.date(2024, 6, 4)),
            all_day("c", dt.date(2024, 6, 4)),
        ]
        self.assertEqual(layout_month(events, 2024, 6, {"tz": "UTC"}), layout_month(events, 2024, 6, {"tz": "UTC"}))


if __name__ == "__main__":
    unittest.main(verbosity=2)
