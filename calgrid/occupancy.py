# calgrid/occupancy.py
"""Row occupation arena.

One fixed-width bitset per row, bit `i` set when day index `i` is occupied in
that row. Available days are the complement within the grid width, so the
occupied/available partition holds by construction.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from .model import Event, RowOccupation


class RowArena:
    __slots__ = ("n_days", "full_mask", "_bits", "_multi", "_single")

    def __init__(self, n_days: int) -> None:
        self.n_days = int(n_days)
        self.full_mask = (1 << self.n_days) - 1 if self.n_days > 0 else 0
        self._bits: List[int] = []
        self._multi: List[List[Event]] = []
        self._single: List[Dict[int, List[Event]]] = []

    def __len__(self) -> int:
        return len(self._bits)

    def span_mask(self, first: int, last: int) -> int:
        """Mask for day indices first..last inclusive (clamped to the grid)."""
        first = max(0, first)
        last = min(self.n_days - 1, last)
        if last < first:
            return 0
        return ((1 << (last - first + 1)) - 1) << first

    def add_row(self) -> int:
        self._bits.append(0)
        self._multi.append([])
        self._single.append({})
        return len(self._bits) - 1

    def fits(self, row: int, mask: int) -> bool:
        return self._bits[row] & mask == 0

    def first_fit(self, mask: int) -> int:
        """Lowest existing row free on every day in `mask`; a new row if none is."""
        for row in range(len(self._bits)):
            if self.fits(row, mask):
                return row
        return self.add_row()

    def occupy(self, row: int, mask: int) -> None:
        self._bits[row] |= mask

    def place_multi_day(self, row: int, mask: int, event: Event) -> None:
        self.occupy(row, mask)
        self._multi[row].append(event)

    def place_single_day(self, row: int, day: int, event: Event) -> None:
        self.occupy(row, 1 << day)
        self._single[row].setdefault(day, []).append(event)

    def is_occupied(self, row: int, day: int) -> bool:
        return bool(self._bits[row] >> day & 1)

    def rows_occupied_on(self, day: int) -> Tuple[int, ...]:
        return tuple(r for r in range(len(self._bits)) if self.is_occupied(r, day))

    def occupied_days(self, row: int) -> frozenset[int]:
        bits = self._bits[row]
        return frozenset(i for i in range(self.n_days) if bits >> i & 1)

    def available_days(self, row: int) -> frozenset[int]:
        bits = ~self._bits[row] & self.full_mask
        return frozenset(i for i in range(self.n_days) if bits >> i & 1)

    def snapshot(self) -> Dict[int, RowOccupation]:
        return {
            row: RowOccupation(
                occupied_days=self.occupied_days(row),
                available_days=self.available_days(row),
                multi_day_events=tuple(self._multi[row]),
                single_day_events={d: tuple(evs) for d, evs in sorted(self._single[row].items())},
            )
            for row in range(len(self._bits))
        }
