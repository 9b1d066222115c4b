"""Row/column grouping of an event's slots.

Rows are the distinct times of day (``HH:MM``, sorted), columns the distinct
calendar dates in order of first appearance. Rendering and drag resolution
both go through :class:`SlotGrid` so a cell address always means the same
slot.
"""

from collections.abc import Iterator, Sequence
from datetime import date
from typing import Any

TIME_LABEL_FORMAT = "%H:%M"
DATE_LABEL_FORMAT = "%a, %b %d"


def time_label(slot: Any) -> str:
    return slot.slot_time.strftime(TIME_LABEL_FORMAT)


class SlotGrid:
    def __init__(self, slots: Sequence[Any]):
        self._by_cell: dict[tuple[int, int], Any] = {}
        self._positions: dict[Any, tuple[int, int]] = {}

        self.rows: list[str] = sorted({time_label(s) for s in slots})
        self.dates: list[date] = []
        for s in slots:
            day = s.slot_time.date()
            if day not in self.dates:
                self.dates.append(day)

        row_index = {label: i for i, label in enumerate(self.rows)}
        col_index = {day: i for i, day in enumerate(self.dates)}
        for s in slots:
            cell = (row_index[time_label(s)], col_index[s.slot_time.date()])
            # first slot wins if two share a cell
            if cell not in self._by_cell:
                self._by_cell[cell] = s.id
                self._positions[s.id] = cell

    @property
    def columns(self) -> list[str]:
        return [d.strftime(DATE_LABEL_FORMAT) for d in self.dates]

    @property
    def shape(self) -> tuple[int, int]:
        return len(self.rows), len(self.dates)

    def slot_at(self, row: int, col: int) -> Any | None:
        return self._by_cell.get((row, col))

    def position_of(self, slot_id: Any) -> tuple[int, int] | None:
        return self._positions.get(slot_id)

    def cells(self) -> Iterator[tuple[int, int, Any | None]]:
        """Yield ``(row, col, slot_id)`` in row-major order; empty cells yield ``None``."""
        n_rows, n_cols = self.shape
        for row in range(n_rows):
            for col in range(n_cols):
                yield row, col, self._by_cell.get((row, col))

    def rectangle(self, corner_a: tuple[int, int], corner_b: tuple[int, int]) -> list[Any]:
        """Slot ids inside the inclusive rectangle spanned by two cells.

        Cells outside the grid or without a slot are skipped.
        """
        min_row, max_row = sorted((corner_a[0], corner_b[0]))
        min_col, max_col = sorted((corner_a[1], corner_b[1]))
        found = []
        for row in range(min_row, max_row + 1):
            for col in range(min_col, max_col + 1):
                slot_id = self._by_cell.get((row, col))
                if slot_id is not None:
                    found.append(slot_id)
        return found
