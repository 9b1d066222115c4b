"""Editing model for one participant's "unavailable" slots.

Participants mark the times they cannot attend, while storage records
whether each slot is available. The two conversion functions at the bottom
of this module are the only place that inversion happens.

Drag gestures are driven by per-cell events: ``pointer_down`` on a cell
starts a gesture, ``pointer_enter`` moves the live corner, ``pointer_up``
(anywhere) applies the rectangle.
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from whentomeet.grid import SlotGrid
from whentomeet.models.polls import SlotAvailability

logger = logging.getLogger("whentomeet.selection")

Cell = tuple[int, int]


class DragMode(str, Enum):
    SELECT = "select"
    DESELECT = "deselect"


@dataclass(frozen=True)
class Drag:
    anchor: Cell
    current: Cell
    mode: DragMode


class SelectionModel:
    """Transient selection set plus the drag state machine.

    ``slots`` is called on every pointer event so the grid always reflects
    the slot data currently on screen.
    """

    def __init__(self, slots: Callable[[], Sequence[Any]], selected: Iterable[Any] = ()):
        self._slots = slots
        self.selected: set[Any] = set(selected)
        self.drag: Drag | None = None

    @property
    def is_dragging(self) -> bool:
        return self.drag is not None

    def grid(self) -> SlotGrid:
        return SlotGrid(self._slots())

    def seed(self, slot_ids: Iterable[Any]) -> None:
        self.selected = set(slot_ids)
        self.drag = None

    def clear(self) -> None:
        self.seed(())

    def toggle(self, slot_id: Any) -> None:
        if slot_id in self.selected:
            self.selected.discard(slot_id)
        else:
            self.selected.add(slot_id)

    def pointer_down(self, row: int, col: int) -> bool:
        """Start a gesture; returns False when the cell holds no slot."""
        slot_id = self.grid().slot_at(row, col)
        if slot_id is None:
            return False
        mode = DragMode.DESELECT if slot_id in self.selected else DragMode.SELECT
        self.drag = Drag(anchor=(row, col), current=(row, col), mode=mode)
        logger.debug("drag start anchor=%s mode=%s", (row, col), mode.value)
        return True

    def pointer_enter(self, row: int, col: int) -> None:
        if self.drag is None:
            return
        self.drag = Drag(anchor=self.drag.anchor, current=(row, col), mode=self.drag.mode)

    def pointer_leave(self, row: int, col: int) -> None:
        # the next pointer_enter moves the corner
        return None

    def pointer_up(self) -> list[Any]:
        """Apply the live rectangle and return to idle.

        Returns the slot ids the gesture covered.
        """
        drag = self.drag
        if drag is None:
            return []
        covered = self.grid().rectangle(drag.anchor, drag.current)
        if drag.mode is DragMode.SELECT:
            self.selected.update(covered)
        else:
            self.selected.difference_update(covered)
        self.drag = None
        logger.debug("drag end mode=%s covered=%d", drag.mode.value, len(covered))
        return covered

    def cancel(self) -> None:
        self.drag = None

    def drag_rectangle(self) -> tuple[int, int, int, int] | None:
        """``(min_row, max_row, min_col, max_col)`` of the live gesture."""
        if self.drag is None:
            return None
        (r0, c0), (r1, c1) = self.drag.anchor, self.drag.current
        return min(r0, r1), max(r0, r1), min(c0, c1), max(c0, c1)

    def in_drag_rectangle(self, row: int, col: int) -> bool:
        bounds = self.drag_rectangle()
        if bounds is None:
            return False
        min_row, max_row, min_col, max_col = bounds
        return min_row <= row <= max_row and min_col <= col <= max_col

    def preview(self) -> set[Any]:
        """The selection as it would be if the pointer were released now."""
        if self.drag is None:
            return set(self.selected)
        covered = self.grid().rectangle(self.drag.anchor, self.drag.current)
        if self.drag.mode is DragMode.SELECT:
            return self.selected | set(covered)
        return self.selected - set(covered)


def apply_drag(
    slots: Sequence[Any],
    selected: Iterable[Any],
    anchor: Cell,
    current: Cell,
) -> tuple[set[Any], list[Any]]:
    """Run one complete gesture against ``selected``.

    Returns the new selection and the covered slot ids. A gesture anchored on
    an empty cell changes nothing.
    """
    model = SelectionModel(lambda: slots, selected)
    if not model.pointer_down(*anchor):
        return model.selected, []
    model.pointer_enter(*current)
    covered = model.pointer_up()
    return model.selected, covered


def selection_to_availability(
    slot_ids: Iterable[Any],
    unavailable: Iterable[Any],
) -> list[SlotAvailability]:
    """Convert marked-unavailable ids into one availability row per slot."""
    marked = set(unavailable)
    return [
        SlotAvailability(time_slot_id=slot_id, is_available=slot_id not in marked)
        for slot_id in slot_ids
    ]


def availability_to_selection(responses: Iterable[Any], participant_name: str) -> set[Any]:
    """Recover a participant's unavailable set from stored rows."""
    return {
        r.time_slot_id
        for r in responses
        if r.participant_name == participant_name and not r.is_available
    }
