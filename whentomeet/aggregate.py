"""Read-side reduction of an event's responses into availability counts."""

from collections import Counter
from collections.abc import Iterable, Sequence
from typing import Any, Final

from whentomeet.grid import SlotGrid
from whentomeet.models.polls import Heatmap, HeatmapCell, RankedSlot

FULL: Final[str] = "full"
HIGH: Final[str] = "high"
MID: Final[str] = "mid"
LOW: Final[str] = "low"
NONE: Final[str] = "none"

# descending lower bounds; ratio == 1 is handled separately as FULL
BUCKET_THRESHOLDS: Final[tuple[tuple[float, str], ...]] = (
    (0.75, HIGH),
    (0.5, MID),
    (0.25, LOW),
)

BUCKET_COLORS: Final[dict[str, str]] = {
    FULL: "#2D8A3E",
    HIGH: "#52A665",
    MID: "#7BC18C",
    LOW: "#A5DCB3",
    NONE: "#FFB6C1",
}


def classify_ratio(ratio: float) -> str:
    if ratio >= 1:
        return FULL
    for threshold, bucket in BUCKET_THRESHOLDS:
        if ratio >= threshold:
            return bucket
    return NONE


class Aggregator:
    def __init__(self, responses: Iterable[Any]):
        self._available: Counter = Counter()
        names: set[str] = set()
        for r in responses:
            names.add(r.participant_name)
            if r.is_available:
                self._available[r.time_slot_id] += 1
        self._participants = sorted(names)

    def availability_count(self, slot_id: Any) -> int:
        return self._available.get(slot_id, 0)

    def participants(self) -> list[str]:
        return list(self._participants)

    @property
    def participant_count(self) -> int:
        return len(self._participants)

    def ratio(self, slot_id: Any) -> float:
        return self.availability_count(slot_id) / max(1, self.participant_count)

    def color_class(self, slot_id: Any) -> str:
        if self.participant_count == 0:
            return NONE
        return classify_ratio(self.ratio(slot_id))

    def color(self, slot_id: Any) -> str:
        return BUCKET_COLORS[self.color_class(slot_id)]

    def heatmap(self, slots: Sequence[Any]) -> Heatmap:
        grid = SlotGrid(slots)
        total = self.participant_count
        cells = []
        for row, col, slot_id in grid.cells():
            if slot_id is None:
                cells.append(HeatmapCell(row=row, col=col, color=BUCKET_COLORS[NONE]))
                continue
            count = self.availability_count(slot_id)
            bucket = self.color_class(slot_id)
            cells.append(
                HeatmapCell(
                    row=row,
                    col=col,
                    slot_id=slot_id,
                    count=count,
                    ratio=self.ratio(slot_id),
                    bucket=bucket,
                    color=BUCKET_COLORS[bucket],
                    title=f"{count} / {total} available",
                )
            )
        return Heatmap(rows=grid.rows, columns=grid.columns, participant_count=total, cells=cells)

    def best_slots(self, slots: Sequence[Any], limit: int = 5) -> list[RankedSlot]:
        """Slots with the most participants available, earliest first on ties."""
        ranked = sorted(slots, key=lambda s: (-self.availability_count(s.id), s.slot_time))
        return [
            RankedSlot(
                slot=s,
                count=self.availability_count(s.id),
                ratio=self.ratio(s.id),
                bucket=self.color_class(s.id),
            )
            for s in ranked[:limit]
        ]
