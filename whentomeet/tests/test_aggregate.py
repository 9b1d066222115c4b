import pytest

from whentomeet.aggregate import BUCKET_COLORS, Aggregator, classify_ratio
from whentomeet.models.polls import Response


def _responses(table):
    """``table`` maps participant -> {slot_id: is_available}."""
    return [
        Response(event_id="e", time_slot_id=slot_id, participant_name=name, is_available=flag)
        for name, row in table.items()
        for slot_id, flag in row.items()
    ]


@pytest.fixture
def four_people():
    return Aggregator(_responses({
        "ana": {1: True, 2: True, 3: True, 4: False},
        "bo": {1: True, 2: True, 3: False, 4: False},
        "cy": {1: True, 2: True, 3: False, 4: False},
        "di": {1: True, 2: False, 3: False, 4: False},
    }))


class TestAggregator:
    def test_counts(self, four_people):
        assert four_people.availability_count(1) == 4
        assert four_people.availability_count(2) == 3
        assert four_people.availability_count(3) == 1
        assert four_people.availability_count(4) == 0
        assert four_people.availability_count(99) == 0

    def test_participants(self, four_people):
        assert four_people.participants() == ["ana", "bo", "cy", "di"]
        assert four_people.participant_count == 4

    def test_ratio_boundaries(self, four_people):
        assert four_people.color_class(1) == "full"
        assert four_people.color_class(2) == "high"
        assert four_people.ratio(2) == 0.75
        assert four_people.ratio(3) == 0.25
        assert four_people.color_class(3) == "low"
        assert four_people.color_class(4) == "none"

    def test_half_is_mid(self):
        agg = Aggregator(_responses({
            "a": {1: True}, "b": {1: True}, "c": {1: False}, "d": {1: False},
        }))
        assert agg.ratio(1) == 0.5
        assert agg.color_class(1) == "mid"

    def test_quarter_is_low(self):
        agg = Aggregator(_responses({
            "a": {1: True}, "b": {1: False}, "c": {1: False}, "d": {1: False},
        }))
        assert agg.color_class(1) == "low"

    def test_just_below_quarter_is_none(self):
        agg = Aggregator(_responses({
            "a": {1: True}, "b": {1: False}, "c": {1: False}, "d": {1: False}, "e": {1: False},
        }))
        assert agg.ratio(1) == 0.2
        assert agg.color_class(1) == "none"
        assert classify_ratio(0.2499) == "none"

    def test_no_participants_is_none(self):
        agg = Aggregator([])
        assert agg.participant_count == 0
        assert agg.ratio(1) == 0
        assert agg.color_class(1) == "none"
        assert agg.color(1) == BUCKET_COLORS["none"]

    @pytest.mark.parametrize(
        "ratio,bucket",
        [(1.0, "full"), (0.99, "high"), (0.75, "high"), (0.74, "mid"), (0.5, "mid"),
         (0.49, "low"), (0.25, "low"), (0.24, "none"), (0.0, "none")],
    )
    def test_classify_ratio(self, ratio, bucket):
        assert classify_ratio(ratio) == bucket

    def test_heatmap(self, slots):
        agg = Aggregator(_responses({
            "ana": {1: True, 5: False},
            "bo": {1: True, 5: True},
        }))
        heatmap = agg.heatmap(slots)
        assert heatmap.rows == ["09:00", "09:30", "10:00", "10:30"]
        assert len(heatmap.columns) == 2
        assert heatmap.participant_count == 2
        assert len(heatmap.cells) == 8
        first = heatmap.cells[0]
        assert (first.row, first.col, first.slot_id) == (0, 0, 1)
        assert first.bucket == "full"
        assert first.color == "#2D8A3E"
        assert first.title == "2 / 2 available"
        day_two = heatmap.cells[1]
        assert day_two.slot_id == 5
        assert day_two.bucket == "mid"
        assert heatmap.cells[2].count == 0

    def test_best_slots_orders_by_count_then_time(self, slots):
        agg = Aggregator(_responses({
            "ana": {3: True, 6: True, 2: True},
            "bo": {6: True, 2: True},
        }))
        best = agg.best_slots(slots, limit=3)
        assert [b.slot.id for b in best] == [2, 6, 3]
        assert [b.count for b in best] == [2, 2, 1]
        assert best[0].bucket == "full"
