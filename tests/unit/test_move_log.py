"""
Unit Tests for MoveLog

Tests trimming and the random-movement heuristic.
"""

import pytest
import sys
import os

# Add project root to path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
sys.path.insert(0, os.path.join(project_root, "hanoi_tutor", "src"))

from hanoi_tutor.move_log import MoveLog, population_variance
from hanoi_tutor.puzzle_state import MoveRecord


def make_record(number, from_peg=0, to_peg=1, succeeded=True):
    return MoveRecord(
        from_peg=from_peg,
        to_peg=to_peg,
        disk_size=1,
        move_number=number,
        timestamp=float(number),
        succeeded=succeeded,
        failure_reason=None if succeeded else "larger_on_smaller",
    )


class TestMoveLogTrimming:
    """Trim from the high-water mark down to the most recent entries."""

    def test_trims_to_most_recent_entries(self):
        log = MoveLog()
        for i in range(1, 52):
            log.record(make_record(i))

        assert len(log) == 30
        assert [m.move_number for m in log] == list(range(22, 52))

    def test_no_trim_at_high_water_mark(self):
        log = MoveLog()
        for i in range(1, 51):
            log.record(make_record(i))
        assert len(log) == 50

    def test_length_never_exceeds_bound(self):
        log = MoveLog(max_entries=10, trim_to=4)
        for i in range(1, 100):
            log.record(make_record(i))
            assert len(log) <= 10
        assert [m.move_number for m in log][-1] == 99

    def test_ring_buffer_configuration(self):
        """trim_to == max_entries drops one entry per overflow."""
        log = MoveLog(max_entries=5, trim_to=5)
        for i in range(1, 9):
            log.record(make_record(i))
        assert [m.move_number for m in log] == [4, 5, 6, 7, 8]

    @pytest.mark.parametrize("max_entries,trim_to", [(0, 0), (10, 11), (10, 0)])
    def test_invalid_bounds(self, max_entries, trim_to):
        with pytest.raises(ValueError):
            MoveLog(max_entries=max_entries, trim_to=trim_to)

    def test_clear(self):
        log = MoveLog()
        log.record(make_record(1))
        log.clear()
        assert len(log) == 0


class TestRandomMovement:
    """Variance of the last three successful moves."""

    def test_population_variance(self):
        assert population_variance([]) == 0.0
        assert population_variance([1, 1, 1]) == 0.0
        assert population_variance([0, 2]) == pytest.approx(1.0)

    def test_variance_needs_two_moves(self):
        log = MoveLog()
        assert log.combined_variance() == 0.0
        log.record(make_record(1, 0, 2))
        assert log.combined_variance() == 0.0

    def test_back_and_forth_is_random(self):
        log = MoveLog()
        log.record(make_record(1, 0, 2))
        log.record(make_record(2, 2, 0))
        log.record(make_record(3, 0, 2))

        assert log.combined_variance() == pytest.approx(8 / 9)
        assert log.is_random_movement()

    def test_two_moves_never_random(self):
        log = MoveLog()
        log.record(make_record(1, 0, 2))
        log.record(make_record(2, 2, 0))
        assert log.combined_variance() == pytest.approx(1.0)
        assert not log.is_random_movement()

    def test_consistent_moves_not_random(self):
        log = MoveLog()
        for i in range(1, 4):
            log.record(make_record(i, 0, 1))
        assert log.combined_variance() == 0.0
        assert not log.is_random_movement()

    def test_failed_moves_ignored(self):
        log = MoveLog()
        log.record(make_record(1, 0, 2))
        log.record(make_record(2, 2, 0))
        log.record(make_record(2, 1, 2, succeeded=False))
        log.record(make_record(2, 1, 0, succeeded=False))

        assert log.failed_count() == 2
        assert len(log.recent_moves(3, succeeded_only=True)) == 2
        assert not log.is_random_movement()

    def test_recent_moves_order(self):
        log = MoveLog()
        for i in range(1, 8):
            log.record(make_record(i))
        assert [m.move_number for m in log.recent_moves(3)] == [5, 6, 7]
        assert log.recent_moves(0) == []
