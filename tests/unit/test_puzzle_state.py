"""
Unit Tests for PuzzleState

Tests the legal-move validator, solve detection and the recursive solver.
"""

import pytest
import sys
import os

# Add project root to path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
sys.path.insert(0, os.path.join(project_root, "hanoi_tutor", "src"))

from hanoi_tutor.puzzle_state import (
    EmptySource,
    InvalidPeg,
    MoveError,
    PuzzleState,
    SizeViolation,
    solve_moves,
)


class TestPuzzleState:
    """Test suite for PuzzleState."""

    @pytest.fixture
    def puzzle(self):
        return PuzzleState(3)

    def test_initial_state(self, puzzle):
        assert puzzle.pegs == [[3, 2, 1], [], []]
        assert puzzle.move_count == 0
        assert puzzle.disk_count == 3
        assert not puzzle.is_solved()
        assert puzzle.progress() == 0.0

    def test_rejects_zero_disks(self):
        with pytest.raises(ValueError):
            PuzzleState(0)

    def test_single_disk_puzzle(self):
        puzzle = PuzzleState(1)
        puzzle.apply_move(0, 2)
        assert puzzle.is_solved()
        assert puzzle.optimal_move_count() == 1

    def test_apply_move_returns_record(self, puzzle):
        record = puzzle.apply_move(0, 2)

        assert record.from_peg == 0
        assert record.to_peg == 2
        assert record.disk_size == 1
        assert record.move_number == 1
        assert record.succeeded
        assert record.failure_reason is None
        assert puzzle.pegs == [[3, 2], [], [1]]

    def test_record_wire_form(self, puzzle):
        data = puzzle.apply_move(0, 1).to_dict()
        assert data["fromPeg"] == 0
        assert data["toPeg"] == 1
        assert data["diskSize"] == 1
        assert data["moveNumber"] == 1
        assert data["succeeded"] is True

    def test_empty_source_rejected(self, puzzle):
        with pytest.raises(EmptySource) as exc_info:
            puzzle.apply_move(1, 2)

        error = exc_info.value
        assert str(error) == "No disk to move from selected tower."
        assert error.record.succeeded is False
        assert error.record.failure_reason == "empty_source"
        assert puzzle.move_count == 0

    def test_size_violation_leaves_state_unchanged(self, puzzle):
        """Moving disk 3 onto disk 1 must be rejected."""
        puzzle.apply_move(0, 2)  # disk 1 -> peg 2
        puzzle.apply_move(0, 1)  # disk 2 -> peg 1, peg 0 now holds only disk 3
        before = puzzle.snapshot()
        moves_before = puzzle.move_count

        with pytest.raises(SizeViolation) as exc_info:
            puzzle.apply_move(0, 2)

        assert str(exc_info.value) == "Cannot place larger disk on smaller disk!"
        assert exc_info.value.record.disk_size == 3
        assert exc_info.value.record.failure_reason == "larger_on_smaller"
        assert puzzle.snapshot() == before
        assert puzzle.move_count == moves_before

    def test_invalid_peg_rejected(self, puzzle):
        with pytest.raises(InvalidPeg):
            puzzle.apply_move(0, 3)
        with pytest.raises(InvalidPeg):
            puzzle.apply_move(0, 0)
        assert puzzle.pegs == [[3, 2, 1], [], []]

    def test_errors_share_base_class(self, puzzle):
        for from_peg, to_peg in [(1, 0), (0, 5)]:
            with pytest.raises(MoveError):
                puzzle.apply_move(from_peg, to_peg)

    def test_efficiency_clamped(self, puzzle):
        assert puzzle.efficiency() == 1.0
        for _ in range(7):
            puzzle.apply_move(0, 1)
            puzzle.apply_move(1, 0)
        assert puzzle.move_count == 14
        assert puzzle.efficiency() == pytest.approx(0.5)

    def test_legal_moves_from_start(self, puzzle):
        assert puzzle.legal_moves() == [(0, 1), (0, 2)]

    def test_snapshot_is_a_copy(self, puzzle):
        snapshot = puzzle.snapshot()
        snapshot[0].pop()
        assert puzzle.pegs[0] == [3, 2, 1]

    def test_reset(self, puzzle):
        puzzle.apply_move(0, 2)
        puzzle.reset(4)
        assert puzzle.pegs == [[4, 3, 2, 1], [], []]
        assert puzzle.move_count == 0
        assert puzzle.optimal_move_count() == 15


class TestSolver:
    """The recursive solution reaches the goal in 2^N - 1 accepted moves."""

    def test_canonical_three_disk_solution(self):
        assert list(solve_moves(3)) == [
            (0, 2), (0, 1), (2, 1), (0, 2), (1, 0), (1, 2), (0, 2),
        ]

    @pytest.mark.parametrize("disk_count", [1, 2, 3, 4, 5, 6, 7, 8])
    def test_solves_in_optimal_moves(self, disk_count):
        puzzle = PuzzleState(disk_count)

        for from_peg, to_peg in solve_moves(disk_count):
            target_top = puzzle.top_disk(to_peg)
            record = puzzle.apply_move(from_peg, to_peg)
            # Every accepted move lands on an empty peg or a larger disk
            assert target_top is None or record.disk_size < target_top

        assert puzzle.is_solved()
        assert puzzle.move_count == 2 ** disk_count - 1
        assert puzzle.efficiency() == 1.0
        assert puzzle.progress() == 1.0
