"""
Unit Tests for Difficulty Adapter

Tests automatic disk-count adjustment logic.
"""

import pytest
import sys
import os

# Add project root to path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
sys.path.insert(0, os.path.join(project_root, "hanoi_tutor", "src"))

from hanoi_tutor.difficulty_adapter import DifficultyAdapter, DifficultyAdjustment
from hanoi_tutor.game_session import GameSession
from hanoi_tutor.puzzle_state import PuzzleState


class TestDifficultyAdapter:
    """Test suite for DifficultyAdapter."""

    @pytest.fixture
    def adapter(self):
        """Create adapter instance."""
        return DifficultyAdapter()

    def test_increase_disks_high_efficiency(self, adapter):
        adjustment = adapter.check_adjustment(
            current_disk_count=3,
            recent_efficiencies=[0.85, 0.90, 0.88, 0.92, 0.87],
        )

        assert adjustment.should_adjust == True
        assert adjustment.direction == "increase"
        assert adjustment.new_disk_count == 4
        assert "High efficiency" in adjustment.reason

    def test_decrease_disks_low_efficiency(self, adapter):
        adjustment = adapter.check_adjustment(
            current_disk_count=5,
            recent_efficiencies=[0.35, 0.30, 0.28, 0.32, 0.25],
        )

        assert adjustment.should_adjust == True
        assert adjustment.direction == "decrease"
        assert adjustment.new_disk_count == 4
        assert "Low efficiency" in adjustment.reason

    def test_no_adjustment_stable_efficiency(self, adapter):
        adjustment = adapter.check_adjustment(
            current_disk_count=4,
            recent_efficiencies=[0.65, 0.68, 0.70, 0.67, 0.69],
        )

        assert adjustment.should_adjust == False
        assert adjustment.direction is None
        assert "stable" in adjustment.reason.lower()

    def test_insufficient_games(self, adapter):
        adjustment = adapter.check_adjustment(
            current_disk_count=3,
            recent_efficiencies=[0.95],
        )

        assert adjustment.should_adjust == False
        assert "Need at least" in adjustment.reason

    def test_declining_trend_blocks_increase(self, adapter):
        adjustment = adapter.check_adjustment(
            current_disk_count=3,
            recent_efficiencies=[1.0, 1.0, 0.85, 0.82],
        )

        assert adjustment.should_adjust == False

    def test_max_disks_boundary(self, adapter):
        """Cannot grow past the maximum."""
        adjustment = adapter.check_adjustment(
            current_disk_count=DifficultyAdapter.MAX_DISKS,
            recent_efficiencies=[0.95, 0.96, 0.97],
        )

        assert adjustment.should_adjust == False

    def test_min_disks_boundary(self, adapter):
        """Cannot shrink below the minimum."""
        adjustment = adapter.check_adjustment(
            current_disk_count=DifficultyAdapter.MIN_DISKS,
            recent_efficiencies=[0.1, 0.2, 0.15],
        )

        assert adjustment.should_adjust == False

    def test_high_cognitive_load_decreases_without_history(self, adapter):
        adjustment = adapter.check_adjustment(
            current_disk_count=5,
            recent_efficiencies=[],
            cognitive_load="high",
        )

        assert adjustment.should_adjust == True
        assert adjustment.direction == "decrease"
        assert adjustment.new_disk_count == 4

    def test_only_recent_games_count(self, adapter):
        adjustment = adapter.check_adjustment(
            current_disk_count=4,
            recent_efficiencies=[0.1, 0.1, 0.1, 0.9, 0.9, 0.9, 0.9, 0.9],
        )

        assert adjustment.direction == "increase"

    def test_calculate_trend(self, adapter):
        assert adapter._calculate_trend([0.5, 0.6, 0.8, 0.9]) == "improving"
        assert adapter._calculate_trend([0.9, 0.8, 0.6, 0.5]) == "declining"
        assert adapter._calculate_trend([0.7, 0.7, 0.72, 0.7]) == "stable"
        assert adapter._calculate_trend([0.7]) == "stable"

    @pytest.mark.parametrize("disk_count,level", [
        (1, "beginner"), (3, "beginner"), (4, "intermediate"), (5, "intermediate"), (6, "advanced"),
    ])
    def test_level_for(self, disk_count, level):
        assert DifficultyAdapter.level_for(disk_count) == level

    def test_apply_adjustment(self, adapter):
        session = GameSession(session_id="s1", puzzle=PuzzleState(3))
        session.attempt_move(0, 2)

        adjustment = DifficultyAdjustment(
            should_adjust=True,
            direction="increase",
            reason="test",
            new_disk_count=4,
        )

        assert adapter.apply_adjustment(session, adjustment) == True
        assert session.puzzle.disk_count == 4
        assert session.puzzle.move_count == 0
        assert len(session.move_log) == 0

    def test_apply_no_adjustment(self, adapter):
        session = GameSession(session_id="s1", puzzle=PuzzleState(3))
        adjustment = DifficultyAdjustment(should_adjust=False, direction=None, reason="stable")

        assert adapter.apply_adjustment(session, adjustment) == False
        assert session.puzzle.disk_count == 3
