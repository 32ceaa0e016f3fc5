"""
Automatic Difficulty Adaptation

Recommends a different disk count based on how the player has been doing.
Uses the efficiency of recently completed games and the current cognitive
load to decide whether the puzzle should get bigger or smaller.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass
class DifficultyAdjustment:
    """Result of difficulty adjustment check."""
    should_adjust: bool
    direction: Optional[str]  # "increase", "decrease", or None
    reason: str
    new_disk_count: Optional[int] = None


class DifficultyAdapter:
    """
    Adjusts the disk count based on player performance.

    Algorithm:
    - Cognitive load "high" (long, wandering game) -> one disk fewer
    - Track efficiency of the last completed games (0-1)
    - If avg > 0.8 and trend not declining -> one disk more
    - If avg < 0.4 -> one disk fewer
    - Otherwise keep the current size
    """

    MIN_DISKS = 3
    MAX_DISKS = 8

    # Thresholds
    HIGH_EFFICIENCY_THRESHOLD = 0.8
    LOW_EFFICIENCY_THRESHOLD = 0.4
    MIN_COMPLETED_GAMES = 2
    RECENT_GAMES = 5

    @staticmethod
    def level_for(disk_count: int) -> str:
        """Difficulty label shown to the player."""
        if disk_count <= 3:
            return "beginner"
        if disk_count <= 5:
            return "intermediate"
        return "advanced"

    def check_adjustment(
        self,
        current_disk_count: int,
        recent_efficiencies: List[float],
        cognitive_load: Optional[str] = None,
    ) -> DifficultyAdjustment:
        """
        Check if the disk count should change.

        Args:
            current_disk_count: Disks in the current puzzle
            recent_efficiencies: Efficiency of completed games, most recent last
            cognitive_load: "appropriate" or "high" from the student analysis

        Returns:
            DifficultyAdjustment with recommendation
        """
        if cognitive_load == "high":
            fewer = self._fewer_disks(current_disk_count)
            if fewer != current_disk_count:
                return DifficultyAdjustment(
                    should_adjust=True,
                    direction="decrease",
                    reason="High cognitive load - try again with fewer disks",
                    new_disk_count=fewer,
                )

        scores = recent_efficiencies[-self.RECENT_GAMES:]
        if len(scores) < self.MIN_COMPLETED_GAMES:
            return DifficultyAdjustment(
                should_adjust=False,
                direction=None,
                reason=f"Need at least {self.MIN_COMPLETED_GAMES} completed games (have {len(scores)})",
            )

        avg = sum(scores) / len(scores)
        trend = self._calculate_trend(scores)

        if avg > self.HIGH_EFFICIENCY_THRESHOLD and trend != "declining":
            more = self._more_disks(current_disk_count)
            if more != current_disk_count:
                return DifficultyAdjustment(
                    should_adjust=True,
                    direction="increase",
                    reason=f"High efficiency (avg={avg:.2f}) - ready for a bigger tower",
                    new_disk_count=more,
                )

        if avg < self.LOW_EFFICIENCY_THRESHOLD:
            fewer = self._fewer_disks(current_disk_count)
            if fewer != current_disk_count:
                return DifficultyAdjustment(
                    should_adjust=True,
                    direction="decrease",
                    reason=f"Low efficiency (avg={avg:.2f}) - practice with fewer disks",
                    new_disk_count=fewer,
                )

        return DifficultyAdjustment(
            should_adjust=False,
            direction=None,
            reason=f"Performance stable (avg={avg:.2f}, trend={trend})",
        )

    def _calculate_trend(self, scores: List[float]) -> str:
        """
        Compare the first half of the scores with the second half.

        Returns:
            "improving", "declining", or "stable"
        """
        if len(scores) < 2:
            return "stable"

        mid = len(scores) // 2
        first_half_avg = sum(scores[:mid]) / len(scores[:mid])
        second_half_avg = sum(scores[mid:]) / len(scores[mid:])
        diff = second_half_avg - first_half_avg

        if diff > 0.1:
            return "improving"
        elif diff < -0.1:
            return "declining"
        return "stable"

    def _more_disks(self, current: int) -> int:
        return current + 1 if current < self.MAX_DISKS else current

    def _fewer_disks(self, current: int) -> int:
        return current - 1 if current > self.MIN_DISKS else current

    def apply_adjustment(self, session, adjustment: DifficultyAdjustment) -> bool:
        """
        Restart the session's puzzle with the recommended disk count.

        Returns:
            True if adjustment was applied, False otherwise
        """
        if not adjustment.should_adjust or not adjustment.new_disk_count:
            return False

        old_count = session.puzzle.disk_count
        session.reset(adjustment.new_disk_count)
        logger.info(
            f"📊 [DifficultyAdapter] Disk count adjusted: {old_count} → "
            f"{adjustment.new_disk_count} ({adjustment.reason})"
        )
        return True
