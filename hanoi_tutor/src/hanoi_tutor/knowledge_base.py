"""
Tower of Hanoi Knowledge Base

Static, read-only tables of rules, strategies, known mistake patterns and
pedagogical tips. Built once at import time and shared by every session.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class Strategy:
    name: str
    description: str
    difficulty: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "description": self.description, "difficulty": self.difficulty}


@dataclass(frozen=True)
class MistakePattern:
    pattern: str
    hint: str

    def to_dict(self) -> Dict[str, str]:
        return {"pattern": self.pattern, "hint": self.hint}


@dataclass(frozen=True)
class KnowledgeBase:
    """Domain knowledge for the tutor. Never mutated after construction."""
    rules: Tuple[str, ...]
    strategies: Tuple[Strategy, ...]
    common_mistakes: Tuple[MistakePattern, ...]
    pedagogical_tips: Tuple[str, ...]

    def strategy(self, name: str) -> Optional[Strategy]:
        for strategy in self.strategies:
            if strategy.name == name:
                return strategy
        return None

    def mistake(self, pattern: str) -> Optional[MistakePattern]:
        for mistake in self.common_mistakes:
            if mistake.pattern == pattern:
                return mistake
        return None


def build_knowledge_base() -> KnowledgeBase:
    return KnowledgeBase(
        rules=(
            "Only move one disk at a time",
            "Only move the top disk from any tower",
            "Cannot place a larger disk on a smaller disk",
        ),
        strategies=(
            Strategy(
                name="recursive_pattern",
                description=(
                    "To move n disks: move n-1 to auxiliary, move largest to destination, "
                    "move n-1 from auxiliary to destination"
                ),
                difficulty="advanced",
            ),
            Strategy(
                name="smallest_disk_cycle",
                description="Move smallest disk in consistent cycle: A→B→C→A for odd number of disks",
                difficulty="intermediate",
            ),
            Strategy(
                name="alternating_moves",
                description="Alternate between moving smallest disk and making the only other legal move",
                difficulty="beginner",
            ),
        ),
        common_mistakes=(
            MistakePattern(
                pattern="trying_to_move_buried_disk",
                hint="You can only move the top disk from each tower",
            ),
            MistakePattern(
                pattern="placing_large_on_small",
                hint="Remember: larger disks cannot go on top of smaller ones",
            ),
            MistakePattern(
                pattern="random_moves",
                hint="Try to develop a systematic approach rather than moving randomly",
            ),
        ),
        pedagogical_tips=(
            "Start with understanding the base case (moving 1 disk)",
            "Practice with 3 disks before attempting more",
            "Visualize the recursive structure",
            "Focus on pattern recognition rather than memorization",
        ),
    )


KNOWLEDGE_BASE = build_knowledge_base()
