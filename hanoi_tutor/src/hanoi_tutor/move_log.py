"""
Move Log

Bounded history of executed and rejected moves, plus the derived
"random movement" heuristic consumed by the context retriever.

Trimming uses hysteresis: once the log grows past `max_entries` it is cut
back to the most recent `trim_to` entries in one go, instead of dropping a
single record on every overflow.
"""

from typing import Iterator, List

from hanoi_tutor.puzzle_state import MoveRecord

DEFAULT_MAX_ENTRIES = 50
DEFAULT_TRIM_TO = 30
RANDOM_MOVEMENT_THRESHOLD = 0.8
VARIANCE_WINDOW = 3


def population_variance(values: List[float]) -> float:
    """mean((x - mean(xs))^2); 0.0 for an empty sequence."""
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    return sum((v - mean) ** 2 for v in values) / len(values)


class MoveLog:
    """
    Ordered sequence of MoveRecords, oldest first.

    Args:
        max_entries: High-water mark; exceeding it triggers a trim
        trim_to: Number of most recent entries kept after a trim
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES, trim_to: int = DEFAULT_TRIM_TO):
        if max_entries < 1:
            raise ValueError("max_entries must be positive")
        if not 0 < trim_to <= max_entries:
            raise ValueError(f"trim_to must be in 1..{max_entries} (got {trim_to})")
        self.max_entries = max_entries
        self.trim_to = trim_to
        self._entries: List[MoveRecord] = []

    def record(self, move: MoveRecord) -> None:
        self._entries.append(move)
        if len(self._entries) > self.max_entries:
            self._entries = self._entries[-self.trim_to:]

    def recent_moves(self, n: int, succeeded_only: bool = False) -> List[MoveRecord]:
        """Last n entries, oldest first."""
        if n <= 0:
            return []
        entries = self._entries
        if succeeded_only:
            entries = [m for m in entries if m.succeeded]
        return list(entries[-n:])

    def combined_variance(self, window: int = VARIANCE_WINDOW) -> float:
        """
        Average of the variances of the `from` and `to` peg indices over the
        last `window` successful moves.

        This is a crude "patterned vs. random" signal, not a statistical
        test. Fewer than 2 moves yield 0.0.
        """
        moves = self.recent_moves(window, succeeded_only=True)
        if len(moves) < 2:
            return 0.0
        from_variance = population_variance([m.from_peg for m in moves])
        to_variance = population_variance([m.to_peg for m in moves])
        return (from_variance + to_variance) / 2

    def is_random_movement(
        self,
        threshold: float = RANDOM_MOVEMENT_THRESHOLD,
        window: int = VARIANCE_WINDOW,
    ) -> bool:
        # A full window is required before the heuristic fires
        if len(self.recent_moves(window, succeeded_only=True)) < window:
            return False
        return self.combined_variance(window) > threshold

    def failed_count(self) -> int:
        return sum(1 for m in self._entries if not m.succeeded)

    def clear(self) -> None:
        self._entries = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[MoveRecord]:
        return iter(list(self._entries))
