"""
Puzzle State

Three-peg Tower of Hanoi state and its legal-move validator.

Pegs are stored bottom-first, so the top disk of a peg is the last element.
Peg 0 is the source, peg 1 the auxiliary and peg 2 the destination.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

PEG_COUNT = 3
SOURCE_PEG = 0
AUXILIARY_PEG = 1
DESTINATION_PEG = 2


@dataclass(frozen=True)
class MoveRecord:
    """A single executed or rejected move. Immutable once created."""
    from_peg: int
    to_peg: int
    disk_size: Optional[int]
    move_number: int
    timestamp: float = field(default_factory=time.time)
    succeeded: bool = True
    failure_reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Wire form used by the HTTP layer and the rephrasing payload."""
        return {
            "fromPeg": self.from_peg,
            "toPeg": self.to_peg,
            "diskSize": self.disk_size,
            "moveNumber": self.move_number,
            "timestamp": self.timestamp,
            "succeeded": self.succeeded,
            "failureReason": self.failure_reason,
        }


class MoveError(Exception):
    """Base class for rejected moves. Carries the failed MoveRecord."""
    reason = "invalid_move"

    def __init__(self, message: str, record: MoveRecord):
        super().__init__(message)
        self.record = record


class EmptySource(MoveError):
    """The source peg holds no disk."""
    reason = "empty_source"


class SizeViolation(MoveError):
    """The moved disk is larger than the destination's top disk."""
    reason = "larger_on_smaller"


class InvalidPeg(MoveError):
    """Peg index out of range, or source and destination are the same peg."""
    reason = "invalid_peg"


class PuzzleState:
    """
    Pegs, move counter and disk count for one puzzle instance.

    Accepts any disk count N >= 1. All disks start on the source peg.
    """

    def __init__(self, disk_count: int = 3):
        self.disk_count = 0
        self.pegs: List[List[int]] = []
        self.move_count = 0
        self.reset(disk_count)

    def reset(self, disk_count: Optional[int] = None) -> None:
        """Put every disk back on the source peg and zero the move counter."""
        if disk_count is None:
            disk_count = self.disk_count
        if disk_count < 1:
            raise ValueError(f"Puzzle needs at least one disk (got {disk_count})")
        self.disk_count = disk_count
        self.pegs = [list(range(disk_count, 0, -1)), [], []]
        self.move_count = 0

    def top_disk(self, peg: int) -> Optional[int]:
        """Size of the top disk on a peg, or None when empty."""
        stack = self.pegs[peg]
        return stack[-1] if stack else None

    def _reject(self, error_cls, message: str, from_peg: int, to_peg: int,
                disk_size: Optional[int]) -> MoveError:
        record = MoveRecord(
            from_peg=from_peg,
            to_peg=to_peg,
            disk_size=disk_size,
            move_number=self.move_count,
            succeeded=False,
            failure_reason=error_cls.reason,
        )
        return error_cls(message, record)

    def apply_move(self, from_peg: int, to_peg: int) -> MoveRecord:
        """
        Move the top disk of from_peg onto to_peg.

        Returns:
            The succeeded MoveRecord.

        Raises:
            InvalidPeg, EmptySource or SizeViolation. The puzzle is left
            unchanged and the error carries the failed MoveRecord.
        """
        if not (0 <= from_peg < PEG_COUNT and 0 <= to_peg < PEG_COUNT):
            raise self._reject(InvalidPeg, f"No such peg: {from_peg} -> {to_peg}",
                                from_peg, to_peg, None)
        if from_peg == to_peg:
            raise self._reject(InvalidPeg, "Source and destination are the same peg.",
                                from_peg, to_peg, self.top_disk(from_peg))

        disk = self.top_disk(from_peg)
        if disk is None:
            raise self._reject(EmptySource, "No disk to move from selected tower.",
                                from_peg, to_peg, None)

        target_top = self.top_disk(to_peg)
        if target_top is not None and disk > target_top:
            raise self._reject(SizeViolation, "Cannot place larger disk on smaller disk!",
                                from_peg, to_peg, disk)

        self.pegs[from_peg].pop()
        self.pegs[to_peg].append(disk)
        self.move_count += 1
        return MoveRecord(
            from_peg=from_peg,
            to_peg=to_peg,
            disk_size=disk,
            move_number=self.move_count,
        )

    def is_solved(self) -> bool:
        return len(self.pegs[DESTINATION_PEG]) == self.disk_count

    def optimal_move_count(self) -> int:
        return 2 ** self.disk_count - 1

    def efficiency(self) -> float:
        """optimal / moves made, clamped to [0, 1]."""
        return min(1.0, self.optimal_move_count() / max(self.move_count, 1))

    def progress(self) -> float:
        """Fraction of disks already sitting on the destination peg."""
        return len(self.pegs[DESTINATION_PEG]) / self.disk_count

    def peg_counts(self) -> List[int]:
        return [len(peg) for peg in self.pegs]

    def snapshot(self) -> List[List[int]]:
        """Deep copy of the pegs."""
        return [list(peg) for peg in self.pegs]

    def legal_moves(self) -> List[Tuple[int, int]]:
        moves = []
        for src in range(PEG_COUNT):
            disk = self.top_disk(src)
            if disk is None:
                continue
            for dst in range(PEG_COUNT):
                if dst == src:
                    continue
                target_top = self.top_disk(dst)
                if target_top is None or disk < target_top:
                    moves.append((src, dst))
        return moves

    def __str__(self) -> str:
        return " | ".join(str(peg) for peg in self.pegs)


def solve_moves(
    n: int,
    source: int = SOURCE_PEG,
    auxiliary: int = AUXILIARY_PEG,
    destination: int = DESTINATION_PEG,
) -> Iterator[Tuple[int, int]]:
    """Yield the 2^n - 1 moves of the standard recursive solution."""
    if n <= 0:
        return
    yield from solve_moves(n - 1, source, destination, auxiliary)
    yield (source, destination)
    yield from solve_moves(n - 1, auxiliary, source, destination)
