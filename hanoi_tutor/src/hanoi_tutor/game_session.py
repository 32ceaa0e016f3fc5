"""
Game Session

Single-player session state: the puzzle, its move log, the tutor
conversation history and timing information. Each session is fully
isolated; only the knowledge base is shared between sessions.

The on_* methods are the game-event hooks. `attempt_move` and `reset` drive
them. A caller that applies moves to `session.puzzle` itself reports them
through the hooks; the tutor always reads the board from `session.puzzle`.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from hanoi_tutor.difficulty_adapter import DifficultyAdapter
from hanoi_tutor.move_log import DEFAULT_MAX_ENTRIES, DEFAULT_TRIM_TO, MoveLog
from hanoi_tutor.puzzle_state import MoveError, MoveRecord, PuzzleState

logger = logging.getLogger(__name__)


def with_efficiency(summary: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of a completion summary with its efficiency percentage filled in."""
    game = dict(summary)
    if game.get("efficiency") is None:
        moves = game.get("moves") or 0
        game["efficiency"] = round(game.get("optimalMoves", 0) / moves * 100) if moves else 0
    return game


@dataclass
class MoveOutcome:
    """Result of a move attempt as reported to the player."""
    success: bool
    message: str
    record: MoveRecord
    completion: Optional[Dict[str, Any]] = None


@dataclass
class GameSession:
    """In-memory state for one player."""
    session_id: str
    puzzle: PuzzleState = field(default_factory=PuzzleState)
    move_log: MoveLog = field(default_factory=lambda: MoveLog(DEFAULT_MAX_ENTRIES, DEFAULT_TRIM_TO))
    conversation_history: List[Dict[str, Any]] = field(default_factory=list)
    conversation_limit: int = 10
    completed_games: List[Dict[str, Any]] = field(default_factory=list)
    started_at: float = field(default_factory=time.time)
    last_move_at: float = field(default_factory=time.time)
    idle_prompt_sent: bool = False
    solved: bool = False

    def attempt_move(self, from_peg: int, to_peg: int) -> MoveOutcome:
        """Apply a move and fire the matching hooks. Rejected moves are logged, not raised."""
        try:
            record = self.puzzle.apply_move(from_peg, to_peg)
        except MoveError as e:
            self.move_log.record(e.record)
            logger.debug(f"[GameSession] {self.session_id} rejected {from_peg}->{to_peg}: {e.reason}")
            return MoveOutcome(success=False, message=str(e), record=e.record)

        self.on_move_applied(record)
        outcome = MoveOutcome(success=True, message=f"Moved disk {record.disk_size}", record=record)

        if self.puzzle.is_solved() and not self.solved:
            outcome.completion = self.completion_summary()
            self.on_game_complete(outcome.completion)
        return outcome

    def reset(self, disk_count: Optional[int] = None) -> None:
        self.puzzle.reset(disk_count)
        self.on_game_reset()

    def on_move_applied(self, record: MoveRecord) -> None:
        self.move_log.record(record)
        self.last_move_at = record.timestamp
        self.idle_prompt_sent = False

    def on_game_reset(self) -> None:
        self.move_log.clear()
        self.started_at = self.last_move_at = time.time()
        self.idle_prompt_sent = False
        self.solved = False
        logger.info(f"🔄 [GameSession] {self.session_id} reset with {self.puzzle.disk_count} disks")

    def on_game_complete(self, summary: Dict[str, Any]) -> None:
        self.solved = True
        self.completed_games.append(with_efficiency(summary))
        logger.info(
            f"🎉 [GameSession] {self.session_id} solved in {summary.get('moves')} moves "
            f"(optimal {summary.get('optimalMoves')})"
        )

    def completion_summary(self, now: Optional[float] = None) -> Dict[str, Any]:
        moves = self.puzzle.move_count
        optimal = self.puzzle.optimal_move_count()
        return {
            "moves": moves,
            "time": int((now or time.time()) - self.started_at),
            "optimalMoves": optimal,
            "diskCount": self.puzzle.disk_count,
            "efficiency": round(optimal / moves * 100) if moves else 0,
        }

    def add_conversation_entry(self, entry: Dict[str, Any]) -> None:
        """Append to the conversation history, keeping the most recent entries."""
        self.conversation_history.append(entry)
        if len(self.conversation_history) > self.conversation_limit:
            self.conversation_history = self.conversation_history[-self.conversation_limit:]

    def recent_efficiencies(self) -> List[float]:
        """Efficiency (0-1) of each completed game, oldest first."""
        return [game["efficiency"] / 100 for game in self.completed_games]

    def game_state(self) -> Dict[str, Any]:
        """Snapshot sent to the presentation layer and the rephrasing service."""
        puzzle = self.puzzle
        moves = puzzle.move_count
        last = self.move_log.recent_moves(1)
        return {
            "towers": puzzle.snapshot(),
            "moveCount": moves,
            "totalDisks": puzzle.disk_count,
            "optimalMoves": puzzle.optimal_move_count(),
            "isComplete": puzzle.is_solved(),
            "timeElapsed": int((time.time() - self.started_at) * 1000),
            "efficiency": round(puzzle.efficiency() * 100) if moves else 0,
            "progress": puzzle.progress(),
            "difficulty": DifficultyAdapter.level_for(puzzle.disk_count),
            "lastMove": last[0].to_dict() if last else None,
        }
