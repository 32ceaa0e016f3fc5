"""
Context Retriever

Selects a small, ranked bundle of static knowledge for a tutor query.

There is no embedding or vector search here: each step walks an explicit
rule table of (predicate, contribution) pairs over the query text and the
current puzzle. Ranking is insertion order, capped per category.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Tuple

from hanoi_tutor.knowledge_base import KNOWLEDGE_BASE, KnowledgeBase, MistakePattern, Strategy
from hanoi_tutor.move_log import MoveLog
from hanoi_tutor.puzzle_state import MoveRecord, PuzzleState

logger = logging.getLogger(__name__)

HISTORY_WINDOW = 5
MAX_STRATEGIES = 2
MAX_MISTAKES = 2
INEFFICIENCY_FACTOR = 1.5


@dataclass
class GameHistory:
    """Snapshot of the puzzle taken when a query arrives."""
    recent_moves: List[MoveRecord]
    peg_counts: List[int]
    move_count: int
    total_disks: int
    progress: float

    @property
    def optimal_moves(self) -> int:
        return 2 ** self.total_disks - 1

    @property
    def efficiency(self) -> float:
        return max(0.0, min(1.0, self.optimal_moves / max(self.move_count, 1)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recentMoves": [m.to_dict() for m in self.recent_moves],
            "currentState": {
                "towers": list(self.peg_counts),
                "moveCount": self.move_count,
                "totalDisks": self.total_disks,
            },
            "progress": self.progress,
        }


@dataclass
class PedagogicalFocus:
    learning_objectives: List[str] = field(default_factory=list)
    suggested_exercises: List[str] = field(default_factory=list)
    concepts_to_reinforce: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "learningObjectives": list(self.learning_objectives),
            "suggestedExercises": list(self.suggested_exercises),
            "conceptsToReinforce": list(self.concepts_to_reinforce),
        }


@dataclass
class RetrievedContext:
    """Per-query context bundle. Created for one query and then discarded."""
    game_history: GameHistory
    top_strategies: List[Strategy] = field(default_factory=list)
    key_mistakes: List[MistakePattern] = field(default_factory=list)
    pedagogical_focus: PedagogicalFocus = field(default_factory=PedagogicalFocus)
    # Never varied; kept for consumers of the serialized context
    priority: str = "high"

    @property
    def progress(self) -> float:
        return self.game_history.progress

    def to_dict(self) -> Dict[str, Any]:
        return {
            "priority": self.priority,
            "gameHistory": self.game_history.to_dict(),
            "topStrategies": [s.to_dict() for s in self.top_strategies],
            "keyMistakes": [m.to_dict() for m in self.key_mistakes],
            "pedagogicalFocus": self.pedagogical_focus.to_dict(),
        }


def _mentions(*keywords: str) -> Callable[[str], bool]:
    return lambda query: any(k in query for k in keywords)


# (query predicate, puzzle predicate) -> strategy name. Order matters.
StrategyRule = Tuple[Callable[[str, PuzzleState], bool], str]

STRATEGY_RULES: List[StrategyRule] = [
    (lambda q, s: "stuck" in q or "help" in q, "alternating_moves"),
    (lambda q, s: s.move_count == 0, "smallest_disk_cycle"),
    (lambda q, s: s.disk_count >= 4, "recursive_pattern"),
]

# query predicate -> (objective, exercise, concept)
PEDAGOGY_RULES: List[Tuple[Callable[[str], bool], Tuple[str, str, str]]] = [
    (
        _mentions("why", "understand"),
        ("Understanding the recursive nature of the problem", "",
         "Pattern recognition in recursive algorithms"),
    ),
    (
        _mentions("faster", "efficient"),
        ("Learning optimal solution strategies", "Practice with systematic move patterns", ""),
    ),
]

INEFFICIENT_SOLVING = MistakePattern(
    pattern="inefficient_solving",
    hint="Try to think more systematically about each move",
)


class ContextRetriever:
    """
    Rule-driven context selection.

    `retrieve` is a pure function of its inputs plus the static knowledge
    base; every step is exposed separately for testing.
    """

    def __init__(self, knowledge_base: KnowledgeBase = KNOWLEDGE_BASE):
        self.knowledge_base = knowledge_base

    def retrieve(self, query: str, state: PuzzleState, log: MoveLog) -> RetrievedContext:
        context = RetrievedContext(
            game_history=self.game_history(state, log),
            top_strategies=self.relevant_strategies(query, state)[:MAX_STRATEGIES],
            key_mistakes=self.mistake_patterns(state, log)[:MAX_MISTAKES],
            pedagogical_focus=self.pedagogical_context(query),
        )
        logger.debug(
            f"[ContextRetriever] strategies={[s.name for s in context.top_strategies]} "
            f"mistakes={[m.pattern for m in context.key_mistakes]}"
        )
        return context

    def game_history(self, state: PuzzleState, log: MoveLog) -> GameHistory:
        return GameHistory(
            recent_moves=log.recent_moves(HISTORY_WINDOW, succeeded_only=True),
            peg_counts=state.peg_counts(),
            move_count=state.move_count,
            total_disks=state.disk_count,
            progress=state.progress(),
        )

    def relevant_strategies(self, query: str, state: PuzzleState) -> List[Strategy]:
        query_lower = query.lower()
        strategies = []
        for predicate, name in STRATEGY_RULES:
            if predicate(query_lower, state):
                strategy = self.knowledge_base.strategy(name)
                if strategy is not None:
                    strategies.append(strategy)
        return strategies

    def mistake_patterns(self, state: PuzzleState, log: MoveLog) -> List[MistakePattern]:
        mistakes = []
        if log.is_random_movement():
            random_moves = self.knowledge_base.mistake("random_moves")
            if random_moves is not None:
                mistakes.append(random_moves)

        if state.move_count > state.optimal_move_count() * INEFFICIENCY_FACTOR:
            mistakes.append(INEFFICIENT_SOLVING)

        return mistakes

    def pedagogical_context(self, query: str) -> PedagogicalFocus:
        query_lower = query.lower()
        focus = PedagogicalFocus()
        for predicate, (objective, exercise, concept) in PEDAGOGY_RULES:
            if not predicate(query_lower):
                continue
            focus.learning_objectives.append(objective)
            if exercise:
                focus.suggested_exercises.append(exercise)
            if concept:
                focus.concepts_to_reinforce.append(concept)
        return focus
