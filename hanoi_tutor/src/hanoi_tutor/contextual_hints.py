"""
Contextual hints for direct hint requests (the "give me a hint" button),
independent of the chat pipeline.
"""

from typing import List, Optional

from hanoi_tutor.puzzle_state import SOURCE_PEG, PuzzleState

SOLVED_HINT = "You've already solved the puzzle! Try increasing the difficulty."
OPENING_HINT = (
    "Start by moving the smallest disk. Remember, you can never place a larger disk on a smaller one."
)
DEFAULT_HINT = "Think about which disk you need to move to make progress toward your goal."


def contextual_hints(state: PuzzleState, selected_peg: Optional[int] = None) -> List[str]:
    """All hints that apply to the current puzzle, most specific first."""
    hints = []

    efficiency = state.optimal_move_count() / state.move_count * 100 if state.move_count else 100.0
    if efficiency < 50 and state.move_count > 5:
        hints.append("Try to think ahead - each move should bring you closer to the goal.")

    if len(state.pegs[SOURCE_PEG]) == state.disk_count:
        hints.append("Start by moving the smallest disk first.")

    if selected_peg is not None:
        hints.append("You've selected a tower. Now choose where to move the top disk.")

    hints.append("Remember: to move a large disk, you first need to move all smaller disks out of the way.")
    hints.append("The smallest disk alternates between the three towers in a pattern.")
    return hints


def hint_for(state: PuzzleState, selected_peg: Optional[int] = None) -> str:
    if state.is_solved():
        return SOLVED_HINT
    if state.move_count == 0:
        return OPENING_HINT
    hints = contextual_hints(state, selected_peg)
    return hints[0] if hints else DEFAULT_HINT
