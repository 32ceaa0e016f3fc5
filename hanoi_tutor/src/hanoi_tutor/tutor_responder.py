"""
Tutor Responder

Turns a RetrievedContext into a structured pedagogical reply:
- Student analysis (struggling areas, strengths, next steps, cognitive load)
- Message and hints
- A Socratic question
- Progress-based encouragement

Deterministic except for the generic Socratic question, which is drawn from
an injectable random source.
"""

import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from hanoi_tutor.context_retriever import RetrievedContext

EFFICIENCY_STRUGGLE_THRESHOLD = 0.5
EFFICIENCY_STRENGTH_THRESHOLD = 0.9
HIGH_LOAD_MOVE_COUNT = 50

SYSTEMATIC_PROMPT = "I notice you might benefit from a more systematic approach. "
SYSTEMATIC_HINT = "Try moving the smallest disk in a consistent cycle between towers"
SYSTEMATIC_QUESTION = "What pattern do you see in how the smallest disk should move?"

OPENING_QUESTION = "What's your plan for the first few moves?"
GENERIC_QUESTIONS = (
    "What do you think would happen if you move the smallest disk to each tower in sequence?",
    "Can you identify which disk needs to be moved to make progress toward your goal?",
    "What similarities do you see between solving this puzzle and the steps you'd take with fewer disks?",
    "If you had to explain your strategy to someone else, what would you say?",
)
# Pattern-recognition question used when planning is the struggling area
PATTERN_QUESTION = GENERIC_QUESTIONS[0]

# (upper bound exclusive, message); the last band is closed at 1.0
ENCOURAGEMENT_BANDS = (
    (0.2, "Great start! Remember, every expert was once a beginner."),
    (0.5, "You're making good progress! Keep thinking about the patterns."),
    (0.8, "Excellent work! You're getting close to mastering this puzzle."),
)
MASTERY_ENCOURAGEMENT = "Outstanding! You're showing real problem-solving skills."


@dataclass
class StudentAnalysis:
    struggling_areas: List[str] = field(default_factory=list)
    strengths: List[str] = field(default_factory=list)
    next_steps: List[str] = field(default_factory=list)
    cognitive_load: str = "appropriate"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strugglingAreas": list(self.struggling_areas),
            "strengths": list(self.strengths),
            "nextSteps": list(self.next_steps),
            "cognitiveLoad": self.cognitive_load,
        }


@dataclass
class TutorReply:
    """Externally visible reply of the tutor."""
    type: str = "educational_guidance"
    message: str = ""
    hints: List[str] = field(default_factory=list)
    questions: List[str] = field(default_factory=list)
    encouragement: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "message": self.message,
            "hints": list(self.hints),
            "questions": list(self.questions),
            "encouragement": self.encouragement,
        }


def fallback_reply() -> TutorReply:
    """Static reply used when the tutor pipeline fails."""
    return TutorReply(
        type="fallback",
        message=(
            "I'm here to help you learn! Can you tell me what specific aspect of "
            "the Tower of Hanoi you'd like to understand better?"
        ),
        hints=["Try focusing on moving the smallest disk in a pattern"],
        questions=["What's your current strategy?"],
        encouragement="Keep exploring - problem-solving is a skill that improves with practice!",
    )


def encouragement_for(progress: float) -> str:
    """Pick the encouragement band; boundary values belong to the upper band."""
    for upper, message in ENCOURAGEMENT_BANDS:
        if progress < upper:
            return message
    return MASTERY_ENCOURAGEMENT


class TutorResponder:
    """
    Builds TutorReply objects from retrieved context.

    Args:
        rng: Random source for the generic Socratic question
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def analyze(self, context: RetrievedContext) -> StudentAnalysis:
        history = context.game_history
        analysis = StudentAnalysis()

        if history.efficiency < EFFICIENCY_STRUGGLE_THRESHOLD:
            analysis.struggling_areas.append("systematic_planning")
            analysis.next_steps.append("focus_on_pattern_recognition")

        if context.key_mistakes:
            analysis.struggling_areas.append("rule_application")
            analysis.next_steps.append("reinforce_basic_rules")

        if history.move_count > 0:
            if history.efficiency >= EFFICIENCY_STRENGTH_THRESHOLD:
                analysis.strengths.append("efficient_moves")
            if not context.key_mistakes:
                analysis.strengths.append("rule_following")
        if history.progress >= 0.5:
            analysis.strengths.append("goal_progress")

        if history.move_count > HIGH_LOAD_MOVE_COUNT:
            analysis.cognitive_load = "high"
            analysis.next_steps.append("suggest_reset_with_fewer_disks")

        return analysis

    def respond(
        self,
        query: str,
        context: RetrievedContext,
        analysis: Optional[StudentAnalysis] = None,
    ) -> TutorReply:
        """
        Assemble the reply. Ordering is fixed: message seed, hints, mistake
        hint appended to the message, questions, encouragement.
        """
        if analysis is None:
            analysis = self.analyze(context)
        reply = TutorReply()

        if "systematic_planning" in analysis.struggling_areas:
            reply.message = SYSTEMATIC_PROMPT
            reply.questions.append(SYSTEMATIC_QUESTION)
            reply.hints.append(SYSTEMATIC_HINT)

        if context.top_strategies:
            reply.hints.append(f"Strategy tip: {context.top_strategies[0].description}")

        if context.key_mistakes:
            reply.message += f"Hint: {context.key_mistakes[0].hint}"

        reply.questions.append(self.socratic_question(context, analysis))
        reply.encouragement = self.encouragement(context.progress)
        return reply

    def socratic_question(self, context: RetrievedContext, analysis: StudentAnalysis) -> str:
        if context.game_history.move_count == 0:
            return OPENING_QUESTION
        if "systematic_planning" in analysis.struggling_areas:
            return PATTERN_QUESTION
        return self.rng.choice(GENERIC_QUESTIONS)

    def encouragement(self, progress: float) -> str:
        return encouragement_for(progress)
