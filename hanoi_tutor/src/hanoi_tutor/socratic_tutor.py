"""
Socratic Tutor - rule-based guidance for the Tower of Hanoi

Pipeline per query:
- Retrieve context (rule table over the query and the puzzle)
- Analyze the student's situation
- Build a structured Socratic reply
- Optionally rephrase it through the external service

Failures inside the pipeline never reach the player: they are logged and
replaced by a fixed fallback reply.
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from hanoi_tutor.config import TutorSettings
from hanoi_tutor.context_retriever import ContextRetriever, RetrievedContext
from hanoi_tutor.contextual_hints import hint_for
from hanoi_tutor.difficulty_adapter import DifficultyAdapter, DifficultyAdjustment
from hanoi_tutor.game_session import GameSession, with_efficiency
from hanoi_tutor.knowledge_base import KNOWLEDGE_BASE, KnowledgeBase
from hanoi_tutor.rephraser import ResponseRephraser, format_agent_response
from hanoi_tutor.tutor_responder import StudentAnalysis, TutorReply, TutorResponder, fallback_reply

logger = logging.getLogger(__name__)

RESET_MESSAGE = "Game reset! Ready to try a new approach? I'm here to help!"
IDLE_MESSAGE = "I notice you haven't made a move in a while. Would you like a hint to get unstuck? 🤔"


class RetrievalOrResponseFailure(Exception):
    """Context retrieval or reply generation failed for a query."""


@dataclass
class TutorMessage:
    """What the player sees for one query."""
    reply: TutorReply
    text: str
    source: str  # "rephrased", "local" or "fallback"

    def to_dict(self) -> Dict[str, Any]:
        return {"reply": self.reply.to_dict(), "text": self.text, "source": self.source}


class HanoiTutor:
    """
    Orchestrates retrieval, analysis and reply generation for game sessions.

    Args:
        settings: Tutor settings (idle threshold, rephrasing endpoint)
        knowledge_base: Static knowledge tables
        rng: Random source for the generic Socratic question
        rephraser: Rephrasing client; built from settings when omitted
    """

    def __init__(
        self,
        settings: Optional[TutorSettings] = None,
        knowledge_base: KnowledgeBase = KNOWLEDGE_BASE,
        rng: Optional[random.Random] = None,
        rephraser: Optional[ResponseRephraser] = None,
    ):
        self.settings = settings or TutorSettings()
        self.retriever = ContextRetriever(knowledge_base)
        self.responder = TutorResponder(rng)
        self.rephraser = rephraser or ResponseRephraser(
            endpoint=self.settings.rephrase_endpoint,
            timeout=self.settings.rephrase_timeout,
        )
        self.difficulty_adapter = DifficultyAdapter()

        if self.rephraser.enabled:
            logger.info(f"✅ [HanoiTutor] Rephrasing via {self.rephraser.endpoint}")
        else:
            logger.info("ℹ️ [HanoiTutor] No rephrasing service configured, replies are formatted locally")

    def generate_tutor_response(self, query: str, session: GameSession) -> TutorReply:
        """
        Build the structured reply for a query.

        Successful replies are appended to the session's conversation history.
        """
        try:
            context, analysis, reply = self._run_pipeline(query, session)
        except RetrievalOrResponseFailure as e:
            logger.error(f"❌ [HanoiTutor] {e}, using fallback reply")
            return fallback_reply()

        session.add_conversation_entry({
            "timestamp": time.time(),
            "userQuery": query,
            "agentResponse": reply.to_dict(),
            "context": context.to_dict(),
        })
        logger.debug(
            f"[HanoiTutor] {session.session_id} struggling={analysis.struggling_areas} "
            f"load={analysis.cognitive_load}"
        )
        return reply

    def _run_pipeline(self, query: str, session: GameSession):
        try:
            context = self.retriever.retrieve(query, session.puzzle, session.move_log)
            analysis = self.responder.analyze(context)
            reply = self.responder.respond(query, context, analysis)
        except Exception as e:
            raise RetrievalOrResponseFailure(f"Tutor pipeline failed: {e}") from e
        return context, analysis, reply

    async def respond(self, query: str, session: GameSession) -> TutorMessage:
        """Reply to a chat message, rephrased when a service is configured."""
        reply = self.generate_tutor_response(query, session)
        if reply.type == "fallback":
            return TutorMessage(reply=reply, text=format_agent_response(reply), source="fallback")

        # History already ends with this exchange
        text, source = await self.rephraser.rephrase(
            query, reply, session.game_state(), session.conversation_history
        )
        return TutorMessage(reply=reply, text=text, source=source)

    def retrieve_context(self, query: str, session: GameSession) -> RetrievedContext:
        return self.retriever.retrieve(query, session.puzzle, session.move_log)

    def analyze(self, session: GameSession) -> StudentAnalysis:
        return self.responder.analyze(self.retrieve_context("", session))

    def get_hint(self, session: GameSession, selected_peg: Optional[int] = None) -> str:
        return hint_for(session.puzzle, selected_peg)

    def handle_game_reset(self, session: GameSession) -> str:
        return RESET_MESSAGE

    def handle_game_complete(self, session: GameSession, summary: Dict[str, Any]) -> str:
        summary = with_efficiency(summary)
        message = (
            f"🎉 Congratulations! You solved it in {summary['moves']} moves and {summary['time']} seconds! "
            f"The optimal solution takes {summary['optimalMoves']} moves, "
            f"so your efficiency was {summary['efficiency']}%."
        )
        adjustment = self.recommend_difficulty(session)
        if adjustment.direction == "increase":
            message += f" Ready for a challenge? Try {adjustment.new_disk_count} disks next."
        elif adjustment.direction == "decrease":
            message += f" Practising with {adjustment.new_disk_count} disks might help you spot the pattern."
        return message

    def recommend_difficulty(self, session: GameSession) -> DifficultyAdjustment:
        analysis = self.analyze(session) if not session.solved else None
        return self.difficulty_adapter.check_adjustment(
            session.puzzle.disk_count,
            session.recent_efficiencies(),
            analysis.cognitive_load if analysis else None,
        )

    def adapt_difficulty(self, session: GameSession) -> bool:
        """Reset the session with the recommended disk count, if any."""
        return self.difficulty_adapter.apply_adjustment(session, self.recommend_difficulty(session))

    def check_idle(self, session: GameSession, now: Optional[float] = None) -> Optional[str]:
        """
        Offer help once when the player has made moves but stopped for a while.
        The next applied move re-arms the check.
        """
        if session.idle_prompt_sent or session.solved or session.puzzle.move_count == 0:
            return None
        now = time.time() if now is None else now
        if now - session.last_move_at <= self.settings.idle_seconds:
            return None
        session.idle_prompt_sent = True
        logger.info(f"⏰ [HanoiTutor] {session.session_id} idle for {int(now - session.last_move_at)}s")
        return IDLE_MESSAGE
