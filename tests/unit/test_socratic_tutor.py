"""
Unit Tests for HanoiTutor

Tests the pipeline fallback, conversation history, idle detection and the
reset/completion messages.
"""

import json

import httpx
import pytest
import sys
import os

# Add project root to path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
sys.path.insert(0, os.path.join(project_root, "hanoi_tutor", "src"))

from hanoi_tutor.config import TutorSettings
from hanoi_tutor.game_session import GameSession
from hanoi_tutor.puzzle_state import PuzzleState, solve_moves
from hanoi_tutor.rephraser import ResponseRephraser, format_agent_response
from hanoi_tutor.socratic_tutor import IDLE_MESSAGE, RESET_MESSAGE, HanoiTutor


class BrokenRetriever:
    def retrieve(self, query, state, log):
        raise KeyError("strategies")


@pytest.fixture
def tutor():
    return HanoiTutor(TutorSettings())


@pytest.fixture
def session():
    return GameSession(session_id="tutor_test", puzzle=PuzzleState(3))


class TestTutorResponse:

    def test_reply_recorded_in_history(self, tutor, session):
        reply = tutor.generate_tutor_response("I'm stuck", session)

        assert reply.type == "educational_guidance"
        assert len(session.conversation_history) == 1
        entry = session.conversation_history[0]
        assert entry["userQuery"] == "I'm stuck"
        assert entry["agentResponse"] == reply.to_dict()
        assert entry["context"]["priority"] == "high"
        assert "timestamp" in entry

    def test_history_bounded_to_ten(self, tutor, session):
        for i in range(12):
            tutor.generate_tutor_response(f"question {i}", session)

        assert len(session.conversation_history) == 10
        assert session.conversation_history[0]["userQuery"] == "question 2"

    def test_pipeline_failure_returns_fallback(self, tutor, session):
        tutor.retriever = BrokenRetriever()

        reply = tutor.generate_tutor_response("help", session)

        assert reply.type == "fallback"
        assert session.conversation_history == []

    @pytest.mark.asyncio
    async def test_respond_without_rephraser(self, tutor, session):
        message = await tutor.respond("hello", session)

        assert message.source == "local"
        assert message.text == format_agent_response(message.reply)

    @pytest.mark.asyncio
    async def test_respond_fallback(self, tutor, session):
        tutor.retriever = BrokenRetriever()

        message = await tutor.respond("hello", session)

        assert message.source == "fallback"
        assert message.text.startswith("I'm here to help you learn!")

    @pytest.mark.asyncio
    async def test_respond_rephrased_sends_recent_history(self, session):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"message": "Rephrased!"})

        rephraser = ResponseRephraser(endpoint="http://rephraser.test", transport=httpx.MockTransport(handler))
        tutor = HanoiTutor(TutorSettings(), rephraser=rephraser)

        for query in ["first", "second", "third"]:
            await tutor.respond(query, session)
        message = await tutor.respond("fourth", session)

        assert message.source == "rephrased"
        assert message.text == "Rephrased!"
        # Last three exchanges, including the current one
        assert [e["userQuery"] for e in seen["body"]["conversationHistory"]] == ["second", "third", "fourth"]
        assert seen["body"]["gameState"]["totalDisks"] == 3


class TestGameEvents:

    def test_reset_message(self, tutor, session):
        assert tutor.handle_game_reset(session) == RESET_MESSAGE

    def test_completion_message(self, tutor, session):
        outcome = None
        for f, t in solve_moves(3):
            outcome = session.attempt_move(f, t)

        message = tutor.handle_game_complete(session, outcome.completion)

        assert message.startswith("🎉 Congratulations! You solved it in 7 moves")
        assert "optimal solution takes 7 moves" in message
        assert "100%" in message

    def test_completion_suggests_more_disks(self, tutor, session):
        for game in range(2):
            if game:
                session.reset()
            for f, t in solve_moves(3):
                outcome = session.attempt_move(f, t)

        message = tutor.handle_game_complete(session, outcome.completion)
        assert "Try 4 disks next" in message

        assert tutor.adapt_difficulty(session)
        assert session.puzzle.disk_count == 4

    def test_completion_hook_without_efficiency(self, tutor, session):
        summary = {"moves": 7, "time": 12, "optimalMoves": 7, "diskCount": 3}
        session.on_game_complete(summary)
        session.on_game_complete(summary)

        assert tutor.recommend_difficulty(session).direction == "increase"
        message = tutor.handle_game_complete(session, summary)
        assert "7 moves and 12 seconds" in message
        assert "efficiency was 100%" in message
        assert tutor.adapt_difficulty(session)
        assert session.puzzle.disk_count == 4

    def test_hint(self, tutor, session):
        assert tutor.get_hint(session).startswith("Start by moving the smallest disk")


class TestIdleDetection:

    def test_no_prompt_before_first_move(self, tutor, session):
        assert tutor.check_idle(session, now=session.last_move_at + 600) is None

    def test_prompt_once_after_threshold(self, tutor, session):
        session.attempt_move(0, 2)
        last = session.last_move_at

        assert tutor.check_idle(session, now=last + 10) is None
        assert tutor.check_idle(session, now=last + 31) == IDLE_MESSAGE
        assert tutor.check_idle(session, now=last + 60) is None

    def test_next_move_rearms(self, tutor, session):
        session.attempt_move(0, 2)
        assert tutor.check_idle(session, now=session.last_move_at + 31) == IDLE_MESSAGE

        session.attempt_move(0, 1)
        assert tutor.check_idle(session, now=session.last_move_at + 31) == IDLE_MESSAGE

    def test_rejected_move_does_not_rearm(self, tutor, session):
        session.attempt_move(0, 2)
        assert tutor.check_idle(session, now=session.last_move_at + 31) == IDLE_MESSAGE

        session.attempt_move(0, 2)  # disk 2 onto disk 1
        assert tutor.check_idle(session, now=session.last_move_at + 31) is None

    def test_custom_threshold(self, session):
        tutor = HanoiTutor(TutorSettings(idle_seconds=5))
        session.attempt_move(0, 2)
        assert tutor.check_idle(session, now=session.last_move_at + 6) == IDLE_MESSAGE
