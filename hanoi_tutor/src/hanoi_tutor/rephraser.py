"""
Response Rephraser

Client for the optional rephrasing service. Posts the structured tutor
reply and receives natural prose back. When the service is not configured,
unreachable, slow, or returns something unusable, the reply is formatted
locally instead; the player never sees the failure.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from hanoi_tutor.tutor_responder import TutorReply

logger = logging.getLogger(__name__)

HISTORY_ENTRIES = 3


class RephraseUnavailable(Exception):
    """The rephrasing service could not produce a usable message."""


def format_agent_response(reply: TutorReply) -> str:
    """Message, first hint, first question and encouragement separated by blank lines."""
    formatted = reply.message or ""
    if reply.hints:
        formatted += "\n\n💡 " + reply.hints[0]
    if reply.questions:
        formatted += "\n\n🤔 " + reply.questions[0]
    if reply.encouragement:
        formatted += "\n\n⭐ " + reply.encouragement
    return formatted


class ResponseRephraser:
    """
    Args:
        endpoint: URL of the rephrasing service; None disables rephrasing
        timeout: Seconds before a pending call counts as unavailable
        transport: Optional httpx transport (used by tests)
    """

    def __init__(
        self,
        endpoint: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self.transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.endpoint)

    def build_payload(
        self,
        user_message: str,
        reply: TutorReply,
        game_state: Dict[str, Any],
        conversation_history: List[Dict[str, Any]],
    ) -> Dict[str, Any]:
        return {
            "userMessage": user_message,
            "agentResponse": reply.to_dict(),
            "gameState": game_state,
            "conversationHistory": conversation_history[-HISTORY_ENTRIES:],
        }

    async def rephrase(
        self,
        user_message: str,
        reply: TutorReply,
        game_state: Dict[str, Any],
        conversation_history: List[Dict[str, Any]],
    ) -> Tuple[str, str]:
        """
        Returns:
            (text, source) where source is "rephrased" or "local"
        """
        if not self.enabled:
            return format_agent_response(reply), "local"

        payload = self.build_payload(user_message, reply, game_state, conversation_history)
        try:
            message = await self._post(payload)
        except RephraseUnavailable as e:
            logger.warning(f"⚠️ [Rephraser] Service unavailable, using agent response: {e}")
            return format_agent_response(reply), "local"
        return message, "rephrased"

    async def _post(self, payload: Dict[str, Any]) -> str:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.endpoint, json=payload)
        except httpx.TimeoutException as e:
            raise RephraseUnavailable(f"timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise RephraseUnavailable(f"request failed: {e}") from e

        if not response.is_success:
            raise RephraseUnavailable(f"status {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise RephraseUnavailable("response is not JSON") from e

        message = data.get("message") if isinstance(data, dict) else None
        if not isinstance(message, str) or not message.strip():
            raise RephraseUnavailable("response has no message")
        return message
