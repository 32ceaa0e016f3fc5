"""
Response Enhancer - the rephrasing service

Turns the tutor's structured reply into a short conversational message.
With an OpenAI key the message comes from a chat completion; without one,
a local template is filled in with the tutor's first hint. Any failure
produces one of a few generic fallback messages so the chat never breaks.
"""

import json
import logging
import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from hanoi_tutor.config import TutorSettings

logger = logging.getLogger(__name__)

DEFAULT_HINT = "Try thinking about the patterns in the puzzle."

TEMPLATES: Dict[str, List[str]] = {
    "stuck": [
        "I can see you're feeling stuck! Let's think about this step by step. {hint} What do you think would happen if you tried that approach?",
        "Getting stuck is part of learning! {hint} Can you see why this might be the next logical step?",
        "Don't worry about being stuck - it means you're thinking! {hint} What pattern do you notice?",
    ],
    "strategy": [
        "Great question about strategy! {hint} How do you think this connects to what you've learned about problem-solving?",
        "Strategy is key to solving puzzles efficiently. {hint} What similarities do you see with other problems you've solved?",
        "Let's explore different approaches together. {hint} Why do you think this strategy might work?",
    ],
    "rules": [
        "Understanding the rules is important! {hint} Can you explain why this rule exists?",
        "Rules help us solve problems systematically. {hint} What would happen if we didn't follow this rule?",
        "Good question about the rules! {hint} How does this rule help us reach our goal?",
    ],
    "general": [
        "That's a thoughtful question! {hint} What connections can you make to help solve this?",
        "I like how you're thinking about this! {hint} What would you try next?",
        "Excellent observation! {hint} How might this help you move forward?",
    ],
}

# category -> keywords, checked in order
CATEGORY_KEYWORDS = (
    ("stuck", ("stuck", "help")),
    ("strategy", ("strategy", "best", "approach")),
    ("rules", ("rule", "why", "not allowed")),
)

FALLBACK_RESPONSES = (
    "I'm here to help you learn! Can you tell me more about what you're trying to do?",
    "Let's work through this together. What specific part of the puzzle is challenging you?",
    "Great question! Think about the goal of the puzzle and what moves might get you closer to it.",
    "I can see you're thinking hard about this! What patterns do you notice in the puzzle?",
    "Learning happens through exploration. What have you tried so far, and what happened?",
)


@dataclass
class EnhancedResponse:
    message: str
    source: str  # "openai", "local" or "fallback"

    def to_dict(self) -> Dict[str, str]:
        return {"message": self.message, "source": self.source}


def calculate_progress(game_state: Optional[Dict[str, Any]]) -> int:
    """Percentage of disks on the destination tower."""
    if not game_state or not game_state.get("towers"):
        return 0
    towers = game_state["towers"]
    if len(towers) < 3 or not towers[2]:
        return 0

    destination = towers[2]
    if isinstance(destination, dict):
        on_destination = len(destination.get("disks") or [])
    else:
        on_destination = len(destination)
    total = game_state.get("totalDisks") or 3
    return round(on_destination / total * 100)


def response_category(user_message: str) -> str:
    message_lower = user_message.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(k in message_lower for k in keywords):
            return category
    return "general"


class ResponseEnhancer:
    """
    Args:
        settings: Supplies the OpenAI key and model
        llm_client: Chat completion client; built from the key when omitted
        rng: Random source for template and fallback selection
    """

    def __init__(
        self,
        settings: Optional[TutorSettings] = None,
        llm_client: Optional[Any] = None,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings or TutorSettings()
        self.model = self.settings.openai_model
        self.rng = rng or random.Random()
        if llm_client is None and self.settings.openai_api_key:
            llm_client = AsyncOpenAI(api_key=self.settings.openai_api_key)
        self.llm_client = llm_client

    async def enhance(
        self,
        user_message: str,
        agent_response: Optional[Dict[str, Any]],
        game_state: Optional[Dict[str, Any]] = None,
        conversation_history: Optional[List[Dict[str, Any]]] = None,
    ) -> EnhancedResponse:
        try:
            if self.llm_client is not None:
                message = await self._call_openai(user_message, agent_response, game_state)
                return EnhancedResponse(message=message, source="openai")
            return EnhancedResponse(
                message=self.enhance_locally(user_message, agent_response),
                source="local",
            )
        except Exception as e:
            logger.warning(f"⚠️ [ResponseEnhancer] Enhancement failed, using fallback: {e}")
            return EnhancedResponse(message=self.rng.choice(FALLBACK_RESPONSES), source="fallback")

    def build_system_prompt(
        self,
        user_message: str,
        agent_response: Optional[Dict[str, Any]],
        game_state: Optional[Dict[str, Any]],
    ) -> str:
        game_state = game_state or {}
        return f"""You are an educational tutor for the Tower of Hanoi puzzle. Your role is to:
1. Help students learn problem-solving strategies through Socratic questioning
2. Provide hints without giving direct answers
3. Encourage critical thinking and pattern recognition
4. Use a friendly, supportive tone appropriate for learning

Game Context:
- Current moves: {game_state.get('moveCount') or 0}
- Total disks: {game_state.get('totalDisks') or 3}
- Progress: {calculate_progress(game_state)}%

Student's question: "{user_message}"

Agent's analysis: {json.dumps(agent_response)}

Please provide a natural, conversational response that incorporates the agent's insights while maintaining an educational, Socratic teaching style. Keep responses concise (2-3 sentences) and end with a thought-provoking question when appropriate."""

    async def _call_openai(
        self,
        user_message: str,
        agent_response: Optional[Dict[str, Any]],
        game_state: Optional[Dict[str, Any]],
    ) -> str:
        response = await self.llm_client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": self.build_system_prompt(user_message, agent_response, game_state)},
                {"role": "user", "content": user_message},
            ],
            max_tokens=150,
            temperature=0.7,
        )
        if not response.choices:
            raise ValueError("Invalid OpenAI response")
        content = response.choices[0].message.content
        if not content or not content.strip():
            raise ValueError("Empty OpenAI response")
        return content.strip()

    def enhance_locally(self, user_message: str, agent_response: Optional[Dict[str, Any]]) -> str:
        template = self.rng.choice(TEMPLATES[response_category(user_message)])
        hints = (agent_response or {}).get("hints") or []
        return template.replace("{hint}", hints[0] if hints else DEFAULT_HINT)
