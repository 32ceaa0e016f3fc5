"""
Tutor configuration loaded from the environment (and a local .env file).
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class TutorSettings:
    disk_count: int = 3
    move_log_max: int = 50
    move_log_trim_to: int = 30
    conversation_limit: int = 10
    idle_seconds: float = 30.0
    # None means "no rephrasing service": replies are always formatted locally
    rephrase_endpoint: Optional[str] = None
    rephrase_timeout: float = 10.0
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-3.5-turbo"

    @classmethod
    def from_env(cls) -> "TutorSettings":
        move_log_max = max(1, _env_int("HANOI_MOVE_LOG_MAX", cls.move_log_max))
        trim_to = _env_int("HANOI_MOVE_LOG_TRIM_TO", cls.move_log_trim_to)
        if not 0 < trim_to <= move_log_max:
            trim_to = min(cls.move_log_trim_to, move_log_max)
        disk_count = _env_int("HANOI_DISK_COUNT", cls.disk_count)
        return cls(
            disk_count=disk_count if disk_count >= 1 else cls.disk_count,
            move_log_max=move_log_max,
            move_log_trim_to=trim_to,
            conversation_limit=max(1, _env_int("HANOI_CONVERSATION_LIMIT", cls.conversation_limit)),
            idle_seconds=_env_float("HANOI_IDLE_SECONDS", cls.idle_seconds),
            rephrase_endpoint=os.getenv("HANOI_REPHRASE_ENDPOINT") or None,
            rephrase_timeout=_env_float("HANOI_REPHRASE_TIMEOUT", cls.rephrase_timeout),
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            openai_model=os.getenv("OPENAI_MODEL", cls.openai_model),
        )
