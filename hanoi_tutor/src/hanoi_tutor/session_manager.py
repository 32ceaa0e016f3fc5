"""
Session Manager

Keeps GameSession objects in memory, one per session id. Sessions do not
survive a restart; nothing is shared between them.
"""

import logging
import uuid
from typing import Dict, List, Optional

from hanoi_tutor.config import TutorSettings
from hanoi_tutor.game_session import GameSession
from hanoi_tutor.move_log import MoveLog
from hanoi_tutor.puzzle_state import PuzzleState

logger = logging.getLogger(__name__)


class SessionManager:
    """
    In-memory session store.

    Args:
        settings: Defaults for new sessions (disk count, log bounds, history limit)
    """

    def __init__(self, settings: Optional[TutorSettings] = None):
        self.settings = settings or TutorSettings()
        self._sessions: Dict[str, GameSession] = {}

    def new_session(self, session_id: Optional[str] = None, disk_count: Optional[int] = None) -> GameSession:
        """Build a fresh session without registering it."""
        settings = self.settings
        return GameSession(
            session_id=session_id or f"session_{uuid.uuid4().hex[:12]}",
            puzzle=PuzzleState(disk_count or settings.disk_count),
            move_log=MoveLog(settings.move_log_max, settings.move_log_trim_to),
            conversation_limit=settings.conversation_limit,
        )

    async def create_session(self, session_id: Optional[str] = None, disk_count: Optional[int] = None) -> GameSession:
        session = self.new_session(session_id, disk_count)
        self._sessions[session.session_id] = session
        logger.info(f"💾 [SessionManager] Created session {session.session_id} ({session.puzzle.disk_count} disks)")
        return session

    async def get_session(self, session_id: str) -> Optional[GameSession]:
        return self._sessions.get(session_id)

    async def get_or_create_session(self, session_id: str, disk_count: Optional[int] = None) -> GameSession:
        session = self._sessions.get(session_id)
        if session is None:
            session = await self.create_session(session_id, disk_count)
        return session

    async def delete_session(self, session_id: str) -> bool:
        """
        Drop a session.

        Returns:
            True if deleted, False if it did not exist
        """
        if session_id in self._sessions:
            del self._sessions[session_id]
            logger.info(f"🗑️ [SessionManager] Deleted session {session_id}")
            return True
        return False

    def session_ids(self) -> List[str]:
        return list(self._sessions)
