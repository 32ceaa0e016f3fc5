"""
FastAPI Backend for the Hanoi Tutor

Provides REST API endpoints for:
- Game sessions (create, state, moves, reset, delete)
- Tutor chat, direct hints and idle suggestions
- The rephrasing service used to turn tutor replies into prose
"""

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
import os
import sys
import time
import logging
import signal

from lib.logger import setup_logging, get_logger

setup_logging(level=logging.INFO, use_colors=True)

logger = get_logger("backend.main")

# Add the hanoi_tutor package to Python path
backend_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.dirname(backend_dir)
package_src = os.path.join(project_root, 'hanoi_tutor', 'src')
if os.path.exists(package_src) and package_src not in sys.path:
    sys.path.insert(0, package_src)

from hanoi_tutor.config import TutorSettings
from hanoi_tutor.game_session import GameSession
from hanoi_tutor.puzzle_state import solve_moves
from hanoi_tutor.response_enhancer import FALLBACK_RESPONSES, ResponseEnhancer
from hanoi_tutor.session_manager import SessionManager
from hanoi_tutor.socratic_tutor import HanoiTutor

MIN_DISKS = 3
MAX_DISKS = 8

# Singletons, created on first use
_settings: Optional[TutorSettings] = None
_tutor: Optional[HanoiTutor] = None
_session_manager: Optional[SessionManager] = None
_enhancer: Optional[ResponseEnhancer] = None


def get_settings() -> TutorSettings:
    global _settings
    if _settings is None:
        _settings = TutorSettings.from_env()
    return _settings


def get_tutor_instance() -> HanoiTutor:
    """Get or create singleton HanoiTutor instance."""
    global _tutor
    if _tutor is None:
        _tutor = HanoiTutor(get_settings())
    return _tutor


def get_session_manager() -> SessionManager:
    global _session_manager
    if _session_manager is None:
        _session_manager = SessionManager(get_settings())
    return _session_manager


def get_enhancer() -> ResponseEnhancer:
    global _enhancer
    if _enhancer is None:
        _enhancer = ResponseEnhancer(get_settings())
    return _enhancer


app = FastAPI(
    title="Hanoi Tutor API",
    description="Tower of Hanoi game sessions with a Socratic tutor",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# ==================== Pydantic Models ====================

class CreateSessionRequest(BaseModel):
    diskCount: Optional[int] = Field(None, ge=MIN_DISKS, le=MAX_DISKS)


class ResetRequest(BaseModel):
    diskCount: Optional[int] = Field(None, ge=MIN_DISKS, le=MAX_DISKS)
    # Use the difficulty adapter's recommendation when no disk count is given
    adaptive: bool = False


class MoveRequest(BaseModel):
    fromPeg: int
    toPeg: int


class ChatMessage(BaseModel):
    content: str


class ChatResponse(BaseModel):
    content: str
    reply: Dict[str, Any]
    source: str


# ==================== Helpers ====================

async def require_session(session_id: str) -> GameSession:
    session = await get_session_manager().get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


# ==================== API Endpoints ====================

@app.get("/")
async def root():
    """Health check endpoint."""
    settings = get_settings()
    return {
        "status": "ok",
        "service": "Hanoi Tutor API",
        "version": "1.0.0",
        "rephrasing_enabled": bool(settings.rephrase_endpoint),
        "openai_enabled": bool(settings.openai_api_key),
    }


@app.post("/api/sessions")
async def create_session(request: Optional[CreateSessionRequest] = None):
    disk_count = request.diskCount if request else None
    session = await get_session_manager().create_session(disk_count=disk_count)
    logger.request("POST", "/api/sessions", session.session_id, {"disk_count": session.puzzle.disk_count})
    return {"sessionId": session.session_id, "state": session.game_state()}


@app.get("/api/sessions/{session_id}/state")
async def get_state(session_id: str):
    session = await require_session(session_id)
    return session.game_state()


@app.post("/api/sessions/{session_id}/moves")
async def make_move(session_id: str, move: MoveRequest):
    """
    Apply a move. Rejected moves are normal game events and answer 200
    with success=false.
    """
    session = await require_session(session_id)
    outcome = session.attempt_move(move.fromPeg, move.toPeg)

    result = {
        "success": outcome.success,
        "message": outcome.message,
        "record": outcome.record.to_dict(),
        "state": session.game_state(),
    }
    if outcome.completion is not None:
        result["tutorMessage"] = get_tutor_instance().handle_game_complete(session, outcome.completion)
        result["completion"] = outcome.completion
    return result


@app.post("/api/sessions/{session_id}/reset")
async def reset_game(session_id: str, request: Optional[ResetRequest] = None):
    session = await require_session(session_id)
    tutor = get_tutor_instance()

    if request and request.diskCount is None and request.adaptive:
        if not tutor.adapt_difficulty(session):
            session.reset()
    else:
        session.reset(request.diskCount if request else None)

    return {"state": session.game_state(), "tutorMessage": tutor.handle_game_reset(session)}


@app.post("/api/sessions/{session_id}/chat", response_model=ChatResponse)
async def chat(session_id: str, message: ChatMessage):
    session = await require_session(session_id)
    start = time.time()
    tutor_message = await get_tutor_instance().respond(message.content, session)
    logger.response(200, f"/api/sessions/{session_id}/chat", time.time() - start, {"source": tutor_message.source})
    return ChatResponse(
        content=tutor_message.text,
        reply=tutor_message.reply.to_dict(),
        source=tutor_message.source,
    )


@app.get("/api/sessions/{session_id}/hint")
async def get_hint(session_id: str, selectedPeg: Optional[int] = None):
    session = await require_session(session_id)
    return {"hint": get_tutor_instance().get_hint(session, selectedPeg)}


@app.get("/api/sessions/{session_id}/idle")
async def check_idle(session_id: str):
    session = await require_session(session_id)
    return {"message": get_tutor_instance().check_idle(session)}


@app.get("/api/solution")
async def get_solution(diskCount: int = Query(3, ge=MIN_DISKS, le=MAX_DISKS)):
    """Optimal move sequence for a puzzle size (demo and walkthroughs)."""
    moves = [[from_peg, to_peg] for from_peg, to_peg in solve_moves(diskCount)]
    return {"diskCount": diskCount, "optimalMoves": len(moves), "moves": moves}


@app.delete("/api/sessions/{session_id}")
async def delete_session(session_id: str):
    if not await get_session_manager().delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"status": "deleted", "session_id": session_id}


@app.post("/api/chatbot")
async def chatbot(request: Request):
    """
    Rephrasing service. Always answers 200 so the chat never breaks.
    """
    enhancer = get_enhancer()
    try:
        body = await request.json()
        enhanced = await enhancer.enhance(
            body.get("userMessage") or "",
            body.get("agentResponse"),
            body.get("gameState"),
            body.get("conversationHistory"),
        )
    except Exception as e:
        logger.error("Chatbot request failed", error=e)
        return {"message": enhancer.rng.choice(FALLBACK_RESPONSES), "source": "fallback"}
    return enhanced.to_dict()


@app.on_event("startup")
async def startup_event():
    settings = get_settings()
    logger.section("HANOI TUTOR STARTUP", {
        "default_disks": settings.disk_count,
        "idle_seconds": settings.idle_seconds,
        "rephrase_endpoint": settings.rephrase_endpoint or "local formatting",
        "openai_model": settings.openai_model if settings.openai_api_key else "local templates",
    })


if __name__ == "__main__":
    import uvicorn

    def handle_exit(*args):
        """Handle graceful shutdown."""
        logger.section("SERVER SHUTDOWN", {"reason": "signal received"})
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_exit)
    signal.signal(signal.SIGTERM, handle_exit)

    try:
        uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
    except KeyboardInterrupt:
        logger.info("🛑 Server stopped.")
        sys.exit(0)
