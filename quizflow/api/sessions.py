"""
Headless quiz session API endpoints.

Sessions run the same state machine as the emitted browser script and are
kept in memory; they are lost on restart.
"""

import random
from typing import Any, Dict, Literal, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from quizflow.config import settings
from quizflow.engine.plan import build_plan
from quizflow.runtime import QuizSession, create_lead_sink
from quizflow.schemas import GraphValidationError, validate_build_options, validate_scene_graph
from quizflow.utils.logger import get_logger

# Set up logging
logger = get_logger(__name__)

router = APIRouter()

# In-memory storage for live sessions
sessions_db: Dict[str, QuizSession] = {}


class SessionCreateRequest(BaseModel):
    """Request to create a new headless session"""

    graph: Dict[str, Any] = Field(..., description="Scene graph JSON")
    options: Optional[Dict[str, Any]] = Field(default=None, description="Build options")
    seed: Optional[int] = Field(default=None, description="Seed for answer shuffling")


class SessionEventRequest(BaseModel):
    """A user gesture or a frame tick"""

    type: Literal[
        "submit_lead",
        "select_answer",
        "begin_edge",
        "release_edge",
        "connect",
        "check",
        "clear",
        "tick",
    ]
    name: str = ""
    email: str = ""
    phone: str = ""
    answer_id: Optional[str] = None
    question_id: Optional[str] = None
    scene_index: Optional[int] = None


class SessionEventResponse(BaseModel):
    accepted: bool
    session: Dict[str, Any]


def _get_session(session_id: str) -> QuizSession:
    session = sessions_db.get(session_id)
    if session is None:
        logger.error(f"✗ Session not found: {session_id}")
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def _evict_if_full() -> None:
    while len(sessions_db) >= settings.max_sessions:
        oldest = next(iter(sessions_db))
        logger.info(f"[API] Evicting session {oldest}")
        del sessions_db[oldest]


@router.post("/")
async def create_session(request: SessionCreateRequest):
    """Create a headless session from a scene graph and build options"""
    logger.info("=" * 60)
    logger.info("SESSION CREATION REQUEST")
    try:
        graph = validate_scene_graph(request.graph)
        options = validate_build_options(request.options)
    except GraphValidationError as e:
        logger.warning(f"[API] Rejected graph: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    plan = build_plan(graph, options)
    rng = random.Random(request.seed) if request.seed is not None else None
    _evict_if_full()
    session = QuizSession(plan, lead_sink=create_lead_sink(settings), rng=rng)
    sessions_db[session.id] = session

    logger.info(f"✓ Session created successfully: {session.id}")
    logger.debug(f"Total sessions: {len(sessions_db)}")
    return session.snapshot()


@router.get("/{session_id}")
async def get_session(session_id: str):
    session = _get_session(session_id)
    session.tick()
    return session.snapshot()


@router.post("/{session_id}/events", response_model=SessionEventResponse)
async def dispatch_event(session_id: str, request: SessionEventRequest):
    """Apply one user gesture to a session"""
    session = _get_session(session_id)
    session.tick()
    logger.debug(f"[API] Session {session_id} event: {request.type}")

    try:
        if request.type == "submit_lead":
            accepted = session.submit_lead(request.name, request.email, request.phone).ok
        elif request.type == "select_answer":
            accepted = session.select_answer(_require(request.answer_id, "answer_id"), request.scene_index)
        elif request.type == "begin_edge":
            accepted = session.begin_edge(_require(request.question_id, "question_id"))
        elif request.type == "release_edge":
            accepted = session.release_edge(request.answer_id)
        elif request.type == "connect":
            accepted = session.connect(
                _require(request.question_id, "question_id"),
                _require(request.answer_id, "answer_id"),
            )
        elif request.type == "check":
            accepted = session.check() is not None
        elif request.type == "clear":
            session.clear()
            accepted = True
        else:
            accepted = True
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return SessionEventResponse(accepted=bool(accepted), session=session.snapshot())


def _require(value: Optional[str], field: str) -> str:
    if not value:
        raise ValueError(f"'{field}' is required for this event")
    return value


@router.post("/{session_id}/restart")
async def restart_session(session_id: str):
    session = _get_session(session_id)
    session.restart()
    return session.snapshot()


@router.delete("/{session_id}")
async def delete_session(session_id: str):
    _get_session(session_id)
    del sessions_db[session_id]
    logger.info(f"✓ Session deleted: {session_id}")
    return {"message": "Session deleted successfully", "id": session_id}
