"""Per-puzzle play session endpoints (start, hint, boost, shuffle, submit).

Sessions live in memory on the app, one per puzzle id. Starting a session
again replaces the old one (fresh shuffles, no boost used).
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from puzzlore.catalog import Catalog
from puzzlore.economy import PuzzleSession
from puzzlore.engine import ProgressionEngine

from .deps import get_catalog, get_engine, get_sessions, require_puzzle
from .models import SubmitBody

router = APIRouter()


def _session_view(session: PuzzleSession) -> dict[str, Any]:
    puzzle = session.puzzle
    return {
        "puzzle_id": puzzle.puzzle_id,
        "wheel": session.wheel,
        "answer_length": len(puzzle.answer),
        "anchors": {str(i): letter for i, letter in puzzle.anchor_map.items()},
        "revealed": {str(i): puzzle.answer[i] for i in sorted(session.revealed_indices)},
        "context_tag": puzzle.context_tag if session.hint_revealed else None,
        "boost_index": session.boost_index,
        "shuffles_remaining": session.shuffles_remaining,
    }


def _require_session(sessions: dict[str, PuzzleSession], puzzle_id: str) -> PuzzleSession:
    session = sessions.get(puzzle_id)
    if session is None:
        raise HTTPException(404, "No active session for this puzzle")
    return session


@router.post("/puzzles/{puzzle_id}/session", status_code=201)
async def start_session(
    puzzle_id: str,
    catalog: Catalog = Depends(get_catalog),
    engine: ProgressionEngine = Depends(get_engine),
    sessions: dict[str, PuzzleSession] = Depends(get_sessions),
):
    """Open a puzzle for play. Locked constellations are refused."""
    puzzle = require_puzzle(catalog, puzzle_id)
    if not engine.is_puzzle_available(puzzle):
        raise HTTPException(403, "Constellation is locked")
    session = PuzzleSession(puzzle, engine)
    sessions[puzzle_id] = session
    engine.store.set_current_puzzle(puzzle_id)
    return _session_view(session)


@router.get("/puzzles/{puzzle_id}/session")
async def get_session(
    puzzle_id: str,
    sessions: dict[str, PuzzleSession] = Depends(get_sessions),
):
    """Current state of a puzzle session."""
    return _session_view(_require_session(sessions, puzzle_id))


@router.post("/puzzles/{puzzle_id}/hint")
async def use_hint(
    puzzle_id: str,
    engine: ProgressionEngine = Depends(get_engine),
    sessions: dict[str, PuzzleSession] = Depends(get_sessions),
):
    """Buy a letter reveal. ok=false means not enough moonstones (or nothing left)."""
    session = _require_session(sessions, puzzle_id)
    reveal = session.use_hint()
    return {
        "ok": reveal is not None,
        "reveal": reveal.model_dump() if reveal else None,
        "currency": engine.store.currency,
        "session": _session_view(session),
    }


@router.post("/puzzles/{puzzle_id}/boost")
async def use_boost(
    puzzle_id: str,
    engine: ProgressionEngine = Depends(get_engine),
    sessions: dict[str, PuzzleSession] = Depends(get_sessions),
):
    """Buy the one-per-puzzle boost highlighting the first open slot."""
    session = _require_session(sessions, puzzle_id)
    index = session.use_boost()
    return {
        "ok": index is not None,
        "boost_index": index,
        "currency": engine.store.currency,
    }


@router.post("/puzzles/{puzzle_id}/shuffle")
async def shuffle_wheel(
    puzzle_id: str,
    sessions: dict[str, PuzzleSession] = Depends(get_sessions),
):
    """Reorder the letter wheel."""
    session = _require_session(sessions, puzzle_id)
    wheel = session.shuffle()
    return {
        "ok": wheel is not None,
        "wheel": session.wheel,
        "shuffles_remaining": session.shuffles_remaining,
    }


@router.post("/puzzles/{puzzle_id}/submit")
async def submit_answer(
    puzzle_id: str,
    body: SubmitBody,
    engine: ProgressionEngine = Depends(get_engine),
    sessions: dict[str, PuzzleSession] = Depends(get_sessions),
):
    """Check a typed word. A correct answer completes the puzzle and ends the session."""
    session = _require_session(sessions, puzzle_id)
    result, outcome = session.submit(body.word)
    response: dict[str, Any] = {"result": result, "outcome": None}
    if outcome is not None:
        response["outcome"] = outcome.model_dump()
        response["explanation"] = session.puzzle.explanation.model_dump()
        response["logic_name"] = session.puzzle.explanation.logic_name
        del sessions[puzzle_id]
        engine.store.set_current_puzzle(None)
        event = engine.pending_event()
        response["pending_event"] = event.model_dump() if event else None
    response["currency"] = engine.store.currency
    return response
