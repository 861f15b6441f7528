"""Dependency functions that hand the app's services to route handlers."""

from fastapi import HTTPException, Request

from puzzlore.catalog import Catalog
from puzzlore.economy import PuzzleSession
from puzzlore.engine import ProgressionEngine
from puzzlore.models import Puzzle
from puzzlore.progress import ProgressStore
from puzzlore.storage import KeyValueStore


def get_catalog(request: Request) -> Catalog:
    return request.app.state.catalog


def get_store(request: Request) -> ProgressStore:
    return request.app.state.store


def get_engine(request: Request) -> ProgressionEngine:
    return request.app.state.engine


def get_kv(request: Request) -> KeyValueStore:
    return request.app.state.kv


def get_sessions(request: Request) -> dict[str, PuzzleSession]:
    return request.app.state.sessions


def require_puzzle(catalog: Catalog, puzzle_id: str) -> Puzzle:
    puzzle = catalog.puzzle(puzzle_id)
    if puzzle is None:
        raise HTTPException(404, "Puzzle not found")
    return puzzle
