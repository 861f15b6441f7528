"""Constellation, puzzle and spirit lookup endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from puzzlore.catalog import Catalog
from puzzlore.engine import ProgressionEngine
from puzzlore.models import Constellation, Puzzle

from .deps import get_catalog, get_engine, require_puzzle

router = APIRouter()


def _puzzle_view(
    engine: ProgressionEngine, puzzle: Puzzle, constellation: Constellation
) -> dict[str, Any]:
    data = puzzle.model_dump()
    data["constellation_id"] = constellation.constellation_id
    data["effective_background"] = engine.catalog.effective_background(puzzle, constellation)
    data["available"] = engine.is_puzzle_available(puzzle)
    data["completed"] = engine.store.is_puzzle_completed(puzzle.puzzle_id)
    return data


@router.get("/constellations")
async def list_constellations(
    catalog: Catalog = Depends(get_catalog),
    engine: ProgressionEngine = Depends(get_engine),
):
    """List constellations in order, each with the player's progress through it."""
    results = []
    for constellation in catalog.load_constellations():
        data = constellation.model_dump(exclude={"puzzles"})
        data["progress"] = engine.constellation_summary(constellation).model_dump()
        results.append(data)
    return results


@router.get("/constellations/{constellation_id}")
async def get_constellation(
    constellation_id: str,
    catalog: Catalog = Depends(get_catalog),
    engine: ProgressionEngine = Depends(get_engine),
):
    """Get one constellation with its puzzles and the player's progress."""
    constellation = catalog.constellation(constellation_id)
    if constellation is None:
        raise HTTPException(404, "Constellation not found")
    data = constellation.model_dump(exclude={"puzzles"})
    data["puzzles"] = [_puzzle_view(engine, p, constellation) for p in constellation.puzzles]
    data["progress"] = engine.constellation_summary(constellation).model_dump()
    return data


@router.get("/puzzles/next")
async def next_puzzle(engine: ProgressionEngine = Depends(get_engine)):
    """The first unsolved puzzle in catalog order, or null when everything is solved."""
    found = engine.next_puzzle()
    if found is None:
        return None
    puzzle, constellation = found
    return _puzzle_view(engine, puzzle, constellation)


@router.get("/puzzles/{puzzle_id}")
async def get_puzzle(
    puzzle_id: str,
    catalog: Catalog = Depends(get_catalog),
    engine: ProgressionEngine = Depends(get_engine),
):
    """Get a single puzzle with its wheel letters and reward."""
    puzzle = require_puzzle(catalog, puzzle_id)
    constellation = catalog.constellation_containing_puzzle(puzzle_id)
    return _puzzle_view(engine, puzzle, constellation)


@router.get("/spirits")
async def list_spirits(
    catalog: Catalog = Depends(get_catalog),
    engine: ProgressionEngine = Depends(get_engine),
):
    """Every spirit in the catalog, flagged with whether the player has it."""
    results = []
    for spirit in catalog.spirits():
        data = spirit.model_dump()
        data["color"] = spirit.color
        data["unlocked"] = engine.store.is_spirit_unlocked(spirit.spirit_id)
        results.append(data)
    return results
