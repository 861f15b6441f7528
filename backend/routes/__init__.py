"""FastAPI API endpoints under /api.

Endpoint groups: catalog (constellations, puzzles, spirits), play (per-puzzle
sessions: hint, boost, shuffle, submit), progress (player record, economy,
pending celebration events), settings (health, preferences).

Services (catalog, progress store, engine, key-value store) are built once in
create_app() and reached through the dependency functions in deps.py.
"""

from fastapi import APIRouter

from .catalog import router as catalog_router
from .play import router as play_router
from .progress import router as progress_router
from .settings import router as settings_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(catalog_router)
router.include_router(play_router)
router.include_router(progress_router)
