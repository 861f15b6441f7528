import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from backend.routes import router
from puzzlore.catalog import Catalog
from puzzlore.engine import ProgressionEngine
from puzzlore.progress import ProgressStore
from puzzlore.storage import JsonFileStore

load_dotenv(Path(__file__).parent.parent / ".env")

STATIC_DIR = Path(__file__).parent / "static"
DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"
DEFAULT_CONTENT_DIR = Path(__file__).parent.parent / "content" / "constellations"


def create_app(data_dir: Path | None = None, content_dir: Path | None = None) -> FastAPI:
    resolved_data = data_dir or Path(os.getenv("DATA_DIR", str(DEFAULT_DATA_DIR)))
    resolved_content = content_dir or Path(os.getenv("CONTENT_DIR", str(DEFAULT_CONTENT_DIR)))

    kv = JsonFileStore(resolved_data)
    catalog = Catalog(resolved_content)
    store = ProgressStore(kv)

    app = FastAPI(title="Puzzlore")
    app.state.kv = kv
    app.state.catalog = catalog
    app.state.store = store
    app.state.engine = ProgressionEngine(store, catalog)
    app.state.sessions = {}
    app.include_router(router, prefix="/api")

    if STATIC_DIR.exists() and not os.getenv("VITE_DEV", ""):
        # Serve static assets (JS, CSS, etc.)
        app.mount("/assets", StaticFiles(directory=STATIC_DIR / "assets"), name="assets")

        # SPA fallback: all non-API routes serve index.html
        @app.get("/{path:path}")
        async def spa_fallback(path: str):
            return FileResponse(STATIC_DIR / "index.html")

    return app


# Default app instance for uvicorn (uses DATA_DIR / CONTENT_DIR env vars or defaults)
app = create_app()
