"""Player progress, moonstone economy and pending celebration endpoints."""

from fastapi import APIRouter, Depends

from puzzlore.economy import PuzzleSession, purchase
from puzzlore.engine import ProgressionEngine
from puzzlore.progress import ProgressStore

from .deps import get_engine, get_sessions, get_store
from .models import AmountBody, PurchaseBody

router = APIRouter()


@router.get("/progress")
async def get_progress(store: ProgressStore = Depends(get_store)):
    """Get the player's progress record."""
    return store.progress.model_dump()


@router.post("/progress/reset")
async def reset_progress(
    engine: ProgressionEngine = Depends(get_engine),
    sessions: dict[str, PuzzleSession] = Depends(get_sessions),
):
    """Wipe all progress and start as a new player."""
    sessions.clear()
    engine.reset_progress()
    return engine.store.progress.model_dump()


@router.post("/progress/unlock-all")
async def unlock_all(engine: ProgressionEngine = Depends(get_engine)):
    """Debug: open every constellation and top up moonstones."""
    engine.unlock_all_content()
    return engine.store.progress.model_dump()


# ── Economy ──────────────────────────────────────────────


@router.post("/economy/spend")
async def spend(body: AmountBody, store: ProgressStore = Depends(get_store)):
    """Spend moonstones. ok=false (balance unchanged) when the player can't afford it."""
    ok = store.spend(body.amount)
    return {"ok": ok, "currency": store.currency}


@router.post("/economy/earn")
async def earn(body: AmountBody, store: ProgressStore = Depends(get_store)):
    """Add moonstones (ads, daily puzzle, ...)."""
    store.add_currency(body.amount)
    return {"ok": True, "currency": store.currency}


@router.post("/economy/purchase")
async def buy(body: PurchaseBody, store: ProgressStore = Depends(get_store)):
    """Buy a visual theme or soundscape."""
    ok = purchase(store, body.kind, body.item_id)
    return {"ok": ok, "currency": store.currency}


# ── Pending events ───────────────────────────────────────


@router.get("/events/pending")
async def get_pending_event(engine: ProgressionEngine = Depends(get_engine)):
    """The celebration to show next (spirit reward before constellation unlock)."""
    event = engine.pending_event()
    return event.model_dump() if event else None


@router.delete("/events/pending/unlock")
async def clear_pending_unlock(engine: ProgressionEngine = Depends(get_engine)):
    """Mark the unlock popup as shown."""
    engine.clear_pending_unlock()
    return {"ok": True}


@router.delete("/events/pending/reward")
async def clear_pending_reward(engine: ProgressionEngine = Depends(get_engine)):
    """Mark the spirit reward animation as shown."""
    engine.clear_pending_reward()
    return {"ok": True}
