"""Health check and player settings endpoints."""

from fastapi import APIRouter, Depends

from puzzlore import preferences
from puzzlore.storage import KeyValueStore

from .deps import get_kv
from .models import UpdateSettings

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/settings")
async def get_settings(kv: KeyValueStore = Depends(get_kv)):
    """Get player settings (sound, music, haptics, notifications, onboarding)."""
    return preferences.get_preferences(kv)


@router.patch("/settings")
async def update_settings(body: UpdateSettings, kv: KeyValueStore = Depends(get_kv)):
    """Update player settings (partial merge)."""
    return preferences.update_preferences(kv, body.model_dump(exclude_none=True))
