"""Pydantic request/response models for API endpoints."""

from typing import Literal

from pydantic import BaseModel, Field


class SubmitBody(BaseModel):
    word: str


class AmountBody(BaseModel):
    amount: int = Field(ge=0)


class PurchaseBody(BaseModel):
    kind: Literal["theme", "soundscape"]
    item_id: str


class UpdateSettings(BaseModel):
    sound_enabled: bool | None = None
    music_enabled: bool | None = None
    haptics_enabled: bool | None = None
    notifications_enabled: bool | None = None
    has_completed_onboarding: bool | None = None
    current_soundscape: str | None = None
