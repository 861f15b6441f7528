"""Player settings (sound, music, haptics, notifications, onboarding).

get_preferences() returns defaults merged with stored values.
update_preferences() applies a partial update; unknown keys are dropped.
"""

import json
import logging
from typing import Any

from .models import DEFAULT_SOUNDSCAPE
from .storage import PREFERENCES_KEY, KeyValueStore

logger = logging.getLogger(__name__)

_PREFERENCE_DEFAULTS: dict[str, Any] = {
    "sound_enabled": True,
    "music_enabled": True,
    "haptics_enabled": True,
    "notifications_enabled": False,
    "has_completed_onboarding": False,
    "current_soundscape": DEFAULT_SOUNDSCAPE,
}


def _read_stored(kv: KeyValueStore) -> dict[str, Any]:
    try:
        raw = kv.get(PREFERENCES_KEY)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Stored preferences could not be read, using defaults: %s", e)
        return {}
    if raw is None:
        return {}
    try:
        stored = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("Stored preferences are not valid JSON, using defaults: %s", e)
        return {}
    if not isinstance(stored, dict):
        logger.warning("Stored preferences are not an object, using defaults")
        return {}
    return stored


def get_preferences(kv: KeyValueStore) -> dict[str, Any]:
    """Read preferences, returning defaults merged with stored values."""
    prefs = dict(_PREFERENCE_DEFAULTS)
    for key, value in _read_stored(kv).items():
        if key in prefs:
            prefs[key] = value
    return prefs


def update_preferences(kv: KeyValueStore, fields: dict[str, Any]) -> dict[str, Any]:
    """Merge fields into preferences and persist. Returns full preferences."""
    prefs = get_preferences(kv)
    for key, value in fields.items():
        if key in prefs:
            prefs[key] = value
    kv.set(PREFERENCES_KEY, json.dumps(prefs, indent=2))
    return prefs


def complete_onboarding(kv: KeyValueStore) -> None:
    update_preferences(kv, {"has_completed_onboarding": True})


def reset_onboarding(kv: KeyValueStore) -> None:
    update_preferences(kv, {"has_completed_onboarding": False})
