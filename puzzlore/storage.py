"""Key-value storage for player state.

Progress and preferences are each stored as one serialised JSON document
under a fixed key. Every write replaces the whole document; there are no
incremental updates.

Two implementations are provided:

    JsonFileStore — one file per key under a base directory:

        {base}/
          player_progress.json   ← PlayerProgress
          preferences.json       ← settings flags

    MemoryStore   — dict-backed. Useful in tests and for throwaway sessions.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

PLAYER_PROGRESS_KEY = "player_progress"
PREFERENCES_KEY = "preferences"

_KEY_RE = re.compile(r"^[a-z0-9_\-]+$")


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class JsonFileStore:
    def __init__(self, base_path: Path) -> None:
        self._base = base_path
        self._base.mkdir(parents=True, exist_ok=True)

    @property
    def base_path(self) -> Path:
        return self._base

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._base / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self._path(key).write_text(value, encoding="utf-8")
        logger.debug("wrote key=%s bytes=%d", key, len(value))

    def delete(self, key: str) -> None:
        path = self._path(key)
        if path.is_file():
            path.unlink()


class MemoryStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)
