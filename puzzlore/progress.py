"""Progress store — the single source of truth for player state.

Holds one PlayerProgress record, loaded from the key-value store on
construction. Every mutation goes through a named method (or a
`transaction()` block), writes the whole record back before returning, and
then notifies subscribers with a fresh snapshot.

Load failures never propagate: missing or undecodable data means a new
player.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from pydantic import ValidationError

from puzzlore.models import Constellation, PlayerProgress
from puzzlore.storage import PLAYER_PROGRESS_KEY, KeyValueStore

logger = logging.getLogger(__name__)

Listener = Callable[[PlayerProgress], None]

DEBUG_CURRENCY = 10000


class ProgressStore:
    def __init__(self, kv: KeyValueStore, key: str = PLAYER_PROGRESS_KEY) -> None:
        self._kv = kv
        self._key = key
        self._listeners: list[Listener] = []
        self._in_transaction = False
        self._progress = self._load()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> PlayerProgress:
        try:
            raw = self._kv.get(self._key)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Saved progress could not be read, starting over: %s", e)
            return PlayerProgress.new_player()
        if raw is None:
            logger.info("No saved progress under %r — starting a new player", self._key)
            return PlayerProgress.new_player()
        try:
            return PlayerProgress.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Saved progress could not be decoded, starting over: %s", e)
            return PlayerProgress.new_player()

    def _save(self) -> None:
        self._kv.set(self._key, self._progress.model_dump_json(indent=2))

    def _notify(self) -> None:
        snapshot = self.progress
        for listener in list(self._listeners):
            listener(snapshot)

    @contextmanager
    def transaction(self) -> Iterator[PlayerProgress]:
        """Mutate the live record; persist and notify once on success.

        If the block raises, the record is restored and nothing is written.
        Transactions do not nest.
        """
        if self._in_transaction:
            raise RuntimeError("ProgressStore transactions cannot be nested")
        before = self._progress.model_copy(deep=True)
        self._in_transaction = True
        try:
            yield self._progress
        except BaseException:
            self._progress = before
            raise
        finally:
            self._in_transaction = False
        self._save()
        self._notify()

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def progress(self) -> PlayerProgress:
        """A copy of the current record. Mutating it changes nothing."""
        return self._progress.model_copy(deep=True)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` with a snapshot after every mutation.

        Returns a function that removes the subscription.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def currency(self) -> int:
        return self._progress.currency

    @property
    def current_constellation_order(self) -> int:
        return self._progress.current_constellation_order

    def is_puzzle_completed(self, puzzle_id: str) -> bool:
        return self._progress.is_puzzle_completed(puzzle_id)

    def is_spirit_unlocked(self, spirit_id: str) -> bool:
        return self._progress.is_spirit_unlocked(spirit_id)

    def is_constellation_unlocked(self, constellation: Constellation) -> bool:
        return self._progress.is_constellation_unlocked(constellation)

    def completed_puzzles_in(self, constellation: Constellation) -> int:
        return self._progress.completed_puzzles_in(constellation)

    def is_constellation_complete(self, constellation: Constellation) -> bool:
        return self._progress.is_constellation_complete(constellation)

    def can_afford(self, amount: int) -> bool:
        return self._progress.can_afford(amount)

    # ------------------------------------------------------------------
    # Economy
    # ------------------------------------------------------------------

    def spend(self, amount: int) -> bool:
        """Deduct `amount` if affordable. Returns False and changes nothing otherwise."""
        if amount < 0:
            raise ValueError(f"Cannot spend a negative amount: {amount}")
        if not self.can_afford(amount):
            logger.debug("spend rejected amount=%d balance=%d", amount, self._progress.currency)
            return False
        with self.transaction() as progress:
            progress.currency -= amount
        return True

    def add_currency(self, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Cannot add a negative amount: {amount}")
        with self.transaction() as progress:
            progress.currency += amount

    def use_hint(self) -> None:
        with self.transaction() as progress:
            progress.hints_used += 1

    # ------------------------------------------------------------------
    # Unlocks and session state
    # ------------------------------------------------------------------

    def set_current_puzzle(self, puzzle_id: str | None) -> None:
        with self.transaction() as progress:
            progress.current_puzzle = puzzle_id

    def unlock_spirit(self, spirit_id: str) -> None:
        with self.transaction() as progress:
            progress.unlocked_spirits.add(spirit_id)

    def unlock_theme(self, theme_id: str) -> None:
        with self.transaction() as progress:
            progress.unlocked_themes.add(theme_id)

    def unlock_soundscape(self, soundscape_id: str) -> None:
        with self.transaction() as progress:
            progress.unlocked_soundscapes.add(soundscape_id)

    # ------------------------------------------------------------------
    # Debug / testing
    # ------------------------------------------------------------------

    def reset_progress(self) -> None:
        """Replace everything with a new player."""
        with self.transaction():
            self._progress = PlayerProgress.new_player()
        logger.info("Progress reset")

    def unlock_all_content(self, last_order: int) -> None:
        """Open every constellation through `last_order` and top up currency."""
        with self.transaction() as progress:
            if last_order > progress.current_constellation_order:
                progress.current_constellation_order = last_order
            progress.currency = DEBUG_CURRENCY
