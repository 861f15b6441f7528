"""Progression engine — what happens when a puzzle is solved.

Completion flow (`complete_puzzle`):
  1. Ignore puzzles that are already completed.
  2. Record the completion and award the puzzle's moonstones.
  3. Find the owning constellation; stop here if the catalog has none.
  4. Count completed puzzles in that constellation (including this one).
  5. Count == unlock_threshold → constellation bonus, open the next order,
     set the pending unlock. Skipped if that order is already open.
  6. Count == total_puzzles → grant the spirit reward (once), set the
     pending reward.
  7. Persist once.

Steps 5 and 6 are edge triggers: each fires only on the completion that
reaches the count exactly. Both can fire on the same call when the
threshold equals the puzzle count; the UI presents the reward first
(see `pending_event`).

Pending events live only in memory. The UI clears each one after it has
shown the matching screen.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Literal

from pydantic import BaseModel

from puzzlore.catalog import Catalog
from puzzlore.models import Constellation, Puzzle
from puzzlore.progress import ProgressStore

logger = logging.getLogger(__name__)

CONSTELLATION_BONUS = 100

ConstellationListener = Callable[[Constellation], None]


class CompletionOutcome(BaseModel):
    """What a single `complete_puzzle` call changed."""

    puzzle_id: str
    newly_completed: bool
    moonstones_awarded: int = 0
    constellation_bonus: int = 0
    unlocked_order: int | None = None
    spirit_id: str | None = None


class PendingEvent(BaseModel):
    """The next celebration screen the UI owes the player."""

    kind: Literal["reward", "unlock"]
    constellation: Constellation
    next_constellation: Constellation | None = None  # unlock only


class ConstellationSummary(BaseModel):
    constellation_id: str
    order: int
    completed: int
    unlock_threshold: int
    total_puzzles: int
    unlocked: bool
    threshold_reached: bool
    fully_complete: bool


class ProgressionEngine:
    def __init__(self, store: ProgressStore, catalog: Catalog) -> None:
        self._store = store
        self._catalog = catalog
        self.pending_unlock_constellation: Constellation | None = None
        self.pending_reward_constellation: Constellation | None = None
        self._completion_listeners: list[ConstellationListener] = []

    @property
    def store(self) -> ProgressStore:
        return self._store

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    def on_constellation_completed(self, listener: ConstellationListener) -> None:
        """Call `listener` whenever a constellation's spirit is newly granted."""
        self._completion_listeners.append(listener)

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    def complete_puzzle(self, puzzle: Puzzle) -> CompletionOutcome:
        if self._store.is_puzzle_completed(puzzle.puzzle_id):
            return CompletionOutcome(puzzle_id=puzzle.puzzle_id, newly_completed=False)

        outcome = CompletionOutcome(
            puzzle_id=puzzle.puzzle_id,
            newly_completed=True,
            moonstones_awarded=puzzle.moonstone_reward,
        )
        granted: Constellation | None = None

        with self._store.transaction() as progress:
            progress.completed_puzzles.add(puzzle.puzzle_id)
            progress.total_puzzles_solved += 1
            progress.currency += puzzle.moonstone_reward

            constellation = self._catalog.constellation_containing_puzzle(puzzle.puzzle_id)
            if constellation is None:
                logger.warning("Puzzle %r is not in the catalog; no unlock check", puzzle.puzzle_id)
            else:
                completed = progress.completed_puzzles_in(constellation)

                if completed == constellation.unlock_threshold:
                    if progress.current_constellation_order <= constellation.order:
                        progress.currency += CONSTELLATION_BONUS
                        next_order = constellation.order + 1
                        if progress.current_constellation_order < next_order:
                            progress.current_constellation_order = next_order
                        self.pending_unlock_constellation = constellation
                        outcome.constellation_bonus = CONSTELLATION_BONUS
                        outcome.unlocked_order = next_order
                        logger.info(
                            "Constellation %r reached its threshold; unlocked order %d",
                            constellation.constellation_id, next_order,
                        )

                spirit = constellation.spirit_reward
                if (
                    completed == constellation.total_puzzles
                    and spirit is not None
                    and spirit.spirit_id not in progress.unlocked_spirits
                ):
                    progress.unlocked_spirits.add(spirit.spirit_id)
                    self.pending_reward_constellation = constellation
                    outcome.spirit_id = spirit.spirit_id
                    granted = constellation
                    logger.info(
                        "Constellation %r fully completed; granted spirit %r",
                        constellation.constellation_id, spirit.spirit_id,
                    )

        if granted is not None:
            for listener in list(self._completion_listeners):
                listener(granted)
        return outcome

    # ------------------------------------------------------------------
    # Pending events
    # ------------------------------------------------------------------

    def clear_pending_unlock(self) -> None:
        self.pending_unlock_constellation = None

    def clear_pending_reward(self) -> None:
        self.pending_reward_constellation = None

    def pending_event(self) -> PendingEvent | None:
        """The event to present next. A reward always goes before an unlock."""
        reward = self.pending_reward_constellation
        if reward is not None and reward.spirit_reward is not None:
            return PendingEvent(kind="reward", constellation=reward)
        unlock = self.pending_unlock_constellation
        if unlock is not None:
            return PendingEvent(
                kind="unlock",
                constellation=unlock,
                next_constellation=self._catalog.constellation_at_order(unlock.order + 1),
            )
        return None

    # ------------------------------------------------------------------
    # Availability and summaries
    # ------------------------------------------------------------------

    def is_puzzle_available(self, puzzle: Puzzle) -> bool:
        """Every puzzle of an unlocked constellation is playable, in any order."""
        constellation = self._catalog.constellation_containing_puzzle(puzzle.puzzle_id)
        if constellation is None:
            return False
        return self._store.is_constellation_unlocked(constellation)

    def next_puzzle(self) -> tuple[Puzzle, Constellation] | None:
        return self._catalog.next_uncompleted_puzzle(self._store.progress.completed_puzzles)

    def constellation_summary(self, constellation: Constellation) -> ConstellationSummary:
        progress = self._store.progress
        return ConstellationSummary(
            constellation_id=constellation.constellation_id,
            order=constellation.order,
            completed=progress.completed_puzzles_in(constellation),
            unlock_threshold=constellation.unlock_threshold,
            total_puzzles=constellation.total_puzzles,
            unlocked=progress.is_constellation_unlocked(constellation),
            threshold_reached=progress.is_constellation_complete(constellation),
            fully_complete=progress.is_constellation_fully_complete(constellation),
        )

    def reset_progress(self) -> None:
        """Start over as a new player. Uncelebrated events are dropped too."""
        self.clear_pending_unlock()
        self.clear_pending_reward()
        self._store.reset_progress()

    def unlock_all_content(self) -> None:
        constellations = self._catalog.load_constellations()
        last_order = constellations[-1].order if constellations else 1
        self._store.unlock_all_content(last_order)
