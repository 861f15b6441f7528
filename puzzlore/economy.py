"""Moonstone economy and per-puzzle play sessions.

A PuzzleSession tracks what the player has bought or revealed while one
puzzle is on screen. None of that is persisted; only the spends and the
cumulative hint counter reach the ProgressStore.

    hint    — costs REVEAL_LETTER_COST; shows the context tag and fills in
              the next hidden answer letter.
    boost   — costs ROCKET_BOOST_COST, once per session; highlights the
              first non-anchor slot. The player still has to type it.
    shuffle — free, SHUFFLES_PER_PUZZLE times per session.
"""

from __future__ import annotations

import logging
import random
from typing import Literal

from pydantic import BaseModel

from puzzlore.engine import CompletionOutcome, ProgressionEngine
from puzzlore.models import Puzzle
from puzzlore.progress import ProgressStore

logger = logging.getLogger(__name__)

# Spending
REVEAL_LETTER_COST = 25
ROCKET_BOOST_COST = 50
EXPLAIN_ICON_COST = 50
SKIP_PUZZLE_COST = 100
SOUNDSCAPE_COST = 500
VISUAL_THEME_COST = 750
STICKER_FRAME_COST = 200

# Earning
DAILY_PUZZLE_REWARD = 50
WATCH_AD_REWARD = 50

SHUFFLES_PER_PUZZLE = 2

SubmitResult = Literal["correct", "wrong", "incomplete"]
PurchaseKind = Literal["theme", "soundscape"]

PURCHASE_PRICES: dict[str, int] = {
    "theme": VISUAL_THEME_COST,
    "soundscape": SOUNDSCAPE_COST,
}


class LetterReveal(BaseModel):
    index: int
    letter: str


class PuzzleSession:
    """Hint, boost, shuffle and answer checking for one puzzle attempt."""

    def __init__(
        self,
        puzzle: Puzzle,
        engine: ProgressionEngine,
        rng: random.Random | None = None,
    ) -> None:
        self.puzzle = puzzle
        self._engine = engine
        self._rng = rng or random.Random()
        self.revealed_indices: set[int] = set()
        self.hint_revealed = False
        self.boost_index: int | None = None
        self.shuffles_remaining = SHUFFLES_PER_PUZZLE
        self.wheel: list[str] = list(puzzle.wheel_letters)
        self._rng.shuffle(self.wheel)
        self.solved = False

    @property
    def _store(self) -> ProgressStore:
        return self._engine.store

    @property
    def boost_used(self) -> bool:
        return self.boost_index is not None

    def _hidden_indices(self) -> list[int]:
        anchors = self.puzzle.anchor_map
        return [
            i for i in range(len(self.puzzle.answer))
            if i not in anchors and i not in self.revealed_indices
        ]

    # ------------------------------------------------------------------
    # Paid helpers
    # ------------------------------------------------------------------

    def use_hint(self) -> LetterReveal | None:
        """Reveal the next hidden letter. None when unaffordable or nothing is hidden."""
        hidden = self._hidden_indices()
        if not hidden:
            return None
        if not self._store.can_afford(REVEAL_LETTER_COST):
            return None
        with self._store.transaction() as progress:
            progress.currency -= REVEAL_LETTER_COST
            progress.hints_used += 1
        index = hidden[0]
        self.revealed_indices.add(index)
        self.hint_revealed = True
        return LetterReveal(index=index, letter=self.puzzle.answer[index])

    def use_boost(self) -> int | None:
        """Highlight the first non-anchor slot. One use per session."""
        if self.boost_used:
            return None
        anchors = self.puzzle.anchor_map
        index = next((i for i in range(len(self.puzzle.answer)) if i not in anchors), None)
        if index is None:
            return None
        if not self._store.spend(ROCKET_BOOST_COST):
            return None
        self.boost_index = index
        return index

    def shuffle(self) -> list[str] | None:
        if self.shuffles_remaining <= 0:
            return None
        previous = list(self.wheel)
        if len(set(previous)) > 1:
            while self.wheel == previous:
                self._rng.shuffle(self.wheel)
        self.shuffles_remaining -= 1
        return list(self.wheel)

    # ------------------------------------------------------------------
    # Answer checking
    # ------------------------------------------------------------------

    def build_full_answer(self, word: str) -> str:
        """Anchors and revealed letters in place; `word` fills the rest left to right."""
        answer = self.puzzle.answer
        slots = [""] * len(answer)
        for i, letter in self.puzzle.anchor_map.items():
            slots[i] = letter
        for i in self.revealed_indices:
            if i < len(answer):
                slots[i] = answer[i]
        typed = iter(word)
        for i, slot in enumerate(slots):
            if slot:
                continue
            letter = next(typed, None)
            if letter is None:
                break
            slots[i] = letter
        return "".join(slots)

    def submit(self, word: str) -> tuple[SubmitResult, CompletionOutcome | None]:
        full = self.build_full_answer(word)
        if full.upper() == self.puzzle.answer.upper():
            self.solved = True
            return "correct", self._engine.complete_puzzle(self.puzzle)
        if len(full) == len(self.puzzle.answer):
            return "wrong", None
        return "incomplete", None


def purchase(store: ProgressStore, kind: PurchaseKind, item_id: str) -> bool:
    """Buy a theme or soundscape. Owning it already counts as success."""
    progress = store.progress
    owned = progress.unlocked_themes if kind == "theme" else progress.unlocked_soundscapes
    if item_id in owned:
        return True
    if not store.spend(PURCHASE_PRICES[kind]):
        return False
    if kind == "theme":
        store.unlock_theme(item_id)
    else:
        store.unlock_soundscape(item_id)
    logger.info("Purchased %s %r", kind, item_id)
    return True
