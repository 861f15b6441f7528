"""Core domain models.

Catalog content (puzzles, constellations, spirits) is parsed once from the
bundled JSON files and never changes afterwards, so those models are frozen.
PlayerProgress is the single mutable record; it is only ever mutated through
ProgressStore, which persists it after every change.

Pydantic is used for validation and serialisation at every data boundary.
"""

from __future__ import annotations

from typing import Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_serializer,
    field_validator,
    model_validator,
)

MAX_WHEEL_LETTERS = 10
STARTING_CURRENCY = 100
DEFAULT_SOUNDSCAPE = "quiet_night"
DEFAULT_THEME = "default"

# difficulty → moonstones; anything outside the table earns the easy reward
PUZZLE_REWARDS: dict[int, int] = {1: 10, 2: 20, 3: 30}
DEFAULT_PUZZLE_REWARD = 10

LogicType = Literal[
    "compound_word",
    "syllable_smash",
    "letter_sound",
    "homophone",
    "symbol_sub",
    "number_sub",
    "visual_position",
    "subtraction",
    "reversal",
]

LOGIC_TYPE_NAMES: dict[str, str] = {
    "compound_word": "Compound Word",
    "syllable_smash": "Syllable Smash",
    "letter_sound": "Letter Sound",
    "homophone": "Homophone",
    "symbol_sub": "Symbol Substitution",
    "number_sub": "Number Substitution",
    "visual_position": "Visual Position",
    "subtraction": "Subtraction",
    "reversal": "Reversal",
}

LOGIC_TYPE_DIFFICULTY: dict[str, int] = {
    "compound_word": 1,
    "syllable_smash": 1,
    "letter_sound": 1,
    "homophone": 2,
    "symbol_sub": 2,
    "number_sub": 2,
    "visual_position": 3,
    "subtraction": 3,
    "reversal": 3,
}

SpiritRarity = Literal["common", "rare", "legendary"]

RARITY_COLORS: dict[str, str] = {
    "common": "#A8A8A8",  # silver
    "rare": "#5C9BD6",  # blue
    "legendary": "#FFD700",  # gold
}


# ---------------------------------------------------------------------------
# Catalog content
# ---------------------------------------------------------------------------

class PuzzleExplanation(BaseModel):
    """Shown after a puzzle is solved."""

    model_config = ConfigDict(frozen=True)

    breakdown: str
    logic_type: LogicType

    @property
    def logic_name(self) -> str:
        return LOGIC_TYPE_NAMES[self.logic_type]


class Puzzle(BaseModel):
    """A single rebus puzzle."""

    model_config = ConfigDict(frozen=True)

    puzzle_id: str
    context_tag: str
    puzzle_image: str  # single composed image of icons
    answer: str
    letters: list[str]
    distractor_letters: list[str] = Field(default_factory=list)
    difficulty: int = 1
    anchor_letters: list[int] = Field(default_factory=list)  # indices of pre-filled letters
    explanation: PuzzleExplanation
    background: str | None = None  # overrides the constellation background

    @field_validator("answer")
    @classmethod
    def _upper_answer(cls, value: str) -> str:
        return value.upper()

    @computed_field
    @property
    def wheel_letters(self) -> list[str]:
        """Answer letters followed by as many decoys as fit, unshuffled."""
        if len(self.letters) >= MAX_WHEEL_LETTERS:
            return list(self.letters[:MAX_WHEEL_LETTERS])
        remaining = MAX_WHEEL_LETTERS - len(self.letters)
        return list(self.letters) + list(self.distractor_letters[:remaining])

    @computed_field
    @property
    def moonstone_reward(self) -> int:
        return PUZZLE_REWARDS.get(self.difficulty, DEFAULT_PUZZLE_REWARD)

    @property
    def anchor_map(self) -> dict[int, str]:
        """Anchor index → answer letter. Out-of-range anchors are ignored."""
        return {
            i: self.answer[i]
            for i in self.anchor_letters
            if 0 <= i < len(self.answer)
        }


class Spirit(BaseModel):
    """A cosmetic reward granted when a constellation is fully completed."""

    model_config = ConfigDict(frozen=True)

    spirit_id: str
    name: str
    rarity: SpiritRarity
    lore: str
    sticker_image: str
    silhouette_path: str | None = None

    @property
    def color(self) -> str:
        return RARITY_COLORS[self.rarity]

    @property
    def rarity_label(self) -> str:
        return self.rarity.upper()


class StarPosition(BaseModel):
    """Where a puzzle's star sits on the constellation map (0–1 coordinates)."""

    model_config = ConfigDict(frozen=True)

    puzzle_index: int
    x: float
    y: float


class Constellation(BaseModel):
    """An ordered, themed group of puzzles.

    Constellations unlock linearly by `order`. Solving `unlock_threshold`
    puzzles opens the next one; solving all of them grants `spirit_reward`.
    """

    model_config = ConfigDict(frozen=True)

    constellation_id: str
    name: str
    order: int = Field(ge=1)
    unlock_threshold: int = Field(ge=1)
    background: str = ""
    background_video: str | None = None
    puzzles: list[Puzzle] = Field(default_factory=list)
    star_positions: list[StarPosition] | None = None
    connections: list[list[int]] | None = None  # pairs of puzzle indices
    spirit_reward: Spirit | None = None

    @computed_field
    @property
    def total_puzzles(self) -> int:
        return len(self.puzzles)

    @property
    def puzzle_ids(self) -> list[str]:
        return [p.puzzle_id for p in self.puzzles]


# ---------------------------------------------------------------------------
# Player state
# ---------------------------------------------------------------------------

class PlayerProgress(BaseModel):
    """Everything persisted about the player.

    `total_puzzles_solved` always equals `len(completed_puzzles)`;
    `current_constellation_order` means "unlocked through order N".
    Missing keys in stored data fall back to the new-player defaults.
    """

    completed_puzzles: set[str] = Field(default_factory=set)
    current_puzzle: str | None = None
    current_constellation_order: int = Field(default=1, ge=1)
    currency: int = Field(default=STARTING_CURRENCY, ge=0)  # moonstones
    unlocked_soundscapes: set[str] = Field(default_factory=lambda: {DEFAULT_SOUNDSCAPE})
    unlocked_themes: set[str] = Field(default_factory=lambda: {DEFAULT_THEME})
    unlocked_spirits: set[str] = Field(default_factory=set)
    hints_used: int = Field(default=0, ge=0)
    total_puzzles_solved: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _solved_count_matches(self) -> PlayerProgress:
        if self.total_puzzles_solved != len(self.completed_puzzles):
            raise ValueError(
                f"total_puzzles_solved={self.total_puzzles_solved} but "
                f"{len(self.completed_puzzles)} completed puzzles recorded"
            )
        return self

    @classmethod
    def new_player(cls) -> PlayerProgress:
        return cls()

    @field_serializer(
        "completed_puzzles", "unlocked_soundscapes", "unlocked_themes", "unlocked_spirits"
    )
    def _sorted_set(self, value: set[str]) -> list[str]:
        return sorted(value)

    def is_puzzle_completed(self, puzzle_id: str) -> bool:
        return puzzle_id in self.completed_puzzles

    def is_spirit_unlocked(self, spirit_id: str) -> bool:
        return spirit_id in self.unlocked_spirits

    def is_constellation_unlocked(self, constellation: Constellation) -> bool:
        return constellation.order <= self.current_constellation_order

    def completed_puzzles_in(self, constellation: Constellation) -> int:
        return sum(1 for pid in constellation.puzzle_ids if pid in self.completed_puzzles)

    def is_constellation_complete(self, constellation: Constellation) -> bool:
        """True once the unlock threshold is reached (not necessarily every puzzle)."""
        return self.completed_puzzles_in(constellation) >= constellation.unlock_threshold

    def is_constellation_fully_complete(self, constellation: Constellation) -> bool:
        return self.completed_puzzles_in(constellation) >= constellation.total_puzzles

    def can_afford(self, amount: int) -> bool:
        return self.currency >= amount
