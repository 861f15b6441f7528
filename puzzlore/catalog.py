"""Content catalog — the read-only constellation/puzzle graph.

Constellations are bundled as one JSON file each:

    content/constellations/
      01_enchanted_woods.json
      02_agon.json

Files are read in name order, then sorted by `order`. Content is loaded on
first use and cached, together with a puzzle id → (puzzle, constellation)
index. A file that fails to parse is skipped. A catalog whose orders are not
exactly 1..N, or that repeats a puzzle id, is rejected as a whole and the
catalog is empty. Loading never raises.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from puzzlore.models import Constellation, Puzzle, Spirit

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """The catalog content is structurally invalid."""


class Catalog:
    def __init__(self, content_dir: Path) -> None:
        self._content_dir = content_dir
        self._constellations: list[Constellation] | None = None
        self._puzzle_index: dict[str, tuple[Puzzle, Constellation]] | None = None

    @property
    def content_dir(self) -> Path:
        return self._content_dir

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_constellations(self) -> list[Constellation]:
        """All constellations by ascending order. Cached after the first call."""
        if self._constellations is not None:
            return self._constellations

        constellations = self._read_files()
        try:
            index = _build_index(constellations)
            _check_ordering(constellations)
        except CatalogError as e:
            logger.error("Catalog at %s rejected: %s", self._content_dir, e)
            constellations, index = [], {}

        self._constellations = constellations
        self._puzzle_index = index
        logger.info(
            "Loaded %d constellations (%d puzzles) from %s",
            len(constellations), len(index), self._content_dir,
        )
        return constellations

    def _read_files(self) -> list[Constellation]:
        if not self._content_dir.is_dir():
            logger.warning("Content directory %s does not exist", self._content_dir)
            return []

        by_id: dict[str, Constellation] = {}
        for path in sorted(self._content_dir.glob("*.json")):
            try:
                constellation = Constellation.model_validate_json(path.read_bytes())
            except (OSError, ValidationError) as e:
                logger.warning("Skipping %s: %s", path.name, e)
                continue
            if constellation.constellation_id in by_id:
                logger.warning(
                    "Skipping %s: duplicate constellation id %r",
                    path.name, constellation.constellation_id,
                )
                continue
            by_id[constellation.constellation_id] = constellation

        return sorted(by_id.values(), key=lambda c: c.order)

    def clear_cache(self) -> None:
        """Forget loaded content; the next query reloads from disk."""
        self._constellations = None
        self._puzzle_index = None

    def _index(self) -> dict[str, tuple[Puzzle, Constellation]]:
        if self._puzzle_index is None:
            self.load_constellations()
        return self._puzzle_index or {}

    # ------------------------------------------------------------------
    # Constellation lookups
    # ------------------------------------------------------------------

    def constellation(self, constellation_id: str) -> Constellation | None:
        for c in self.load_constellations():
            if c.constellation_id == constellation_id:
                return c
        return None

    def constellation_at_order(self, order: int) -> Constellation | None:
        for c in self.load_constellations():
            if c.order == order:
                return c
        return None

    def constellation_containing_puzzle(self, puzzle_id: str) -> Constellation | None:
        entry = self._index().get(puzzle_id)
        return entry[1] if entry else None

    # ------------------------------------------------------------------
    # Puzzle lookups
    # ------------------------------------------------------------------

    def puzzle(self, puzzle_id: str) -> Puzzle | None:
        entry = self._index().get(puzzle_id)
        return entry[0] if entry else None

    def all_puzzles(self) -> list[Puzzle]:
        return [p for c in self.load_constellations() for p in c.puzzles]

    def puzzles_for(self, constellation_id: str) -> list[Puzzle]:
        constellation = self.constellation(constellation_id)
        return list(constellation.puzzles) if constellation else []

    def next_uncompleted_puzzle(
        self, completed_ids: set[str]
    ) -> tuple[Puzzle, Constellation] | None:
        """First puzzle, in catalog order, whose id is not in completed_ids."""
        for constellation in self.load_constellations():
            for puzzle in constellation.puzzles:
                if puzzle.puzzle_id not in completed_ids:
                    return puzzle, constellation
        return None

    def effective_background(self, puzzle: Puzzle, constellation: Constellation) -> str:
        return puzzle.background or constellation.background

    def spirits(self) -> list[Spirit]:
        return [c.spirit_reward for c in self.load_constellations() if c.spirit_reward]


def _build_index(
    constellations: list[Constellation],
) -> dict[str, tuple[Puzzle, Constellation]]:
    index: dict[str, tuple[Puzzle, Constellation]] = {}
    for constellation in constellations:
        for puzzle in constellation.puzzles:
            if puzzle.puzzle_id in index:
                owner = index[puzzle.puzzle_id][1].constellation_id
                raise CatalogError(
                    f"Puzzle {puzzle.puzzle_id!r} appears in both {owner!r} "
                    f"and {constellation.constellation_id!r}"
                )
            index[puzzle.puzzle_id] = (puzzle, constellation)
    return index


def _check_ordering(constellations: list[Constellation]) -> None:
    orders = [c.order for c in constellations]
    expected = list(range(1, len(constellations) + 1))
    if orders != expected:
        raise CatalogError(f"Constellation orders must be 1..{len(orders)}, got {orders}")
