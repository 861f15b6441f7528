import json
from pathlib import Path

import pytest

from puzzlore.catalog import Catalog
from puzzlore.engine import ProgressionEngine
from puzzlore.progress import ProgressStore
from puzzlore.storage import MemoryStore

WOODS_ANSWERS = ["OAK", "FERN", "MOSS", "PINE", "LEAF", "ROOT", "BARK", "SEED", "VINE", "TWIG"]
SEA_ANSWERS = ["WAVE", "TIDE", "REEF"]


def puzzle_data(
    puzzle_id: str,
    answer: str,
    difficulty: int = 2,
    anchors: list[int] | None = None,
    distractors: str = "XYZQ",
) -> dict:
    return {
        "puzzle_id": puzzle_id,
        "context_tag": f"hint for {answer.lower()}",
        "puzzle_image": f"{puzzle_id}_image",
        "answer": answer,
        "letters": list(answer),
        "distractor_letters": list(distractors),
        "difficulty": difficulty,
        "anchor_letters": anchors or [],
        "explanation": {"breakdown": f"{answer} explained", "logic_type": "compound_word"},
    }


def constellation_data(
    constellation_id: str,
    order: int,
    answers: list[str],
    threshold: int,
    spirit_id: str | None = None,
    prefix: str | None = None,
) -> dict:
    prefix = prefix or constellation_id[:1]
    data: dict = {
        "constellation_id": constellation_id,
        "name": constellation_id.title(),
        "order": order,
        "unlock_threshold": threshold,
        "background": f"{constellation_id}_bg",
        "puzzles": [
            puzzle_data(f"{prefix}_{i:02d}", answer) for i, answer in enumerate(answers, start=1)
        ],
    }
    if spirit_id:
        data["spirit_reward"] = {
            "spirit_id": spirit_id,
            "name": spirit_id.replace("_", " ").title(),
            "rarity": "common",
            "lore": "Lore.",
            "sticker_image": spirit_id,
        }
    return data


def write_constellations(directory: Path, *constellations: dict) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    for data in constellations:
        path = directory / f"{data['order']:02d}_{data['constellation_id']}.json"
        path.write_text(json.dumps(data, indent=2))
    return directory


@pytest.fixture
def content_dir(tmp_path):
    """Two constellations: woods (order 1, 7 of 10) and sea (order 2, 3 of 3)."""
    return write_constellations(
        tmp_path / "content",
        constellation_data("woods", 1, WOODS_ANSWERS, threshold=7, spirit_id="spirit_fox", prefix="w"),
        constellation_data("sea", 2, SEA_ANSWERS, threshold=3, spirit_id="sea_whale", prefix="s"),
    )


@pytest.fixture
def catalog(content_dir):
    return Catalog(content_dir)


@pytest.fixture
def kv():
    return MemoryStore()


@pytest.fixture
def store(kv):
    return ProgressStore(kv)


@pytest.fixture
def engine(store, catalog):
    return ProgressionEngine(store, catalog)


@pytest.fixture
def make_puzzle():
    return puzzle_data


@pytest.fixture
def make_constellation():
    return constellation_data


@pytest.fixture
def write_catalog(tmp_path):
    """Write constellation dicts to a fresh directory and return a Catalog over it."""
    def _write(*constellations: dict, name: str = "catalog") -> Catalog:
        return Catalog(write_constellations(tmp_path / name, *constellations))
    return _write
