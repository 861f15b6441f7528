"""Tests for ProgressStore: loading, persistence, economy and observers."""

import json

import pytest

from puzzlore.models import PlayerProgress
from puzzlore.progress import ProgressStore
from puzzlore.storage import PLAYER_PROGRESS_KEY, JsonFileStore, MemoryStore


def _saved(kv) -> PlayerProgress:
    return PlayerProgress.model_validate_json(kv.get(PLAYER_PROGRESS_KEY))


# ── Loading ──────────────────────────────────────────────


def test_new_player_when_nothing_saved(store):
    assert store.progress == PlayerProgress.new_player()


def test_loads_saved_progress():
    saved = PlayerProgress(completed_puzzles={"w_01"}, total_puzzles_solved=1, currency=55)
    kv = MemoryStore({PLAYER_PROGRESS_KEY: saved.model_dump_json()})
    assert ProgressStore(kv).progress == saved


def test_corrupt_data_falls_back_to_new_player():
    kv = MemoryStore({PLAYER_PROGRESS_KEY: "{definitely not json"})
    assert ProgressStore(kv).progress == PlayerProgress.new_player()


def test_wrong_shape_falls_back_to_new_player():
    kv = MemoryStore({PLAYER_PROGRESS_KEY: json.dumps({"currency": "lots"})})
    assert ProgressStore(kv).progress == PlayerProgress.new_player()


def test_mismatched_solved_count_falls_back_to_new_player():
    kv = MemoryStore(
        {PLAYER_PROGRESS_KEY: json.dumps({"completed_puzzles": ["a"], "total_puzzles_solved": 5})}
    )
    progress = ProgressStore(kv).progress
    assert progress == PlayerProgress.new_player()
    assert progress.total_puzzles_solved == len(progress.completed_puzzles)


def test_undecodable_file_falls_back_to_new_player(tmp_path):
    """A progress file that is not UTF-8 at all still loads as a new player."""
    (tmp_path / "player_progress.json").write_bytes(b"\xff\xfe\x00garbage")
    store = ProgressStore(JsonFileStore(tmp_path))
    assert store.progress == PlayerProgress.new_player()

    store.add_currency(5)
    assert ProgressStore(JsonFileStore(tmp_path)).currency == 105


def test_corrupt_json_file_falls_back_to_new_player(tmp_path):
    (tmp_path / "player_progress.json").write_text('{"currency": ')
    assert ProgressStore(JsonFileStore(tmp_path)).progress == PlayerProgress.new_player()


def test_file_store_roundtrip(tmp_path):
    store = ProgressStore(JsonFileStore(tmp_path))
    store.add_currency(15)
    store.unlock_spirit("spirit_fox")

    reopened = ProgressStore(JsonFileStore(tmp_path))
    assert reopened.progress == store.progress
    assert reopened.currency == 115


# ── Snapshots ────────────────────────────────────────────


def test_snapshot_is_a_copy(store):
    snapshot = store.progress
    snapshot.currency = 9999
    snapshot.completed_puzzles.add("sneaky")
    assert store.currency == 100
    assert not store.is_puzzle_completed("sneaky")


# ── Economy ──────────────────────────────────────────────


def test_spend_affordable(store, kv):
    assert store.spend(40) is True
    assert store.currency == 60
    assert _saved(kv).currency == 60


def test_spend_exact_balance(store):
    assert store.spend(100) is True
    assert store.currency == 0


def test_spend_unaffordable_changes_nothing(store, kv):
    assert store.spend(101) is False
    assert store.currency == 100
    assert kv.get(PLAYER_PROGRESS_KEY) is None  # nothing written


def test_negative_amounts_rejected(store):
    with pytest.raises(ValueError):
        store.spend(-5)
    with pytest.raises(ValueError):
        store.add_currency(-5)
    assert store.currency == 100


def test_add_currency_persists(store, kv):
    store.add_currency(50)
    assert _saved(kv).currency == 150


def test_use_hint_counts(store, kv):
    store.use_hint()
    store.use_hint()
    assert _saved(kv).hints_used == 2


# ── Unlocks & session state ──────────────────────────────


def test_unlock_mutators_persist(store, kv):
    store.unlock_theme("aurora")
    store.unlock_soundscape("rain")
    store.unlock_spirit("spirit_fox")
    store.set_current_puzzle("w_03")

    saved = _saved(kv)
    assert saved.unlocked_themes == {"default", "aurora"}
    assert saved.unlocked_soundscapes == {"quiet_night", "rain"}
    assert saved.unlocked_spirits == {"spirit_fox"}
    assert saved.current_puzzle == "w_03"
    assert store.is_spirit_unlocked("spirit_fox")


def test_constellation_queries(store, catalog):
    woods = catalog.constellation("woods")
    sea = catalog.constellation("sea")
    assert store.is_constellation_unlocked(woods)
    assert not store.is_constellation_unlocked(sea)
    assert store.completed_puzzles_in(woods) == 0
    assert not store.is_constellation_complete(woods)


def test_reset_progress(store, kv):
    store.add_currency(500)
    store.unlock_spirit("spirit_fox")
    store.reset_progress()
    assert store.progress == PlayerProgress.new_player()
    assert _saved(kv) == PlayerProgress.new_player()


def test_unlock_all_content(store):
    store.unlock_all_content(5)
    assert store.current_constellation_order == 5
    assert store.currency == 10000


def test_unlock_all_content_never_lowers_order(store):
    with store.transaction() as progress:
        progress.current_constellation_order = 4
    store.unlock_all_content(2)
    assert store.current_constellation_order == 4


# ── Transactions ─────────────────────────────────────────


def test_transaction_writes_once(store):
    writes = []
    store.subscribe(writes.append)
    with store.transaction() as progress:
        progress.currency += 1
        progress.hints_used += 1
    assert len(writes) == 1
    assert writes[0].currency == 101


def test_transaction_rolls_back_on_error(store, kv):
    with pytest.raises(RuntimeError):
        with store.transaction() as progress:
            progress.currency = 5
            progress.completed_puzzles.add("w_01")
            raise RuntimeError("boom")
    assert store.currency == 100
    assert not store.is_puzzle_completed("w_01")
    assert kv.get(PLAYER_PROGRESS_KEY) is None


def test_transactions_do_not_nest(store):
    with pytest.raises(RuntimeError):
        with store.transaction():
            with store.transaction():
                pass
    # the store is usable again afterwards
    store.add_currency(1)
    assert store.currency == 101


# ── Observers ────────────────────────────────────────────


def test_subscribers_get_snapshots(store):
    seen: list[PlayerProgress] = []
    store.subscribe(seen.append)
    store.add_currency(10)
    store.spend(30)
    assert [p.currency for p in seen] == [110, 80]

    seen[0].currency = 0
    assert store.currency == 80


def test_rejected_spend_does_not_notify(store):
    seen = []
    store.subscribe(seen.append)
    store.spend(1000)
    assert seen == []


def test_unsubscribe(store):
    seen = []
    unsubscribe = store.subscribe(seen.append)
    store.add_currency(1)
    unsubscribe()
    unsubscribe()  # idempotent
    store.add_currency(1)
    assert len(seen) == 1
