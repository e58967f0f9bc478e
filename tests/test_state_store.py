"""Persistence round-trips and corrupt-slice recovery for JSON and SQLite stores."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from logic import actions
from memory.state_store import SLICE_KEYS, JSONStateStore, SQLiteStateStore
from models.category import Category, create_category
from models.wardrobe import WardrobeState, build_state, deserialize_state, serialize_state

NOW = datetime(2024, 6, 3, 12, 0, tzinfo=timezone.utc)


def _in_flight_state() -> WardrobeState:
    state = build_state(
        categories=[create_category("cat_tees", "T-Shirts", "👕", 10), create_category("cat_socks", "Socks", "🧦", 6)],
        bag_contents={"T-Shirts": 3},
    )
    state = actions.toss_item(state, "cat_socks", 2, now=NOW).state
    state = actions.dispatch_laundry(state, batch_id="BATCH_1", now=NOW).state
    return actions.add_to_bag(state, "Socks", 2).state


@pytest.fixture(params=["json", "sqlite"])
def store(request, tmp_path: Path):
    if request.param == "json":
        return JSONStateStore(base_dir=tmp_path / "wardrobe")
    return SQLiteStateStore(db_path=tmp_path / "wardrobe.db")


def test_round_trip_preserves_settled_state(store) -> None:
    state = build_state(
        categories=[create_category("cat_tees", "T-Shirts", "👕", 10)],
        bag_contents={"T-Shirts": 2},
    )
    assert store.save(state) is True
    assert store.load_state() == state


def test_in_flight_batches_and_histories_survive_reload(store) -> None:
    state = _in_flight_state()
    store.save(state)
    loaded = store.load_state()

    assert loaded.batches == state.batches
    assert loaded.bag_contents == {"Socks": 2}
    socks = loaded.find_category("cat_socks")
    assert socks.wear_history == state.find_category("cat_socks").wear_history
    tees = loaded.find_category("cat_tees")
    assert tees.total_owned == tees.clean_count + tees.dirty_count + tees.in_laundry_count


def test_empty_store_loads_empty_state(store) -> None:
    assert store.load_state() == WardrobeState()


def test_corrupt_slice_falls_back_independently(tmp_path: Path) -> None:
    store = JSONStateStore(base_dir=tmp_path)
    store.save(build_state(categories=[create_category("cat_tees", "T-Shirts", total_owned=4)], bag_contents={"T-Shirts": 1}))
    (tmp_path / f"{SLICE_KEYS['bagContents'].lstrip('@')}.json").write_text("{not json")

    loaded = store.load_state()
    assert loaded.bag_contents == {}
    assert loaded.find_category("cat_tees").total_owned == 4


def test_undecodable_slice_falls_back_independently(tmp_path: Path) -> None:
    store = JSONStateStore(base_dir=tmp_path)
    store.save(build_state(categories=[create_category("cat_tees", "T-Shirts", total_owned=4)], bag_contents={"T-Shirts": 1}))
    (tmp_path / f"{SLICE_KEYS['bagContents'].lstrip('@')}.json").write_bytes(b"\xff\xfe{")

    loaded = store.load_state()
    assert loaded.bag_contents == {}
    assert loaded.find_category("cat_tees").total_owned == 4


def test_sqlite_corrupt_slice_falls_back(tmp_path: Path) -> None:
    store = SQLiteStateStore(db_path=tmp_path / "state.db")
    store.set_item(SLICE_KEYS["categories"], "[{broken")
    store.set_item(SLICE_KEYS["bagContents"], '{"Ghost": 4}')

    loaded = store.load_state()
    assert loaded.categories == ()
    assert loaded.bag_contents == {}


def test_load_repairs_drifted_counts(tmp_path: Path) -> None:
    store = SQLiteStateStore(db_path=tmp_path / "state.db")
    drifted = Category(id="cat_socks", name="Socks", total_owned=8, clean_count=2, dirty_count=1)
    store.save(build_state(categories=[drifted], bag_contents={"Socks": 2, "Ghost": 1}))

    loaded = store.load_state()
    socks = loaded.find_category("cat_socks")
    assert (socks.clean_count, socks.dirty_count) == (7, 1)
    assert socks.safety_threshold == 2
    assert loaded.bag_contents == {"Socks": 2}


def test_save_failure_is_reported_not_raised(tmp_path: Path) -> None:
    store = JSONStateStore(base_dir=tmp_path / "wardrobe")
    (tmp_path / "wardrobe").rmdir()
    (tmp_path / "wardrobe").write_text("now a file")
    assert store.save(WardrobeState()) is False


def test_serialize_round_trip_and_garbage_default() -> None:
    state = _in_flight_state()
    assert deserialize_state(serialize_state(state)) == state
    fallback = build_state(bag_contents={"Socks": 1})
    assert deserialize_state("not json", default=fallback) is fallback
    assert deserialize_state(None) == WardrobeState()
