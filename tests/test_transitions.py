"""State transition and consistency repair tests."""

from dataclasses import replace
from datetime import datetime, timezone

from logic import transitions
from logic.consistency import is_conserved, prune_orphans, validate_and_fix_consistency
from models.category import Category, create_category

NOW = datetime(2024, 6, 3, 12, 0, tzinfo=timezone.utc)


def _socks(**overrides) -> Category:
    base = create_category("cat_socks", "Socks", "🧦", 10)
    return replace(base, **overrides)


def test_create_category_derives_thresholds() -> None:
    category = create_category("cat_jeans", "Jeans", total_owned=4)
    assert category.clean_count == 4
    assert category.safety_threshold == 2
    assert category.max_batch_size == 2

    large = create_category("cat_tees", "T-Shirts", total_owned=12)
    assert large.safety_threshold == 3
    assert large.max_batch_size == 5

    empty = create_category("cat_none", "Hats")
    assert empty.safety_threshold == 0 and empty.max_batch_size == 0


def test_toss_records_wear_without_moving_stock() -> None:
    categories = [_socks()]
    updated = transitions.toss(categories, "cat_socks", 3, now=NOW)

    socks = updated[0]
    assert socks.clean_count == 10
    assert socks.dirty_count == 0
    assert socks.wear_history[-1].count == 3
    assert socks.last_worn_date == NOW.isoformat()
    assert categories[0].wear_history == ()


def test_toss_clamps_to_clean_and_ignores_zero() -> None:
    categories = [_socks(clean_count=2, dirty_count=8)]
    updated = transitions.toss(categories, "cat_socks", 5, now=NOW)
    assert updated[0].wear_history[-1].count == 2

    empty = [_socks(clean_count=0, dirty_count=10)]
    assert transitions.toss(empty, "cat_socks", 1, now=NOW) == empty
    assert transitions.toss(categories, "cat_socks", -4, now=NOW) == categories


def test_dispatch_clamps_to_clean_stock() -> None:
    categories = [_socks(clean_count=3, dirty_count=7)]
    updated, moved = transitions.dispatch(categories, {"Socks": 100})

    socks = updated[0]
    assert moved == {"Socks": 3}
    assert socks.clean_count == 0
    assert socks.dirty_count == 10
    assert socks.in_laundry_count == 3


def test_dispatch_ignores_unknown_and_non_positive_names() -> None:
    categories = [_socks()]
    updated, moved = transitions.dispatch(categories, {"Hats": 4, "Socks": 0})
    assert moved == {}
    assert updated == categories


def test_complete_restores_pre_dispatch_counts() -> None:
    categories = [_socks(clean_count=6, dirty_count=4)]
    dispatched, moved = transitions.dispatch(categories, {"Socks": 5})
    restored = transitions.complete(dispatched, moved)

    assert restored[0].dirty_count == 4
    assert restored[0].in_laundry_count == 0
    assert restored[0].clean_count == 6
    assert is_conserved(restored[0])


def test_complete_clamps_counts_at_zero() -> None:
    categories = [_socks(clean_count=9, dirty_count=1, in_laundry_count=0)]
    updated = transitions.complete(categories, {"Socks": 3})
    assert updated[0].dirty_count == 0
    assert updated[0].in_laundry_count == 0
    assert updated[0].clean_count == 10
    assert is_conserved(updated[0])


def test_complete_after_retiring_in_flight_items_stays_conserved() -> None:
    tees = [create_category("cat_tees", "T-Shirts", "👕", 10)]
    dispatched, moved = transitions.dispatch(tees, {"T-Shirts": 3})
    retired = transitions.retire(dispatched, "cat_tees", 9, now=NOW)
    assert (retired[0].clean_count, retired[0].dirty_count, retired[0].in_laundry_count) == (0, 1, 3)

    restored = transitions.complete(retired, moved)[0]
    assert restored.total_owned == 1
    assert (restored.clean_count, restored.dirty_count, restored.in_laundry_count) == (1, 0, 0)
    assert is_conserved(restored)


def test_acquire_adds_clean_stock_and_recomputes_thresholds() -> None:
    categories = [_socks()]
    updated = transitions.acquire(categories, "cat_socks", 5, price=4.5, now=NOW)

    socks = updated[0]
    assert socks.total_owned == 15
    assert socks.clean_count == 15
    assert socks.safety_threshold == 3
    assert socks.max_batch_size == 6
    assert socks.purchase_history[-1].price == 4.5
    assert is_conserved(socks)


def test_retire_draws_clean_then_dirty_then_laundry() -> None:
    category = Category(
        id="cat_tees",
        name="T-Shirts",
        total_owned=4,
        clean_count=2,
        dirty_count=1,
        in_laundry_count=1,
    )
    updated = transitions.retire([category], "cat_tees", 3, reason="stained", now=NOW)

    tees = updated[0]
    assert (tees.clean_count, tees.dirty_count, tees.in_laundry_count) == (0, 0, 1)
    assert tees.total_owned == 1
    assert tees.retirement_history[-1].reason == "stained"
    assert tees.retirement_history[-1].count == 3


def test_retire_clamps_to_owned_and_prune_drops_empty() -> None:
    updated = transitions.retire([_socks()], "cat_socks", 50, now=NOW)
    assert updated[0].total_owned == 0
    assert updated[0].safety_threshold == 0
    assert transitions.prune_empty(updated) == []


def test_add_category_ignores_duplicates() -> None:
    categories = [_socks()]
    assert transitions.add_category(categories, "cat_other", "Socks", "", 3) == categories
    added = transitions.add_category(categories, "cat_hats", "Hats", "🧢", 2)
    assert [category.name for category in added] == ["Socks", "Hats"]


def test_remove_category_prunes_bag_entry() -> None:
    categories = [_socks(), create_category("cat_hats", "Hats", total_owned=2)]
    remaining, bag = transitions.remove_category(categories, "cat_socks", {"Socks": 4, "Hats": 1})
    assert [category.id for category in remaining] == ["cat_hats"]
    assert bag == {"Hats": 1}


def test_set_hibernation_only_touches_target() -> None:
    categories = [_socks(), create_category("cat_hats", "Hats", total_owned=2)]
    updated = transitions.set_hibernation(categories, "cat_hats", True)
    assert [category.hibernated for category in updated] == [False, True]


def test_repair_forces_conservation_and_is_idempotent() -> None:
    drifted = [
        Category(id="a", name="Socks", total_owned=10, clean_count=3, dirty_count=5, in_laundry_count=5),
        Category(id="b", name="Hats", total_owned=6, clean_count=1, dirty_count=-2),
        Category(id="c", name="Jeans", total_owned=5, clean_count=0, dirty_count=5, safety_threshold=1),
    ]
    repaired = validate_and_fix_consistency(drifted)

    socks, hats, jeans = repaired
    assert (socks.clean_count, socks.dirty_count, socks.in_laundry_count) == (3, 2, 5)
    assert (hats.clean_count, hats.dirty_count) == (6, 0)
    assert hats.safety_threshold == 2
    assert jeans.safety_threshold == 1
    assert all(is_conserved(category) for category in repaired)
    assert validate_and_fix_consistency(repaired) == repaired


def test_prune_orphans_drops_unknown_names() -> None:
    assert prune_orphans({"Socks": 2, "Ghost": 3, "Hats": 0}, [_socks()]) == {"Socks": 2}
