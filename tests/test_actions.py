"""Atomic action tests over whole wardrobe snapshots."""

from datetime import datetime, timedelta, timezone

from logic import actions
from logic.consistency import is_conserved
from models.category import create_category
from models.wardrobe import build_state

NOW = datetime(2024, 6, 3, 12, 0, tzinfo=timezone.utc)


def _state(bag=None):
    return build_state(
        categories=[
            create_category("cat_tees", "T-Shirts", "👕", 10),
            create_category("cat_socks", "Socks", "🧦", 3),
        ],
        bag_contents=bag or {},
    )


def test_toss_reports_clamped_amount() -> None:
    result = actions.toss_item(_state(), "cat_socks", 5, now=NOW)
    assert result.status == actions.STATUS_PARTIAL
    assert (result.requested, result.applied) == (5, 3)
    assert result.state.find_category("cat_socks").clean_count == 3

    missing = actions.toss_item(_state(), "cat_unknown", 1, now=NOW)
    assert missing.status == actions.STATUS_NOOP


def test_dispatch_builds_batch_from_moved_quantities() -> None:
    state = _state(bag={"Socks": 100, "T-Shirts": 4})
    result = actions.dispatch_laundry(state, batch_id="BATCH_1", now=NOW)

    assert result.batch is not None
    assert result.batch.contents == {"Socks": 3, "T-Shirts": 4}
    assert result.batch.total_items == 7
    assert result.details == {"moved": {"Socks": 3, "T-Shirts": 4}}
    assert (result.requested, result.applied) == (104, 7)
    assert result.status == actions.STATUS_PARTIAL
    assert result.state.bag_contents == {}
    assert result.state.batches == (result.batch,)
    socks = result.state.find_category("cat_socks")
    assert (socks.clean_count, socks.dirty_count, socks.in_laundry_count) == (0, 3, 3)


def test_dispatch_explicit_bag_leaves_other_staged_items() -> None:
    state = _state(bag={"Socks": 2, "T-Shirts": 3})
    result = actions.dispatch_laundry(state, {"T-Shirts": 1}, batch_id="BATCH_1", now=NOW)

    assert result.batch.contents == {"T-Shirts": 1}
    assert result.state.bag_contents == {"Socks": 2, "T-Shirts": 2}


def test_malformed_counts_are_clamped_not_raised() -> None:
    state = _state(bag={"Socks": 1})

    dispatched = actions.dispatch_laundry(state, {"T-Shirts": "lots", "Socks": None}, now=NOW)
    assert dispatched.status == actions.STATUS_NOOP
    assert dispatched.batch is None
    assert dispatched.state.categories == state.categories

    for result in (
        actions.toss_item(state, "cat_socks", "lots", now=NOW),
        actions.acquire_item(state, "cat_socks", None, now=NOW),
        actions.retire_item(state, "cat_socks", "two", now=NOW),
        actions.add_to_bag(state, "Socks", object()),
        actions.quick_fill(state, per_category="some"),
    ):
        assert result.status == actions.STATUS_NOOP
        assert result.requested == 0
        assert result.state == state


def test_completing_after_retiring_in_flight_items_conserves_stock() -> None:
    dispatched = actions.dispatch_laundry(_state(bag={"T-Shirts": 3}), batch_id="BATCH_1", now=NOW)
    retired = actions.retire_item(dispatched.state, "cat_tees", 9, now=NOW)
    completed = actions.complete_batch(retired.state, "BATCH_1", now=NOW)

    tees = completed.state.find_category("cat_tees")
    assert tees.total_owned == 1
    assert tees.clean_count == 1
    assert is_conserved(tees)


def test_dispatch_with_nothing_to_move_creates_no_batch() -> None:
    result = actions.dispatch_laundry(_state(), now=NOW)
    assert result.batch is None
    assert result.state.batches == ()
    assert result.status == actions.STATUS_NOOP


def test_complete_batch_returns_items_and_records_history() -> None:
    dispatched = actions.dispatch_laundry(_state(bag={"T-Shirts": 4}), batch_id="BATCH_1", now=NOW)
    later = NOW + timedelta(hours=3)
    result = actions.complete_batch(dispatched.state, "BATCH_1", now=later)

    tees = result.state.find_category("cat_tees")
    assert (tees.clean_count, tees.dirty_count, tees.in_laundry_count) == (10, 0, 0)
    assert is_conserved(tees)
    assert result.state.find_batch("BATCH_1").status == "completed"
    assert len(result.state.laundry_history) == 1
    assert result.state.laundry_history[0].completed_at == later.isoformat()

    again = actions.complete_batch(result.state, "BATCH_1", now=later)
    assert again.status == actions.STATUS_NOOP
    assert again.state == result.state


def test_retire_everything_prunes_category_and_bag_entry() -> None:
    state = _state(bag={"Socks": 2, "T-Shirts": 1})
    result = actions.retire_item(state, "cat_socks", 3, now=NOW)

    assert result.state.find_category("cat_socks") is None
    assert result.state.bag_contents == {"T-Shirts": 1}
    assert result.state.bag_count == 1


def test_add_category_assigns_id_and_prunes_empty() -> None:
    result = actions.add_category(_state(), "Hoodies", "🧥", 4)
    new_id = result.details["category_id"]
    assert result.state.find_category(new_id).total_owned == 4

    empty = actions.add_category(_state(), "Scarves", "", 0)
    assert empty.status == actions.STATUS_NOOP
    assert len(empty.state.categories) == 2

    duplicate = actions.add_category(_state(), "Socks", "", 5)
    assert duplicate.status == actions.STATUS_NOOP
    assert "already exists" in duplicate.message


def test_remove_category_drops_staged_items() -> None:
    result = actions.remove_category(_state(bag={"Socks": 2}), "cat_socks")
    assert result.status == actions.STATUS_OK
    assert result.state.bag_contents == {}


def test_add_to_bag_and_quick_fill_report_applied() -> None:
    staged = actions.add_to_bag(_state(), "Socks", 5, capacity=30)
    assert (staged.requested, staged.applied) == (5, 3)
    assert "Added 3 of 5" in staged.message

    filled = actions.quick_fill(_state(), capacity=30)
    assert filled.state.bag_contents == {"T-Shirts": 2, "Socks": 2}

    full = actions.dump_all(_state(), "cat_tees", capacity=6)
    assert full.applied == 6
    assert "4 items remaining" in full.message

    cleared = actions.clear_bag(filled.state)
    assert cleared.applied == 4
    assert cleared.state.bag_contents == {}


def test_hibernation_toggle() -> None:
    result = actions.update_category_hibernation(_state(), "cat_tees", True)
    assert result.state.find_category("cat_tees").hibernated
    missing = actions.update_category_hibernation(_state(), "cat_nope", True)
    assert missing.status == actions.STATUS_NOOP


def test_acquire_grows_stock() -> None:
    result = actions.acquire_item(_state(), "cat_socks", 2, price=3.0, now=NOW)
    socks = result.state.find_category("cat_socks")
    assert (socks.total_owned, socks.clean_count) == (5, 5)
    assert result.applied == 2
