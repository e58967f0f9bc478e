"""Atomic wardrobe actions.

Each action is a pure function from one :class:`WardrobeState` to the next.
Categories, batches, laundry history and the hamper are all updated together
in a single result, and every mutating action ends with the same clean-up:
zero-owned categories are pruned and hamper entries left without a category
are dropped.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from logic import hamper, transitions
from logic.consistency import prune_orphans
from models.batch import STATUS_COMPLETED, Batch, LaundryHistoryEntry, create_batch
from models.category import Category, as_count
from models.wardrobe import WardrobeState

STATUS_OK = "ok"
STATUS_NOOP = "noop"
STATUS_PARTIAL = "partial"
STATUS_REJECTED = "rejected"


@dataclass(frozen=True)
class ActionResult:
    """Outcome of one action: the next snapshot plus what was actually applied."""

    state: Optional[WardrobeState]
    status: str = STATUS_OK
    requested: int = 0
    applied: int = 0
    message: str = ""
    batch: Optional[Batch] = None
    details: Optional[Dict[str, Any]] = None

    @classmethod
    def rejected(cls, message: str, details: Optional[Dict[str, Any]] = None) -> "ActionResult":
        return cls(state=None, status=STATUS_REJECTED, message=message, details=details)


def _status(requested: int, applied: int) -> str:
    if applied <= 0:
        return STATUS_NOOP
    if applied < requested:
        return STATUS_PARTIAL
    return STATUS_OK


def _settle(
    state: WardrobeState,
    categories: Sequence[Category],
    bag_contents: Optional[Mapping[str, int]] = None,
    **changes: Any,
) -> WardrobeState:
    kept = transitions.prune_empty(categories)
    bag = prune_orphans(state.bag_contents if bag_contents is None else bag_contents, kept)
    return replace(state, categories=tuple(kept), bag_contents=bag, **changes)


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def toss_item(
    state: WardrobeState, category_id: str, count: int = 1, now: Optional[datetime] = None
) -> ActionResult:
    count = as_count(count)
    category = state.find_category(category_id)
    applied = min(count, category.clean_count) if category else 0
    categories = transitions.toss(state.categories, category_id, count, now=now)
    return ActionResult(
        state=_settle(state, categories),
        status=_status(count, applied),
        requested=count,
        applied=applied,
    )


def acquire_item(
    state: WardrobeState,
    category_id: str,
    count: int = 1,
    price: float = 0,
    now: Optional[datetime] = None,
) -> ActionResult:
    count = as_count(count)
    applied = count if state.find_category(category_id) else 0
    categories = transitions.acquire(state.categories, category_id, count, price, now=now)
    return ActionResult(
        state=_settle(state, categories),
        status=_status(count, applied),
        requested=count,
        applied=applied,
    )


def retire_item(
    state: WardrobeState,
    category_id: str,
    count: int = 1,
    reason: str = transitions.DEFAULT_RETIREMENT_REASON,
    now: Optional[datetime] = None,
) -> ActionResult:
    count = as_count(count)
    category = state.find_category(category_id)
    applied = min(count, category.total_owned) if category else 0
    categories = transitions.retire(state.categories, category_id, count, reason, now=now)
    return ActionResult(
        state=_settle(state, categories),
        status=_status(count, applied),
        requested=count,
        applied=applied,
    )


def add_to_bag(
    state: WardrobeState,
    category_name: str,
    count: int = 1,
    capacity: int = hamper.DEFAULT_BAG_CAPACITY,
) -> ActionResult:
    count = as_count(count)
    bag, added = hamper.add_to_bag(state.bag_contents, state.categories, category_name, count, capacity)
    message = ""
    if added < count:
        message = f"Added {added} of {count} items ({hamper.bag_count(bag)}/{capacity} in bag)."
    return ActionResult(
        state=_settle(state, state.categories, bag),
        status=_status(count, added),
        requested=count,
        applied=added,
        message=message,
    )


def dump_all(
    state: WardrobeState, category_id: str, capacity: int = hamper.DEFAULT_BAG_CAPACITY
) -> ActionResult:
    category = state.find_category(category_id)
    requested = hamper.available_to_stage(state.bag_contents, category) if category else 0
    bag, added = hamper.dump_all(state.bag_contents, state.categories, category_id, capacity)
    message = ""
    if added < requested:
        message = f"Added {added} items. Bag is now full ({capacity}/{capacity}). {requested - added} items remaining."
    return ActionResult(
        state=_settle(state, state.categories, bag),
        status=_status(requested, added),
        requested=requested,
        applied=added,
        message=message,
    )


def quick_fill(
    state: WardrobeState,
    per_category: int = hamper.QUICK_FILL_PER_CATEGORY,
    capacity: int = hamper.DEFAULT_BAG_CAPACITY,
) -> ActionResult:
    bag, added = hamper.quick_fill(state.bag_contents, state.categories, per_category, capacity)
    return ActionResult(
        state=_settle(state, state.categories, bag),
        status=_status(added, added),
        requested=added,
        applied=added,
    )


def clear_bag(state: WardrobeState) -> ActionResult:
    cleared = state.bag_count
    return ActionResult(
        state=_settle(state, state.categories, hamper.clear_bag()),
        status=_status(cleared, cleared),
        requested=cleared,
        applied=cleared,
    )


def dispatch_laundry(
    state: WardrobeState,
    bag_contents: Optional[Mapping[str, int]] = None,
    batch_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ActionResult:
    """Send the hamper (or an explicit ``bag_contents``) to the laundry.

    The batch records only the quantities actually removed from clean stock.
    Dispatching the hamper empties it; an explicit bag only takes the moved
    quantities out of whatever is staged.
    """

    requested_bag = dict(state.bag_contents if bag_contents is None else bag_contents)
    requested = sum(as_count(count) for count in requested_bag.values())
    categories, moved = transitions.dispatch(state.categories, requested_bag)
    batch = create_batch(batch_id or _new_id("BATCH"), moved, now=now)
    batches = state.batches + (batch,) if batch else state.batches
    applied = batch.total_items if batch else 0
    message = ""
    if applied < requested:
        message = f"Dispatched {applied} of {requested} requested items."
    if bag_contents is None:
        remaining_bag = hamper.clear_bag()
    else:
        remaining_bag = hamper.unstage(state.bag_contents, moved)
    return ActionResult(
        state=_settle(state, categories, remaining_bag, batches=batches),
        status=_status(requested, applied),
        requested=requested,
        applied=applied,
        message=message,
        batch=batch,
        details={"moved": moved},
    )


def complete_batch(state: WardrobeState, batch_id: str, now: Optional[datetime] = None) -> ActionResult:
    """Return a batch's items to clean stock and move it into laundry history."""

    batch = state.find_batch(batch_id)
    if batch is None or batch.status == STATUS_COMPLETED:
        return ActionResult(state=state, status=STATUS_NOOP, message=f"No in-progress batch {batch_id}.")

    completed = batch.mark_completed(now)
    batches = tuple(completed if item.id == batch_id else item for item in state.batches)
    categories = transitions.complete(state.categories, completed.contents)
    history = state.laundry_history + (LaundryHistoryEntry.from_batch(completed),)
    return ActionResult(
        state=_settle(state, categories, batches=batches, laundry_history=history),
        requested=completed.total_items,
        applied=completed.total_items,
        batch=completed,
    )


def add_category(
    state: WardrobeState,
    name: str,
    emoji: str = "",
    initial_count: int = 0,
    category_id: Optional[str] = None,
) -> ActionResult:
    """Register a category. A zero initial count is pruned immediately."""

    new_id = category_id or _new_id("CAT")
    categories: List[Category] = transitions.add_category(state.categories, new_id, name, emoji, initial_count)
    added = len(categories) > len(state.categories)
    settled = _settle(state, categories)
    created = settled.find_category(new_id) is not None
    message = ""
    if added and not created:
        message = f"Category {name} has no items and was not kept."
    elif not added:
        message = f"Category {name} already exists."
    return ActionResult(
        state=settled,
        status=STATUS_OK if created else STATUS_NOOP,
        requested=1,
        applied=1 if created else 0,
        message=message,
        details={"category_id": new_id} if created else None,
    )


def remove_category(state: WardrobeState, category_id: str) -> ActionResult:
    categories, bag = transitions.remove_category(state.categories, category_id, state.bag_contents)
    removed = len(categories) < len(state.categories)
    return ActionResult(
        state=_settle(state, categories, bag),
        status=STATUS_OK if removed else STATUS_NOOP,
        requested=1,
        applied=1 if removed else 0,
    )


def update_category_hibernation(state: WardrobeState, category_id: str, hibernated: bool) -> ActionResult:
    found = state.find_category(category_id) is not None
    categories = transitions.set_hibernation(state.categories, category_id, hibernated)
    return ActionResult(
        state=_settle(state, categories),
        status=STATUS_OK if found else STATUS_NOOP,
        requested=1,
        applied=1 if found else 0,
    )


__all__ = [
    "ActionResult",
    "acquire_item",
    "add_category",
    "add_to_bag",
    "clear_bag",
    "complete_batch",
    "dispatch_laundry",
    "dump_all",
    "quick_fill",
    "remove_category",
    "retire_item",
    "toss_item",
    "update_category_hibernation",
    "STATUS_NOOP",
    "STATUS_OK",
    "STATUS_PARTIAL",
    "STATUS_REJECTED",
]
