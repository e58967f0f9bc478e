"""Pure state transitions applied to the category collection.

Every function takes the current categories plus the event fields and returns
a new list. Inputs are never mutated and out-of-range quantities are clamped
instead of rejected, so the worst outcome of a malformed event is a no-op.

The hamper is keyed by category *name*; batches and bags therefore join on
``Category.name`` while UI actions address categories by ``Category.id``.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from models.category import (
    Category,
    HistoryEntry,
    as_count,
    create_category,
    max_batch_size_for,
    safety_threshold_for,
)
from models.timestamps import resolve_now, to_iso

logger = logging.getLogger(__name__)

DEFAULT_RETIREMENT_REASON = "worn_out"


def _with_ownership(category: Category, total_owned: int, **changes: object) -> Category:
    """Apply an ownership change and recompute the derived thresholds."""

    return replace(
        category,
        total_owned=total_owned,
        safety_threshold=safety_threshold_for(total_owned),
        max_batch_size=max_batch_size_for(total_owned),
        **changes,
    )


def toss(
    categories: Sequence[Category],
    category_id: str,
    count: int = 1,
    now: Optional[datetime] = None,
) -> List[Category]:
    """Record a wear event; the items stay clean until they are dispatched."""

    stamp = to_iso(resolve_now(now))
    updated: List[Category] = []
    for category in categories:
        if category.id != category_id:
            updated.append(category)
            continue
        tossed = min(as_count(count), category.clean_count)
        if tossed == 0:
            updated.append(category)
            continue
        updated.append(
            replace(
                category,
                last_worn_date=stamp,
                wear_history=category.wear_history + (HistoryEntry(date=stamp, count=tossed),),
            )
        )
    return updated


def dispatch(
    categories: Sequence[Category], bag_contents: Mapping[str, int]
) -> Tuple[List[Category], Dict[str, int]]:
    """Send staged items to the laundry.

    Returns the new categories and the quantities actually moved per category
    name. Requests beyond the available clean stock are dropped, so the batch
    built from ``moved`` never records items that were not removed.
    """

    moved: Dict[str, int] = {}
    updated: List[Category] = []
    for category in categories:
        requested = as_count(bag_contents.get(category.name, 0))
        to_dispatch = min(requested, category.clean_count)
        if to_dispatch == 0:
            updated.append(category)
            continue
        if to_dispatch < requested:
            logger.debug(
                "Clamped dispatch for %s from %s to %s", category.name, requested, to_dispatch
            )
        moved[category.name] = to_dispatch
        updated.append(
            replace(
                category,
                clean_count=category.clean_count - to_dispatch,
                dirty_count=category.dirty_count + to_dispatch,
                in_laundry_count=category.in_laundry_count + to_dispatch,
            )
        )
    return updated, moved


def complete(categories: Sequence[Category], batch_contents: Mapping[str, int]) -> List[Category]:
    """Return laundered items to clean stock.

    Items retired while the batch was out were already taken from dirty
    stock, so clean stock only refills up to what the category still owns.
    """

    updated: List[Category] = []
    for category in categories:
        returned = as_count(batch_contents.get(category.name, 0))
        if returned == 0:
            updated.append(category)
            continue
        in_laundry = max(0, category.in_laundry_count - returned)
        dirty = max(0, category.dirty_count - returned)
        room = category.total_owned - dirty - in_laundry
        clean = max(category.clean_count, min(category.clean_count + returned, room))
        if clean - category.clean_count < returned:
            logger.debug(
                "Capped clean return for %s at %s of %s",
                category.name,
                clean - category.clean_count,
                returned,
            )
        updated.append(
            replace(
                category,
                in_laundry_count=in_laundry,
                dirty_count=dirty,
                clean_count=clean,
            )
        )
    return updated


def acquire(
    categories: Sequence[Category],
    category_id: str,
    count: int = 1,
    price: float = 0,
    now: Optional[datetime] = None,
) -> List[Category]:
    """Add newly purchased items as clean stock."""

    added = as_count(count)
    if added == 0:
        return list(categories)
    stamp = to_iso(resolve_now(now))
    updated: List[Category] = []
    for category in categories:
        if category.id != category_id:
            updated.append(category)
            continue
        record = HistoryEntry(date=stamp, count=added, price=max(0.0, float(price or 0)))
        updated.append(
            _with_ownership(
                category,
                category.total_owned + added,
                clean_count=category.clean_count + added,
                purchase_history=category.purchase_history + (record,),
            )
        )
    return updated


def retire(
    categories: Sequence[Category],
    category_id: str,
    count: int = 1,
    reason: str = DEFAULT_RETIREMENT_REASON,
    now: Optional[datetime] = None,
) -> List[Category]:
    """Remove items from ownership, drawing clean, then dirty, then in-laundry stock."""

    stamp = to_iso(resolve_now(now))
    updated: List[Category] = []
    for category in categories:
        if category.id != category_id:
            updated.append(category)
            continue
        to_retire = min(as_count(count), category.total_owned)
        if to_retire == 0:
            updated.append(category)
            continue

        remaining = to_retire
        from_clean = min(remaining, category.clean_count)
        remaining -= from_clean
        from_dirty = min(remaining, category.dirty_count)
        remaining -= from_dirty
        from_laundry = min(remaining, category.in_laundry_count)

        record = HistoryEntry(date=stamp, count=to_retire, reason=reason or DEFAULT_RETIREMENT_REASON)
        updated.append(
            _with_ownership(
                category,
                category.total_owned - to_retire,
                clean_count=category.clean_count - from_clean,
                dirty_count=category.dirty_count - from_dirty,
                in_laundry_count=category.in_laundry_count - from_laundry,
                retirement_history=category.retirement_history + (record,),
            )
        )
    return updated


def add_category(
    categories: Sequence[Category],
    category_id: str,
    name: str,
    emoji: str = "",
    initial_count: int = 0,
) -> List[Category]:
    """Register a new category; duplicate names or ids are ignored."""

    if any(category.id == category_id or category.name == name for category in categories):
        logger.debug("Ignoring duplicate category %s", name)
        return list(categories)
    return [*categories, create_category(category_id, name, emoji, as_count(initial_count))]


def remove_category(
    categories: Sequence[Category], category_id: str, bag_contents: Mapping[str, int]
) -> Tuple[List[Category], Dict[str, int]]:
    """Drop a category and any hamper quantity staged under its name."""

    removed = next((category for category in categories if category.id == category_id), None)
    remaining = [category for category in categories if category.id != category_id]
    bag = dict(bag_contents)
    if removed is not None:
        bag.pop(removed.name, None)
    return remaining, bag


def set_hibernation(categories: Sequence[Category], category_id: str, hibernated: bool) -> List[Category]:
    return [
        replace(category, hibernated=bool(hibernated)) if category.id == category_id else category
        for category in categories
    ]


def prune_empty(categories: Sequence[Category]) -> List[Category]:
    """Zero-owned categories are removed after every mutating action."""

    return [category for category in categories if category.total_owned > 0]


__all__ = [
    "acquire",
    "add_category",
    "complete",
    "dispatch",
    "prune_empty",
    "remove_category",
    "retire",
    "set_hibernation",
    "toss",
    "DEFAULT_RETIREMENT_REASON",
]
