"""Repair passes for persisted state that drifted out of its invariants."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, List, Mapping, Sequence

from models.category import Category, max_batch_size_for, safety_threshold_for

logger = logging.getLogger(__name__)


def _non_negative(value: object) -> int:
    try:
        return max(0, int(value))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0


def is_conserved(category: Category) -> bool:
    """``totalOwned`` equals the sum of clean, dirty and in-laundry stock."""

    counts = (category.clean_count, category.dirty_count, category.in_laundry_count)
    return all(count >= 0 for count in counts) and sum(counts) == category.total_owned


def _repair(category: Category) -> Category:
    total = _non_negative(category.total_owned)
    clean = _non_negative(category.clean_count)
    dirty = _non_negative(category.dirty_count)
    in_laundry = _non_negative(category.in_laundry_count)

    surplus = clean + dirty + in_laundry - total
    if surplus > 0:
        # Clean stock is what the user sees first, so it is trimmed last.
        taken = min(surplus, dirty)
        dirty -= taken
        surplus -= taken
        taken = min(surplus, in_laundry)
        in_laundry -= taken
        surplus -= taken
        clean -= surplus
    elif surplus < 0:
        clean += -surplus

    safety = _non_negative(category.safety_threshold)
    batch_size = _non_negative(category.max_batch_size)
    if total > 0:
        safety = safety or safety_threshold_for(total)
        batch_size = batch_size or max_batch_size_for(total)

    return replace(
        category,
        total_owned=total,
        clean_count=clean,
        dirty_count=dirty,
        in_laundry_count=in_laundry,
        safety_threshold=safety,
        max_batch_size=batch_size,
        hibernated=bool(category.hibernated),
    )


def validate_and_fix_consistency(categories: Sequence[Category]) -> List[Category]:
    """Clamp counts and force conservation; applying it twice is a no-op."""

    repaired: List[Category] = []
    for category in categories:
        fixed = _repair(category)
        if fixed != category:
            logger.info(
                "Repaired category %s: clean=%s dirty=%s in_laundry=%s total=%s",
                fixed.name,
                fixed.clean_count,
                fixed.dirty_count,
                fixed.in_laundry_count,
                fixed.total_owned,
            )
        repaired.append(fixed)
    return repaired


def prune_orphans(bag_contents: Mapping[str, int], categories: Sequence[Category]) -> Dict[str, int]:
    """Drop hamper entries whose category no longer exists or whose count is not positive."""

    names = {category.name for category in categories}
    pruned: Dict[str, int] = {}
    for name, count in bag_contents.items():
        quantity = _non_negative(count)
        if name in names and quantity > 0:
            pruned[name] = quantity
    return pruned


__all__ = ["is_conserved", "prune_orphans", "validate_and_fix_consistency"]
