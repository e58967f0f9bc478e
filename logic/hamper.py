"""Hamper (bag) staging helpers.

The hamper is a name-keyed staging area for the next dispatch. Staging does
not move stock: a category's staged quantity is bounded by its clean count,
and the whole bag is bounded by its capacity.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Sequence, Tuple

from models.category import Category, as_count

DEFAULT_BAG_CAPACITY = 30
QUICK_FILL_PER_CATEGORY = 2


def bag_count(bag_contents: Mapping[str, int]) -> int:
    return sum(as_count(count) for count in bag_contents.values())


def _by_name(categories: Sequence[Category], name: str) -> Optional[Category]:
    return next((category for category in categories if category.name == name), None)


def available_to_stage(bag_contents: Mapping[str, int], category: Category) -> int:
    return max(0, category.clean_count - as_count(bag_contents.get(category.name, 0)))


def add_to_bag(
    bag_contents: Mapping[str, int],
    categories: Sequence[Category],
    category_name: str,
    count: int = 1,
    capacity: int = DEFAULT_BAG_CAPACITY,
) -> Tuple[Dict[str, int], int]:
    """Stage up to ``count`` items of one category; returns the new bag and the staged amount."""

    bag = dict(bag_contents)
    category = _by_name(categories, category_name)
    if category is None:
        return bag, 0
    space = max(0, capacity - bag_count(bag))
    added = min(as_count(count), available_to_stage(bag, category), space)
    if added:
        bag[category.name] = bag.get(category.name, 0) + added
    return bag, added


def dump_all(
    bag_contents: Mapping[str, int],
    categories: Sequence[Category],
    category_id: str,
    capacity: int = DEFAULT_BAG_CAPACITY,
) -> Tuple[Dict[str, int], int]:
    """Stage every remaining clean item of a category, as far as the bag allows."""

    category = next((item for item in categories if item.id == category_id), None)
    if category is None:
        return dict(bag_contents), 0
    return add_to_bag(
        bag_contents,
        categories,
        category.name,
        available_to_stage(bag_contents, category),
        capacity,
    )


def quick_fill(
    bag_contents: Mapping[str, int],
    categories: Sequence[Category],
    per_category: int = QUICK_FILL_PER_CATEGORY,
    capacity: int = DEFAULT_BAG_CAPACITY,
) -> Tuple[Dict[str, int], int]:
    """Stage a couple of items from every awake category that still fits in the bag."""

    bag = dict(bag_contents)
    total_added = 0
    for category in categories:
        if category.hibernated:
            continue
        to_add = min(as_count(per_category), available_to_stage(bag, category))
        if to_add <= 0 or bag_count(bag) + to_add > capacity:
            continue
        bag[category.name] = bag.get(category.name, 0) + to_add
        total_added += to_add
    return bag, total_added


def clear_bag() -> Dict[str, int]:
    return {}


def unstage(bag_contents: Mapping[str, int], moved: Mapping[str, int]) -> Dict[str, int]:
    """Take dispatched quantities out of the hamper, dropping emptied entries."""

    bag: Dict[str, int] = {}
    for name, count in bag_contents.items():
        left = as_count(count) - as_count(moved.get(name, 0))
        if left > 0:
            bag[name] = left
    return bag


__all__ = [
    "add_to_bag",
    "available_to_stage",
    "bag_count",
    "clear_bag",
    "dump_all",
    "quick_fill",
    "unstage",
    "DEFAULT_BAG_CAPACITY",
    "QUICK_FILL_PER_CATEGORY",
]
