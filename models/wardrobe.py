"""Wardrobe snapshot container and JSON (de)serialisation helpers."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from models.batch import Batch, LaundryHistoryEntry, positive_contents
from models.category import Category


@dataclass(frozen=True)
class WardrobeState:
    """Everything the engine needs: categories, batches, laundry history and the hamper."""

    categories: Tuple[Category, ...] = field(default_factory=tuple)
    batches: Tuple[Batch, ...] = field(default_factory=tuple)
    laundry_history: Tuple[LaundryHistoryEntry, ...] = field(default_factory=tuple)
    bag_contents: Dict[str, int] = field(default_factory=dict)

    @property
    def bag_count(self) -> int:
        return sum(self.bag_contents.values())

    def find_category(self, category_id: str) -> Optional[Category]:
        return next((category for category in self.categories if category.id == category_id), None)

    def find_batch(self, batch_id: str) -> Optional[Batch]:
        return next((batch for batch in self.batches if batch.id == batch_id), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "categories": [category.to_dict() for category in self.categories],
            "batches": [batch.to_dict() for batch in self.batches],
            "laundryHistory": [entry.to_dict() for entry in self.laundry_history],
            "bagContents": dict(self.bag_contents),
        }


def _records(raw: Any) -> List[Dict[str, Any]]:
    if not isinstance(raw, list):
        return []
    return [record for record in raw if isinstance(record, dict)]


def categories_from_records(raw: Any) -> List[Category]:
    return [Category.from_dict(record) for record in _records(raw)]


def batches_from_records(raw: Any) -> List[Batch]:
    return [Batch.from_dict(record) for record in _records(raw)]


def history_from_records(raw: Any) -> List[LaundryHistoryEntry]:
    entries = (LaundryHistoryEntry.from_dict(record) for record in _records(raw))
    return [entry for entry in entries if entry is not None]


def bag_from_record(raw: Any) -> Dict[str, int]:
    return positive_contents(raw) if isinstance(raw, Mapping) else {}


def build_state(
    categories: Iterable[Category] = (),
    batches: Iterable[Batch] = (),
    laundry_history: Iterable[LaundryHistoryEntry] = (),
    bag_contents: Optional[Mapping[str, int]] = None,
) -> WardrobeState:
    return WardrobeState(
        categories=tuple(categories),
        batches=tuple(batches),
        laundry_history=tuple(laundry_history),
        bag_contents=dict(bag_contents or {}),
    )


def state_from_dict(payload: Mapping[str, Any]) -> WardrobeState:
    """Rebuild a snapshot from plain data; absent slices become empty."""

    return build_state(
        categories=categories_from_records(payload.get("categories")),
        batches=batches_from_records(payload.get("batches")),
        laundry_history=history_from_records(payload.get("laundryHistory")),
        bag_contents=bag_from_record(payload.get("bagContents")),
    )


def serialize_state(state: WardrobeState) -> str:
    return json.dumps(state.to_dict())


def deserialize_state(raw: Optional[str], default: Optional[WardrobeState] = None) -> WardrobeState:
    """Parse a serialised snapshot, returning ``default`` for unparsable input."""

    fallback = default if default is not None else WardrobeState()
    if not raw:
        return fallback
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError):
        return fallback
    if not isinstance(payload, dict):
        return fallback
    return state_from_dict(payload)


__all__ = [
    "WardrobeState",
    "bag_from_record",
    "batches_from_records",
    "build_state",
    "categories_from_records",
    "deserialize_state",
    "history_from_records",
    "serialize_state",
    "state_from_dict",
]
