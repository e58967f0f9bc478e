"""Category data model and helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple

SAFETY_RATIO = 0.2
BATCH_RATIO = 0.4
MINIMUM_THRESHOLD = 2


def as_count(value: Any) -> int:
    """Coerce a loose stored value into a non-negative integer."""

    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


def safety_threshold_for(total_owned: int) -> int:
    """Minimum clean stock considered safe for ``total_owned`` items."""

    if total_owned <= 0:
        return 0
    return max(MINIMUM_THRESHOLD, math.ceil(total_owned * SAFETY_RATIO))


def max_batch_size_for(total_owned: int) -> int:
    """Rotation capacity used by the efficiency calculation."""

    if total_owned <= 0:
        return 0
    return max(MINIMUM_THRESHOLD, math.ceil(total_owned * BATCH_RATIO))


@dataclass(frozen=True)
class HistoryEntry:
    """One wear, purchase or retirement record."""

    date: str
    count: int
    price: Optional[float] = None
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"date": self.date, "count": self.count}
        if self.price is not None:
            payload["price"] = self.price
        if self.reason is not None:
            payload["reason"] = self.reason
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryEntry":
        price = data.get("price")
        return cls(
            date=str(data.get("date", "")),
            count=as_count(data.get("count", 0)),
            price=float(price) if isinstance(price, (int, float)) else None,
            reason=data.get("reason"),
        )


def _history(raw: Optional[Iterable[Any]]) -> Tuple[HistoryEntry, ...]:
    if not raw:
        return ()
    return tuple(HistoryEntry.from_dict(entry) for entry in raw if isinstance(entry, dict))


@dataclass(frozen=True)
class Category:
    """One clothing type the user owns."""

    id: str
    name: str
    emoji: str = ""
    total_owned: int = 0
    clean_count: int = 0
    dirty_count: int = 0
    in_laundry_count: int = 0
    safety_threshold: int = 0
    max_batch_size: int = 0
    hibernated: bool = False
    wear_history: Tuple[HistoryEntry, ...] = field(default_factory=tuple)
    purchase_history: Tuple[HistoryEntry, ...] = field(default_factory=tuple)
    retirement_history: Tuple[HistoryEntry, ...] = field(default_factory=tuple)
    last_worn_date: Optional[str] = None

    @property
    def is_active(self) -> bool:
        """Counted by scoring and insights."""

        return not self.hibernated and self.total_owned > 0

    @property
    def items_in_use(self) -> int:
        return self.dirty_count + self.in_laundry_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "emoji": self.emoji,
            "totalOwned": self.total_owned,
            "cleanCount": self.clean_count,
            "dirtyCount": self.dirty_count,
            "inLaundryCount": self.in_laundry_count,
            "safetyThreshold": self.safety_threshold,
            "maxBatchSize": self.max_batch_size,
            "hibernated": self.hibernated,
            "wearHistory": [entry.to_dict() for entry in self.wear_history],
            "purchaseHistory": [entry.to_dict() for entry in self.purchase_history],
            "retirementHistory": [entry.to_dict() for entry in self.retirement_history],
            "lastWornDate": self.last_worn_date,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Category":
        """Build a category from a persisted record.

        Missing counters default to zero; call
        :func:`logic.consistency.validate_and_fix_consistency` afterwards to
        restore the ownership invariants.
        """

        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            emoji=str(data.get("emoji") or ""),
            total_owned=as_count(data.get("totalOwned")),
            clean_count=as_count(data.get("cleanCount")),
            dirty_count=as_count(data.get("dirtyCount")),
            in_laundry_count=as_count(data.get("inLaundryCount")),
            safety_threshold=as_count(data.get("safetyThreshold")),
            max_batch_size=as_count(data.get("maxBatchSize")),
            hibernated=bool(data.get("hibernated", False)),
            wear_history=_history(data.get("wearHistory")),
            purchase_history=_history(data.get("purchaseHistory")),
            retirement_history=_history(data.get("retirementHistory")),
            last_worn_date=data.get("lastWornDate"),
        )


def create_category(category_id: str, name: str, emoji: str = "", total_owned: int = 0) -> Category:
    """Factory for a freshly registered category with all stock clean."""

    owned = max(0, int(total_owned))
    return Category(
        id=category_id,
        name=name,
        emoji=emoji,
        total_owned=owned,
        clean_count=owned,
        safety_threshold=safety_threshold_for(owned),
        max_batch_size=max_batch_size_for(owned),
    )


__all__ = [
    "Category",
    "as_count",
    "HistoryEntry",
    "create_category",
    "max_batch_size_for",
    "safety_threshold_for",
    "SAFETY_RATIO",
    "BATCH_RATIO",
    "MINIMUM_THRESHOLD",
]
