"""Laundry batch and laundry history schemas."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from models.timestamps import resolve_now, to_iso

STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"


def positive_contents(contents: Mapping[str, Any]) -> Dict[str, int]:
    """Keep only positive integer quantities keyed by category name."""

    cleaned: Dict[str, int] = {}
    for name, raw in (contents or {}).items():
        try:
            count = int(raw)
        except (TypeError, ValueError):
            continue
        if count > 0:
            cleaned[str(name)] = count
    return cleaned


@dataclass(frozen=True)
class Batch:
    """One laundry run."""

    id: str
    timestamp: str
    contents: Dict[str, int] = field(default_factory=dict)
    total_items: int = 0
    status: str = STATUS_IN_PROGRESS
    completed_at: Optional[str] = None

    @property
    def is_in_progress(self) -> bool:
        return self.status == STATUS_IN_PROGRESS

    def mark_completed(self, now: Optional[datetime] = None) -> "Batch":
        return replace(self, status=STATUS_COMPLETED, completed_at=to_iso(resolve_now(now)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "contents": dict(self.contents),
            "totalItems": self.total_items,
            "status": self.status,
            "completedAt": self.completed_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Batch":
        contents = positive_contents(data.get("contents") or {})
        status = data.get("status")
        return cls(
            id=str(data.get("id", "")),
            timestamp=str(data.get("timestamp", "")),
            contents=contents,
            total_items=sum(contents.values()),
            status=status if status in {STATUS_IN_PROGRESS, STATUS_COMPLETED} else STATUS_IN_PROGRESS,
            completed_at=data.get("completedAt"),
        )


def create_batch(batch_id: str, contents: Mapping[str, Any], now: Optional[datetime] = None) -> Optional[Batch]:
    """Build an in-progress batch, or ``None`` when nothing would be laundered."""

    cleaned = positive_contents(contents)
    if not cleaned:
        return None
    return Batch(
        id=batch_id,
        timestamp=to_iso(resolve_now(now)),
        contents=cleaned,
        total_items=sum(cleaned.values()),
    )


@dataclass(frozen=True)
class LaundryHistoryEntry:
    """Completed batch (or synthetic seed record) used for cycle statistics."""

    completed_at: str
    status: str = STATUS_COMPLETED
    id: Optional[str] = None
    timestamp: Optional[str] = None
    contents: Dict[str, int] = field(default_factory=dict)
    total_items: int = 0

    @classmethod
    def from_batch(cls, batch: Batch) -> "LaundryHistoryEntry":
        return cls(
            completed_at=batch.completed_at or batch.timestamp,
            status=batch.status,
            id=batch.id,
            timestamp=batch.timestamp,
            contents=dict(batch.contents),
            total_items=batch.total_items,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "contents": dict(self.contents),
            "totalItems": self.total_items,
            "status": self.status,
            "completedAt": self.completed_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["LaundryHistoryEntry"]:
        completed_at = data.get("completedAt")
        if not completed_at:
            return None
        contents = positive_contents(data.get("contents") or {})
        return cls(
            completed_at=str(completed_at),
            status=str(data.get("status") or STATUS_COMPLETED),
            id=data.get("id"),
            timestamp=data.get("timestamp"),
            contents=contents,
            total_items=sum(contents.values()),
        )


__all__ = [
    "Batch",
    "LaundryHistoryEntry",
    "create_batch",
    "positive_contents",
    "STATUS_COMPLETED",
    "STATUS_IN_PROGRESS",
]
