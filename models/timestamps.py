"""Timestamp helpers shared by transitions and analytics."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

SECONDS_PER_DAY = 24 * 60 * 60


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def resolve_now(now: Optional[datetime] = None) -> datetime:
    """Return ``now`` as an aware datetime, defaulting to the current UTC time."""

    if now is None:
        return utc_now()
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def to_iso(moment: datetime) -> str:
    return resolve_now(moment).isoformat()


def parse_timestamp(raw: object) -> Optional[datetime]:
    """Parse an ISO-8601 string (``Z`` suffix allowed); naive values are UTC."""

    if isinstance(raw, datetime):
        return resolve_now(raw)
    if not isinstance(raw, str) or not raw.strip():
        return None
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return resolve_now(parsed)


__all__ = ["SECONDS_PER_DAY", "parse_timestamp", "resolve_now", "to_iso", "utc_now"]
