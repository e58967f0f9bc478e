"""Persistence collaborators for the wardrobe snapshot.

The host app stores four independent slices (categories, batches, laundry
history and the hamper). Every slice loads on its own so one corrupt value
falls back to its empty default without taking the others down, and saves are
best effort: failures are logged and never reach the engine.
"""
from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict

from flow_app.logging_config import get_logger, log_event
from logic.consistency import prune_orphans, validate_and_fix_consistency
from models.wardrobe import (
    WardrobeState,
    bag_from_record,
    batches_from_records,
    build_state,
    categories_from_records,
    history_from_records,
)

LOGGER = get_logger(__name__)

SLICE_KEYS = {
    "categories": "@wardrobe_categories",
    "batches": "@wardrobe_batches",
    "laundryHistory": "@wardrobe_laundry_history",
    "bagContents": "@wardrobe_bag_contents",
}


def _slices(state: WardrobeState) -> Dict[str, Any]:
    return state.to_dict()


def _parse_slice(name: str, raw: str | None) -> Any:
    """Decode one stored slice, returning ``None`` when absent or corrupt."""

    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        log_event(LOGGER, logging.WARNING, "state_slice_corrupt", slice=name)
        return None


def restore_state(loaded: Dict[str, Any]) -> WardrobeState:
    """Build a usable snapshot from loaded slices, repairing drifted counts."""

    categories = validate_and_fix_consistency(categories_from_records(loaded.get("categories")))
    return build_state(
        categories=categories,
        batches=batches_from_records(loaded.get("batches")),
        laundry_history=history_from_records(loaded.get("laundryHistory")),
        bag_contents=prune_orphans(bag_from_record(loaded.get("bagContents")), categories),
    )


class StateStore:
    """Load/save contract for the wardrobe snapshot."""

    def load(self) -> Dict[str, Any]:
        raise NotImplementedError

    def save(self, state: WardrobeState) -> bool:
        raise NotImplementedError

    def load_state(self) -> WardrobeState:
        return restore_state(self.load())


class JSONStateStore(StateStore):
    """One JSON file per slice, suitable for local runs."""

    def __init__(self, base_dir: str | Path = "data/wardrobe") -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, name: str) -> Path:
        return self.base_dir / f"{SLICE_KEYS[name].lstrip('@')}.json"

    def load(self) -> Dict[str, Any]:
        loaded: Dict[str, Any] = {}
        for name in SLICE_KEYS:
            path = self._path(name)
            try:
                raw = path.read_text(encoding="utf-8") if path.exists() else None
            except UnicodeDecodeError:
                log_event(LOGGER, logging.WARNING, "state_slice_corrupt", slice=name)
                raw = None
            except OSError:
                log_event(LOGGER, logging.WARNING, "state_slice_unreadable", slice=name, exc_info=True)
                raw = None
            value = _parse_slice(name, raw)
            if value is not None:
                loaded[name] = value
        return loaded

    def save(self, state: WardrobeState) -> bool:
        try:
            for name, value in _slices(state).items():
                self._path(name).write_text(json.dumps(value, indent=2), encoding="utf-8")
        except OSError:
            log_event(LOGGER, logging.ERROR, "state_save_failed", backend="json", exc_info=True)
            return False
        return True


class SQLiteStateStore(StateStore):
    """Key-value table mirroring the host's storage keys."""

    def __init__(self, db_path: str | Path = "data/wardrobe_state.db") -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS wardrobe_state (
                    key TEXT PRIMARY KEY,
                    value TEXT
                );
                """
            )

    def get_item(self, key: str) -> str | None:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM wardrobe_state WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else None

    def set_item(self, key: str, value: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO wardrobe_state(key, value) VALUES (?, ?)\n"
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (key, value),
            )

    def load(self) -> Dict[str, Any]:
        loaded: Dict[str, Any] = {}
        for name, key in SLICE_KEYS.items():
            try:
                raw = self.get_item(key)
            except sqlite3.Error:
                log_event(LOGGER, logging.WARNING, "state_slice_unreadable", slice=name, exc_info=True)
                raw = None
            value = _parse_slice(name, raw)
            if value is not None:
                loaded[name] = value
        return loaded

    def save(self, state: WardrobeState) -> bool:
        try:
            for name, value in _slices(state).items():
                self.set_item(SLICE_KEYS[name], json.dumps(value))
        except sqlite3.Error:
            log_event(LOGGER, logging.ERROR, "state_save_failed", backend="sqlite", exc_info=True)
            return False
        return True


__all__ = [
    "JSONStateStore",
    "SLICE_KEYS",
    "SQLiteStateStore",
    "StateStore",
    "restore_state",
]
