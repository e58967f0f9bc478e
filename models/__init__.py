"""Model package exports."""

from models.batch import Batch, LaundryHistoryEntry, create_batch
from models.category import Category, HistoryEntry, create_category
from models.wardrobe import WardrobeState, deserialize_state, serialize_state

__all__ = [
    "Batch",
    "Category",
    "HistoryEntry",
    "LaundryHistoryEntry",
    "WardrobeState",
    "create_batch",
    "create_category",
    "deserialize_state",
    "serialize_state",
]
