"""Evaluation scenarios exercising scoring, forecasts, cycles and laundry round trips."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Tuple

from models.batch import LaundryHistoryEntry
from models.category import Category, max_batch_size_for, safety_threshold_for
from models.timestamps import to_iso

EVALUATION_NOW = datetime(2024, 6, 3, 12, 0, tzinfo=timezone.utc)


@dataclass
class EvaluationScenario:
    name: str
    description: str
    categories: List[Category]
    laundry_history: List[LaundryHistoryEntry]
    now: datetime
    expectations: Dict[str, Any]
    steps: List[Tuple[str, Dict[str, Any]]] = field(default_factory=list)


def _days_ago(days: int) -> str:
    return to_iso(EVALUATION_NOW - timedelta(days=days))


def _category(
    name: str,
    total: int,
    clean: int,
    dirty: int = 0,
    in_laundry: int = 0,
    worn_days_ago: int | None = 1,
    **overrides: Any,
) -> Category:
    values: Dict[str, Any] = {
        "id": f"cat_{name.lower().replace('-', '_')}",
        "name": name,
        "total_owned": total,
        "clean_count": clean,
        "dirty_count": dirty,
        "in_laundry_count": in_laundry,
        "safety_threshold": safety_threshold_for(total),
        "max_batch_size": max_batch_size_for(total),
        "last_worn_date": _days_ago(worn_days_ago) if worn_days_ago is not None else None,
    }
    values.update(overrides)
    return Category(**values)


def _history(*days_ago: int) -> List[LaundryHistoryEntry]:
    return [LaundryHistoryEntry(completed_at=_days_ago(days)) for days in days_ago]


SCENARIOS: List[EvaluationScenario] = [
    EvaluationScenario(
        name="steady_weekly_routine",
        description="Two well-stocked categories washed every seven days.",
        categories=[
            _category("T-Shirts", total=10, clean=8, dirty=2),
            _category("Socks", total=10, clean=8, dirty=2),
        ],
        laundry_history=_history(28, 21, 14, 7),
        now=EVALUATION_NOW,
        expectations={
            "flow_score_min": 60,
            "flow_score_max": 75,
            "insight_types": ["deadstock"],
            "cycle_consistency": "excellent",
        },
    ),
    EvaluationScenario(
        name="jeans_bottleneck",
        description="Every pair of jeans is dirty while t-shirts pile up clean.",
        categories=[
            _category("Jeans", total=5, clean=0, dirty=5, safety_threshold=1, max_batch_size=2),
            _category("T-Shirts", total=10, clean=9, dirty=1),
        ],
        laundry_history=[],
        now=EVALUATION_NOW,
        expectations={
            "flow_score_max": 30,
            "first_stockout": "Jeans",
            "insight_types": ["bottleneck", "forecast", "deadstock", "imbalance"],
            "cycle_consistency": "unknown",
        },
    ),
    EvaluationScenario(
        name="erratic_cycles_dead_stock",
        description="Hoodies never worn and laundry gaps swinging between 2 and 12 days.",
        categories=[
            _category("Hoodies", total=8, clean=8, worn_days_ago=None),
            _category("Socks", total=10, clean=6, dirty=4),
        ],
        laundry_history=_history(24, 22, 10, 7),
        now=EVALUATION_NOW,
        expectations={
            "insight_types": ["deadstock", "procrastination"],
            "dead_stock": ["Hoodies"],
            "efficiency_percent": 22,
            "cycle_consistency": "poor",
        },
    ),
    EvaluationScenario(
        name="empty_wardrobe",
        description="Fresh install with nothing tracked yet.",
        categories=[],
        laundry_history=[],
        now=EVALUATION_NOW,
        expectations={
            "flow_score_min": 0,
            "flow_score_max": 0,
            "insight_types": [],
            "efficiency_percent": 100,
        },
    ),
    EvaluationScenario(
        name="laundry_round_trip",
        description="Stage an oversized bag, dispatch it and bring the batch home.",
        categories=[
            _category("T-Shirts", total=10, clean=10),
            _category("Socks", total=8, clean=8),
        ],
        laundry_history=[],
        now=EVALUATION_NOW,
        steps=[
            ("add_to_bag", {"category_name": "T-Shirts", "count": 4}),
            ("add_to_bag", {"category_name": "Socks", "count": 20}),
            ("dispatch_laundry", {}),
            ("complete_batch", {}),
        ],
        expectations={
            "flow_score_min": 60,
            "conserved": True,
            "bag_count": 0,
            "history_entries": 1,
            "cycle_consistency": "unknown",
        },
    ),
]


__all__ = ["EVALUATION_NOW", "EvaluationScenario", "SCENARIOS"]
