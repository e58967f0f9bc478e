"""Deterministic wardrobe analytics over an immutable snapshot.

``WardrobeAnalyticsEngine`` is a stateless calculator. It is built from the
current categories, batches and laundry history and it never caches between
calls, so callers construct a new engine whenever the snapshot changes. All
"days" figures are measured against the injected ``now`` so results are
reproducible in tests.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from models.batch import Batch, LaundryHistoryEntry
from models.category import Category
from models.timestamps import SECONDS_PER_DAY, parse_timestamp, resolve_now

WEIGHTS = {
    "clean_ratio": 0.35,
    "balance": 0.25,
    "bottleneck_penalty": 0.25,
    "consistency": 0.15,
}

DEFAULT_DAILY_CONSUMPTION: Dict[str, float] = {
    "T-Shirts": 1.0,
    "Socks": 1.0,
    "Underwear": 1.0,
    "Shirts": 0.7,
    "Jeans": 0.3,
    "Hoodies": 0.2,
}
FALLBACK_DAILY_CONSUMPTION = 0.5
MIN_WEAR_HISTORY = 7
CONSUMPTION_WINDOW_DAYS = 30

DEAD_STOCK_DAYS = 60
MAX_CYCLE_GAP_DAYS = 30
DEFAULT_OPTIMAL_INTERVAL = 7
MIN_OPTIMAL_INTERVAL = 3
MAX_OPTIMAL_INTERVAL = 14
BURN_DOWN_CATEGORY_LIMIT = 3

EFFICIENT_COST_PER_WEAR = 100
TARGET_COST_PER_WEAR = 50

URGENCY_RANK = {"critical": 0, "warning": 1, "insight": 2}
WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

UNKNOWN_CYCLE_PROMPT = "Start tracking your laundry cycles for personalized insights."


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def _pstdev(values: Sequence[float]) -> float:
    average = _mean(values)
    return math.sqrt(sum((value - average) ** 2 for value in values) / len(values))


def classify_stockout_severity(days: float) -> str:
    if days <= 2:
        return "critical"
    if days <= 5:
        return "warning"
    return "normal"


@dataclass(frozen=True)
class StockoutPrediction:
    category_id: str
    category_name: str
    current_clean: int
    daily_consumption: float
    days_until_stockout: int
    stockout_date: str
    severity: str

    @property
    def weekday(self) -> str:
        parsed = parse_timestamp(self.stockout_date)
        return WEEKDAYS[parsed.weekday()] if parsed else ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "categoryId": self.category_id,
            "categoryName": self.category_name,
            "currentClean": self.current_clean,
            "dailyConsumption": self.daily_consumption,
            "daysUntilStockout": self.days_until_stockout,
            "stockoutDate": self.stockout_date,
            "severity": self.severity,
        }


@dataclass(frozen=True)
class DeadStockRecord:
    category_id: str
    category_name: str
    days_since_worn: Optional[int]
    clean_count: int
    total_owned: int
    is_dead_stock: bool = True


@dataclass(frozen=True)
class InventoryEfficiency:
    active_items: int
    stagnant_items: int
    total_items: int
    efficiency_percent: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "activeItems": self.active_items,
            "stagnantItems": self.stagnant_items,
            "totalItems": self.total_items,
            "efficiencyPercent": self.efficiency_percent,
        }


@dataclass(frozen=True)
class LaundryCycleAnalysis:
    intervals: List[int]
    avg_interval: int
    optimal_interval: int
    consistency: str
    recommendation: str
    min_interval: Optional[int] = None
    max_interval: Optional[int] = None

    @property
    def range(self) -> Optional[int]:
        if self.min_interval is None or self.max_interval is None:
            return None
        return self.max_interval - self.min_interval


@dataclass(frozen=True)
class BurnDownSeries:
    name: str
    values: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class BurnDownData:
    dates: List[str]
    categories: List[BurnDownSeries]


@dataclass(frozen=True)
class Insight:
    id: int
    urgency: str
    type: str
    title: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "urgency": self.urgency,
            "type": self.type,
            "title": self.title,
            "message": self.message,
        }


@dataclass(frozen=True)
class CostPerWear:
    name: str
    purchase_price: float
    wear_count: int
    cost_per_wear: float
    is_efficient: bool
    wear_goal: int


def calculate_cost_per_wear(items: Iterable[Mapping[str, Any]]) -> List[CostPerWear]:
    """Rank priced items by cost per wear, cheapest first."""

    results = []
    for item in items:
        price = float(item.get("purchase_price", 0) or 0)
        wears = int(item.get("wear_count", 0) or 0)
        cost = price / wears if wears > 0 else price
        results.append(
            CostPerWear(
                name=str(item.get("name", "")),
                purchase_price=price,
                wear_count=wears,
                cost_per_wear=cost,
                is_efficient=wears > 0 and cost < EFFICIENT_COST_PER_WEAR,
                wear_goal=math.ceil(price / TARGET_COST_PER_WEAR),
            )
        )
    return sorted(results, key=lambda result: result.cost_per_wear)


class WardrobeAnalyticsEngine:
    """Stateless calculator for flow score, forecasts and insights."""

    def __init__(
        self,
        categories: Sequence[Category],
        batches: Sequence[Batch] = (),
        laundry_history: Optional[Sequence[LaundryHistoryEntry]] = None,
        now: Optional[datetime] = None,
    ) -> None:
        self.categories = tuple(categories)
        self.batches = tuple(batches)
        self.laundry_history = tuple(laundry_history or ())
        self.now = resolve_now(now)

    def _active_categories(self) -> List[Category]:
        return [category for category in self.categories if category.is_active]

    def _awake_categories(self) -> List[Category]:
        return [category for category in self.categories if not category.hibernated]

    # Flow score

    def calculate_flow_score(self) -> int:
        """Composite 0-100 health metric; 0 when nothing is actively owned."""

        if not self._active_categories():
            return 0
        raw = (
            self._clean_ratio_score() * WEIGHTS["clean_ratio"]
            + self._balance_score() * WEIGHTS["balance"]
            - self._bottleneck_penalty() * WEIGHTS["bottleneck_penalty"]
            + self._consistency_score() * WEIGHTS["consistency"]
        )
        return max(0, min(100, _round_half_up(raw)))

    def _clean_ratio_score(self) -> float:
        active = self._active_categories()
        total_owned = sum(category.total_owned for category in active)
        if total_owned == 0:
            return 0.0
        return sum(category.clean_count for category in active) / total_owned * 100

    def _balance_score(self) -> float:
        active = self._active_categories()
        if not active:
            return 0.0
        if len(active) < 2:
            return 100.0
        ratios = [category.clean_count / category.total_owned for category in active]
        return max(0.0, 100 - _pstdev(ratios) * 200)

    def _bottleneck_penalty(self) -> float:
        penalty = 0.0
        for category in self._active_categories():
            if category.safety_threshold > 0 and category.clean_count < category.safety_threshold:
                penalty += (1 - category.clean_count / category.safety_threshold) * 30
            if category.clean_count == 0:
                penalty += 20
        return min(100.0, penalty)

    def _consistency_score(self) -> float:
        if not self.laundry_history:
            return 0.0
        if len(self.laundry_history) < 3:
            return 50.0
        intervals = self._laundry_intervals()
        if len(intervals) < 2:
            return 50.0
        coefficient_of_variation = _pstdev(intervals) / _mean(intervals)
        return max(0.0, 100 - coefficient_of_variation * 100)

    # Stockout prediction

    def estimate_daily_consumption(self, category: Category) -> float:
        """Wear events per day over the trailing window, or a per-category default."""

        if len(category.wear_history) < MIN_WEAR_HISTORY:
            return DEFAULT_DAILY_CONSUMPTION.get(category.name, FALLBACK_DAILY_CONSUMPTION)
        window_start = self.now - timedelta(days=CONSUMPTION_WINDOW_DAYS)
        recent = 0
        for entry in category.wear_history:
            worn_at = parse_timestamp(entry.date)
            if worn_at is not None and worn_at > window_start:
                recent += 1
        return recent / CONSUMPTION_WINDOW_DAYS

    def predict_stockout(self, category_id: str) -> Optional[StockoutPrediction]:
        category = next((item for item in self.categories if item.id == category_id), None)
        if category is None or category.hibernated:
            return None
        consumption = self.estimate_daily_consumption(category)
        if consumption <= 0:
            return None

        days = category.clean_count / consumption
        whole_days = int(math.floor(days))
        return StockoutPrediction(
            category_id=category.id,
            category_name=category.name,
            current_clean=category.clean_count,
            daily_consumption=round(consumption, 2),
            days_until_stockout=whole_days,
            stockout_date=(self.now + timedelta(days=whole_days)).isoformat(),
            severity=classify_stockout_severity(days),
        )

    def get_all_stockout_predictions(self) -> List[StockoutPrediction]:
        predictions = [self.predict_stockout(category.id) for category in self._awake_categories()]
        return sorted(
            (prediction for prediction in predictions if prediction is not None),
            key=lambda prediction: prediction.days_until_stockout,
        )

    # Dead stock and efficiency

    def days_since_worn(self, category: Category) -> Optional[int]:
        """Whole days since the last toss; ``None`` when never worn."""

        last_worn = parse_timestamp(category.last_worn_date)
        if last_worn is None:
            return None
        return int(math.floor((self.now - last_worn).total_seconds() / SECONDS_PER_DAY))

    def is_dead_stock(self, category: Category) -> bool:
        days = self.days_since_worn(category)
        idle = days is None or days > DEAD_STOCK_DAYS
        return idle and category.clean_count > 0

    def detect_dead_stock(self) -> List[DeadStockRecord]:
        return [
            DeadStockRecord(
                category_id=category.id,
                category_name=category.name,
                days_since_worn=self.days_since_worn(category),
                clean_count=category.clean_count,
                total_owned=category.total_owned,
            )
            for category in self._awake_categories()
            if self.is_dead_stock(category)
        ]

    def calculate_inventory_efficiency(self) -> InventoryEfficiency:
        """Split owned items into active (in use or in rotation) and stagnant."""

        active_items = 0
        stagnant_items = 0
        for category in self._active_categories():
            if self.is_dead_stock(category):
                stagnant_items += category.total_owned
                continue
            in_use = category.items_in_use
            rotation = category.max_batch_size or math.ceil(category.total_owned * 0.4)
            clean_in_rotation = min(category.clean_count, max(0, rotation - in_use))
            category_active = in_use + clean_in_rotation
            active_items += category_active
            stagnant_items += max(0, category.total_owned - category_active)

        total = active_items + stagnant_items
        return InventoryEfficiency(
            active_items=active_items,
            stagnant_items=stagnant_items,
            total_items=total,
            efficiency_percent=_round_half_up(active_items / total * 100) if total > 0 else 100,
        )

    # Laundry cycles

    def _laundry_intervals(self) -> List[int]:
        completions = sorted(
            moment
            for moment in (parse_timestamp(entry.completed_at) for entry in self.laundry_history)
            if moment is not None
        )
        intervals = []
        for previous, current in zip(completions, completions[1:]):
            days = _round_half_up((current - previous).total_seconds() / SECONDS_PER_DAY)
            if 0 < days < MAX_CYCLE_GAP_DAYS:
                intervals.append(days)
        return intervals

    def _optimal_interval(self) -> int:
        active = self._active_categories()
        if not active:
            return DEFAULT_OPTIMAL_INTERVAL
        buffers = []
        for category in active:
            daily_use = self.estimate_daily_consumption(category)
            if daily_use > 0:
                buffers.append((category.clean_count - category.safety_threshold) / daily_use)
            else:
                buffers.append(float(MAX_OPTIMAL_INTERVAL))
        return max(MIN_OPTIMAL_INTERVAL, min(MAX_OPTIMAL_INTERVAL, int(math.floor(min(buffers)))))

    def analyze_laundry_cycles(self) -> LaundryCycleAnalysis:
        intervals = self._laundry_intervals()
        if len(intervals) < 2:
            return LaundryCycleAnalysis(
                intervals=intervals,
                avg_interval=0,
                optimal_interval=DEFAULT_OPTIMAL_INTERVAL,
                consistency="unknown",
                recommendation=UNKNOWN_CYCLE_PROMPT,
            )

        avg_interval = _round_half_up(_mean(intervals))
        min_interval = min(intervals)
        max_interval = max(intervals)
        spread = max_interval - min_interval
        optimal = self._optimal_interval()

        if spread <= 3:
            consistency = "excellent"
            recommendation = f"Great consistency! Your {avg_interval}-day cycle is working well."
        elif spread <= 6:
            consistency = "good"
            recommendation = f"Good routine. Try to stay closer to {optimal} days for optimal flow."
        else:
            consistency = "poor"
            recommendation = (
                f"Your laundry gaps swing from {min_interval} to {max_interval} days. "
                f'Aim for every {optimal} days to fix your "nothing to wear" feeling.'
            )

        return LaundryCycleAnalysis(
            intervals=intervals,
            avg_interval=avg_interval,
            optimal_interval=optimal,
            consistency=consistency,
            recommendation=recommendation,
            min_interval=min_interval,
            max_interval=max_interval,
        )

    def procrastination_series(self, limit: int = 10) -> List[int]:
        """Most recent intervals, left-padded with zeros to ``limit`` entries."""

        intervals = self._laundry_intervals()
        if not intervals:
            return []
        recent = intervals[-limit:]
        return [0] * (limit - len(recent)) + recent

    # Burn-down projection

    def generate_burn_down_data(self, days_ahead: int = 14) -> BurnDownData:
        """Linear depletion of clean stock; future laundry completions are ignored."""

        tracked = self._awake_categories()[:BURN_DOWN_CATEGORY_LIMIT]
        horizon = max(0, int(days_ahead))
        dates = [f"Day {day + 1}" for day in range(horizon + 1)]
        series = []
        for category in tracked:
            rate = self.estimate_daily_consumption(category)
            values = [
                _round_half_up(max(0.0, category.clean_count - rate * day)) for day in range(horizon + 1)
            ]
            series.append(BurnDownSeries(name=category.name, values=values))
        return BurnDownData(dates=dates, categories=series)

    # Insights

    def _detect_imbalance(self) -> Optional[str]:
        active = self._active_categories()
        if len(active) < 2:
            return None
        most = max(active, key=lambda category: category.clean_count)
        least = min(active, key=lambda category: category.clean_count)
        if most.clean_count > 5 and least.clean_count < 3:
            return (
                f"You have {most.clean_count} clean {most.name.lower()} but only "
                f"{least.clean_count} clean {least.name.lower()}. "
                f"You effectively have only {least.clean_count} outfits available."
            )
        return None

    def generate_insights(self) -> List[Insight]:
        """Scan for alerts in a fixed order, then stable-sort by urgency."""

        drafts: List[Dict[str, str]] = []
        stockouts = self.get_all_stockout_predictions()

        for stockout in stockouts:
            if stockout.severity == "normal":
                continue
            noun = "item" if stockout.current_clean == 1 else "items"
            drafts.append(
                {
                    "urgency": stockout.severity,
                    "type": "bottleneck",
                    "title": "Bottleneck Detected" if stockout.severity == "critical" else "Low Stock Warning",
                    "message": (
                        f"{stockout.category_name}. You have {stockout.current_clean} {noun} left. "
                        f"At your current pace, you reach zero on {stockout.weekday}."
                    ),
                }
            )

        efficiency = self.calculate_inventory_efficiency()
        if efficiency.stagnant_items > 5:
            dead_stock = self.detect_dead_stock()
            worst = max(dead_stock, key=lambda record: record.total_owned) if dead_stock else None
            if worst is not None:
                message = (
                    f"You own {worst.total_owned} {worst.category_name} but rarely use them. "
                    f"{efficiency.stagnant_items} items are Dead Stock."
                )
            else:
                message = (
                    f"{efficiency.stagnant_items} items in your wardrobe are rarely worn. "
                    "Consider donating unused items."
                )
            drafts.append({"urgency": "warning", "type": "deadstock", "title": "Low Utilization", "message": message})

        imbalance = self._detect_imbalance()
        if imbalance:
            drafts.append(
                {"urgency": "warning", "type": "imbalance", "title": "Inventory Imbalance", "message": imbalance}
            )

        cycles = self.analyze_laundry_cycles()
        if cycles.consistency == "poor":
            drafts.append(
                {
                    "urgency": "insight",
                    "type": "procrastination",
                    "title": "Routine Stability: Low",
                    "message": cycles.recommendation,
                }
            )

        urgent = next((stockout for stockout in stockouts if stockout.days_until_stockout <= 3), None)
        if urgent is not None:
            drafts.append(
                {
                    "urgency": "critical",
                    "type": "forecast",
                    "title": f"{urgent.weekday} Panic Forecast",
                    "message": (
                        f"You typically run out of {urgent.category_name} on {urgent.weekday}s. "
                        "Wash a batch tonight to break the loop."
                    ),
                }
            )

        insights = [Insight(id=index, **draft) for index, draft in enumerate(drafts, start=1)]
        return sorted(insights, key=lambda insight: URGENCY_RANK[insight.urgency])

    # Supplementary views

    def active_batches(self) -> List[Batch]:
        return [batch for batch in self.batches if batch.is_in_progress]

    def category_cost_per_wear(self) -> List[CostPerWear]:
        """Cost per wear per category, using per-unit purchase prices and logged wears."""

        items = []
        for category in self.categories:
            spent = sum((entry.price or 0) * entry.count for entry in category.purchase_history)
            if spent <= 0:
                continue
            items.append(
                {
                    "name": category.name,
                    "purchase_price": spent,
                    "wear_count": sum(entry.count for entry in category.wear_history),
                }
            )
        return calculate_cost_per_wear(items)


__all__ = [
    "BurnDownData",
    "BurnDownSeries",
    "CostPerWear",
    "DeadStockRecord",
    "Insight",
    "InventoryEfficiency",
    "LaundryCycleAnalysis",
    "StockoutPrediction",
    "WardrobeAnalyticsEngine",
    "calculate_cost_per_wear",
    "classify_stockout_severity",
    "WEIGHTS",
]
