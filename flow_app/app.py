"""Wardrobe Flow app shell.

``WardrobeFlowApp`` is the thin orchestration layer between the host UI and
the pure core: it owns the current :class:`WardrobeState`, routes each UI
action through the matching pure action, persists the result and answers
queries with a freshly built analytics engine.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from pydantic import ValidationError

from flow_app.config import FlowConfig
from flow_app.logging_config import configure_logging, get_logger, log_event, operation_context
from logic import actions
from logic.actions import ActionResult
from logic.analytics import (
    BurnDownData,
    Insight,
    InventoryEfficiency,
    LaundryCycleAnalysis,
    StockoutPrediction,
    WardrobeAnalyticsEngine,
)
from logic.validation import (
    AcquireInput,
    AddCategoryInput,
    BagInput,
    CategoryRefInput,
    CompleteBatchInput,
    DispatchInput,
    HibernationInput,
    QuickFillInput,
    RetireInput,
    TossInput,
    validation_failure,
)
from memory.state_store import JSONStateStore, SQLiteStateStore, StateStore
from models.wardrobe import WardrobeState
from tools.observability import instrument_action

LOGGER = get_logger(__name__)


def _rejected(exc: ValidationError) -> ActionResult:
    review = validation_failure("Action payload failed validation", exc)
    return ActionResult.rejected(review["message"], details=review)


class WardrobeFlowApp:
    """Owns the wardrobe snapshot and exposes the action and query surfaces."""

    def __init__(
        self,
        config: FlowConfig | None = None,
        store: StateStore | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config or FlowConfig.from_env()
        configure_logging(self.config.log_level)
        self.store = store or self._build_store()
        self.clock = clock
        self.state: WardrobeState = self.store.load_state()
        log_event(
            LOGGER,
            logging.INFO,
            "wardrobe_loaded",
            categories=len(self.state.categories),
            batches=len(self.state.batches),
            history_entries=len(self.state.laundry_history),
        )

    def _build_store(self) -> StateStore:
        if self.config.storage_backend == "sqlite":
            return SQLiteStateStore(self.config.storage_path or "data/wardrobe_state.db")
        return JSONStateStore(self.config.storage_path or "data/wardrobe")

    def _now(self) -> Optional[datetime]:
        return self.clock() if self.clock else None

    def _commit(self, result: ActionResult) -> ActionResult:
        if result.state is None or result.state == self.state:
            return result
        self.state = result.state
        self.store.save(self.state)
        return result

    # Action surface

    @instrument_action("toss", input_model=TossInput, on_validation_error=_rejected)
    def toss(self, category_id: str, count: int = 1) -> ActionResult:
        return self._commit(actions.toss_item(self.state, category_id, count, now=self._now()))

    @instrument_action("acquire", input_model=AcquireInput, on_validation_error=_rejected)
    def acquire(self, category_id: str, count: int = 1, price: float = 0.0) -> ActionResult:
        return self._commit(actions.acquire_item(self.state, category_id, count, price, now=self._now()))

    @instrument_action("retire", input_model=RetireInput, on_validation_error=_rejected)
    def retire(self, category_id: str, count: int = 1, reason: str = "worn_out") -> ActionResult:
        return self._commit(actions.retire_item(self.state, category_id, count, reason, now=self._now()))

    @instrument_action("add_to_bag", input_model=BagInput, on_validation_error=_rejected)
    def add_to_bag(self, category_name: str, count: int = 1) -> ActionResult:
        return self._commit(actions.add_to_bag(self.state, category_name, count, self.config.bag_capacity))

    @instrument_action("dump_all", input_model=CategoryRefInput, on_validation_error=_rejected)
    def dump_all(self, category_id: str) -> ActionResult:
        return self._commit(actions.dump_all(self.state, category_id, self.config.bag_capacity))

    @instrument_action("quick_fill", input_model=QuickFillInput, on_validation_error=_rejected)
    def quick_fill(self, per_category: int = 2) -> ActionResult:
        return self._commit(actions.quick_fill(self.state, per_category, self.config.bag_capacity))

    @instrument_action("clear_bag")
    def clear_bag(self) -> ActionResult:
        return self._commit(actions.clear_bag(self.state))

    @instrument_action("dispatch_laundry", input_model=DispatchInput, on_validation_error=_rejected)
    def dispatch_laundry(self, bag_contents: Optional[Mapping[str, int]] = None) -> ActionResult:
        return self._commit(actions.dispatch_laundry(self.state, bag_contents, now=self._now()))

    @instrument_action("complete_batch", input_model=CompleteBatchInput, on_validation_error=_rejected)
    def complete_batch(self, batch_id: str) -> ActionResult:
        return self._commit(actions.complete_batch(self.state, batch_id, now=self._now()))

    @instrument_action("add_category", input_model=AddCategoryInput, on_validation_error=_rejected)
    def add_category(self, name: str, emoji: str = "", initial_count: int = 0) -> ActionResult:
        return self._commit(actions.add_category(self.state, name, emoji, initial_count))

    @instrument_action("remove_category", input_model=CategoryRefInput, on_validation_error=_rejected)
    def remove_category(self, category_id: str) -> ActionResult:
        return self._commit(actions.remove_category(self.state, category_id))

    @instrument_action(
        "update_category_hibernation", input_model=HibernationInput, on_validation_error=_rejected
    )
    def update_category_hibernation(self, category_id: str, hibernated: bool) -> ActionResult:
        return self._commit(actions.update_category_hibernation(self.state, category_id, hibernated))

    # Query surface

    def engine(self) -> WardrobeAnalyticsEngine:
        """A fresh engine over the current snapshot; never reused across actions."""

        return WardrobeAnalyticsEngine(
            self.state.categories,
            self.state.batches,
            self.state.laundry_history,
            now=self._now(),
        )

    def calculate_flow_score(self) -> int:
        return self.engine().calculate_flow_score()

    def generate_insights(self) -> List[Insight]:
        return self.engine().generate_insights()

    def get_all_stockout_predictions(self) -> List[StockoutPrediction]:
        return self.engine().get_all_stockout_predictions()

    def calculate_inventory_efficiency(self) -> InventoryEfficiency:
        return self.engine().calculate_inventory_efficiency()

    def analyze_laundry_cycles(self) -> LaundryCycleAnalysis:
        return self.engine().analyze_laundry_cycles()

    def generate_burn_down_data(self, days_ahead: int | None = None) -> BurnDownData:
        horizon = self.config.burn_down_days if days_ahead is None else max(0, int(days_ahead))
        return self.engine().generate_burn_down_data(horizon)

    def dashboard(self) -> Dict[str, Any]:
        """Score and insights as plain data for the dashboard screen."""

        with operation_context("dashboard"):
            engine = self.engine()
            return {
                "flowScore": engine.calculate_flow_score(),
                "insights": [insight.to_dict() for insight in engine.generate_insights()],
                "bagCount": self.state.bag_count,
                "activeBatches": len(engine.active_batches()),
            }


def build_local_app(base_dir: str | Path, clock: Callable[[], datetime] | None = None) -> WardrobeFlowApp:
    """App wired to a JSON store under ``base_dir``; handy for scripts and tests."""

    config = FlowConfig(storage_backend="json", storage_path=str(base_dir))
    return WardrobeFlowApp(config=config, store=JSONStateStore(base_dir), clock=clock)


__all__ = ["WardrobeFlowApp", "build_local_app"]
