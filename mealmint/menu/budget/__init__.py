"""Budget planner base class, plan normalization, and factory."""

from __future__ import annotations

import json
import logging
import math
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from .. import errors
from ..models import MenuInfo, PlanItem, RecommendationPlan
from ..vision import strip_code_fences

if TYPE_CHECKING:
    from ..config import MenuConfig

logger = logging.getLogger(__name__)


def validate_budget(budget) -> float:
    """Return ``budget`` as a float, or raise ``INVALID_BUDGET``."""
    if isinstance(budget, bool):
        raise errors.invalid_budget()
    try:
        value = float(budget)
    except (TypeError, ValueError):
        raise errors.invalid_budget() from None
    if not math.isfinite(value) or value <= 0:
        raise errors.invalid_budget()
    return value


class BudgetPlanner(ABC):
    """Abstract base for choosing dishes that fit a budget."""

    name = "base"

    async def recommend(
        self,
        menu_info: MenuInfo,
        budget: float,
        user_note: str = "",
    ) -> RecommendationPlan:
        """Validate inputs and produce a plan for ``menu_info``.

        Raises:
            MenuAnalysisError: ``INVALID_BUDGET`` for a non-finite or
                non-positive budget, ``INTERNAL_ERROR`` for an empty menu,
                ``BUDGET_API_ERROR`` when a live planner's reply is unusable.
        """
        budget = validate_budget(budget)
        if menu_info is None or not menu_info.items:
            raise errors.internal_error("Menu info is empty")
        return await self._plan(menu_info, budget, user_note)

    @abstractmethod
    async def _plan(
        self, menu_info: MenuInfo, budget: float, user_note: str
    ) -> RecommendationPlan:
        ...


def _to_number(value) -> float:
    if isinstance(value, bool) or value is None:
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _to_qty(value) -> float:
    qty = _to_number(value)
    if not math.isfinite(qty):
        return 1.0
    return max(1.0, qty)


def normalize_plan(payload: dict, budget: float, currency: str) -> RecommendationPlan:
    """Turn a planner's decoded JSON into a validated RecommendationPlan.

    Items without a name or with a non-finite ``unit_price``/``subtotal`` are
    dropped. ``total`` is taken from the payload when finite, otherwise summed
    from the surviving subtotals, and ``within_budget`` is recomputed.
    """
    raw_items = payload.get("items")
    if not isinstance(raw_items, list):
        raw_items = []

    items: list[PlanItem] = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            continue
        name = str(raw.get("name") or "").strip()
        unit_price = _to_number(raw.get("unit_price"))
        subtotal = _to_number(raw.get("subtotal"))
        if not name or not math.isfinite(unit_price) or not math.isfinite(subtotal):
            continue
        items.append(
            PlanItem(
                name=name,
                qty=_to_qty(raw.get("qty")),
                unit_price=unit_price,
                subtotal=subtotal,
            )
        )

    total = _to_number(payload.get("total"))
    if not math.isfinite(total):
        total = sum(item.subtotal for item in items)

    rationale = payload.get("rationale")
    plan_currency = payload.get("currency")
    return RecommendationPlan(
        total=total,
        currency=plan_currency if isinstance(plan_currency, str) and plan_currency else currency,
        budget=budget,
        items=items,
        rationale=rationale.strip() if isinstance(rationale, str) else "",
        within_budget=total <= budget,
    )


def parse_plan_response(text: str | None, budget: float, currency: str) -> RecommendationPlan:
    if not text or not text.strip():
        raise errors.budget_api_error("Empty response from budget planner")
    try:
        payload = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as exc:
        raise errors.budget_api_error("Failed to parse budget JSON", exc) from exc
    if not isinstance(payload, dict):
        raise errors.budget_api_error("Budget JSON is not an object")
    return normalize_plan(payload, budget, currency)


def create_planner(config: MenuConfig) -> BudgetPlanner:
    """Create a budget planner based on configuration.

    Test mode, the ``greedy`` backend, or a missing API key all produce the
    deterministic greedy planner.
    """
    from .greedy import GreedyBudgetPlanner

    backend_name = config.budget.backend
    if config.general.test_mode:
        return GreedyBudgetPlanner()

    match backend_name:
        case "greedy":
            return GreedyBudgetPlanner()
        case "claude":
            if not config.budget.claude.api_key:
                logger.warning("No Anthropic API key; using the greedy budget planner")
                return GreedyBudgetPlanner()
            from .claude import ClaudeBudgetPlanner

            return ClaudeBudgetPlanner(
                api_key=config.budget.claude.api_key,
                model=config.budget.claude.model,
            )
        case _:
            raise ValueError(
                f"Unknown budget backend: {backend_name!r} (choose claude / greedy)"
            )
