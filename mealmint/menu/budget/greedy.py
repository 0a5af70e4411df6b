"""Deterministic greedy budget planner."""

from __future__ import annotations

from ..models import MenuInfo, PlanItem, RecommendationPlan
from . import BudgetPlanner

RATIONALE = "Greedy selection in menu order, adding each dish that still fits the budget."


class GreedyBudgetPlanner(BudgetPlanner):
    """Take dishes in menu order while the running total stays within budget.

    The user note and any preference context are ignored.
    """

    name = "greedy"

    async def _plan(
        self, menu_info: MenuInfo, budget: float, user_note: str
    ) -> RecommendationPlan:
        chosen: list[PlanItem] = []
        running = 0.0
        for item in menu_info.items:
            if running + item.price <= budget:
                chosen.append(
                    PlanItem(
                        name=item.name,
                        qty=1,
                        unit_price=item.price,
                        subtotal=item.price,
                    )
                )
                running += item.price

        return RecommendationPlan(
            total=running,
            currency=menu_info.currency or "$",
            budget=budget,
            items=chosen,
            rationale=RATIONALE,
            within_budget=running <= budget,
        )
