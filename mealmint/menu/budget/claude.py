"""Claude API budget planner."""

from __future__ import annotations

import json
import logging

from .. import errors
from ..models import MenuInfo, RecommendationPlan
from ..vision import response_text
from . import BudgetPlanner, parse_plan_response

logger = logging.getLogger(__name__)

_SYSTEM_PROMPT = (
    "You are a helpful dining planner. Choose a set of dishes that maximizes"
    " value and taste while staying within budget. Prefer variety"
    " (appetizer/main/drink/dessert if applicable), account for sharing when"
    " logical, and avoid exceeding the budget. Output clear JSON strictly"
    " matching the schema."
)

_SCHEMA_HINT = (
    '{ "total": number, "currency": string, "items": [{ "name": string,'
    ' "qty": number, "unit_price": number, "subtotal": number }],'
    ' "rationale": string }'
)


class ClaudeBudgetPlanner(BudgetPlanner):
    """Ask Claude to pick dishes, then validate the returned plan."""

    name = "claude"

    def __init__(self, api_key: str = "", model: str = "claude-sonnet-4-5-20250929") -> None:
        self._api_key = api_key
        self._model = model

    async def _plan(
        self, menu_info: MenuInfo, budget: float, user_note: str
    ) -> RecommendationPlan:
        if not self._api_key:
            raise ValueError(
                "Anthropic API key is not set. "
                "Check the config file or the ANTHROPIC_API_KEY environment variable."
            )

        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "anthropic SDK is required: pip install anthropic"
            ) from None

        currency = menu_info.currency or "$"
        payload = {
            "currency": currency,
            "budget": budget,
            "items": [item.to_dict() for item in menu_info.items],
            "note": user_note,
        }
        prompt = (
            "Here is the extracted menu JSON and a budget. Choose dishes within"
            f" budget and respond ONLY with JSON matching {_SCHEMA_HINT}.\n\n"
            f"Menu: {json.dumps(payload, ensure_ascii=False)}"
        )

        client = anthropic.AsyncAnthropic(api_key=self._api_key)
        try:
            response = await client.messages.create(
                model=self._model,
                max_tokens=2048,
                temperature=0.2,
                system=_SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as exc:
            raise errors.budget_api_error(f"Claude budget request failed: {exc}", exc) from exc

        text = response_text(response.content)
        plan = parse_plan_response(text, budget, currency)
        if not plan.within_budget:
            logger.warning(
                "Planner returned %s%.2f for a budget of %.2f",
                plan.currency,
                plan.total,
                budget,
            )
        return plan
