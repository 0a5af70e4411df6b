"""Data models for extracted menus, filter results and recommendation plans."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class MenuItem:
    """A single dish read off a menu photo."""

    name: str
    price: float
    description: str = ""
    category: str = ""

    def searchable_text(self) -> str:
        return f"{self.name} {self.description}".lower()

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "category": self.category,
        }


@dataclass
class MenuInfo:
    currency: str
    items: list[MenuItem] = field(default_factory=list)

    def with_items(self, items: list[MenuItem]) -> MenuInfo:
        return MenuInfo(currency=self.currency, items=list(items))

    def to_dict(self) -> dict:
        return {
            "currency": self.currency,
            "items": [item.to_dict() for item in self.items],
        }


@dataclass
class PlanItem:
    name: str
    qty: float
    unit_price: float
    subtotal: float

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "qty": self.qty,
            "unit_price": self.unit_price,
            "subtotal": self.subtotal,
        }


@dataclass
class RecommendationPlan:
    """Dishes picked for a budget, with the total and whether it fits."""

    total: float
    currency: str
    budget: float
    items: list[PlanItem] = field(default_factory=list)
    rationale: str = ""
    within_budget: bool = True

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "currency": self.currency,
            "items": [item.to_dict() for item in self.items],
            "rationale": self.rationale,
            "budget": self.budget,
            "withinBudget": self.within_budget,
        }

    def display(self) -> str:
        """Format the plan for terminal display."""
        lines: list[str] = []
        lines.append(f"Budget: {self.currency}{self.budget:.2f}")
        lines.append(f"{'─' * 50}")
        if self.items:
            lines.append(f"  {'Dish':<28} {'Qty':>3} {'Unit':>7} {'Subtotal':>9}")
            lines.append(f"  {'─' * 48}")
            for item in self.items:
                lines.append(
                    f"  {item.name:<28} {item.qty:>3g} "
                    f"{item.unit_price:>7.2f} {item.subtotal:>9.2f}"
                )
        else:
            lines.append("  No dishes fit this budget.")
        lines.append(f"{'─' * 50}")
        status = "within budget" if self.within_budget else "OVER BUDGET"
        lines.append(f"  Total: {self.currency}{self.total:.2f} ({status})")
        if self.rationale:
            lines.append("")
            lines.append(f"  {self.rationale}")
        return "\n".join(lines)


@dataclass
class FilterDebug:
    """Why a menu item was removed by the hard filter."""

    item_name: str
    reason: str
    tag: str
    text: str
    matched: str | None = None

    def to_dict(self) -> dict:
        return {
            "itemName": self.item_name,
            "reason": self.reason,
            "tag": self.tag,
            "matched": self.matched,
            "text": self.text,
        }


@dataclass
class FilterResult:
    allowed_items: list[MenuItem] = field(default_factory=list)
    removed_count: int = 0
    hard_core: list[str] = field(default_factory=list)
    neg_keys: list[str] = field(default_factory=list)
    soft: list[str] = field(default_factory=list)
    debug: list[FilterDebug] = field(default_factory=list)

    @property
    def hard_constraints(self) -> list[str]:
        """Core diet tags plus ``no:<key>`` for every dynamic negative."""
        return [*self.hard_core, *(f"no:{key}" for key in self.neg_keys)]


@dataclass
class RecommendationResult:
    """Everything one recommend/rebudget call hands back to the caller."""

    menu_info: MenuInfo
    recommendation: RecommendationPlan
    tags_applied: list[str] = field(default_factory=list)
    hard_constraints: list[str] = field(default_factory=list)
    soft_preferences: list[str] = field(default_factory=list)
    removed_by_tags: int = 0
    filter_debug: list[FilterDebug] = field(default_factory=list)
    tag_source: str = "defaults"
    cached: bool = False

    def to_dict(self) -> dict:
        return {
            "menuInfo": self.menu_info.to_dict(),
            "recommendation": self.recommendation.to_dict(),
            "tagsApplied": list(self.tags_applied),
            "hardConstraints": list(self.hard_constraints),
            "softPreferences": list(self.soft_preferences),
            "removedByTags": self.removed_by_tags,
            "filterDebug": [d.to_dict() for d in self.filter_debug],
            "tagSource": self.tag_source,
            "cached": self.cached,
        }
