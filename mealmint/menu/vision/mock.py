"""Deterministic extractor returning a fixed sample menu."""

from __future__ import annotations

from ..models import MenuInfo, MenuItem
from . import MenuExtractor

SAMPLE_MENU = MenuInfo(
    currency="$",
    items=[
        MenuItem("Spring Rolls", 6.5, "Crispy veggie rolls", "Appetizers"),
        MenuItem("Fried Rice", 11.0, "Egg, peas, carrots", "Mains"),
        MenuItem("Kung Pao Chicken", 13.5, "Spicy peanuts", "Mains"),
        MenuItem("Jasmine Tea", 3.0, "Hot tea", "Drinks"),
        MenuItem("Mango Pudding", 5.0, "Dessert", "Desserts"),
    ],
)


class MockMenuExtractor(MenuExtractor):
    """Ignore the image and return the sample menu."""

    name = "mock"

    async def extract_menu(self, image: bytes, mime_type: str) -> MenuInfo:
        return SAMPLE_MENU.with_items(SAMPLE_MENU.items)
