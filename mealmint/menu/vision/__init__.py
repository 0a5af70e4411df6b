"""Menu extractor base class, response parsing, and factory."""

from __future__ import annotations

import json
import logging
import math
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from .. import errors
from ..models import MenuInfo, MenuItem

if TYPE_CHECKING:
    from ..config import MenuConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a precise OCR and information extraction assistant for restaurant menus."
    " Extract all dishes with name, description if available, price as a number,"
    " and currency symbol or code. Return concise, correct data only."
)

USER_PROMPT = (
    "From this menu image, extract a JSON object with: { currency: string,"
    " items: [{ name: string, description?: string, price: number,"
    " category?: string }] }. Ensure prices are numeric, and do not include"
    " currency symbols in the number. Respond with the JSON object only."
)


class MenuExtractor(ABC):
    """Abstract base for turning a menu photo into structured dishes."""

    name = "base"

    @abstractmethod
    async def extract_menu(self, image: bytes, mime_type: str) -> MenuInfo:
        """Extract the menu shown in ``image``.

        Raises:
            MenuAnalysisError: ``VISION_API_ERROR`` when the model output is
                empty or unparseable, ``NO_MENU_ITEMS`` when no valid dish
                survives normalization.
        """
        ...


def response_text(content) -> str:
    """Join the text blocks of a Claude reply, skipping tool or other blocks."""
    return "".join(
        block.text for block in content or []
        if isinstance(getattr(block, "text", None), str)
    )


def strip_code_fences(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        lines = [l for l in lines[1:] if not l.strip().startswith("```")]
        cleaned = "\n".join(lines)
    return cleaned.strip()


def _to_price(value) -> float:
    if isinstance(value, bool):
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def normalize_menu_payload(payload: dict) -> MenuInfo:
    """Build a MenuInfo from decoded model JSON, dropping unusable items.

    An item needs a non-blank name and a finite, non-negative price.
    """
    raw_items = payload.get("items")
    if not isinstance(raw_items, list):
        raw_items = []

    items: list[MenuItem] = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            continue
        name = str(raw.get("name") or "").strip()
        price = _to_price(raw.get("price"))
        if not name or not math.isfinite(price) or price < 0:
            continue
        items.append(
            MenuItem(
                name=name,
                price=price,
                description=str(raw.get("description") or "").strip(),
                category=str(raw.get("category") or "").strip(),
            )
        )

    if not items:
        raise errors.no_menu_items()

    currency = payload.get("currency")
    return MenuInfo(
        currency=currency if isinstance(currency, str) and currency else "$",
        items=items,
    )


def parse_menu_response(text: str | None) -> MenuInfo:
    """Parse a vision model's text reply into a MenuInfo."""
    if not text or not text.strip():
        raise errors.vision_api_error("Empty response from vision")
    try:
        payload = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as exc:
        raise errors.vision_api_error("Failed to parse vision JSON", exc) from exc
    if not isinstance(payload, dict):
        raise errors.vision_api_error("Vision JSON is not an object")
    return normalize_menu_payload(payload)


def create_extractor(config: MenuConfig) -> MenuExtractor:
    """Create a menu extractor based on configuration.

    Test mode, the ``mock`` backend, or a live backend without an API key
    all produce the deterministic sample-menu extractor.
    """
    from .mock import MockMenuExtractor

    backend_name = config.vision.backend
    if config.general.test_mode:
        return MockMenuExtractor()

    match backend_name:
        case "mock":
            return MockMenuExtractor()
        case "claude":
            if not config.vision.claude.api_key:
                logger.warning("No Anthropic API key; using the sample menu extractor")
                return MockMenuExtractor()
            from .claude import ClaudeMenuExtractor

            return ClaudeMenuExtractor(
                api_key=config.vision.claude.api_key,
                model=config.vision.claude.model,
            )
        case "gemini":
            if not config.vision.gemini.api_key:
                logger.warning("No Gemini API key; using the sample menu extractor")
                return MockMenuExtractor()
            from .gemini import GeminiMenuExtractor

            return GeminiMenuExtractor(
                api_key=config.vision.gemini.api_key,
                model=config.vision.gemini.model,
            )
        case _:
            raise ValueError(
                f"Unknown vision backend: {backend_name!r} "
                f"(choose claude / gemini / mock)"
            )
