"""Remove menu items that violate hard dietary constraints."""

from __future__ import annotations

import logging
import re
from functools import lru_cache

from .models import FilterDebug, FilterResult, MenuInfo, MenuItem
from .rules import (
    GLUTEN_FREE_INDICATORS,
    GLUTEN_TERMS,
    NON_VEGAN_TERMS,
    NON_VEGETARIAN_TERMS,
    VEGAN_INDICATORS,
    VEGETARIAN_INDICATORS,
)
from .tags import build_dynamic_hard_terms, split_hard_soft_tags, terms_for_key

logger = logging.getLogger(__name__)

_DEBUG_TEXT_LIMIT = 100

# (core tag, excluded terms, waiving indicators, reason)
_CORE_RULES: list[tuple[str, list[str], tuple[str, ...], str]] = [
    ("vegan", NON_VEGAN_TERMS, VEGAN_INDICATORS, "Contains non-vegan ingredients"),
    ("vegetarian", NON_VEGETARIAN_TERMS, VEGETARIAN_INDICATORS, "Contains meat or seafood"),
    ("glutenfree", GLUTEN_TERMS, GLUTEN_FREE_INDICATORS, "Contains gluten"),
]


@lru_cache(maxsize=1024)
def _word_pattern(term: str) -> re.Pattern[str]:
    return re.compile(r"\b" + re.escape(term) + r"\b", re.IGNORECASE)


def matches_word(text: str, term: str) -> bool:
    """True if ``term`` occurs in ``text`` as a whole word or phrase.

    ``"tea"`` matches ``"ice tea"`` but not ``"steak"``.
    """
    return _word_pattern(term).search(text) is not None


def first_matching_term(text: str, terms: list[str]) -> str | None:
    for term in terms:
        if matches_word(text, term):
            return term
    return None


def _key_for_term(term: str, neg_keys: list[str]) -> str:
    for key in neg_keys:
        if any(syn.lower() == term for syn in terms_for_key(key)):
            return key
    return term


def _check_item(
    item: MenuItem,
    hard_core: list[str],
    neg_keys: list[str],
    neg_terms: list[str],
) -> FilterDebug | None:
    text = item.searchable_text()
    snippet = text[:_DEBUG_TEXT_LIMIT] + ("..." if len(text) > _DEBUG_TEXT_LIMIT else "")

    # Dynamic negatives take priority over core diet rules
    matched = first_matching_term(text, neg_terms)
    if matched is not None:
        return FilterDebug(
            item_name=item.name,
            reason="dynamic_exclude",
            tag=f"no:{_key_for_term(matched, neg_keys)}",
            text=snippet,
            matched=matched,
        )

    for tag, terms, indicators, reason in _CORE_RULES:
        if tag not in hard_core:
            continue
        if first_matching_term(text, terms) is None:
            continue
        if any(indicator in text for indicator in indicators):
            continue
        return FilterDebug(item_name=item.name, reason=reason, tag=tag, text=snippet)

    return None


def apply_hard_filter(menu_info: MenuInfo, tags: list[str] | None) -> FilterResult:
    """Drop items that trip a core diet rule or a dynamic negative term.

    With no tags every item passes.
    """
    if not tags:
        return FilterResult(allowed_items=list(menu_info.items))

    classification = split_hard_soft_tags(tags)
    neg_terms = build_dynamic_hard_terms(classification.neg_keys)

    allowed: list[MenuItem] = []
    debug: list[FilterDebug] = []
    for item in menu_info.items:
        verdict = _check_item(
            item, classification.hard_core, classification.neg_keys, neg_terms
        )
        if verdict is None:
            allowed.append(item)
        else:
            debug.append(verdict)

    removed = len(menu_info.items) - len(allowed)
    if removed:
        logger.info(
            "Hard filter removed %d of %d items (core=%s, negatives=%s)",
            removed,
            len(menu_info.items),
            classification.hard_core,
            classification.neg_keys,
        )

    return FilterResult(
        allowed_items=allowed,
        removed_count=removed,
        hard_core=classification.hard_core,
        neg_keys=classification.neg_keys,
        soft=classification.soft,
        debug=debug,
    )
