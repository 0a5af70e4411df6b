"""Menu recommendation pipeline: extract → filter → plan → cache."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from . import errors
from .budget import BudgetPlanner, create_planner, validate_budget
from .cache import DEFAULT_SESSION, CacheEntry, RecommendationCache, SessionCacheStore
from .config import MenuConfig
from .hard_filter import apply_hard_filter
from .models import MenuInfo, RecommendationPlan, RecommendationResult
from .tags import determine_final_tags, tags_hash
from .vision import MenuExtractor, create_extractor

logger = logging.getLogger(__name__)

NO_ALLOWED_ITEMS_RATIONALE = "No dishes on this menu satisfy the dietary constraints."


def _timeout(seconds: float) -> float | None:
    return seconds if seconds and seconds > 0 else None


def build_planner_note(
    user_note: str,
    hard_constraints: list[str],
    soft_preferences: list[str],
) -> str:
    """Append dietary context to the user's note for the live planner."""
    parts = [user_note.strip()] if user_note and user_note.strip() else []
    if hard_constraints:
        parts.append(
            "Hard constraints (already applied to the menu): "
            + ", ".join(hard_constraints)
        )
    if soft_preferences:
        parts.append("Soft preferences: " + ", ".join(soft_preferences))
    return "\n".join(parts)


class MenuRecommender:
    """Recommend dishes from a menu photo within a budget.

    Extraction and planning strategies are injected; by default they are
    built from ``config``. Cached results are kept per session id.
    """

    def __init__(
        self,
        extractor: MenuExtractor | None = None,
        planner: BudgetPlanner | None = None,
        caches: SessionCacheStore | None = None,
        config: MenuConfig | None = None,
    ) -> None:
        self._config = config or MenuConfig()
        self._extractor = extractor or create_extractor(self._config)
        self._planner = planner or create_planner(self._config)
        self._caches = caches or SessionCacheStore(
            ttl_seconds=self._config.cache.ttl_seconds
        )

    @property
    def extractor(self) -> MenuExtractor:
        return self._extractor

    @property
    def planner(self) -> BudgetPlanner:
        return self._planner

    def validate_upload(self, image: bytes | None, mime_type: str | None) -> None:
        """Reject a missing, wrongly typed, or oversized menu photo."""
        if not image:
            raise errors.missing_image()
        if mime_type not in self._config.upload.allowed_mime_types:
            raise errors.invalid_mime_type()
        if len(image) > self._config.upload.max_size_bytes:
            raise errors.image_too_large()

    async def _extract(self, image: bytes, mime_type: str) -> MenuInfo:
        logger.info("Extracting menu with %s backend", self._extractor.name)
        try:
            menu_info = await asyncio.wait_for(
                self._extractor.extract_menu(image, mime_type),
                timeout=_timeout(self._config.vision.timeout_seconds),
            )
        except asyncio.TimeoutError as exc:
            raise errors.vision_api_error("Vision request timed out", exc) from exc
        logger.info("Extracted %d menu items", len(menu_info.items))
        return menu_info

    async def _plan(
        self, menu_info: MenuInfo, budget: float, user_note: str
    ) -> RecommendationPlan:
        logger.info(
            "Planning %d items for budget %.2f with %s planner",
            len(menu_info.items),
            budget,
            self._planner.name,
        )
        try:
            return await asyncio.wait_for(
                self._planner.recommend(menu_info, budget, user_note),
                timeout=_timeout(self._config.budget.timeout_seconds),
            )
        except asyncio.TimeoutError as exc:
            raise errors.budget_api_error("Budget request timed out", exc) from exc

    async def handle_recommend(
        self,
        image: bytes | None,
        mime_type: str | None,
        budget: float,
        user_note: str = "",
    ) -> RecommendationResult:
        """Extract the menu and plan over every item, without tag filtering."""
        if not image or not mime_type:
            raise errors.missing_image_buffer()
        budget = validate_budget(budget)

        menu_info = await self._extract(image, mime_type)
        recommendation = await self._plan(menu_info, budget, user_note)
        return RecommendationResult(
            menu_info=menu_info,
            recommendation=recommendation,
            tag_source="none",
        )

    async def _recommend_with_tags(
        self,
        menu_info: MenuInfo,
        budget: float,
        tags: list[str],
        tag_source: str,
        user_note: str,
    ) -> RecommendationResult:
        filtered = apply_hard_filter(menu_info, tags)
        allowed_menu = menu_info.with_items(filtered.allowed_items)
        hard_constraints = filtered.hard_constraints

        if allowed_menu.items:
            note = build_planner_note(user_note, hard_constraints, filtered.soft)
            recommendation = await self._plan(allowed_menu, budget, note)
        else:
            logger.warning("Hard filter removed every item; returning an empty plan")
            recommendation = RecommendationPlan(
                total=0.0,
                currency=menu_info.currency,
                budget=budget,
                rationale=NO_ALLOWED_ITEMS_RATIONALE,
                within_budget=True,
            )

        return RecommendationResult(
            menu_info=allowed_menu,
            recommendation=recommendation,
            tags_applied=list(tags),
            hard_constraints=hard_constraints,
            soft_preferences=list(filtered.soft),
            removed_by_tags=filtered.removed_count,
            filter_debug=filtered.debug,
            tag_source=tag_source,
        )

    def _resolve_tags(
        self,
        tags: str | Iterable[str] | None,
        profile_tags: Iterable[str] | None,
        ignore_profile_tags: bool,
    ) -> tuple[list[str], str]:
        return determine_final_tags(
            request_tags=tags,
            profile_tags=profile_tags,
            ignore_profile_tags=ignore_profile_tags,
            defaults=self._config.tags.defaults,
        )

    async def recommend(
        self,
        image: bytes | None,
        mime_type: str | None,
        budget: float,
        tags: str | Iterable[str] | None = None,
        profile_tags: Iterable[str] | None = None,
        ignore_profile_tags: bool = False,
        user_note: str = "",
        session_id: str = DEFAULT_SESSION,
    ) -> RecommendationResult:
        """Run the full pipeline for an uploaded menu photo.

        A photo already in the session cache is not re-extracted; when budget
        and tags also match, the cached result is returned as is.
        """
        self.validate_upload(image, mime_type)
        budget = validate_budget(budget)

        final_tags, source = self._resolve_tags(tags, profile_tags, ignore_profile_tags)
        tags_sig = tags_hash(final_tags)
        cache = self._caches.get(session_id)

        entry = cache.get_last_recommendation() if cache.has_same_menu(image) else None
        if entry is not None:
            if entry.budget == budget and entry.tags_sig == tags_sig:
                logger.info("Returning cached recommendation for session %s", session_id)
                return _result_from_entry(entry, tag_source=source)
            logger.info("Same menu photo; reusing cached menu for session %s", session_id)
            menu_info = entry.menu_info
        else:
            menu_info = await self._extract(image, mime_type)

        result = await self._recommend_with_tags(
            menu_info, budget, final_tags, source, user_note
        )
        self._store(cache, image, menu_info, result, budget, tags_sig)
        return result

    async def rebudget(
        self,
        budget: float,
        tags: str | Iterable[str] | None = None,
        profile_tags: Iterable[str] | None = None,
        ignore_profile_tags: bool = False,
        user_note: str = "",
        session_id: str = DEFAULT_SESSION,
    ) -> RecommendationResult:
        """Re-plan the cached menu for a new budget or tag set."""
        budget = validate_budget(budget)
        cache = self._caches.get(session_id)
        menu_info = cache.get_cached_menu_info()
        if menu_info is None:
            raise errors.no_cache()

        final_tags, source = self._resolve_tags(tags, profile_tags, ignore_profile_tags)
        tags_sig = tags_hash(final_tags)
        result = await self._recommend_with_tags(
            menu_info, budget, final_tags, source, user_note
        )
        self._store(cache, None, menu_info, result, budget, tags_sig)
        return result

    def last_recommendation(self, session_id: str = DEFAULT_SESSION) -> RecommendationResult:
        entry = self._caches.get(session_id).get_last_recommendation()
        if entry is None:
            raise errors.no_cache()
        return _result_from_entry(entry, tag_source="cache")

    def clear_cache(self, session_id: str = DEFAULT_SESSION) -> None:
        self._caches.get(session_id).clear()

    @staticmethod
    def _store(
        cache: RecommendationCache,
        image: bytes | None,
        menu_info: MenuInfo,
        result: RecommendationResult,
        budget: float,
        tags_sig: str,
    ) -> None:
        cache.set_last_recommendation(
            image=image,
            menu_info=menu_info,
            allowed_menu_info=result.menu_info,
            recommendation=result.recommendation,
            budget=budget,
            tags_sig=tags_sig,
            tags_applied=result.tags_applied,
            hard_constraints=result.hard_constraints,
            soft_preferences=result.soft_preferences,
            removed_by_tags=result.removed_by_tags,
            filter_debug=result.filter_debug,
        )


def _result_from_entry(entry: CacheEntry, tag_source: str) -> RecommendationResult:
    return RecommendationResult(
        menu_info=entry.allowed_menu_info or entry.menu_info,
        recommendation=entry.recommendation,
        tags_applied=list(entry.tags_applied),
        hard_constraints=list(entry.hard_constraints),
        soft_preferences=list(entry.soft_preferences),
        removed_by_tags=entry.removed_by_tags,
        filter_debug=list(entry.filter_debug),
        tag_source=tag_source,
        cached=True,
    )
