"""In-memory recommendation cache keyed by the menu photo's content hash."""

from __future__ import annotations

import hashlib
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from .models import FilterDebug, MenuInfo, RecommendationPlan

DEFAULT_SESSION = "default"


def compute_menu_hash(image: bytes) -> str:
    """SHA-256 hex digest of the image bytes."""
    return hashlib.sha256(image).hexdigest()


@dataclass
class CacheEntry:
    menu_hash: str | None
    menu_info: MenuInfo
    recommendation: RecommendationPlan
    budget: float
    timestamp: float
    tags_sig: str | None = None
    tags_applied: list[str] = field(default_factory=list)
    hard_constraints: list[str] = field(default_factory=list)
    soft_preferences: list[str] = field(default_factory=list)
    removed_by_tags: int = 0
    filter_debug: list[FilterDebug] = field(default_factory=list)
    allowed_menu_info: MenuInfo | None = None


class RecommendationCache:
    """Holds the last recommendation: a single slot, last write wins.

    Entries never expire unless ``ttl_seconds`` is positive. Reads and writes
    are serialized, but a ``has_same_menu`` check followed by
    ``set_last_recommendation`` is not atomic.
    """

    def __init__(
        self,
        ttl_seconds: float = 0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entry: CacheEntry | None = None
        self._lock = threading.Lock()

    def _current(self) -> CacheEntry | None:
        entry = self._entry
        if entry is not None and self._ttl > 0:
            if self._clock() - entry.timestamp > self._ttl:
                self._entry = None
                return None
        return entry

    def set_last_recommendation(
        self,
        *,
        image: bytes | None,
        menu_info: MenuInfo,
        recommendation: RecommendationPlan,
        budget: float,
        tags_sig: str | None = None,
        tags_applied: list[str] | None = None,
        hard_constraints: list[str] | None = None,
        soft_preferences: list[str] | None = None,
        removed_by_tags: int = 0,
        filter_debug: list[FilterDebug] | None = None,
        allowed_menu_info: MenuInfo | None = None,
    ) -> CacheEntry:
        """Overwrite the slot.

        ``menu_info`` is the full extracted menu; ``allowed_menu_info`` is what
        survived the hard filter. Without ``image`` the previous menu hash is
        kept, so a rebudget does not forget which photo the menu came from.
        """
        with self._lock:
            if image is not None:
                menu_hash = compute_menu_hash(image)
            else:
                menu_hash = self._entry.menu_hash if self._entry else None
            self._entry = CacheEntry(
                menu_hash=menu_hash,
                menu_info=menu_info,
                recommendation=recommendation,
                budget=budget,
                timestamp=self._clock(),
                tags_sig=tags_sig,
                tags_applied=list(tags_applied or []),
                hard_constraints=list(hard_constraints or []),
                soft_preferences=list(soft_preferences or []),
                removed_by_tags=removed_by_tags,
                filter_debug=list(filter_debug or []),
                allowed_menu_info=allowed_menu_info,
            )
            return self._entry

    def get_last_recommendation(self) -> CacheEntry | None:
        with self._lock:
            return self._current()

    def get_cached_menu_info(self) -> MenuInfo | None:
        with self._lock:
            entry = self._current()
            return entry.menu_info if entry else None

    def is_empty(self) -> bool:
        with self._lock:
            return self._current() is None

    def has_same_menu(self, image: bytes) -> bool:
        with self._lock:
            entry = self._current()
            return entry is not None and entry.menu_hash == compute_menu_hash(image)

    def has_same_budget(self, budget: float) -> bool:
        with self._lock:
            entry = self._current()
            return entry is not None and entry.budget == budget

    def has_same_tags(self, tags_sig: str) -> bool:
        with self._lock:
            entry = self._current()
            return entry is not None and entry.tags_sig == tags_sig

    def clear(self) -> None:
        with self._lock:
            self._entry = None


class SessionCacheStore:
    """One RecommendationCache per session id, created on first use.

    With a positive TTL, sessions that are empty and have not been fetched
    for longer than the TTL are pruned on the next ``get``. Without a TTL
    nothing expires and callers remove finished sessions with ``drop``.
    """

    def __init__(
        self,
        ttl_seconds: float = 0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._caches: dict[str, RecommendationCache] = {}
        self._last_access: dict[str, float] = {}
        self._lock = threading.Lock()

    def _prune(self, now: float) -> None:
        if self._ttl <= 0:
            return
        stale = [
            sid for sid, cache in self._caches.items()
            if now - self._last_access.get(sid, now) > self._ttl and cache.is_empty()
        ]
        for sid in stale:
            del self._caches[sid]
            self._last_access.pop(sid, None)

    def get(self, session_id: str = DEFAULT_SESSION) -> RecommendationCache:
        with self._lock:
            now = self._clock()
            self._prune(now)
            cache = self._caches.get(session_id)
            if cache is None:
                cache = RecommendationCache(ttl_seconds=self._ttl, clock=self._clock)
                self._caches[session_id] = cache
            self._last_access[session_id] = now
            return cache

    def drop(self, session_id: str) -> None:
        with self._lock:
            self._caches.pop(session_id, None)
            self._last_access.pop(session_id, None)

    def sessions(self) -> list[str]:
        with self._lock:
            return list(self._caches)
