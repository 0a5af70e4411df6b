"""Tests for the recommendation cache."""

import hashlib

import pytest

from mealmint.menu.cache import RecommendationCache, SessionCacheStore, compute_menu_hash
from mealmint.menu.models import MenuInfo, MenuItem, RecommendationPlan


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def menu():
    return MenuInfo("$", [MenuItem("Fried Rice", 11.0)])


@pytest.fixture
def plan():
    return RecommendationPlan(total=11.0, currency="$", budget=20.0)


def test_compute_menu_hash_deterministic():
    assert compute_menu_hash(b"menu") == compute_menu_hash(b"menu")
    assert compute_menu_hash(b"menu") == hashlib.sha256(b"menu").hexdigest()
    assert compute_menu_hash(b"menu-a") != compute_menu_hash(b"menu-b")


def test_empty_cache():
    cache = RecommendationCache()
    assert cache.is_empty()
    assert cache.get_last_recommendation() is None
    assert cache.get_cached_menu_info() is None
    assert cache.has_same_menu(b"menu") is False
    assert cache.has_same_budget(20.0) is False
    assert cache.has_same_tags("sig") is False


def test_set_and_get(menu, plan):
    cache = RecommendationCache(clock=FakeClock(42.0))
    cache.set_last_recommendation(
        image=b"menu", menu_info=menu, recommendation=plan, budget=20.0, tags_sig="sig"
    )

    entry = cache.get_last_recommendation()
    assert entry.menu_hash == compute_menu_hash(b"menu")
    assert entry.menu_info is menu
    assert entry.recommendation is plan
    assert entry.timestamp == 42.0
    assert cache.has_same_menu(b"menu")
    assert not cache.has_same_menu(b"other")
    assert cache.has_same_budget(20.0)
    assert not cache.has_same_budget(25.0)
    assert cache.has_same_tags("sig")


def test_set_without_image_keeps_previous_hash(menu, plan):
    cache = RecommendationCache()
    cache.set_last_recommendation(image=b"menu", menu_info=menu, recommendation=plan, budget=20.0)
    cache.set_last_recommendation(image=None, menu_info=menu, recommendation=plan, budget=30.0)

    assert cache.has_same_menu(b"menu")
    assert cache.has_same_budget(30.0)


def test_single_slot_last_write_wins(menu, plan):
    cache = RecommendationCache()
    cache.set_last_recommendation(image=b"first", menu_info=menu, recommendation=plan, budget=20.0)
    cache.set_last_recommendation(image=b"second", menu_info=menu, recommendation=plan, budget=20.0)

    assert cache.has_same_menu(b"second")
    assert not cache.has_same_menu(b"first")


def test_clear(menu, plan):
    cache = RecommendationCache()
    cache.set_last_recommendation(image=b"menu", menu_info=menu, recommendation=plan, budget=20.0)
    cache.clear()
    assert cache.is_empty()


def test_no_expiry_by_default(menu, plan):
    clock = FakeClock()
    cache = RecommendationCache(clock=clock)
    cache.set_last_recommendation(image=b"menu", menu_info=menu, recommendation=plan, budget=20.0)
    clock.now += 10**9
    assert not cache.is_empty()


def test_ttl_expiry(menu, plan):
    clock = FakeClock()
    cache = RecommendationCache(ttl_seconds=60, clock=clock)
    cache.set_last_recommendation(image=b"menu", menu_info=menu, recommendation=plan, budget=20.0)

    clock.now += 59
    assert cache.has_same_menu(b"menu")
    clock.now += 2
    assert cache.get_last_recommendation() is None
    assert cache.is_empty()


class TestSessionCacheStore:
    def test_same_session_same_cache(self):
        store = SessionCacheStore()
        assert store.get("alice") is store.get("alice")

    def test_sessions_are_isolated(self, menu, plan):
        store = SessionCacheStore()
        store.get("alice").set_last_recommendation(
            image=b"menu", menu_info=menu, recommendation=plan, budget=20.0
        )
        assert store.get("bob").is_empty()
        assert sorted(store.sessions()) == ["alice", "bob"]

    def test_drop(self, menu, plan):
        store = SessionCacheStore()
        store.get("alice").set_last_recommendation(
            image=b"menu", menu_info=menu, recommendation=plan, budget=20.0
        )
        store.drop("alice")
        assert store.get("alice").is_empty()

    def test_ttl_passed_to_sessions(self, menu, plan):
        clock = FakeClock()
        store = SessionCacheStore(ttl_seconds=5, clock=clock)
        cache = store.get()
        cache.set_last_recommendation(image=b"menu", menu_info=menu, recommendation=plan, budget=20.0)
        clock.now += 10
        assert cache.is_empty()

    def test_idle_empty_sessions_pruned(self, menu, plan):
        clock = FakeClock()
        store = SessionCacheStore(ttl_seconds=5, clock=clock)
        for sid in ("alice", "bob", "carol"):
            store.get(sid)
        store.get("bob").set_last_recommendation(
            image=b"menu", menu_info=menu, recommendation=plan, budget=20.0
        )
        clock.now += 3
        store.get("carol")
        clock.now += 3

        store.get("dave")

        # alice never cached, bob's entry expired, carol was fetched 3s ago
        assert sorted(store.sessions()) == ["carol", "dave"]

    def test_live_entries_survive_pruning(self, menu, plan):
        clock = FakeClock()
        store = SessionCacheStore(ttl_seconds=5, clock=clock)
        alice = store.get("alice")
        clock.now += 4
        alice.set_last_recommendation(
            image=b"menu", menu_info=menu, recommendation=plan, budget=20.0
        )
        clock.now += 3

        store.get("bob")

        assert store.get("alice") is alice
        assert not alice.is_empty()

    def test_no_pruning_without_ttl(self):
        clock = FakeClock()
        store = SessionCacheStore(clock=clock)
        store.get("alice")
        clock.now += 10_000
        store.get("bob")
        assert sorted(store.sessions()) == ["alice", "bob"]
