# tests/test_cache.py
from __future__ import annotations

import pytest

from refap.runtime.cache import ResponseCache


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_set_then_get():
    cache = ResponseCache(clock=FakeClock())
    cache.set("k", {"reply": "ok"})
    assert cache.get("k") == {"reply": "ok"}
    assert "k" in cache


def test_missing_key():
    assert ResponseCache().get("absent") is None


def test_entries_expire_lazily():
    clock = FakeClock()
    cache = ResponseCache(ttl_seconds=300, clock=clock)
    cache.set("k", "payload")
    clock.now += 299.9
    assert cache.get("k") == "payload"
    clock.now += 0.1
    assert len(cache) == 1
    assert cache.get("k") is None
    assert len(cache) == 0


def test_capacity_evicts_earliest_inserted():
    cache = ResponseCache(capacity=3, clock=FakeClock())
    for key in ["a", "b", "c", "d"]:
        cache.set(key, key.upper())
    assert len(cache) == 3
    assert cache.get("a") is None
    assert [cache.get(k) for k in ["b", "c", "d"]] == ["B", "C", "D"]


def test_eviction_ignores_recent_reads():
    cache = ResponseCache(capacity=2, clock=FakeClock())
    cache.set("a", 1)
    cache.set("b", 2)
    assert cache.get("a") == 1
    cache.set("c", 3)
    assert cache.get("a") is None
    assert cache.get("b") == 2


def test_growth_stays_bounded():
    cache = ResponseCache(capacity=10, clock=FakeClock())
    for i in range(50):
        cache.set(f"k{i}", i)
        assert len(cache) <= 10
    assert cache.get("k39") is None
    assert cache.get("k40") == 40


def test_last_write_wins():
    cache = ResponseCache(clock=FakeClock())
    cache.set("k", 1)
    cache.set("k", 2)
    assert cache.get("k") == 2
    assert len(cache) == 1


def test_make_key_normalizes_and_separates():
    assert ResponseCache.make_key("Mon Voyant !", None) == "mon voyant|"
    assert ResponseCache.make_key("Voyant", "Bonjour, Merci") == "voyant|bonjour merci"
    assert ResponseCache.make_key("a b", "c") != ResponseCache.make_key("a", "b c")


def test_clear():
    cache = ResponseCache(clock=FakeClock())
    cache.set("k", 1)
    cache.clear()
    assert len(cache) == 0


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        ResponseCache(capacity=0)
