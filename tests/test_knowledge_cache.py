# tests/test_knowledge_cache.py
from __future__ import annotations

import threading
import time

import pytest

from refap.errors import KnowledgeSourceError
from refap.runtime.knowledge_cache import KnowledgeIndexCache, text_file_loader

_KB = """[FAP_CLIGNOTANT]
Voyant clignotant, filtre très encrassé.

[NETTOYAGE_SERVICE]
Nettoyage haute pression en 48h.
"""


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class CountingLoader:
    def __init__(self, text: str = _KB, delay: float = 0.0) -> None:
        self.text = text
        self.delay = delay
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        return self.text


def test_snapshot_reused_while_fresh():
    loader = CountingLoader()
    kc = KnowledgeIndexCache(loader, ttl_seconds=300, clock=FakeClock())
    first = kc.get_or_rebuild()
    second = kc.get_or_rebuild()
    assert first is second
    assert loader.calls == 1
    assert [e.title for e in first.entries] == ["FAP_CLIGNOTANT", "NETTOYAGE_SERVICE"]
    assert first.index.document_count == 2


def test_rebuild_after_ttl():
    loader = CountingLoader()
    clock = FakeClock()
    kc = KnowledgeIndexCache(loader, ttl_seconds=300, clock=clock)
    first = kc.get_or_rebuild()
    clock.now += 300
    second = kc.get_or_rebuild()
    assert second is not first
    assert second.built_at == clock.now
    assert loader.calls == 2


def test_invalidate_forces_rebuild():
    loader = CountingLoader()
    kc = KnowledgeIndexCache(loader, clock=FakeClock())
    kc.get_or_rebuild()
    kc.invalidate()
    assert kc.snapshot is None
    kc.get_or_rebuild()
    assert loader.calls == 2


def test_rebuild_sees_new_text():
    loader = CountingLoader()
    kc = KnowledgeIndexCache(loader, clock=FakeClock())
    kc.get_or_rebuild()
    loader.text = "[SEUL]\nUn seul bloc."
    kc.invalidate()
    assert [e.title for e in kc.get_or_rebuild().entries] == ["SEUL"]


def test_loader_failure_is_wrapped():
    def broken() -> str:
        raise OSError("disk gone")

    kc = KnowledgeIndexCache(broken)
    with pytest.raises(KnowledgeSourceError):
        kc.get_or_rebuild()


def test_shutdown_releases_snapshot():
    kc = KnowledgeIndexCache(CountingLoader(), clock=FakeClock())
    kc.get_or_rebuild()
    kc.shutdown()
    assert kc.snapshot is None
    with pytest.raises(RuntimeError):
        kc.get_or_rebuild()


def test_concurrent_readers_rebuild_once():
    loader = CountingLoader(delay=0.05)
    kc = KnowledgeIndexCache(loader)
    results = []

    def read():
        results.append(kc.get_or_rebuild())

    threads = [threading.Thread(target=read) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert loader.calls == 1
    assert all(r is results[0] for r in results)


def test_text_file_loader(tmp_path):
    path = tmp_path / "data.txt"
    path.write_text(_KB, encoding="utf-8")
    kc = KnowledgeIndexCache(text_file_loader(path))
    assert len(kc.get_or_rebuild().entries) == 2


def test_text_file_loader_missing_file(tmp_path):
    kc = KnowledgeIndexCache(text_file_loader(tmp_path / "absent.txt"))
    with pytest.raises(KnowledgeSourceError):
        kc.get_or_rebuild()


class FlakyLoader(CountingLoader):
    def __init__(self) -> None:
        super().__init__()
        self.broken = False

    def __call__(self) -> str:
        if self.broken:
            self.calls += 1
            raise OSError("share unmounted")
        return super().__call__()


def test_expired_snapshot_served_while_rebuild_fails():
    loader = FlakyLoader()
    clock = FakeClock()
    kc = KnowledgeIndexCache(loader, ttl_seconds=300, clock=clock)
    first = kc.get_or_rebuild()

    loader.broken = True
    clock.now += 301
    assert kc.get_or_rebuild() is first
    assert kc.get_or_rebuild() is first
    assert loader.calls == 3  # every expired read retries

    loader.broken = False
    recovered = kc.get_or_rebuild()
    assert recovered is not first
    assert recovered.built_at == clock.now


def test_failed_rebuild_after_invalidate_raises():
    loader = FlakyLoader()
    kc = KnowledgeIndexCache(loader, clock=FakeClock())
    kc.get_or_rebuild()
    kc.invalidate()
    loader.broken = True
    with pytest.raises(KnowledgeSourceError):
        kc.get_or_rebuild()
