# refap/runtime/knowledge_cache.py
"""
Process-wide knowledge index, held as an explicit state object.

Lifecycle:
  init            -> KnowledgeIndexCache(loader, ...)
  get_or_rebuild  -> current snapshot, rebuilt when older than the TTL; an
                     expired snapshot is still served while rebuilds fail
  invalidate      -> next read rebuilds, no previous snapshot to fall back on
  shutdown        -> snapshot released, further reads refused

Rebuilds are single-flight: concurrent readers of a stale cache wait for one
rebuild instead of each parsing the knowledge text. A new snapshot replaces the
old one in a single assignment, so readers never see a partial index.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Tuple

from refap.errors import KnowledgeSourceError
from refap.log import get_logger, log_with_context
from refap.shared.knowledge import KnowledgeEntry, parse
from refap.shared.lexicon import Lexicon, default_lexicon
from refap.shared.rag import TfIdfIndex, build_index

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60

Loader = Callable[[], str]


@dataclass(frozen=True)
class KnowledgeSnapshot:
    entries: Tuple[KnowledgeEntry, ...]
    index: TfIdfIndex
    built_at: float


def text_file_loader(path: str | Path) -> Loader:
    """Loader reading a UTF-8 knowledge file on every rebuild."""
    p = Path(path)

    def _load() -> str:
        return p.read_text(encoding="utf-8")

    return _load


class KnowledgeIndexCache:
    def __init__(
        self,
        loader: Loader,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        lexicon: Optional[Lexicon] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._loader = loader
        self.ttl_seconds = ttl_seconds
        self.lexicon = lexicon or default_lexicon()
        self._clock = clock
        self._snapshot: Optional[KnowledgeSnapshot] = None
        self._lock = threading.Lock()
        self._closed = False

    @property
    def snapshot(self) -> Optional[KnowledgeSnapshot]:
        return self._snapshot

    def _is_fresh(self, snap: Optional[KnowledgeSnapshot]) -> bool:
        return snap is not None and self._clock() - snap.built_at < self.ttl_seconds

    def _rebuild(self) -> KnowledgeSnapshot:
        try:
            raw = self._loader()
        except Exception as e:
            raise KnowledgeSourceError(f"knowledge loader failed: {e}") from e

        entries = tuple(parse(raw, self.lexicon))
        snap = KnowledgeSnapshot(
            entries=entries,
            index=build_index(entries, self.lexicon),
            built_at=self._clock(),
        )
        log_with_context(
            logger,
            logging.INFO,
            "knowledge index rebuilt",
            entries=len(entries),
            terms=len(snap.index.document_frequency),
            lexicon=self.lexicon.version,
        )
        return snap

    def get_or_rebuild(self) -> KnowledgeSnapshot:
        if self._closed:
            raise RuntimeError("knowledge cache has been shut down")
        snap = self._snapshot
        if self._is_fresh(snap):
            return snap  # type: ignore[return-value]
        with self._lock:
            # another request may have rebuilt while we waited
            snap = self._snapshot
            if self._is_fresh(snap):
                return snap  # type: ignore[return-value]
            try:
                fresh = self._rebuild()
            except KnowledgeSourceError as e:
                if snap is None:
                    raise
                # keep serving the expired snapshot, the next read retries
                logger.warning(f"knowledge rebuild failed, serving previous index: {e}")
                return snap
            self._snapshot = fresh
            return fresh

    def invalidate(self) -> None:
        with self._lock:
            self._snapshot = None

    def shutdown(self) -> None:
        with self._lock:
            self._snapshot = None
            self._closed = True
        logger.info("knowledge cache shut down")
