# refap/runtime/pipeline.py
"""
Per-request analysis: stage detection, retrieval and classification.

For a (question, history) pair the pipeline produces an ``Analysis``:
  - first_turn      from the history alone
  - query_terms     tokenize(history + " " + question)
  - context         top-k knowledge entries for those terms
  - classification  from the question alone

Results are memoized in a ResponseCache under the normalized pair.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Sequence, Tuple

from refap.errors import KnowledgeSourceError
from refap.log import get_logger
from refap.runtime.cache import ResponseCache
from refap.runtime.classifier import Classification, IntentClassifier
from refap.runtime.knowledge_cache import KnowledgeIndexCache
from refap.runtime.stage import is_first_turn
from refap.shared.knowledge import KnowledgeEntry
from refap.shared.lexicon import Lexicon, default_lexicon
from refap.shared.rag import DEFAULT_TOP_K, rank
from refap.shared.tokenize import tokenize

logger = get_logger(__name__)

NO_CONTEXT_TEXT = "Utilise tes connaissances sur les FAP."


@dataclass(frozen=True)
class Analysis:
    first_turn: bool
    classification: Classification
    context: Tuple[KnowledgeEntry, ...]
    query_terms: Tuple[str, ...]
    cached: bool = False


def context_text(entries: Sequence[KnowledgeEntry]) -> str:
    if not entries:
        return NO_CONTEXT_TEXT
    return "\n\n".join(f"[{e.title}]\n{e.body}" for e in entries)


class DiagnosticPipeline:
    def __init__(
        self,
        knowledge: KnowledgeIndexCache,
        cache: Optional[ResponseCache] = None,
        classifier: Optional[IntentClassifier] = None,
        lexicon: Optional[Lexicon] = None,
        top_k: int = DEFAULT_TOP_K,
    ) -> None:
        self.knowledge = knowledge
        self.cache = cache if cache is not None else ResponseCache()
        self.lexicon = lexicon or knowledge.lexicon or default_lexicon()
        self.classifier = classifier or IntentClassifier(self.lexicon)
        self.top_k = top_k

    def is_first_turn(self, history: Optional[str]) -> bool:
        return is_first_turn(history, self.lexicon)

    def _retrieve(self, terms: Sequence[str]) -> Tuple[Tuple[KnowledgeEntry, ...], bool]:
        """Ranked context and whether the knowledge base was available."""
        try:
            snap = self.knowledge.get_or_rebuild()
        except KnowledgeSourceError as e:
            logger.warning(f"knowledge unavailable, continuing without context: {e}")
            return (), False
        return tuple(rank(snap.index, snap.entries, terms, self.top_k)), True

    def analyze(self, question: str, history: Optional[str] = None) -> Analysis:
        history = history or ""
        key = ResponseCache.make_key(question, history)
        hit = self.cache.get(key)
        if hit is not None:
            logger.debug("analysis cache hit")
            return replace(hit, cached=True)

        terms = tuple(tokenize(f"{history} {question}", self.lexicon))
        context, knowledge_ok = self._retrieve(terms)
        analysis = Analysis(
            first_turn=self.is_first_turn(history),
            classification=self.classifier.classify(question),
            context=context,
            query_terms=terms,
        )
        # a degraded result is not memoized, the next request retries the knowledge base
        if knowledge_ok:
            self.cache.set(key, analysis)
        return analysis
