# refap/shared/rag.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from refap.shared.knowledge import KnowledgeEntry
from refap.shared.lexicon import Lexicon, default_lexicon
from refap.shared.tokenize import term_stream, tokenize

# ---------------------------
# Ranking constants
# ---------------------------

TITLE_BONUS = 1.5  # per query term found in the tokenized title
SYNONYM_BONUS = 1.2  # per query term found in the declared synonyms
PRIORITY_WEIGHT = 0.1
DEFAULT_TOP_K = 3


@dataclass(frozen=True)
class TfIdfIndex:
    document_count: int
    document_frequency: Dict[str, int]  # term -> number of entries containing it
    term_weights: Tuple[Dict[str, float], ...]  # smoothed tf per entry
    title_terms: Tuple[FrozenSet[str], ...]
    synonym_terms: Tuple[FrozenSet[str], ...]

    def idf(self, term: str) -> float:
        if self.document_count <= 0:
            return 0.0
        df = max(1, self.document_frequency.get(term, 0))
        return math.log(self.document_count / df)


def _entry_text(entry: KnowledgeEntry) -> str:
    return " ".join([entry.title, entry.body, " ".join(entry.synonyms)])


def _smoothed_tf(terms: Sequence[str]) -> Dict[str, float]:
    counts: Dict[str, int] = {}
    for t in terms:
        counts[t] = counts.get(t, 0) + 1
    if not counts:
        return {}
    peak = max(counts.values())
    return {t: 0.5 + 0.5 * c / peak for t, c in counts.items()}


# ---------------------------
# Index building
# ---------------------------


def build_index(entries: Sequence[KnowledgeEntry], lexicon: Optional[Lexicon] = None) -> TfIdfIndex:
    """Pure function of ``entries``: same entries, same index."""
    lex = lexicon or default_lexicon()
    df: Dict[str, int] = {}
    weights: List[Dict[str, float]] = []
    titles: List[FrozenSet[str]] = []
    synonyms: List[FrozenSet[str]] = []
    for entry in entries:
        tf = _smoothed_tf(term_stream(_entry_text(entry), lex))
        weights.append(tf)
        for t in tf:
            df[t] = df.get(t, 0) + 1
        titles.append(frozenset(tokenize(entry.title, lex)))
        synonyms.append(frozenset(tokenize(" ".join(entry.synonyms), lex)))

    return TfIdfIndex(
        document_count=len(entries),
        document_frequency=df,
        term_weights=tuple(weights),
        title_terms=tuple(titles),
        synonym_terms=tuple(synonyms),
    )


# ---------------------------
# Ranking
# ---------------------------


def score_entry(index: TfIdfIndex, position: int, entry: KnowledgeEntry, query_terms: Sequence[str]) -> float:
    weights = index.term_weights[position]
    idfs = [index.idf(t) for t in query_terms]
    idf_total = sum(idfs)
    tfidf = 0.0
    if idf_total > 0:
        tfidf = sum(weights.get(t, 0.0) * w for t, w in zip(query_terms, idfs)) / idf_total

    title_hits = sum(1 for t in query_terms if t in index.title_terms[position])
    synonym_hits = sum(1 for t in query_terms if t in index.synonym_terms[position])
    return (
        tfidf
        + TITLE_BONUS * title_hits
        + SYNONYM_BONUS * synonym_hits
        + PRIORITY_WEIGHT * entry.priority
    )


def rank_with_scores(
    index: TfIdfIndex,
    entries: Sequence[KnowledgeEntry],
    query_terms: Sequence[str],
    k: int = DEFAULT_TOP_K,
) -> List[Tuple[float, KnowledgeEntry]]:
    if len(entries) != index.document_count:
        raise ValueError(
            f"index was built over {index.document_count} entries, got {len(entries)}"
        )
    if k <= 0 or not entries:
        return []
    terms = list(dict.fromkeys(query_terms))
    scores = [(score_entry(index, i, e, terms), e) for i, e in enumerate(entries)]
    # list.sort is stable, equal scores keep corpus order
    scores.sort(key=lambda x: x[0], reverse=True)
    return scores[:k]


def rank(
    index: TfIdfIndex,
    entries: Sequence[KnowledgeEntry],
    query_terms: Sequence[str],
    k: int = DEFAULT_TOP_K,
) -> List[KnowledgeEntry]:
    """
    Top-``k`` entries for ``query_terms``, best first.

    Score is the idf-normalized TF-IDF sum plus title and synonym bonuses plus
    a small bias from the entry's static priority. An empty corpus gives an
    empty list, which callers treat as "no contextual knowledge".
    """
    return [e for _, e in rank_with_scores(index, entries, query_terms, k)]
