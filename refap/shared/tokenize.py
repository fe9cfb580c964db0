# refap/shared/tokenize.py
from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from refap.shared.lexicon import Lexicon, default_lexicon
from refap.shared.normalize import normalize

MIN_TOKEN_CHARS = 3


def _dedupe(terms: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(terms))


def stem(token: str, lexicon: Optional[Lexicon] = None) -> str:
    return (lexicon or default_lexicon()).stem(token)


def _analyze(text: str, lex: Lexicon) -> Tuple[List[str], List[str]]:
    """Return (stems, expansions), both with repeats, in text order."""
    stems: List[str] = []
    expansions: List[str] = []
    for raw in normalize(text).split(" "):
        if len(raw) < MIN_TOKEN_CHARS or raw in lex.stopwords:
            continue
        s = lex.stem(raw)
        stems.append(s)
        expansions.extend(lex.synonyms_for(s) or lex.synonyms_for(raw))
    return stems, expansions


def base_terms(text: str, lexicon: Optional[Lexicon] = None) -> List[str]:
    """Stemmed, stopword-filtered terms before synonym expansion."""
    stems, _ = _analyze(text, lexicon or default_lexicon())
    return _dedupe(stems)


def term_stream(text: str, lexicon: Optional[Lexicon] = None) -> List[str]:
    """
    Every term occurrence including synonym expansions, repeats kept.

    Used for term-frequency counting; ``tokenize`` is the de-duplicated view.
    """
    stems, expansions = _analyze(text, lexicon or default_lexicon())
    return stems + expansions


def tokenize(text: str, lexicon: Optional[Lexicon] = None) -> List[str]:
    """
    Searchable terms of ``text``: stems first, then their domain synonyms.

    Expansion is additive, every base term is kept. Order is first-seen and
    duplicates are removed.
    """
    return _dedupe(term_stream(text, lexicon))
