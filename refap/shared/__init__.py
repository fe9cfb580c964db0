# refap/shared/__init__.py
#
# Pure text core: normalization, tokenization, knowledge parsing, TF-IDF ranking.

from refap.shared.knowledge import KnowledgeEntry, parse, priority_for
from refap.shared.lexicon import Lexicon, default_lexicon, load_lexicon
from refap.shared.normalize import normalize
from refap.shared.rag import TfIdfIndex, build_index, rank
from refap.shared.tokenize import base_terms, stem, tokenize

__all__ = [
    "KnowledgeEntry",
    "Lexicon",
    "TfIdfIndex",
    "base_terms",
    "build_index",
    "default_lexicon",
    "load_lexicon",
    "normalize",
    "parse",
    "priority_for",
    "rank",
    "stem",
    "tokenize",
]
