# refap/shared/lexicon.py
"""
Versioned tuning data for the text core.

Stopwords, stemming suffixes, the synonym table, title priority rules, stage
markers and classification categories all live in ``lexicon.yaml`` next to this
module. They are loaded once into an immutable ``Lexicon`` value; changing the
assistant's vocabulary is a data change, not a code change.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property, lru_cache
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

import yaml

from refap.errors import LexiconError
from refap.shared.normalize import normalize
from refap.shared.stemmer import stem_word

LEXICON_PATH = Path(__file__).parent / "lexicon.yaml"


@dataclass(frozen=True)
class CategoryRule:
    """One classifier category: marker words plus a named composite pattern."""

    name: str
    weight: float
    pattern: str
    markers: FrozenSet[str]  # stemmed


@dataclass(frozen=True)
class Lexicon:
    version: str
    stopwords: FrozenSet[str]
    suffixes: Tuple[str, ...]
    plural_marker: str
    synonyms: Tuple[Tuple[str, Tuple[str, ...]], ...]
    priority_rules: Tuple[Tuple[str, int], ...]
    default_priority: int
    min_history_chars: int
    assistant_markers: Tuple[str, ...]
    categories: Tuple[CategoryRule, ...]
    pattern_bonus: float
    fallback_category: str

    @cached_property
    def _synonym_map(self) -> Dict[str, Tuple[str, ...]]:
        table: Dict[str, Tuple[str, ...]] = {}
        for term, values in self.synonyms:
            table.setdefault(term, values)  # first declaration wins
        return table

    def synonyms_for(self, term: str) -> Tuple[str, ...]:
        return self._synonym_map.get(term, ())

    def stem(self, token: str) -> str:
        return stem_word(token, self.suffixes, self.plural_marker)


# ---------------------------
# Loading
# ---------------------------


def _section(data: Dict[str, Any], key: str, kind: type) -> Any:
    value = data.get(key)
    if not isinstance(value, kind):
        raise LexiconError(f"lexicon key {key!r} must be a {kind.__name__}, got {type(value).__name__}")
    return value


def _words(values: Any, where: str) -> List[str]:
    if not isinstance(values, list):
        raise LexiconError(f"lexicon {where} must be a list")
    out: List[str] = []
    for v in values:
        w = normalize(str(v))
        if w and w not in out:
            out.append(w)
    return out


def _parse_lexicon(data: Dict[str, Any]) -> Lexicon:
    stemming = _section(data, "stemming", dict)
    suffixes = tuple(_words(stemming.get("suffixes"), "stemming.suffixes"))
    plural_marker = normalize(str(stemming.get("plural_marker", "s")))

    synonyms: List[Tuple[str, Tuple[str, ...]]] = []
    for row in _section(data, "synonyms", list):
        if not isinstance(row, dict) or "term" not in row:
            raise LexiconError(f"synonym row without a term: {row!r}")
        synonyms.append((normalize(str(row["term"])), tuple(_words(row.get("synonyms", []), "synonyms"))))

    priority = _section(data, "priority", dict)
    rules = tuple(
        (normalize(str(r["marker"])), int(r["priority"])) for r in _section(priority, "rules", list)
    )

    stage = _section(data, "stage", dict)

    classification = _section(data, "classification", dict)
    categories: List[CategoryRule] = []
    for row in _section(classification, "categories", list):
        try:
            markers = frozenset(
                stem_word(w, suffixes, plural_marker) for w in _words(row.get("markers", []), "markers")
            )
            categories.append(
                CategoryRule(
                    name=str(row["name"]),
                    weight=float(row["weight"]),
                    pattern=str(row["pattern"]),
                    markers=markers,
                )
            )
        except (KeyError, TypeError, ValueError) as e:
            raise LexiconError(f"bad classification category {row!r}: {e}") from e

    return Lexicon(
        version=str(data.get("version", "unversioned")),
        stopwords=frozenset(_words(data.get("stopwords"), "stopwords")),
        suffixes=suffixes,
        plural_marker=plural_marker,
        synonyms=tuple(synonyms),
        priority_rules=rules,
        default_priority=int(priority.get("default", 5)),
        min_history_chars=int(stage.get("min_history_chars", 50)),
        assistant_markers=tuple(_words(stage.get("assistant_markers"), "stage.assistant_markers")),
        categories=tuple(categories),
        pattern_bonus=float(classification.get("pattern_bonus", 9)),
        fallback_category=str(classification.get("fallback", "GEN")),
    )


def load_lexicon(path: Optional[Path] = None) -> Lexicon:
    """Read and validate a lexicon file (the packaged one by default)."""
    p = Path(path) if path else LEXICON_PATH
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise LexiconError(f"cannot read lexicon {p}: {e}") from e
    if not isinstance(data, dict):
        raise LexiconError(f"lexicon {p} must be a mapping at top level")
    try:
        return _parse_lexicon(data)
    except (KeyError, TypeError, ValueError) as e:
        raise LexiconError(f"malformed lexicon {p}: {e}") from e


@lru_cache(maxsize=1)
def default_lexicon() -> Lexicon:
    return load_lexicon()
