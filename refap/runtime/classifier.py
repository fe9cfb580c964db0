# refap/runtime/classifier.py
"""
Deterministic intent classifier for diesel particulate filter messages.

Every category declared in the lexicon is scored as::

    score = weight * (1 if any marker word is in the message else 0)
          + weight * pattern_bonus   (if its composite pattern holds)

The highest score wins; ties go to the category declared first. Declared order
is: true urgency, blinking indicator, multi-symptom, single-symptom, unrelated
subsystem, generic fallback. The lexicon's weights and bonus are checked so
that a category whose pattern holds is never outscored by a later one. When
nothing scores, the result is the fallback category with confidence 0.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional, Tuple

from refap.errors import LexiconError
from refap.shared.lexicon import Lexicon, default_lexicon
from refap.shared.normalize import normalize
from refap.shared.tokenize import base_terms


class Category(str, Enum):
    URGENT_FAULT = "URGENCE_REELLE"
    BLINKING_INDICATOR = "FAP_CLIGNOTANT"
    MULTI_SYMPTOM = "FAP_MULTI"
    SINGLE_SYMPTOM = "FAP_SINGLE"
    UNRELATED_SUBSYSTEM = "HORS_FAP"
    GENERIC = "GEN"


@dataclass(frozen=True)
class Classification:
    category: Category
    confidence: float  # relative, not a probability
    symptoms: Tuple[str, ...] = ()
    scores: Dict[str, float] = field(default_factory=dict, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.category.value,
            "confidence": self.confidence,
            "symptoms": list(self.symptoms),
        }


# ── Named predicates over normalized text ───────────────────────────

_OVERHEATING = re.compile(r"surchauff")
_RED_ENGINE_LIGHT = re.compile(r"(voyant|temoin).*rouge.*moteur")
_BLINKING = re.compile(r"clignot|flash")
_INDICATOR = re.compile(r"voyant|temoin")
_POWER_LOSS = re.compile(r"(perte|baisse).*puissance")
_BLACK_SMOKE = re.compile(r"fumee.*noire")
_SATURATION = re.compile(r"satur|encrass|colmat")
_FILTER = re.compile(r"\b(fap|dpf)\b")
_OTHER_SUBSYSTEM = re.compile(
    r"\b(embrayage|freins?|pneus?|batterie|climatisation|boite de vitesses?|courroie|vidange|amortisseurs?)\b"
)


def mentions_overheating(text: str) -> bool:
    return bool(_OVERHEATING.search(text))


def mentions_red_engine_light(text: str) -> bool:
    return bool(_RED_ENGINE_LIGHT.search(text))


def mentions_blinking_indicator(text: str) -> bool:
    return bool(_BLINKING.search(text))


def mentions_indicator(text: str) -> bool:
    return bool(_INDICATOR.search(text))


def mentions_power_loss(text: str) -> bool:
    return bool(_POWER_LOSS.search(text))


def mentions_black_smoke(text: str) -> bool:
    return bool(_BLACK_SMOKE.search(text))


def mentions_saturation(text: str) -> bool:
    return bool(_SATURATION.search(text))


def mentions_filter(text: str) -> bool:
    return bool(_FILTER.search(text))


def mentions_other_subsystem(text: str) -> bool:
    return bool(_OTHER_SUBSYSTEM.search(text))


# Evaluated in this order; the tag order of a Classification follows it.
SYMPTOM_RULES: List[Tuple[str, Callable[[str], bool]]] = [
    ("clignotant", mentions_blinking_indicator),
    ("voyant", mentions_indicator),
    ("puissance", mentions_power_loss),
    ("fumee", mentions_black_smoke),
    ("sature", mentions_saturation),
]


def detect_symptoms(text: str) -> Tuple[str, ...]:
    """Symptom tags found in already-normalized ``text``."""
    return tuple(tag for tag, check in SYMPTOM_RULES if check(text))


# Composite patterns referenced by name from the lexicon.
PatternFn = Callable[[str, Tuple[str, ...]], bool]

PATTERNS: Dict[str, PatternFn] = {
    "urgent_fault": lambda text, _s: mentions_overheating(text) or mentions_red_engine_light(text),
    "blinking_indicator": lambda text, _s: mentions_blinking_indicator(text),
    "multi_symptom": lambda _t, symptoms: len(symptoms) >= 2,
    "single_symptom": lambda text, symptoms: len(symptoms) == 1 or mentions_filter(text),
    "other_subsystem": lambda text, _s: mentions_other_subsystem(text),
    "never": lambda _t, _s: False,
}


class IntentClassifier:
    """Ordered rule cascade built from a lexicon's category table."""

    def __init__(self, lexicon: Optional[Lexicon] = None) -> None:
        self.lexicon = lexicon or default_lexicon()
        for rule in self.lexicon.categories:
            if rule.pattern not in PATTERNS:
                raise LexiconError(f"category {rule.name} uses unknown pattern {rule.pattern!r}")
            try:
                Category(rule.name)
            except ValueError as e:
                raise LexiconError(f"unknown category {rule.name!r}") from e
        try:
            self.fallback = Category(self.lexicon.fallback_category)
        except ValueError as e:
            raise LexiconError(f"unknown fallback category {self.lexicon.fallback_category!r}") from e
        self._check_precedence()

    def _check_precedence(self) -> None:
        """Reject weights under which a later category could outscore an earlier matching pattern."""
        bonus = self.lexicon.pattern_bonus
        rules = self.lexicon.categories
        for i, higher in enumerate(rules):
            if higher.pattern == "never":
                continue
            for lower in rules[i + 1:]:
                if higher.weight * bonus < lower.weight * (bonus + 1):
                    raise LexiconError(
                        f"category {lower.name} can outscore {higher.name}: "
                        f"raise pattern_bonus or the weight gap"
                    )

    def classify(self, text: str) -> Classification:
        norm = normalize(text)
        terms = base_terms(norm, self.lexicon)
        symptoms = detect_symptoms(norm)

        scores: Dict[str, float] = {}
        best: Optional[Tuple[str, float]] = None
        for rule in self.lexicon.categories:
            # markers count once per category
            score = rule.weight if any(t in rule.markers for t in terms) else 0.0
            if PATTERNS[rule.pattern](norm, symptoms):
                score += rule.weight * self.lexicon.pattern_bonus
            scores[rule.name] = score
            if best is None or score > best[1]:
                best = (rule.name, score)

        if best is None or best[1] <= 0:
            return Classification(category=self.fallback, confidence=0.0, symptoms=symptoms, scores=scores)
        return Classification(
            category=Category(best[0]),
            confidence=best[1],
            symptoms=symptoms,
            scores=scores,
        )


@lru_cache(maxsize=1)
def _default_classifier() -> IntentClassifier:
    return IntentClassifier()


def classify(text: str, lexicon: Optional[Lexicon] = None) -> Classification:
    classifier = IntentClassifier(lexicon) if lexicon else _default_classifier()
    return classifier.classify(text)
