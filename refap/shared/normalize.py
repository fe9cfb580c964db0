# refap/shared/normalize.py
from __future__ import annotations

import unicodedata


def _keep(ch: str) -> bool:
    return ch.isalnum() or ch.isspace() or ch == "-"


def normalize(text: str | None) -> str:
    """
    Canonical comparable form of free text.

    Lower-cases, strips diacritical marks, turns every character that is not a
    letter, digit, whitespace or hyphen into a space, then collapses whitespace.
    ``normalize(normalize(x)) == normalize(x)`` holds for every input.
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text.lower())
    stripped = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")
    cleaned = "".join(ch if _keep(ch) else " " for ch in stripped)
    return " ".join(cleaned.split())
