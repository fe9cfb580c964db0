# refap/shared/stemmer.py
from __future__ import annotations

from typing import Sequence


def stem_word(token: str, suffixes: Sequence[str], plural_marker: str = "s") -> str:
    """
    Single-pass suffix stripper over a closed rule table.

    The first suffix in ``suffixes`` that ends ``token`` is removed when the
    remaining stem keeps at least three characters. Otherwise a trailing plural
    marker is dropped from tokens longer than three characters. At most one
    rule applies.
    """
    for suffix in suffixes:
        if len(token) > len(suffix) + 2 and token.endswith(suffix):
            return token[: -len(suffix)]
    if plural_marker and token.endswith(plural_marker) and len(token) > 3:
        return token[: -len(plural_marker)]
    return token
