# refap/runtime/stage.py
from __future__ import annotations

from typing import Optional

from refap.shared.lexicon import Lexicon, default_lexicon
from refap.shared.normalize import normalize


def assistant_has_replied(history: str, lexicon: Optional[Lexicon] = None) -> bool:
    """True when the normalized history holds a phrase only the assistant writes."""
    lex = lexicon or default_lexicon()
    hist = normalize(history)
    return any(marker in hist for marker in lex.assistant_markers)


def is_first_turn(history: Optional[str], lexicon: Optional[Lexicon] = None) -> bool:
    """
    First turn of a conversation unless the history is long enough and already
    contains one of the assistant's own marker phrases.
    """
    lex = lexicon or default_lexicon()
    if not history or len(history) < lex.min_history_chars:
        return True
    return not assistant_has_replied(history, lex)
