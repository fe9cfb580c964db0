# refap/shared/knowledge.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from refap.shared.lexicon import Lexicon, default_lexicon
from refap.shared.normalize import normalize

# A block starts at a line opening with a bracketed header.
_BLOCK_SPLIT = re.compile(r"\n(?=\[[^\]\n]*\])")
_BLOCK = re.compile(r"^\[([^\]\n]*)\]\s*(.*)$", re.S)

_SYNONYM_LABEL = r"(?:synonyms|synonymes)"
_KEYWORD_LABEL = r"(?:keywords|mots-cl[eé]s)"
_SYNONYM_LINE = re.compile(rf"^[ \t]*{_SYNONYM_LABEL}[ \t]*:[ \t]*(.+)$", re.I | re.M)
_KEYWORD_LINE = re.compile(rf"^[ \t]*{_KEYWORD_LABEL}[ \t]*:[ \t]*(.+)$", re.I | re.M)
_META_LINE = re.compile(rf"^[ \t]*(?:{_SYNONYM_LABEL}|{_KEYWORD_LABEL})[ \t]*:.*(?:\n|$)", re.I | re.M)
_LIST_SEP = re.compile(r"[,|]")


@dataclass(frozen=True)
class KnowledgeEntry:
    title: str
    body: str
    synonyms: Tuple[str, ...] = ()
    keywords: Tuple[str, ...] = ()
    priority: int = 5


def _split_list(line: Optional[re.Match]) -> Tuple[str, ...]:
    if not line:
        return ()
    return tuple(v.strip() for v in _LIST_SEP.split(line.group(1)) if v.strip())


def priority_for(title: str, lexicon: Optional[Lexicon] = None) -> int:
    """First rule whose marker occurs in the normalized title decides."""
    lex = lexicon or default_lexicon()
    t = normalize(title)
    for marker, priority in lex.priority_rules:
        if marker and marker in t:
            return priority
    return lex.default_priority


def _parse_block(block: str, lex: Lexicon) -> Optional[KnowledgeEntry]:
    m = _BLOCK.match(block)
    if not m:
        return None
    title = m.group(1).strip()
    if not title:
        return None
    raw_body = m.group(2)
    return KnowledgeEntry(
        title=title,
        body=_META_LINE.sub("", raw_body).strip(),
        synonyms=_split_list(_SYNONYM_LINE.search(raw_body)),
        keywords=_split_list(_KEYWORD_LINE.search(raw_body)),
        priority=priority_for(title, lex),
    )


def parse(raw: str, lexicon: Optional[Lexicon] = None) -> List[KnowledgeEntry]:
    """
    Split a flat knowledge document into entries.

    Each block begins with a ``[Title]`` line and runs until the next header.
    ``Synonyms:`` / ``Keywords:`` lines (French labels accepted) are lifted out
    of the body into their own fields. Text before the first header and blocks
    with an empty title are dropped.
    """
    if not raw:
        return []
    lex = lexicon or default_lexicon()
    text = raw.replace("\r\n", "\n").replace("\r", "\n")
    entries: List[KnowledgeEntry] = []
    for block in _BLOCK_SPLIT.split(text):
        entry = _parse_block(block.lstrip("\n"), lex)
        if entry is not None:
            entries.append(entry)
    return entries
