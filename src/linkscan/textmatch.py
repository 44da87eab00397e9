"""Whole-token, case-insensitive term matching over note text.

A term matches only when it stands as a token of its own: it must be
preceded by start of text, whitespace, a word boundary, ``*`` or one of
``? . ! , ; : - / \\ ` ~ =`` and followed by end of text or the same set.
Occurrences already inside a wikilink (``[[Target]]`` or
``[[Target|Display]]``) are skipped.
"""
from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

# Punctuation allowed directly around a term, besides whitespace and ``*``.
_EDGE_CHARS = r"*?.!,;:\-/\\`~="

_BEFORE = rf"(?:\A|(?<=[\s{_EDGE_CHARS}])|\b)"
_AFTER = rf"(?=\Z|[\s{_EDGE_CHARS}]|\b)"

WIKILINK_OPEN = "[["
WIKILINK_CLOSE = "]]"


@dataclass(frozen=True, slots=True)
class TermMatch:
    """One occurrence of a term in (stripped) note text."""

    offset: int
    text: str

    @property
    def end(self) -> int:
        return self.offset + len(self.text)


def build_term_pattern(term: str) -> re.Pattern[str]:
    """Compile the token-boundary pattern for *term*.

    The term is escaped; it is never interpreted as a regex fragment.
    """
    return re.compile(_BEFORE + re.escape(term) + _AFTER, re.IGNORECASE)


def is_inside_wikilink(text: str, offset: int) -> bool:
    """True when *offset* follows an unclosed ``[[`` on the same line."""
    line_start = text.rfind("\n", 0, offset) + 1
    opened = text.rfind(WIKILINK_OPEN, line_start, offset)
    if opened < 0:
        return False
    closed = text.rfind(WIKILINK_CLOSE, line_start, offset)
    return closed < opened


def find_term_matches(text: str, term: str) -> Iterator[TermMatch]:
    """Yield non-overlapping matches of *term* in *text*, left to right.

    Blank terms yield nothing.
    """
    if not term.strip():
        return
    for m in build_term_pattern(term).finditer(text):
        if is_inside_wikilink(text, m.start()):
            continue
        yield TermMatch(m.start(), m.group(0))
