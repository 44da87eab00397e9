"""Unlinked-mention scanner.

For the note being scanned, every other note's terms are matched against
the note body (front matter removed) in a fixed priority order:

1. Notes sorted by descending title length (ties keep corpus order).
2. Within a note, the title before its aliases, in declared order.
3. Within a term, matches left to right.

A match is accepted only if its span does not intersect a span already
claimed earlier in that order. The first claimant wins, so the result is
deterministic and never contains overlapping links.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from linkscan.corpus import CorpusProvider, Document, snapshot_documents
from linkscan.frontmatter import strip_frontmatter
from linkscan.positions import SpanRange, span_range
from linkscan.terms import iter_terms
from linkscan.textmatch import find_term_matches

log = logging.getLogger(__name__)

DEFAULT_PREVIEW_CHARS = 20


# ---------------------------------------------------------------------------
# Contract
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ScanConfig:
    """Knobs for a scan pass."""

    preview_chars: int = DEFAULT_PREVIEW_CHARS
    include_empty: bool = False  # keep notes with no links in vault results


@dataclass(frozen=True, slots=True)
class PotentialLink:
    """An unlinked mention of another note, ready to be turned into a link."""

    id: str                          # Range key, stable across re-scans
    match_text: str                  # Exact text matched in the note
    text_preview: str                # Bounded window around the match
    linked_title: str                # Title of the note that was matched
    linked_basename: str             # Wikilink target (file stem)
    linked_path: str
    linked_aliases: tuple[str, ...]
    matched_alias: str | None        # Alias that matched, None for the title
    range: SpanRange

    @property
    def is_alias_match(self) -> bool:
        return self.matched_alias is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "match_text": self.match_text,
            "text_preview": self.text_preview,
            "linked_title": self.linked_title,
            "linked_basename": self.linked_basename,
            "linked_path": self.linked_path,
            "linked_aliases": list(self.linked_aliases),
            "is_alias_match": self.is_alias_match,
            "matched_alias": self.matched_alias,
            "range": self.range.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class NoteLinks:
    """All potential links found in one note by one scan pass."""

    note_title: str
    note_path: str
    potential_links: tuple[PotentialLink, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "note_title": self.note_title,
            "note_path": self.note_path,
            "potential_links": [p.to_dict() for p in self.potential_links],
        }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _overlaps(start: int, end: int, claimed: list[tuple[int, int]]) -> bool:
    for c_start, c_end in claimed:
        if start < c_end and c_start < end:
            return True
    return False


def text_preview(text: str, start: int, end: int, window: int) -> str:
    """``... <window chars> match <window chars> ...`` clipped to *text*."""
    lo = max(0, start - window)
    hi = min(len(text), end + window)
    return f"... {text[lo:hi]} ..."


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def scan_note(
    doc: Document,
    corpus_docs: Sequence[Document],
    *,
    config: ScanConfig | None = None,
) -> NoteLinks:
    """Find unlinked mentions of other notes inside *doc*.

    Args:
        doc: The note to scan.
        corpus_docs: Snapshot of the whole vault. *doc* itself may be
            included; it is never matched against itself.
        config: Scan options.

    Returns:
        NoteLinks with potential links in acceptance order.
    """
    cfg = config or ScanConfig()
    raw = doc.text
    body, header_chars = strip_frontmatter(raw)

    claimed: list[tuple[int, int]] = []
    links: list[PotentialLink] = []

    for term in iter_terms(doc, corpus_docs):
        target = term.document
        for m in find_term_matches(body, term.text):
            if _overlaps(m.offset, m.end, claimed):
                continue
            claimed.append((m.offset, m.end))

            rng = span_range(raw, m.offset, len(m.text), header_chars)
            links.append(
                PotentialLink(
                    id=rng.key,
                    match_text=m.text,
                    text_preview=text_preview(
                        body, m.offset, m.end, cfg.preview_chars
                    ),
                    linked_title=target.title,
                    linked_basename=target.basename,
                    linked_path=target.path,
                    linked_aliases=target.aliases,
                    matched_alias=term.text if term.is_alias else None,
                    range=rng,
                )
            )

    return NoteLinks(
        note_title=doc.title,
        note_path=doc.path,
        potential_links=tuple(links),
    )


def scan_documents(
    docs: Sequence[Document],
    corpus_docs: Sequence[Document],
    *,
    config: ScanConfig | None = None,
    should_stop: Callable[[], bool] | None = None,
) -> list[NoteLinks]:
    """Scan several notes against one vault snapshot.

    ``should_stop`` is polled between notes; when it returns True the notes
    scanned so far are returned.
    """
    cfg = config or ScanConfig()
    results: list[NoteLinks] = []
    for doc in docs:
        if should_stop is not None and should_stop():
            log.info("Scan cancelled after %d of %d notes", len(results), len(docs))
            break
        note_links = scan_note(doc, corpus_docs, config=cfg)
        log.debug("%s: %d potential links", doc.path, len(note_links.potential_links))
        results.append(note_links)
    if not cfg.include_empty:
        results = [r for r in results if r.potential_links]
    return results


def scan_vault(
    corpus: CorpusProvider,
    *,
    config: ScanConfig | None = None,
    should_stop: Callable[[], bool] | None = None,
) -> list[NoteLinks]:
    """Scan every note in *corpus*, longest title first."""
    snapshot = snapshot_documents(corpus)
    order = sorted(snapshot, key=lambda d: len(d.title), reverse=True)
    log.info("Scanning %d notes", len(order))
    return scan_documents(
        order, snapshot, config=config, should_stop=should_stop
    )
