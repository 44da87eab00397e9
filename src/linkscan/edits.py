"""Commit a chosen link into a note on disk.

Committing rewrites exactly one reported range, persists the note, and
returns a fresh scan of it. Every range from the previous scan of that
note is stale afterwards; callers look links up again by id in the
returned result.
"""
from __future__ import annotations

import logging
from typing import Protocol

from linkscan.corpus import CorpusProvider, Document, snapshot_documents
from linkscan.rewrite import EditSpan, rewrite_checked
from linkscan.scanner import NoteLinks, PotentialLink, ScanConfig, scan_note

log = logging.getLogger(__name__)


class LinkNotFoundError(KeyError):
    """Raised when a link id is not part of a note's current scan."""


class WritableCorpus(CorpusProvider, Protocol):
    """A corpus that can load one note and persist new content for it."""

    def get(self, path: str) -> Document: ...

    def write_text(self, doc: Document, text: str) -> Document: ...


def find_link(note_links: NoteLinks, link_id: str) -> PotentialLink:
    """Return the potential link with *link_id* from a scan result."""
    for link in note_links.potential_links:
        if link.id == link_id:
            return link
    raise LinkNotFoundError(f"{note_links.note_path}: no potential link {link_id}")


def commit_link(
    corpus: WritableCorpus,
    note_path: str,
    link: PotentialLink,
    replacement: str,
    *,
    config: ScanConfig | None = None,
) -> NoteLinks:
    """Replace *link*'s range in the note with *replacement* and re-scan.

    The note is re-read first; if the text under the range is no longer the
    matched text, StaleSpanError is raised and nothing is written.
    """
    doc = corpus.get(note_path)
    edit = EditSpan(link.range, replacement)
    new_text = rewrite_checked(doc.text, edit.range, edit.replacement, link.match_text)
    corpus.write_text(doc, new_text)
    log.info("%s: %r -> %r at %s", note_path, link.match_text, replacement, link.id)

    snapshot = snapshot_documents(corpus)
    updated = next((d for d in snapshot if d.path == doc.path), None)
    if updated is None:
        updated = corpus.get(note_path)
    return scan_note(updated, snapshot, config=config)
