"""Searchable terms for each note in the vault.

A note is known by its title and by the aliases declared in its front
matter. The order of terms sets match priority: the title always comes
first, aliases follow in declared order.
"""
from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from linkscan.corpus import Document


@dataclass(frozen=True, slots=True)
class Term:
    """A search key tied to the note it would link to."""

    text: str
    document: Document
    alias_index: int | None  # None for the title, else index into aliases

    @property
    def is_alias(self) -> bool:
        return self.alias_index is not None


def document_terms(doc: Document) -> list[Term]:
    """Return ``[title, alias_1, ..., alias_n]`` minus blank entries."""
    terms: list[Term] = []
    if doc.title.strip():
        terms.append(Term(doc.title, doc, None))
    for i, alias in enumerate(doc.aliases):
        if alias.strip():
            terms.append(Term(alias, doc, i))
    return terms


def candidate_documents(
    doc: Document,
    corpus_docs: Sequence[Document],
) -> list[Document]:
    """Every other note, longest title first.

    The sort is stable, so equal-length titles keep corpus order. Longer
    titles claim text before shorter titles they may contain.
    """
    others = [d for d in corpus_docs if d.path != doc.path]
    return sorted(others, key=lambda d: len(d.title), reverse=True)


def iter_terms(
    doc: Document,
    corpus_docs: Sequence[Document],
) -> Iterator[Term]:
    """Yield terms of every other note in resolver priority order."""
    for other in candidate_documents(doc, corpus_docs):
        yield from document_terms(other)
