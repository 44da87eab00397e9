"""Replace a previously reported span of a note.

Ranges are only valid against the text they were computed from. After any
edit the note must be re-scanned before another range is applied.
"""
from __future__ import annotations

from dataclasses import dataclass

from linkscan.positions import SpanRange
from linkscan.scanner import PotentialLink


class SpanError(IndexError):
    """Raised when a range does not fit the text it is applied to."""


class StaleSpanError(ValueError):
    """Raised when the text under a range no longer matches what was scanned."""


@dataclass(frozen=True, slots=True)
class EditSpan:
    """A region of a note plus the text that should replace it."""

    range: SpanRange
    replacement: str


def _validate(lines: list[str], rng: SpanRange) -> None:
    start, end = rng.start, rng.end
    for label, pos in (("start", start), ("end", end)):
        if not 0 <= pos.line < len(lines):
            raise SpanError(
                f"{label} line {pos.line} out of range (text has {len(lines)} lines)"
            )
        if not 0 <= pos.ch <= len(lines[pos.line]):
            raise SpanError(
                f"{label} column {pos.ch} out of range for line {pos.line} "
                f"(length {len(lines[pos.line])})"
            )
    if (end.line, end.ch) < (start.line, start.ch):
        raise SpanError(f"range end {rng.key} precedes its start")


def rewrite(content: str, rng: SpanRange, replacement: str) -> str:
    """Return *content* with the text inside *rng* replaced.

    A single-line range is replaced inside its line. A multi-line range
    keeps the head of the start line and the tail of the end line, and
    drops every line in between.

    Raises:
        SpanError: when *rng* does not fit *content*. Nothing is produced.
    """
    lines = content.split("\n")
    _validate(lines, rng)
    start, end = rng.start, rng.end

    if start.line == end.line:
        line = lines[start.line]
        new_line = line[:start.ch] + replacement + line[end.ch:]
        return "\n".join(lines[:start.line] + [new_line] + lines[start.line + 1:])

    new_start = lines[start.line][:start.ch] + replacement
    new_end = lines[end.line][end.ch:]
    return "\n".join(
        lines[:start.line] + [new_start, new_end] + lines[end.line + 1:]
    )


def apply_edit(content: str, edit: EditSpan) -> str:
    """Edit-sink entry point: apply one EditSpan to raw note text."""
    return rewrite(content, edit.range, edit.replacement)


def text_at(content: str, rng: SpanRange) -> str:
    """Return the text covered by *rng*."""
    lines = content.split("\n")
    _validate(lines, rng)
    start, end = rng.start, rng.end
    if start.line == end.line:
        return lines[start.line][start.ch:end.ch]
    parts = [lines[start.line][start.ch:]]
    parts.extend(lines[start.line + 1:end.line])
    parts.append(lines[end.line][:end.ch])
    return "\n".join(parts)


def rewrite_checked(
    content: str,
    rng: SpanRange,
    replacement: str,
    expected: str,
) -> str:
    """Like :func:`rewrite`, but refuse when the range no longer holds *expected*."""
    found = text_at(content, rng)
    if found != expected:
        raise StaleSpanError(
            f"text at {rng.key} is {found!r}, expected {expected!r}; re-scan the note"
        )
    return rewrite(content, rng, replacement)


def link_variants(link: PotentialLink) -> list[str]:
    """Replacement options for a potential link.

    The plain wikilink comes first. When the matched text is not the linked
    note's file name (an alias hit, or different casing), a
    ``[[basename|match]]`` form follows. Then one ``[[match|alias]]`` form
    per alias of the linked note, except an alias equal to the match.
    """
    variants = [f"[[{link.match_text}]]"]
    if link.match_text != link.linked_basename:
        variants.append(f"[[{link.linked_basename}|{link.match_text}]]")
    for alias in link.linked_aliases:
        if alias.strip() and alias != link.match_text:
            variants.append(f"[[{link.match_text}|{alias}]]")
    return variants
