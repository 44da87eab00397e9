"""Character offsets to editor (line, ch) positions."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Position:
    """Zero-based line and column in raw note text."""

    line: int
    ch: int

    def to_dict(self) -> dict[str, int]:
        return {"line": self.line, "ch": self.ch}


@dataclass(frozen=True, slots=True)
class SpanRange:
    """Half-open ``[start, end)`` region of a note, in editor positions."""

    start: Position
    end: Position

    @property
    def key(self) -> str:
        return make_range_key(self.start, self.end)

    @property
    def is_multiline(self) -> bool:
        return self.start.line != self.end.line

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {"from": self.start.to_dict(), "to": self.end.to_dict()}

    @classmethod
    def from_dict(cls, payload: dict[str, dict[str, int]]) -> SpanRange:
        start = payload["from"]
        end = payload["to"]
        return cls(
            Position(int(start["line"]), int(start["ch"])),
            Position(int(end["line"]), int(end["ch"])),
        )


def make_range_key(start: Position, end: Position) -> str:
    """Stable id for a range: depends only on the positions, not the text."""
    return f"{start.line}-{start.ch}-{end.line}-{end.ch}"


def offset_to_position(raw: str, offset: int, header_chars: int = 0) -> Position:
    """Translate a stripped-text offset into a position in *raw*.

    ``header_chars`` is the front matter length removed before matching.
    Lines are counted from scratch on every call, so the result does not
    depend on call order.
    """
    raw_offset = offset + header_chars
    line = raw.count("\n", 0, raw_offset)
    ch = raw_offset - (raw.rfind("\n", 0, raw_offset) + 1)
    return Position(line, ch)


def span_range(raw: str, offset: int, length: int, header_chars: int = 0) -> SpanRange:
    """Start and end positions of a match of *length* chars at *offset*."""
    return SpanRange(
        offset_to_position(raw, offset, header_chars),
        offset_to_position(raw, offset + length, header_chars),
    )
