"""Front matter handling for Markdown notes.

A note may open with a YAML metadata block::

    ---
    aliases: [Alpha Project, AP]
    tags: [work]
    ---

The block is stripped before term matching so titles and aliases listed in
the header never become link candidates. The removed character count lets
callers shift offsets found in stripped text back onto the raw note.

Only the triple-dash fenced style is recognised. TOML (``+++``) headers and
anything else are treated as "no header".
"""
from __future__ import annotations

import logging
import re
from typing import Any

import yaml

log = logging.getLogger(__name__)

# Opening fence at offset 0, a key-shaped first line, then lazily up to the
# first closing fence that starts a line.
_FRONTMATTER_RE = re.compile(r"---\r?\n(\w+:.*?)\r?\n---", re.DOTALL)

ALIAS_KEYS: tuple[str, ...] = ("aliases", "alias")


def find_frontmatter(raw: str) -> re.Match[str] | None:
    """Return the header match anchored at the start of *raw*, or None."""
    if not raw.startswith(("---\n", "---\r\n")):
        return None
    return _FRONTMATTER_RE.match(raw)


def strip_frontmatter(raw: str) -> tuple[str, int]:
    """Remove the leading metadata block from a note.

    Args:
        raw: Raw note text.

    Returns:
        (stripped, removed_chars). ``removed_chars`` is always
        ``len(raw) - len(stripped)``; it is 0 and ``stripped == raw`` when
        the note has no recognisable header.
    """
    m = find_frontmatter(raw)
    if m is None:
        return raw, 0
    stripped = raw[m.end():]
    return stripped, len(raw) - len(stripped)


def parse_frontmatter(raw: str) -> dict[str, Any]:
    """Load the header body as a mapping. Malformed headers yield ``{}``."""
    m = find_frontmatter(raw)
    if m is None:
        return {}
    try:
        data = yaml.safe_load(m.group(1))
    except yaml.YAMLError as exc:
        log.warning("Ignoring malformed front matter: %s", exc)
        return {}
    if not isinstance(data, dict):
        return {}
    return data


def _coerce_aliases(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",")]
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None]
    return [str(value)]


def extract_aliases(raw: str) -> tuple[str, ...]:
    """Return the aliases declared in a note's front matter, in order.

    Accepts ``aliases``/``alias`` as a YAML list or a comma-separated string.
    Blank entries are kept here; the term registry filters them.
    """
    meta = parse_frontmatter(raw)
    for key in ALIAS_KEYS:
        if key in meta:
            return tuple(_coerce_aliases(meta[key]))
    return ()
