"""Vault corpus providers.

The scan engine never reads files itself. It receives a snapshot of
``Document`` records from a ``CorpusProvider``:

    VaultCorpus  : walks a directory of Markdown notes on disk
    IndexedCorpus: read-only DuckDB snapshot built by
                   scripts/build_vault_index.py

Index tables:
    documents      : one row per note (path, title, aliases, content)
    _schema_version: schema version tracking
"""
from __future__ import annotations

import importlib
import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path, PurePosixPath
from typing import Any, Protocol

from linkscan.frontmatter import extract_aliases

# Dynamic DuckDB import for pyright compatibility
_duckdb_mod = importlib.import_module("duckdb")

log = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0.0"

DEFAULT_EXTENSIONS: tuple[str, ...] = (".md",)
DEFAULT_SKIP_DIRS: tuple[str, ...] = (".obsidian", ".trash", ".git")


class SchemaVersionError(RuntimeError):
    """Raised when a vault index schema version does not match expected."""


class DocumentNotFoundError(KeyError):
    """Raised when a note path is not part of the corpus."""


@dataclass(frozen=True, slots=True)
class Document:
    """A note in the vault snapshot."""

    path: str                    # Vault-relative POSIX path: "Projects/Alpha.md"
    title: str                   # Display title used as the primary term
    aliases: tuple[str, ...]     # Declared aliases, in front matter order
    text: str                    # Raw note content, front matter included
    encoding: str = "utf-8"      # Codec the file was decoded with

    @property
    def basename(self) -> str:
        """File name without extension: the canonical wikilink target."""
        return PurePosixPath(self.path).stem


class CorpusProvider(Protocol):
    """What the scanner needs from a corpus. Must be a consistent snapshot.

    ``list_documents`` may return records whose ``aliases``/``text`` are not
    filled in; the scanner always asks ``aliases_of`` and ``raw_text_of``.
    """

    def list_documents(self) -> list[Document]: ...

    def aliases_of(self, doc: Document) -> tuple[str, ...]: ...

    def raw_text_of(self, doc: Document) -> str: ...


def snapshot_documents(corpus: CorpusProvider) -> list[Document]:
    """Materialise one scan snapshot through the provider interface."""
    return [
        replace(doc, aliases=tuple(corpus.aliases_of(doc)), text=corpus.raw_text_of(doc))
        for doc in corpus.list_documents()
    ]


# Tried in order. latin-1 decodes every byte, so it always succeeds and
# encodes back to the same bytes.
NOTE_ENCODINGS: tuple[str, ...] = ("utf-8", "cp1252", "latin-1")


def read_note(fpath: Path) -> tuple[str, str]:
    """Read a note exactly as stored: no newline translation.

    Returns:
        (text, encoding) where *encoding* is the first of NOTE_ENCODINGS
        that decodes the file.
    """
    data = fpath.read_bytes()
    for encoding in NOTE_ENCODINGS[:-1]:
        try:
            return data.decode(encoding), encoding
        except UnicodeDecodeError:
            continue
    return data.decode(NOTE_ENCODINGS[-1]), NOTE_ENCODINGS[-1]


def write_note(fpath: Path, text: str, encoding: str) -> None:
    """Write *text* back with the codec it was read with, newlines untouched."""
    with open(fpath, "w", encoding=encoding, newline="") as f:
        f.write(text)


def make_document(path: str, text: str, encoding: str = "utf-8") -> Document:
    """Build a Document from a vault-relative path and raw text."""
    posix = PurePosixPath(path)
    return Document(
        path=posix.as_posix(),
        title=posix.stem,
        aliases=extract_aliases(text),
        text=text,
        encoding=encoding,
    )


# ---------------------------------------------------------------------------
# Filesystem vault
# ---------------------------------------------------------------------------

class VaultCorpus:
    """A directory of Markdown notes.

    Every ``list_documents()`` call re-reads the vault and returns a fresh
    snapshot; documents returned by one call are never mutated afterwards.
    """

    def __init__(
        self,
        root: Path,
        *,
        extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
        skip_dirs: tuple[str, ...] = DEFAULT_SKIP_DIRS,
    ) -> None:
        self._root = Path(root)
        self._extensions = tuple(e.lower() for e in extensions)
        self._skip_dirs = frozenset(skip_dirs)

    @property
    def root(self) -> Path:
        return self._root

    def note_paths(self) -> list[str]:
        """Vault-relative POSIX paths of every note, sorted."""
        out: list[str] = []
        for fpath in self._root.rglob("*"):
            if not fpath.is_file():
                continue
            if fpath.suffix.lower() not in self._extensions:
                continue
            rel = fpath.relative_to(self._root)
            if any(part in self._skip_dirs for part in rel.parts[:-1]):
                continue
            out.append(rel.as_posix())
        out.sort()
        return out

    def _load(self, rel_path: str) -> Document:
        text, encoding = read_note(self._root / rel_path)
        return make_document(rel_path, text, encoding)

    def list_documents(self) -> list[Document]:
        docs: list[Document] = []
        for rel_path in self.note_paths():
            try:
                docs.append(self._load(rel_path))
            except OSError as exc:
                log.warning("Skipping unreadable note %s: %s", rel_path, exc)
        log.debug("Loaded %d notes from %s", len(docs), self._root)
        return docs

    def get(self, path: str) -> Document:
        """Load one note by vault-relative path."""
        rel = Path(path).as_posix()
        fpath = self._root / rel
        if not fpath.is_file() or fpath.suffix.lower() not in self._extensions:
            raise DocumentNotFoundError(path)
        return self._load(rel)

    def aliases_of(self, doc: Document) -> tuple[str, ...]:
        return doc.aliases

    def raw_text_of(self, doc: Document) -> str:
        return doc.text

    def write_text(self, doc: Document, text: str) -> Document:
        """Persist new content for *doc* and return the updated record.

        The note keeps the encoding it was read with; newlines in *text* are
        written as given.
        """
        write_note(self._root / doc.path, text, doc.encoding)
        return make_document(doc.path, text, doc.encoding)


# ---------------------------------------------------------------------------
# DuckDB snapshot
# ---------------------------------------------------------------------------

def _read_schema_version(conn: Any) -> str:
    """Read vault index schema version from an open DuckDB connection."""
    try:
        result = conn.execute(
            "SELECT version FROM _schema_version WHERE table_name = 'vault'"
        ).fetchone()
        return str(result[0]) if result else "unknown"
    except _duckdb_mod.Error:
        return "unknown"


def ensure_schema_version(
    conn: Any,
    *,
    db_path: Path | None = None,
    expected: str = SCHEMA_VERSION,
) -> str:
    """Validate schema version for an open DuckDB connection.

    Returns actual schema version on success.
    Raises SchemaVersionError on mismatch.
    """
    actual = _read_schema_version(conn)
    if actual != expected:
        where = f" in {db_path}" if db_path is not None else ""
        raise SchemaVersionError(
            f"Schema version mismatch{where}: expected {expected}, got {actual}"
        )
    return actual


def decode_aliases(value: Any) -> tuple[str, ...]:
    """Decode the JSON alias column, tolerating NULL and bare strings."""
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value)
    raw = str(value).strip()
    if not raw:
        return ()
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError:
        return (raw,)
    if isinstance(decoded, list):
        return tuple(str(v) for v in decoded)
    return ()


class IndexedCorpus:
    """Read-only interface to a DuckDB vault snapshot."""

    def __init__(self, db_path: Path, *, enforce_schema: bool = True) -> None:
        self._db_path = db_path
        self._conn: Any = _duckdb_mod.connect(str(db_path), read_only=True)
        if enforce_schema:
            try:
                ensure_schema_version(self._conn, db_path=db_path)
            except SchemaVersionError:
                self._conn.close()
                raise

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def __enter__(self) -> IndexedCorpus:
        return self

    def __exit__(self, *_args: object) -> None:
        self.close()

    @property
    def schema_version(self) -> str:
        return _read_schema_version(self._conn)

    def list_documents(self) -> list[Document]:
        rows = self._conn.execute(
            "SELECT path, title, aliases, content FROM documents ORDER BY ord"
        ).fetchall()
        return [
            Document(
                path=str(path),
                title=str(title),
                aliases=decode_aliases(aliases),
                text=str(text or ""),
            )
            for path, title, aliases, text in rows
        ]

    def get(self, path: str) -> Document:
        row = self._conn.execute(
            "SELECT path, title, aliases, content FROM documents WHERE path = ?",
            [path],
        ).fetchone()
        if row is None:
            raise DocumentNotFoundError(path)
        return Document(
            path=str(row[0]),
            title=str(row[1]),
            aliases=decode_aliases(row[2]),
            text=str(row[3] or ""),
        )

    def aliases_of(self, doc: Document) -> tuple[str, ...]:
        return doc.aliases

    def raw_text_of(self, doc: Document) -> str:
        return doc.text
