#!/usr/bin/env python3
"""Build a DuckDB snapshot of a Markdown vault.

The snapshot freezes note paths, titles, aliases and raw text so scans can
run against a consistent corpus while the vault keeps changing. It is read
by ``linkscan.corpus.IndexedCorpus`` and ``link_scanner.py --index``.

A ``<db>.manifest.json`` sidecar records the schema version, note counts
and a digest over every note's path and file hash, so two snapshots of the
same vault state compare equal.

Usage:
    python3 scripts/build_vault_index.py \
        --vault ~/notes \
        --output vault_index/vault.duckdb

    # Replace an existing snapshot:
    python3 scripts/build_vault_index.py \
        --vault ~/notes \
        --output vault_index/vault.duckdb --force
"""
from __future__ import annotations

import argparse
import hashlib
import importlib
import json
import logging
import sys
import time
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from linkscan.corpus import SCHEMA_VERSION, VaultCorpus, read_note
from linkscan.frontmatter import extract_aliases
from linkscan.io_utils import dump_json_bytes, save_json

# DuckDB: dynamic import for pyright compatibility
_duckdb = importlib.import_module("duckdb")

log = logging.getLogger("build_vault_index")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_SCHEMA_DDL = f"""\
CREATE TABLE _schema_version (
    table_name VARCHAR PRIMARY KEY,
    version VARCHAR NOT NULL,
    created_at TIMESTAMP DEFAULT current_timestamp
);

INSERT INTO _schema_version VALUES ('vault', '{SCHEMA_VERSION}', current_timestamp);

CREATE TABLE documents (
    ord INTEGER NOT NULL,
    path VARCHAR PRIMARY KEY,
    title VARCHAR NOT NULL,
    aliases VARCHAR DEFAULT '[]',
    content VARCHAR,
    char_count INTEGER DEFAULT 0,
    sha256 VARCHAR
);
"""


def manifest_path_for(db_path: Path) -> Path:
    """Sidecar manifest path next to a snapshot database."""
    return db_path.with_name(db_path.name + ".manifest.json")


def vault_digest(entries: Iterable[tuple[str, str]]) -> str:
    """Digest of ``(path, sha256)`` pairs, independent of their order."""
    h = hashlib.sha256()
    for path, sha in sorted(entries):
        h.update(f"{path}\0{sha}\n".encode("utf-8"))
    return h.hexdigest()


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="Snapshot a Markdown vault into DuckDB.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--vault", required=True, help="Vault directory")
    parser.add_argument("--output", required=True, help="Output DuckDB path")
    parser.add_argument(
        "--force", action="store_true",
        help="Overwrite an existing output database",
    )
    parser.add_argument("--verbose", action="store_true", help="Verbose logging")
    return parser


def build_index(vault: Path, output: Path) -> dict[str, Any]:
    """Write every note of *vault* into a fresh DuckDB file at *output*.

    Returns note counts plus ``vault_digest`` over the indexed notes.
    """
    corpus = VaultCorpus(vault)
    output.parent.mkdir(parents=True, exist_ok=True)
    con = _duckdb.connect(str(output))
    stats: dict[str, Any] = {"notes": 0, "errors": 0, "with_aliases": 0}
    hashes: list[tuple[str, str]] = []
    try:
        for stmt in _SCHEMA_DDL.split(";"):
            if stmt.strip():
                con.execute(stmt)
        con.execute("BEGIN TRANSACTION")
        for ord_, rel_path in enumerate(corpus.note_paths()):
            try:
                text, encoding = read_note(vault / rel_path)
            except OSError as exc:
                log.warning("Skipping unreadable note %s: %s", rel_path, exc)
                stats["errors"] += 1
                continue
            aliases = extract_aliases(text)
            sha = hashlib.sha256(text.encode(encoding)).hexdigest()
            con.execute(
                "INSERT INTO documents VALUES (?, ?, ?, ?, ?, ?, ?)",
                [
                    ord_,
                    rel_path,
                    Path(rel_path).stem,
                    json.dumps(list(aliases)),
                    text,
                    len(text),
                    sha,
                ],
            )
            hashes.append((rel_path, sha))
            stats["notes"] += 1
            if aliases:
                stats["with_aliases"] += 1
        con.execute("COMMIT")
    finally:
        con.close()
    stats["vault_digest"] = vault_digest(hashes)
    return stats


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    vault = Path(args.vault)
    output = Path(args.output)
    if not vault.is_dir():
        log.error("Vault directory not found: %s", vault)
        return 1
    if output.exists():
        if not args.force:
            log.error("Output exists: %s (use --force to overwrite)", output)
            return 1
        output.unlink()
        wal = output.with_name(output.name + ".wal")
        if wal.exists():
            wal.unlink()

    t0 = time.perf_counter()
    stats = build_index(vault, output)
    elapsed = time.perf_counter() - t0
    log.info("Indexed %d notes into %s in %.2fs", stats["notes"], output, elapsed)

    manifest_path = manifest_path_for(output)
    save_json({
        "schema_version": SCHEMA_VERSION,
        "created_at": datetime.now(UTC).isoformat(),
        "vault_root": str(vault),
        "db_path": str(output),
        "build_sec": round(elapsed, 3),
        **stats,
    }, manifest_path)

    sys.stdout.buffer.write(dump_json_bytes({
        "db_path": str(output),
        "manifest_path": str(manifest_path),
        "stats": stats,
    }))
    sys.stdout.buffer.write(b"\n")
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
