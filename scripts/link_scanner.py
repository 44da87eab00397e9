#!/usr/bin/env python3
"""Find unlinked mentions of note titles and aliases in a vault.

Usage:
    python3 scripts/link_scanner.py --vault ~/notes
    python3 scripts/link_scanner.py --vault ~/notes --note "Projects/Alpha.md"
    python3 scripts/link_scanner.py --index vault_index/vault.duckdb

Outputs structured JSON to stdout, human messages to stderr. Ctrl-C during
a vault scan stops after the current note and prints what was found.
"""
from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import Any

from linkscan.corpus import (
    DocumentNotFoundError,
    IndexedCorpus,
    SchemaVersionError,
    VaultCorpus,
    snapshot_documents,
)
from linkscan.io_utils import dump_json_bytes, save_jsonl
from linkscan.scanner import (
    DEFAULT_PREVIEW_CHARS,
    NoteLinks,
    ScanConfig,
    scan_note,
    scan_vault,
)

log = logging.getLogger("link_scanner")


def dump_json(obj: object) -> None:
    sys.stdout.buffer.write(dump_json_bytes(obj))
    sys.stdout.buffer.write(b"\n")
    sys.stdout.flush()


class _StopFlag:
    """Set by SIGINT; polled by the scanner between notes."""

    def __init__(self) -> None:
        self.stopped = False

    def __call__(self) -> bool:
        return self.stopped

    def handle(self, _signum: int, _frame: Any) -> None:
        log.warning("Interrupt received, finishing current note")
        self.stopped = True


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="Scan a Markdown vault for mentions that could be wikilinks.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--vault", help="Vault directory")
    source.add_argument(
        "--index", help="DuckDB vault snapshot built by build_vault_index.py",
    )
    parser.add_argument(
        "--note", default=None,
        help="Scan only this note (vault-relative path)",
    )
    parser.add_argument(
        "--preview-chars", type=int, default=DEFAULT_PREVIEW_CHARS,
        help=f"Context characters on each side of a match (default: {DEFAULT_PREVIEW_CHARS})",
    )
    parser.add_argument(
        "--include-empty", action="store_true",
        help="Also list notes without potential links",
    )
    parser.add_argument(
        "--output-jsonl", default=None,
        help="Also write one JSON line per scanned note to this path",
    )
    parser.add_argument("--verbose", action="store_true", help="Verbose logging")
    return parser


def _scan(corpus: Any, args: argparse.Namespace, config: ScanConfig) -> list[NoteLinks]:
    if args.note:
        doc = corpus.get(args.note)
        log.info("Scanning single note: %s", doc.path)
        return [scan_note(doc, snapshot_documents(corpus), config=config)]

    stop = _StopFlag()
    previous = signal.signal(signal.SIGINT, stop.handle)
    try:
        return scan_vault(corpus, config=config, should_stop=stop)
    finally:
        signal.signal(signal.SIGINT, previous)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.preview_chars < 0:
        log.error("--preview-chars must be >= 0")
        return 1
    config = ScanConfig(
        preview_chars=args.preview_chars,
        include_empty=args.include_empty,
    )

    corpus: Any
    if args.index:
        db_path = Path(args.index)
        if not db_path.exists():
            log.error("Vault index not found: %s", db_path)
            return 1
        try:
            corpus = IndexedCorpus(db_path)
        except SchemaVersionError as exc:
            log.error("%s", exc)
            return 1
        source = str(db_path)
    else:
        vault = Path(args.vault)
        if not vault.is_dir():
            log.error("Vault directory not found: %s", vault)
            return 1
        corpus = VaultCorpus(vault)
        source = str(vault)

    try:
        results = _scan(corpus, args, config)
    except DocumentNotFoundError:
        log.error("Note not found: %s", args.note)
        return 1
    finally:
        if isinstance(corpus, IndexedCorpus):
            corpus.close()

    records = [r.to_dict() for r in results]
    link_count = sum(len(r.potential_links) for r in results)
    log.info("Found %d potential links in %d notes", link_count, len(results))

    if args.output_jsonl:
        save_jsonl(records, Path(args.output_jsonl))

    dump_json({
        "source": source,
        "note_count": len(results),
        "link_count": link_count,
        "notes": records,
    })
    return 0


if __name__ == "__main__":
    sys.exit(main())
