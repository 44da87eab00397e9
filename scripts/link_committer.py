#!/usr/bin/env python3
"""Turn one potential link into a wikilink inside its note.

Usage:
    python3 scripts/link_committer.py --vault ~/notes \
      --note "Journal/2024-01-05.md" --link-id 3-10-3-15
    python3 scripts/link_committer.py --vault ~/notes \
      --note "Journal/2024-01-05.md" --link-id 3-10-3-15 --variant 1
    python3 scripts/link_committer.py --vault ~/notes \
      --note "Journal/2024-01-05.md" --link-id 3-10-3-15 \
      --replacement "[[Alpha Project|Alpha]]" --dry-run

The note is scanned first so the link id is resolved against current text.
After writing, the note is re-scanned and the fresh result is printed; ids
from earlier scans must not be reused.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from linkscan.corpus import DocumentNotFoundError, VaultCorpus, snapshot_documents
from linkscan.edits import LinkNotFoundError, commit_link, find_link
from linkscan.io_utils import dump_json_bytes
from linkscan.rewrite import EditSpan, SpanError, StaleSpanError, apply_edit, link_variants
from linkscan.scanner import DEFAULT_PREVIEW_CHARS, ScanConfig, scan_note

log = logging.getLogger("link_committer")


def dump_json(obj: object) -> None:
    sys.stdout.buffer.write(dump_json_bytes(obj))
    sys.stdout.buffer.write(b"\n")
    sys.stdout.flush()


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="Commit one potential link into a vault note.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--vault", required=True, help="Vault directory")
    parser.add_argument("--note", required=True, help="Vault-relative note path")
    parser.add_argument("--link-id", required=True, help="Potential link id from link_scanner.py")
    choice = parser.add_mutually_exclusive_group()
    choice.add_argument(
        "--variant", type=int, default=0,
        help="Index into the offered wikilink variants (default: 0, [[match]])",
    )
    choice.add_argument(
        "--replacement", default=None,
        help="Literal replacement text instead of an offered variant",
    )
    parser.add_argument(
        "--preview-chars", type=int, default=DEFAULT_PREVIEW_CHARS,
        help=f"Preview width for the re-scan output (default: {DEFAULT_PREVIEW_CHARS})",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Print the rewritten note instead of writing it",
    )
    parser.add_argument("--verbose", action="store_true", help="Verbose logging")
    return parser


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
    if not vault.is_dir():
        log.error("Vault directory not found: %s", vault)
        return 1
    corpus = VaultCorpus(vault)
    config = ScanConfig(preview_chars=args.preview_chars)

    try:
        doc = corpus.get(args.note)
        note_links = scan_note(doc, snapshot_documents(corpus), config=config)
        link = find_link(note_links, args.link_id)
    except DocumentNotFoundError:
        log.error("Note not found: %s", args.note)
        return 1
    except LinkNotFoundError as exc:
        log.error("%s", exc.args[0])
        return 1

    variants = link_variants(link)
    if args.replacement is not None:
        replacement = args.replacement
    elif 0 <= args.variant < len(variants):
        replacement = variants[args.variant]
    else:
        log.error(
            "Variant %d out of range; choose 0-%d: %s",
            args.variant, len(variants) - 1, variants,
        )
        return 1

    if args.dry_run:
        try:
            new_text = apply_edit(doc.text, EditSpan(link.range, replacement))
        except SpanError as exc:
            log.error("%s", exc)
            return 1
        dump_json({
            "link": link.to_dict(),
            "replacement": replacement,
            "variants": variants,
            "text": new_text,
        })
        return 0

    try:
        rescanned = commit_link(corpus, doc.path, link, replacement, config=config)
    except (SpanError, StaleSpanError) as exc:
        log.error("%s", exc)
        return 1

    dump_json({
        "committed": link.to_dict(),
        "replacement": replacement,
        "note": rescanned.to_dict(),
    })
    return 0


if __name__ == "__main__":
    sys.exit(main())
