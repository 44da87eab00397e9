"""Tests for scripts/link_scanner.py."""
from __future__ import annotations

import importlib.util
import json
import sys
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]


def _load_script(name: str):
    """Import a scripts/ module by file path (scripts/ is not a package)."""
    src = _ROOT / "src"
    if str(src) not in sys.path:
        sys.path.insert(0, str(src))
    spec = importlib.util.spec_from_file_location(name, _ROOT / "scripts" / f"{name}.py")
    assert spec is not None and spec.loader is not None
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    return mod


_mod = _load_script("link_scanner")
_index_mod = _load_script("build_vault_index")

from linkscan.io_utils import load_jsonl  # noqa: E402


def _write_vault(root: Path) -> Path:
    vault = root / "vault"
    vault.mkdir()
    (vault / "Alpha.md").write_text("---\naliases: [AP]\n---\nAlpha note\n", encoding="utf-8")
    (vault / "Long Title.md").write_text("Nothing to see.\n", encoding="utf-8")
    (vault / "Title.md").write_text("Mentions Long Title.\n", encoding="utf-8")
    (vault / "Journal.md").write_text(
        "See [[Alpha]] and Alpha again.\nAP said hi.", encoding="utf-8"
    )
    return vault


def _run(capsys: pytest.CaptureFixture[str], argv: list[str]) -> tuple[int, dict]:
    code = _mod.main(argv)
    out = capsys.readouterr().out
    return code, (json.loads(out) if out.strip() else {})


class TestParser:
    def test_requires_a_source(self) -> None:
        with pytest.raises(SystemExit):
            _mod.build_parser().parse_args([])

    def test_vault_and_index_exclusive(self) -> None:
        with pytest.raises(SystemExit):
            _mod.build_parser().parse_args(["--vault", "a", "--index", "b"])

    def test_defaults(self) -> None:
        args = _mod.build_parser().parse_args(["--vault", "v"])
        assert args.preview_chars == 20
        assert args.note is None
        assert not args.include_empty


class TestScanVault:
    def test_vault_scan(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        vault = _write_vault(tmp_path)
        code, payload = _run(capsys, ["--vault", str(vault)])
        assert code == 0
        by_note = {n["note_path"]: n for n in payload["notes"]}
        assert set(by_note) == {"Journal.md", "Title.md"}
        journal = by_note["Journal.md"]["potential_links"]
        assert [l["id"] for l in journal] == ["0-18-0-23", "1-0-1-2"]
        assert journal[1]["matched_alias"] == "AP"
        title_links = by_note["Title.md"]["potential_links"]
        assert [l["linked_title"] for l in title_links] == ["Long Title"]
        assert payload["link_count"] == 3

    def test_include_empty(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        vault = _write_vault(tmp_path)
        code, payload = _run(capsys, ["--vault", str(vault), "--include-empty"])
        assert code == 0
        assert payload["note_count"] == 4

    def test_jsonl_output(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        vault = _write_vault(tmp_path)
        out = tmp_path / "out" / "links.jsonl"
        code, _ = _run(capsys, ["--vault", str(vault), "--output-jsonl", str(out)])
        assert code == 0
        records = load_jsonl(out)
        assert {r["note_path"] for r in records} == {"Journal.md", "Title.md"}

    def test_missing_vault(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        code, payload = _run(capsys, ["--vault", str(tmp_path / "nope")])
        assert code == 1
        assert payload == {}


class TestScanNote:
    def test_single_note(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        vault = _write_vault(tmp_path)
        code, payload = _run(
            capsys, ["--vault", str(vault), "--note", "Journal.md", "--preview-chars", "3"]
        )
        assert code == 0
        assert payload["note_count"] == 1
        link = payload["notes"][0]["potential_links"][0]
        assert link["text_preview"] == "... nd Alpha ag ..."

    def test_unknown_note(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        vault = _write_vault(tmp_path)
        code, _ = _run(capsys, ["--vault", str(vault), "--note", "Nope.md"])
        assert code == 1

    def test_negative_preview(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        vault = _write_vault(tmp_path)
        code, _ = _run(capsys, ["--vault", str(vault), "--preview-chars", "-1"])
        assert code == 1


class TestScanIndex:
    def test_index_scan_matches_vault_scan(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        vault = _write_vault(tmp_path)
        db = tmp_path / "index" / "vault.duckdb"
        assert _index_mod.main(["--vault", str(vault), "--output", str(db)]) == 0
        capsys.readouterr()

        _, from_vault = _run(capsys, ["--vault", str(vault)])
        code, from_index = _run(capsys, ["--index", str(db)])
        assert code == 0
        assert from_index["notes"] == from_vault["notes"]

    def test_missing_index(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        code, _ = _run(capsys, ["--index", str(tmp_path / "none.duckdb")])
        assert code == 1
