"""Tests for linkscan.frontmatter module."""
from linkscan.frontmatter import (
    extract_aliases,
    parse_frontmatter,
    strip_frontmatter,
)


class TestStripFrontmatter:
    def test_no_header(self) -> None:
        assert strip_frontmatter("Hello Alpha") == ("Hello Alpha", 0)

    def test_removes_header_block(self) -> None:
        raw = "---\ntitle: Alpha\n---\nAlpha"
        stripped, removed = strip_frontmatter(raw)
        assert stripped == "\nAlpha"
        assert removed == 20
        assert removed == len(raw) - len(stripped)

    def test_header_only(self) -> None:
        raw = "---\ntitle: Alpha\n---"
        stripped, removed = strip_frontmatter(raw)
        assert stripped == ""
        assert removed == len(raw)

    def test_stops_at_first_closing_fence(self) -> None:
        raw = "---\naliases:\n  - AP\n---\nBody\n---\nMore"
        stripped, _ = strip_frontmatter(raw)
        assert stripped == "\nBody\n---\nMore"

    def test_fence_must_open_the_file(self) -> None:
        raw = "\n---\ntitle: Alpha\n---\nAlpha"
        assert strip_frontmatter(raw) == (raw, 0)

    def test_first_line_must_be_key_shaped(self) -> None:
        raw = "---\n- item\n---\nbody"
        assert strip_frontmatter(raw) == (raw, 0)

    def test_unterminated_header(self) -> None:
        raw = "---\ntitle: Alpha\nAlpha"
        assert strip_frontmatter(raw) == (raw, 0)

    def test_toml_header_is_not_a_header(self) -> None:
        raw = "+++\ntitle = 'Alpha'\n+++\nAlpha"
        assert strip_frontmatter(raw) == (raw, 0)

    def test_crlf_header(self) -> None:
        raw = "---\r\ntitle: Alpha\r\n---\r\nAlpha"
        stripped, removed = strip_frontmatter(raw)
        assert stripped == "\r\nAlpha"
        assert removed == 22

    def test_line_count_after_header_preserved(self) -> None:
        raw = "---\ntags: [x]\n---\none\ntwo\nthree"
        stripped, removed = strip_frontmatter(raw)
        assert stripped.count("\n") == raw[removed:].count("\n") == 3


class TestParseFrontmatter:
    def test_mapping(self) -> None:
        raw = "---\ntitle: Alpha\ntags: [a, b]\n---\nbody"
        assert parse_frontmatter(raw) == {"title": "Alpha", "tags": ["a", "b"]}

    def test_no_header(self) -> None:
        assert parse_frontmatter("body") == {}

    def test_malformed_yaml(self) -> None:
        raw = "---\naliases: [unclosed\n---\nbody"
        assert parse_frontmatter(raw) == {}


class TestExtractAliases:
    def test_yaml_list(self) -> None:
        raw = "---\naliases:\n  - AP\n  - Alpha Project\n---\nbody"
        assert extract_aliases(raw) == ("AP", "Alpha Project")

    def test_crlf_yaml_list(self) -> None:
        raw = "---\r\naliases:\r\n  - AP\r\n  - Alpha Project\r\n---\r\nbody"
        assert extract_aliases(raw) == ("AP", "Alpha Project")

    def test_flow_list(self) -> None:
        raw = "---\naliases: [AP, Alpha Project]\n---\n"
        assert extract_aliases(raw) == ("AP", "Alpha Project")

    def test_comma_string(self) -> None:
        raw = "---\naliases: AP, Alpha Project\n---\n"
        assert extract_aliases(raw) == ("AP", "Alpha Project")

    def test_singular_key(self) -> None:
        raw = "---\nalias: AP\n---\n"
        assert extract_aliases(raw) == ("AP",)

    def test_scalars_become_strings(self) -> None:
        raw = "---\naliases: [2024, x]\n---\n"
        assert extract_aliases(raw) == ("2024", "x")

    def test_empty_value(self) -> None:
        raw = "---\naliases:\ntags: [x]\n---\n"
        assert extract_aliases(raw) == ()

    def test_no_aliases(self) -> None:
        assert extract_aliases("---\ntitle: Alpha\n---\n") == ()
        assert extract_aliases("plain body") == ()

    def test_malformed_header_has_no_aliases(self) -> None:
        assert extract_aliases("---\naliases: [AP\n---\n") == ()
