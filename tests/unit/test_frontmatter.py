"""Tests for frontmatter extraction."""

from __future__ import annotations

import pytest

from pattern_catalog.errors import MalformedContentError
from pattern_catalog.frontmatter import (
    decode_inline_array,
    decode_scalar,
    extract_frontmatter,
    parse_metadata_text,
)


class TestExtractFrontmatter:
    """Tests for extract_frontmatter."""

    def test_splits_metadata_and_body(self) -> None:
        """Metadata is decoded and the body is trimmed."""
        meta, body = extract_frontmatter("---\nid: button\nstatus: stable\n---\n\n## Use when\n- x\n\n")
        assert meta == {"id": "button", "status": "stable"}
        assert body == "## Use when\n- x"

    def test_crlf_and_bom(self) -> None:
        """CRLF endings and a leading BOM are tolerated."""
        meta, body = extract_frontmatter("\ufeff---\r\nid: a\r\n---\r\nbody\r\n")
        assert meta == {"id": "a"}
        assert body == "body"

    def test_missing_opening_fence(self) -> None:
        """A document without frontmatter fails, naming the source."""
        with pytest.raises(MalformedContentError) as exc_info:
            extract_frontmatter("# Title\nbody", source="components/x.md")
        assert exc_info.value.path == "components/x.md"
        assert "components/x.md" in str(exc_info.value)

    def test_missing_closing_fence(self) -> None:
        """An unterminated frontmatter block fails."""
        with pytest.raises(MalformedContentError):
            extract_frontmatter("---\nid: a\nbody")

    def test_empty_frontmatter(self) -> None:
        """An empty header decodes to an empty mapping."""
        meta, body = extract_frontmatter("---\n---\nbody")
        assert meta == {}
        assert body == "body"


class TestParseMetadataText:
    """Tests for the YAML subset decoder."""

    def test_scalars(self) -> None:
        """Quoted, bare, boolean and null scalars; numbers stay text."""
        meta = parse_metadata_text(
            'summary: "Quoted: with colon"\n'
            "title: bare value  \n"
            "single: 'single quoted'\n"
            "draft: true\n"
            "published: false\n"
            "cache_ttl_seconds: 86400\n"
            "version: 1.0\n"
            "empty: null\n"
        )
        assert meta == {
            "summary": "Quoted: with colon",
            "title": "bare value",
            "single": "single quoted",
            "draft": True,
            "published": False,
            "cache_ttl_seconds": "86400",
            "version": "1.0",
            "empty": None,
        }

    def test_inline_array(self) -> None:
        """Bracket arrays become trimmed strings without empty entries."""
        meta = parse_metadata_text("tags: [ overlay, 'modal' ,, \"focus\" ]\nnone: []")
        assert meta == {"tags": ["overlay", "modal", "focus"], "none": []}

    def test_block_list(self) -> None:
        """Indented dash items under an empty key become a list."""
        meta = parse_metadata_text("aliases:\n  - modal\n  - \"popup\"\nid: dialog")
        assert meta == {"aliases": ["modal", "popup"], "id": "dialog"}

    def test_unindented_block_list(self) -> None:
        """Dash items at the key's own indentation are accepted."""
        meta = parse_metadata_text("aliases:\n- modal\n- popup")
        assert meta == {"aliases": ["modal", "popup"]}

    def test_nested_mapping(self) -> None:
        """One nested mapping level with inline and block lists."""
        meta = parse_metadata_text(
            "apply_policy:\n"
            "  instruction: Apply utility rules first\n"
            "  scopes_in_order:\n"
            "    - utility\n"
            "    - page\n"
            "  other: [a, b]\n"
            "id: x\n"
        )
        assert meta == {
            "apply_policy": {
                "instruction": "Apply utility rules first",
                "scopes_in_order": ["utility", "page"],
                "other": ["a", "b"],
            },
            "id": "x",
        }

    def test_comments_and_blank_lines_skipped(self) -> None:
        """Comment lines and blank lines are ignored."""
        assert parse_metadata_text("# comment\n\nid: a\n  # indented comment\n") == {"id": "a"}

    def test_empty_key_is_null(self) -> None:
        """A key with no value and no children decodes to None."""
        assert parse_metadata_text("stack:\nid: a") == {"stack": None, "id": "a"}

    def test_list_item_without_key(self) -> None:
        """A leading dash item is rejected."""
        with pytest.raises(MalformedContentError, match="List item without a key"):
            parse_metadata_text("- orphan")

    def test_line_without_colon(self) -> None:
        """Lines that are not key/value pairs are rejected."""
        with pytest.raises(MalformedContentError, match="Invalid metadata line"):
            parse_metadata_text("id: a\njust words")

    def test_deeper_nesting_rejected(self) -> None:
        """Nesting below one mapping level is outside the subset."""
        with pytest.raises(MalformedContentError):
            parse_metadata_text("a:\n  b:\n    c: d")

    def test_stray_indentation_rejected(self) -> None:
        """An indented line after a scalar value is rejected."""
        with pytest.raises(MalformedContentError, match="Unexpected indentation"):
            parse_metadata_text("id: a\n  extra: b")


class TestDecoders:
    """Tests for scalar and array decoders."""

    def test_decode_scalar(self) -> None:
        """Numbers are not coerced; tilde is null."""
        assert decode_scalar("-5") == "-5"
        assert decode_scalar("007") == "007"
        assert decode_scalar("~") is None
        assert decode_scalar("True") == "True"

    def test_decode_inline_array_empty(self) -> None:
        """Blank brackets give an empty list."""
        assert decode_inline_array("[   ]") == []
