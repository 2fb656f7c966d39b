"""Tests for markdown text-block primitives."""

from __future__ import annotations

from pattern_catalog.text_blocks import (
    H2_HEADING,
    H3_HEADING,
    RULE_HEADING,
    find_all_fenced_blocks,
    find_first_fenced_block,
    split_by_heading,
    to_bullet_list,
)


class TestSplitByHeading:
    """Tests for split_by_heading."""

    def test_splits_in_document_order(self) -> None:
        """Each heading opens a block with the following lines as body."""
        text = "## Use when\n- a\n\n## Donts\n\n- b\n"
        blocks = split_by_heading(text, H2_HEADING)
        assert [(b.title, b.body) for b in blocks] == [("Use when", "- a"), ("Donts", "- b")]

    def test_preamble_discarded_by_default(self) -> None:
        """Text before the first heading is dropped."""
        blocks = split_by_heading("intro\n\n## A\nbody", H2_HEADING)
        assert [b.title for b in blocks] == ["A"]

    def test_preamble_kept_when_requested(self) -> None:
        """keep_preamble returns the preamble as an untitled block."""
        blocks = split_by_heading("intro\n\n## A\nbody", H2_HEADING, keep_preamble=True)
        assert blocks[0].title is None
        assert blocks[0].body == "intro"
        assert blocks[1].title == "A"

    def test_blank_preamble_not_kept(self) -> None:
        """A blank preamble never becomes a block."""
        blocks = split_by_heading("\n\n## A\nbody", H2_HEADING, keep_preamble=True)
        assert [b.title for b in blocks] == ["A"]

    def test_h2_pattern_ignores_h3(self) -> None:
        """### lines stay inside the enclosing ## block."""
        blocks = split_by_heading("## A\n### Sub\ntext", H2_HEADING)
        assert len(blocks) == 1
        assert blocks[0].body == "### Sub\ntext"

    def test_rule_heading_is_case_insensitive(self) -> None:
        """## rule: titles are recognized; plain ## headings are not."""
        text = "## Overview\nx\n## rule: Focus\nbody1\n## Rule: Title\nbody2"
        blocks = split_by_heading(text, RULE_HEADING)
        assert [(b.title, b.body) for b in blocks] == [("Focus", "body1"), ("Title", "body2")]

    def test_headings_inside_fences_are_ignored(self) -> None:
        """A heading-looking line inside a code fence is body text."""
        text = "### Snippets\n```md\n### Not a heading\n```\n### Next\n- x"
        blocks = split_by_heading(text, H3_HEADING)
        assert [b.title for b in blocks] == ["Snippets", "Next"]
        assert "### Not a heading" in blocks[0].body

    def test_heading_without_body(self) -> None:
        """A heading followed by nothing has an empty body."""
        blocks = split_by_heading("## Empty\n\n\n## Next\nx", H2_HEADING)
        assert blocks[0].body == ""

    def test_crlf_input(self) -> None:
        """Windows line endings are normalized."""
        blocks = split_by_heading("## A\r\n- a\r\n", H2_HEADING)
        assert blocks[0].body == "- a"


class TestToBulletList:
    """Tests for to_bullet_list."""

    def test_simple_bullets(self) -> None:
        """Dash bullets become items."""
        assert to_bullet_list("- A\n- B") == ["A", "B"]

    def test_star_and_numbered_bullets(self) -> None:
        """Star and numbered bullets are top-level items."""
        assert to_bullet_list("* one\n2. two\n10. ten") == ["one", "two", "ten"]

    def test_nested_bullets(self) -> None:
        """Nested items render under their parent with two-space dashes."""
        text = "- A\n  - A1\n  - A2\n- B"
        assert to_bullet_list(text) == ["A\n  - A1\n  - A2", "B"]

    def test_nested_star_bullets_render_as_dashes(self) -> None:
        """Nested '*' bullets are rendered with '-'."""
        assert to_bullet_list("- A\n    * deep") == ["A\n  - deep"]

    def test_tab_indented_nested_bullet(self) -> None:
        """Tabs count as two spaces."""
        assert to_bullet_list("- A\n\t- A1") == ["A\n  - A1"]

    def test_soft_wrap_continuation(self) -> None:
        """Non-bullet lines join the open item with a single space."""
        assert to_bullet_list("- A long\n  sentence\nwraps") == ["A long sentence wraps"]

    def test_continuation_after_nested_joins_parent(self) -> None:
        """A wrapped line after a nested item continues the top-level item."""
        assert to_bullet_list("- A\n  - A1\n  wrapped") == ["A wrapped\n  - A1"]
        text = "- A\n  - child starts\n    and continues\n- B"
        assert to_bullet_list(text) == ["A and continues\n  - child starts", "B"]

    def test_blank_lines_ignored(self) -> None:
        """Blank lines between items do not create items."""
        assert to_bullet_list("- A\n\n\n- B\n") == ["A", "B"]

    def test_empty_and_none(self) -> None:
        """Empty input always yields an empty list."""
        assert to_bullet_list("") == []
        assert to_bullet_list(None) == []

    def test_heading_only_segment(self) -> None:
        """A segment holding only a heading has no items."""
        assert to_bullet_list("### Heading") == []

    def test_heading_inside_open_bullet_is_continuation(self) -> None:
        """A heading-looking line under an open bullet is wrapped text."""
        assert to_bullet_list("- A\n#### Note\n- B") == ["A #### Note", "B"]

    def test_plain_paragraph_is_not_a_list(self) -> None:
        """Prose without bullets yields nothing."""
        assert to_bullet_list("Just a paragraph\nof text.") == []

    def test_nested_line_without_parent_ignored(self) -> None:
        """An indented bullet with no open parent is dropped."""
        assert to_bullet_list("  - orphan\n- A") == ["A"]


class TestFencedBlocks:
    """Tests for fenced code block finders."""

    def test_first_block_by_language(self) -> None:
        """Finds the first fence with the exact language tag."""
        text = "```js\nx()\n```\n```YAML\nid: a\n```\n```yaml\nid: b\n```"
        block = find_first_fenced_block(text, "yaml")
        assert block is not None
        assert block.language == "yaml"
        assert block.code == "id: a"

    def test_first_block_requires_exact_language(self) -> None:
        """A language with a longer tag does not match."""
        assert find_first_fenced_block("```yamlx\nid: a\n```", "yaml") is None

    def test_first_block_missing(self) -> None:
        """No matching fence returns None."""
        assert find_first_fenced_block("no fences here", "yaml") is None

    def test_unterminated_fence_not_matched(self) -> None:
        """An unterminated fence is silently ignored."""
        assert find_first_fenced_block("```yaml\nid: a\n", "yaml") is None
        assert find_all_fenced_blocks("```css\na {}\n") == []

    def test_all_blocks_in_document_order(self) -> None:
        """All fences are returned in order with trimmed code."""
        text = "```css\n  a { }  \n```\ntext\n```\nplain\n```\n```TSX\n<A />\n```"
        blocks = find_all_fenced_blocks(text)
        assert [(b.language, b.code) for b in blocks] == [
            ("css", "a { }"),
            ("text", "plain"),
            ("tsx", "<A />"),
        ]
