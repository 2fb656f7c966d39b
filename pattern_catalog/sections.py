"""
Section mapper for component pattern files.

Turns a pattern body (frontmatter removed) into a fixed set of sections:
- bullet sections become lists of strings
- "Golden Pattern" is preserved as raw markdown (it usually holds code fences)

Unknown headings are ignored so new authoring sections do not break parsing.
"""

from __future__ import annotations

import re
from typing import Dict, Optional

from .models import PatternSections
from .text_blocks import H2_HEADING, split_by_heading, to_bullet_list

# Normalized heading text -> PatternSections field
HEADING_TO_FIELD: Dict[str, str] = {
    "use when": "use_when",
    "do not use when": "do_not_use_when",
    "must haves": "must_haves",
    "customizable": "customizable",
    "don'ts": "donts",
    "donts": "donts",
    "golden pattern": "golden_pattern",
}

_APOSTROPHES = str.maketrans({"\u2019": "'", "\u2018": "'", "\u02bc": "'", "\u00a0": " "})
_WHITESPACE = re.compile(r'\s+')


def normalize_heading(title: Optional[str]) -> str:
    """Normalize a heading for lookup: ASCII apostrophes, lowercase, no trailing ':' or '.'."""
    if not title:
        return ""
    text = _WHITESPACE.sub(" ", title.translate(_APOSTROPHES)).strip().lower()
    return text.rstrip(":.").strip()


def extract_sections(body: str) -> PatternSections:
    """Extract the known sections from a pattern body.

    Args:
        body: Markdown content without frontmatter

    Returns:
        PatternSections with every list present (possibly empty)

    Example:
        >>> sections = extract_sections("## Must Haves\\n- A\\n  - A1\\n- B")
        >>> list(sections.must_haves)
        ['A\\n  - A1', 'B']
    """
    raw_by_field: Dict[str, str] = {}

    for block in split_by_heading(body, H2_HEADING):
        field = HEADING_TO_FIELD.get(normalize_heading(block.title))
        if field:
            raw_by_field[field] = block.body.strip()

    golden = raw_by_field.get("golden_pattern", "").strip()

    return PatternSections(
        use_when=tuple(to_bullet_list(raw_by_field.get("use_when"))),
        do_not_use_when=tuple(to_bullet_list(raw_by_field.get("do_not_use_when"))),
        must_haves=tuple(to_bullet_list(raw_by_field.get("must_haves"))),
        customizable=tuple(to_bullet_list(raw_by_field.get("customizable"))),
        donts=tuple(to_bullet_list(raw_by_field.get("donts"))),
        golden_pattern=golden or None,
    )
