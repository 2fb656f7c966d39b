"""
Generic markdown text-block primitives.

Only the subset of markdown the pattern files use is recognized:
- ``##`` / ``###`` headings (never inside a fenced code block)
- ``-``, ``*`` and ``N.`` bullets with one level of nesting
- triple-backtick fenced code blocks
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Pattern

H2_HEADING = re.compile(r'^##\s+(.*)$')
RULE_HEADING = re.compile(r'^##\s+Rule:\s+(.*)$', re.IGNORECASE)
H3_HEADING = re.compile(r'^###\s+(.*)$')

FENCE_LINE = re.compile(r'^\s*```')

TOP_DASH_BULLET = re.compile(r'^[-*]\s+(.*)$')
TOP_NUMBERED_BULLET = re.compile(r'^\d+\.\s+(.*)$')
NESTED_BULLET = re.compile(r'^\s{2,}[-*]\s+(.*)$')

UNLABELED_LANGUAGE = "text"
_ALL_FENCES = re.compile(r'^```([A-Za-z0-9_+-]+)?[ \t]*\n(.*?)\n```', re.MULTILINE | re.DOTALL)


@dataclass(frozen=True)
class TextBlock:
    """A heading-delimited block. ``title`` is None for a preamble."""
    title: Optional[str]
    body: str


@dataclass(frozen=True)
class FencedBlock:
    language: str
    code: str


def _trim_blank_lines(lines: List[str]) -> str:
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return '\n'.join(lines[start:end])


def split_by_heading(
    text: str,
    heading: Pattern[str],
    keep_preamble: bool = False,
) -> List[TextBlock]:
    """Split text into blocks at every line matching ``heading``.

    Args:
        text: Markdown text
        heading: Compiled pattern whose first group captures the title
        keep_preamble: Return non-blank text before the first heading as an
            untitled block instead of discarding it

    Returns:
        Blocks in document order, bodies trimmed of surrounding blank lines

    Example:
        >>> blocks = split_by_heading("## Use when\\n- a\\n## Donts\\n- b", H2_HEADING)
        >>> [(b.title, b.body) for b in blocks]
        [('Use when', '- a'), ('Donts', '- b')]
    """
    blocks: List[TextBlock] = []
    current_title: Optional[str] = None
    current_lines: List[str] = []
    in_preamble = True
    in_fence = False

    def push() -> None:
        body = _trim_blank_lines(current_lines)
        if in_preamble:
            if keep_preamble and body:
                blocks.append(TextBlock(title=None, body=body))
            return
        blocks.append(TextBlock(title=current_title, body=body))

    for line in text.replace('\r\n', '\n').split('\n'):
        if FENCE_LINE.match(line):
            in_fence = not in_fence
            current_lines.append(line)
            continue

        match = None if in_fence else heading.match(line)
        if match:
            push()
            in_preamble = False
            current_title = match.group(1).strip()
            current_lines = []
        else:
            current_lines.append(line)

    push()
    return blocks


def to_bullet_list(text: Optional[str]) -> List[str]:
    """Convert a markdown segment into a list of bullet strings.

    Supports:
    - "- item" / "* item" / "1. item" at column 0
    - one level of nested "  - child" items, rendered as "parent\\n  - child"
    - wrapped lines and stray headings, joined to the open top-level item
      with a single space

    Anything that is not a list yields [].

    Example:
        >>> to_bullet_list("- A\\n  - A1\\n- B\\n  continues")
        ['A\\n  - A1', 'B continues']
    """
    if not text:
        return []

    items: List[str] = []
    current: Optional[str] = None
    nested: List[str] = []

    def flush() -> None:
        nonlocal current, nested
        if current is None:
            return
        if nested:
            items.append(current + '\n' + '\n'.join(f'  - {child}' for child in nested))
        else:
            items.append(current)
        current = None
        nested = []

    for raw_line in text.replace('\r\n', '\n').split('\n'):
        line = raw_line.replace('\t', '  ')
        stripped = line.strip()
        if not stripped:
            continue

        # Nested bullets must be checked before top-level ones
        nested_match = NESTED_BULLET.match(line)
        if nested_match and current is not None:
            nested.append(nested_match.group(1).strip())
            continue

        top_match = TOP_DASH_BULLET.match(line) or TOP_NUMBERED_BULLET.match(line)
        if top_match:
            flush()
            current = top_match.group(1).strip()
            continue

        # Soft-wrapped continuation always extends the top-level item
        if current is not None:
            current = f'{current} {stripped}'.strip()

    flush()
    return items


def find_first_fenced_block(text: str, language: str) -> Optional[FencedBlock]:
    """Find the first fenced block tagged exactly ``language`` (case-insensitive)."""
    pattern = re.compile(
        r'^```' + re.escape(language) + r'[ \t]*\n(.*?)\n```',
        re.IGNORECASE | re.MULTILINE | re.DOTALL,
    )
    match = pattern.search(text.replace('\r\n', '\n'))
    if not match:
        return None
    return FencedBlock(language=language.lower(), code=match.group(1).strip())


def find_all_fenced_blocks(text: str) -> List[FencedBlock]:
    """Collect every fenced block in document order.

    Unlabeled fences are reported with the language ``"text"``.
    """
    blocks = []
    for match in _ALL_FENCES.finditer(text.replace('\r\n', '\n')):
        language = (match.group(1) or '').strip().lower() or UNLABELED_LANGUAGE
        blocks.append(FencedBlock(language=language, code=match.group(2).strip()))
    return blocks
