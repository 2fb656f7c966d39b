"""
Frontmatter extractor for pattern markdown files.

Separates the ``---`` fenced metadata header from the markdown body and
decodes a small YAML subset.

Format:
---
id: dialog
status: stable
summary: "Modal dialog that traps focus"
tags: [overlay, modal]
aliases:
  - modal
  - popup
apply_policy:
  instruction: Apply utility rules first
  scopes_in_order: [utility, style]
---
## Use when
...

Supported values: quoted or bare scalars, ``true``/``false``,
``null``, single-line ``[a, b]`` arrays, block ``- item`` lists and one level
of nested mapping. Anything else is a MalformedContentError.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from .errors import MalformedContentError

FENCE = '---'


def extract_frontmatter(content: str, source: Optional[str] = None) -> Tuple[Dict[str, Any], str]:
    """Split a document into decoded frontmatter and body.

    Args:
        content: Full markdown document
        source: File path used in error messages

    Returns:
        Tuple of (metadata dict, body trimmed and newline-normalized)

    Raises:
        MalformedContentError: If the frontmatter fence is missing or
            the metadata cannot be decoded

    Example:
        >>> meta, body = extract_frontmatter('---\\nid: button\\ntags: [a, b]\\n---\\n## Use when\\n- x')
        >>> meta['tags']
        ['a', 'b']
        >>> body
        '## Use when\\n- x'
    """
    lines = content.lstrip('\ufeff').replace('\r\n', '\n').split('\n')

    if not lines or lines[0].strip() != FENCE:
        raise MalformedContentError(
            f"Missing frontmatter (document must start with '---'): {source or '<string>'}",
            path=source,
        )

    closing = None
    for i in range(1, len(lines)):
        if lines[i].strip() == FENCE:
            closing = i
            break

    if closing is None:
        raise MalformedContentError(
            f"Unterminated frontmatter (no closing '---'): {source or '<string>'}",
            path=source,
        )

    metadata = parse_metadata_text('\n'.join(lines[1:closing]), source)
    body = '\n'.join(lines[closing + 1:]).strip()
    return metadata, body


def parse_metadata_text(text: str, source: Optional[str] = None) -> Dict[str, Any]:
    """Decode the metadata text between the frontmatter fences."""
    entries = []
    for raw_line in text.split('\n'):
        line = raw_line.replace('\t', '  ').rstrip()
        stripped = line.strip()
        if not stripped or stripped.startswith('#'):
            continue
        entries.append((len(line) - len(line.lstrip(' ')), stripped))

    if entries and entries[0][0] != 0:
        raise MalformedContentError(
            f"Frontmatter must start with an unindented key: {entries[0][1]!r} ({source or '<string>'})",
            path=source,
        )

    metadata, position = _parse_mapping(entries, 0, 0, source)
    if position != len(entries):
        raise MalformedContentError(
            f"Unexpected indentation in frontmatter: {entries[position][1]!r} ({source or '<string>'})",
            path=source,
        )
    return metadata


def _parse_mapping(entries: List[Tuple[int, str]], position: int, indent: int, source: Optional[str]):
    mapping: Dict[str, Any] = {}

    while position < len(entries):
        line_indent, line = entries[position]
        if line_indent < indent:
            break
        if line_indent > indent:
            raise MalformedContentError(
                f"Unexpected indentation in frontmatter: {line!r} ({source or '<string>'})",
                path=source,
            )
        if line.startswith('-'):
            raise MalformedContentError(
                f"List item without a key: {line!r} ({source or '<string>'})",
                path=source,
            )
        if ':' not in line:
            raise MalformedContentError(
                f"Invalid metadata line: {line!r} ({source or '<string>'})",
                path=source,
            )

        key, raw_value = line.split(':', 1)
        key = key.strip()
        raw_value = raw_value.strip()
        position += 1

        if raw_value:
            mapping[key] = decode_value(raw_value)
            continue

        # Empty value: a block list, a nested mapping, or null
        if position < len(entries) and entries[position][0] > indent:
            child_indent, child_line = entries[position]
            if child_line.startswith('-'):
                mapping[key], position = _parse_block_list(entries, position, child_indent, source)
            elif indent == 0:
                mapping[key], position = _parse_mapping(entries, position, child_indent, source)
            else:
                raise MalformedContentError(
                    f"Frontmatter nesting deeper than one level under '{key}' ({source or '<string>'})",
                    path=source,
                    field=key,
                )
        elif position < len(entries) and entries[position][0] == indent and entries[position][1].startswith('-'):
            # Unindented block list ("key:\n- a")
            mapping[key], position = _parse_block_list(entries, position, indent, source)
        else:
            mapping[key] = None

    return mapping, position


def _parse_block_list(entries: List[Tuple[int, str]], position: int, indent: int, source: Optional[str]):
    values: List[Any] = []
    while position < len(entries):
        line_indent, line = entries[position]
        if line_indent != indent or not line.startswith('-'):
            break
        item = line[1:].strip()
        if item:
            values.append(decode_scalar(item))
        position += 1
    return values, position


def decode_value(raw: str) -> Any:
    """Decode an inline value: bracket array or scalar."""
    if raw.startswith('[') and raw.endswith(']'):
        return decode_inline_array(raw)
    return decode_scalar(raw)


def decode_inline_array(raw: str) -> List[str]:
    """Decode ``[a, "b", c]`` into trimmed strings, dropping empty entries."""
    inner = raw[1:-1].strip()
    if not inner:
        return []
    values = []
    for part in inner.split(','):
        value = _unquote(part.strip()).strip()
        if value:
            values.append(value)
    return values


def decode_scalar(raw: str) -> Any:
    """Decode a scalar: quoted string, boolean, null or bare string.

    Numbers stay strings (``id: 404`` is the id ``"404"``); consumers that
    need an integer convert the field themselves.
    """
    value = raw.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    if value == 'true':
        return True
    if value == 'false':
        return False
    if value in ('null', '~'):
        return None
    return value


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value
