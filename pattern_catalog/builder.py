"""
Repository indexer for the pattern catalog.

Builds an in-memory PatternIndex for one stack:
- reads the baseline rules, the catalog (patterns.json) and every component file
- fingerprints the whole content set (catalog_revision)
- decodes each component's frontmatter into a PatternSummary
- enriches summaries with selection excerpts from the catalog
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import re
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import aiofiles
import aiofiles.os

from .errors import ConfigurationError, MalformedContentError
from .frontmatter import extract_frontmatter
from .models import (
    PATTERN_STATUSES,
    CacheMeta,
    PatternIndex,
    PatternStatus,
    PatternSummary,
    SelectionExcerpt,
)
from .paths import get_repo_paths, list_component_files, make_relative_path

logger = logging.getLogger(__name__)

EXCERPT_MAX_ITEMS = 3
EXCERPT_MAX_LENGTH = 140

_WHITESPACE = re.compile(r'\s+')


async def read_text_file(path: Path) -> str:
    """Read a UTF-8 text file without blocking the event loop."""
    async with aiofiles.open(path, encoding="utf-8") as f:
        return await f.read()


async def file_exists(path: Path) -> bool:
    return bool(await aiofiles.os.path.isfile(path))


def compute_catalog_revision(
    stack: str,
    baseline_text: str,
    catalog_text: str,
    components: Sequence[Tuple[str, str]],
) -> str:
    """Fingerprint the content set of one stack.

    Args:
        stack: Stack identifier
        baseline_text: Full baseline rules text
        catalog_text: Full patterns.json text
        components: (relative path, content) pairs

    Returns:
        ``"sha256:<hex>"``; independent of the order of ``components``
    """
    def entry(label: str, value: str) -> str:
        return f"{label}:{len(value)}:{value}"

    parts = [
        entry("stack", stack),
        entry("baseline", baseline_text),
        entry("catalog", catalog_text),
    ]
    for path, text in sorted(components):
        parts.append(entry("component_path", path))
        parts.append(entry("component", text))

    digest = hashlib.sha256("\n\n".join(parts).encode("utf-8")).hexdigest()
    return f"sha256:{digest}"


def _normalize_bullet(value: Any, max_length: int) -> Optional[str]:
    if not isinstance(value, str):
        return None
    cleaned = _WHITESPACE.sub(" ", value).strip()
    if not cleaned:
        return None
    return cleaned[:max_length].rstrip() if len(cleaned) > max_length else cleaned


def _normalize_bullet_list(value: Any) -> Tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    bullets: List[str] = []
    for item in value:
        bullet = _normalize_bullet(item, EXCERPT_MAX_LENGTH)
        if bullet:
            bullets.append(bullet)
        if len(bullets) >= EXCERPT_MAX_ITEMS:
            break
    return tuple(bullets)


def parse_selection_excerpt(value: Any) -> Optional[SelectionExcerpt]:
    """Normalize a catalog ``selection_excerpt`` entry; None when it has no bullets."""
    if not isinstance(value, dict):
        return None

    use_when = _normalize_bullet_list(value.get("use_when"))
    do_not_use_when = _normalize_bullet_list(value.get("do_not_use_when"))
    if not use_when and not do_not_use_when:
        return None
    return SelectionExcerpt(use_when=use_when, do_not_use_when=do_not_use_when)


def build_selection_map(catalog_text: str, source: Optional[str] = None) -> Dict[str, SelectionExcerpt]:
    """Map pattern id -> selection excerpt from patterns.json.

    Accepted shapes:
        [ {...}, ... ]
        { "patterns": [ {...}, ... ] }
        { "items": [ {...}, ... ] }

    Raises:
        MalformedContentError: If the catalog is not valid JSON
    """
    try:
        parsed = json.loads(catalog_text)
    except json.JSONDecodeError as exc:
        raise MalformedContentError(
            f"patterns.json is not valid JSON: {exc} ({source or '<string>'})",
            path=source,
        ) from exc

    if isinstance(parsed, list):
        entries = parsed
    elif isinstance(parsed, dict) and isinstance(parsed.get("patterns"), list):
        entries = parsed["patterns"]
    elif isinstance(parsed, dict) and isinstance(parsed.get("items"), list):
        entries = parsed["items"]
    else:
        entries = []

    selection: Dict[str, SelectionExcerpt] = {}
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        pattern_id = entry.get("id")
        if not isinstance(pattern_id, str) or not pattern_id.strip():
            continue
        excerpt = parse_selection_excerpt(entry.get("selection_excerpt"))
        if excerpt:
            selection[pattern_id.strip()] = excerpt
    return selection


def _require_string(data: Dict[str, Any], key: str, source: str) -> str:
    value = data.get(key)
    if value is None:
        raise MalformedContentError(f"Pattern missing '{key}' in frontmatter: {source}", path=source, field=key)
    if not isinstance(value, str):
        raise MalformedContentError(
            f"Pattern '{key}' must be a string, got {value!r}: {source}", path=source, field=key
        )
    if not value.strip():
        raise MalformedContentError(f"Pattern missing '{key}' in frontmatter: {source}", path=source, field=key)
    return value.strip()


def _string_set(data: Dict[str, Any], key: str, source: str) -> Tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise MalformedContentError(
            f"Pattern '{key}' must be a list of strings like [dialog, modal]: {source}",
            path=source,
            field=key,
        )
    return tuple(sorted({item.strip() for item in value if item.strip()}))


def decode_pattern_summary(
    data: Dict[str, Any],
    stack: str,
    source: str,
    selection_excerpt: Optional[SelectionExcerpt] = None,
) -> PatternSummary:
    """Decode component frontmatter into a validated PatternSummary.

    Raises:
        MalformedContentError: Naming the file and the offending field
    """
    pattern_id = _require_string(data, "id", source)

    declared_stack = data.get("stack")
    if declared_stack is not None:
        if not isinstance(declared_stack, str):
            raise MalformedContentError(
                f"Pattern 'stack' must be a string: {source}", path=source, field="stack"
            )
        if declared_stack.strip() and declared_stack.strip() != stack:
            raise MalformedContentError(
                f"Pattern {pattern_id} declares stack={declared_stack.strip()} but is located under stack={stack}: {source}",
                path=source,
                field="stack",
            )

    summary = _require_string(data, "summary", source)

    raw_status = data.get("status")
    status_text = raw_status.strip() if isinstance(raw_status, str) else ""
    if status_text not in PATTERN_STATUSES:
        raise MalformedContentError(
            f"Invalid status '{raw_status if raw_status is not None else ''}' in {source}. "
            f"Allowed: {', '.join(PATTERN_STATUSES)}",
            path=source,
            field="status",
        )

    return PatternSummary(
        id=pattern_id,
        stack=stack,
        status=PatternStatus(status_text),
        summary=summary,
        tags=_string_set(data, "tags", source),
        aliases=_string_set(data, "aliases", source),
        selection_excerpt=selection_excerpt,
    )


async def build_index(root: Path, stack: str, cache_ttl_seconds: int) -> PatternIndex:
    """Read and index the content repository for one stack.

    Args:
        root: Content repository root (contains ``patterns/``)
        stack: Stack identifier, e.g. "web/react"
        cache_ttl_seconds: TTL reported in the index cache metadata

    Returns:
        PatternIndex with summaries sorted by id

    Raises:
        ConfigurationError: If the baseline or catalog file is missing
        MalformedContentError: On the first invalid component file
    """
    root = Path(root)
    paths = get_repo_paths(root, stack)

    if not await file_exists(paths.baseline_path):
        raise ConfigurationError(f"Missing baseline file: {paths.baseline_path}")
    if not await file_exists(paths.catalog_path):
        raise ConfigurationError(f"Missing catalog file: {paths.catalog_path}")

    # Walk the tree in a worker thread
    component_paths = await asyncio.to_thread(list_component_files, paths.components_dir)

    # Every file is read exactly once; the same text feeds hashing and parsing
    texts = await asyncio.gather(
        read_text_file(paths.baseline_path),
        read_text_file(paths.catalog_path),
        *(read_text_file(path) for path in component_paths),
    )
    baseline_text, catalog_text = texts[0], texts[1]
    component_texts = texts[2:]

    relative_paths = [make_relative_path(root, path) for path in component_paths]
    catalog_revision = compute_catalog_revision(
        stack,
        baseline_text,
        catalog_text,
        list(zip(relative_paths, component_texts)),
    )

    selection_by_id = build_selection_map(catalog_text, str(paths.catalog_path))

    by_id: Dict[str, PatternSummary] = {}
    id_to_path: Dict[str, Path] = {}

    for path, text in zip(component_paths, component_texts):
        source = str(path)
        data, _body = extract_frontmatter(text, source)
        summary = decode_pattern_summary(data, stack, source)
        excerpt = selection_by_id.get(summary.id)
        if excerpt is not None:
            summary = replace(summary, selection_excerpt=excerpt)

        if summary.id in by_id:
            raise MalformedContentError(
                f"Duplicate pattern id '{summary.id}' found in {id_to_path[summary.id]} and {source}",
                path=source,
                field="id",
            )
        by_id[summary.id] = summary
        id_to_path[summary.id] = path

    all_patterns = tuple(sorted(by_id.values(), key=lambda pattern: pattern.id))

    logger.info(
        f"Indexed {len(all_patterns)} patterns for stack {stack} (revision {catalog_revision[:19]})"
    )

    return PatternIndex(
        stack=stack,
        cache=CacheMeta(catalog_revision=catalog_revision, cache_ttl_seconds=cache_ttl_seconds),
        by_id={pattern.id: pattern for pattern in all_patterns},
        id_to_path={pattern.id: id_to_path[pattern.id] for pattern in all_patterns},
        all=all_patterns,
    )
