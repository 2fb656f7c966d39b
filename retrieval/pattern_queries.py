"""
Query operations against a built PatternIndex.

Operations:
- list_patterns: filter the cached summaries by tags and free-text query
- get_pattern: re-read one pattern file from disk and extract its sections
- get_global_rules: parse the baseline rules, optionally filtered by scope

Usage:
    from retrieval.pattern_queries import list_patterns, get_pattern

    index = await cache.get_index("web/react")
    listing = list_patterns(index, "web/react", tags=["overlay"])
    detail = await get_pattern(index, root, "web/react", "dialog")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from pattern_catalog.builder import decode_pattern_summary, read_text_file
from pattern_catalog.errors import (
    ConfigurationError,
    MalformedContentError,
    NotFoundError,
    StackMismatchError,
)
from pattern_catalog.frontmatter import extract_frontmatter
from pattern_catalog.global_rules import parse_global_rules_document
from pattern_catalog.models import CacheMeta, PatternDetail, PatternIndex, PatternSummary
from pattern_catalog.paths import get_repo_paths, make_relative_path
from pattern_catalog.sections import extract_sections

from .response import wrap_response

logger = logging.getLogger(__name__)


def _check_stack(index: PatternIndex, stack: str) -> None:
    if stack != index.stack:
        raise StackMismatchError(index.stack, stack)


def filter_patterns(
    patterns: Iterable[PatternSummary],
    tags: Optional[List[str]] = None,
    query: Optional[str] = None,
) -> List[PatternSummary]:
    """Filter summaries by tags (any match) and a substring query, sorted by id."""
    results = list(patterns)

    if tags:
        wanted = {tag.lower() for tag in tags}
        results = [p for p in results if any(tag.lower() in wanted for tag in p.tags)]

    if query and query.strip():
        q = query.lower()
        results = [
            p for p in results
            if q in p.id.lower()
            or q in p.summary.lower()
            or any(q in alias.lower() for alias in p.aliases)
        ]

    return sorted(results, key=lambda p: p.id)


def list_patterns(
    index: PatternIndex,
    stack: str,
    tags: Optional[List[str]] = None,
    query: Optional[str] = None,
) -> Dict[str, Any]:
    """List patterns of a stack.

    Args:
        index: Index built for ``stack``
        stack: Requested stack
        tags: Keep patterns carrying any of these tags (case-insensitive)
        query: Case-insensitive substring of id, summary or an alias

    Returns:
        ``{contract_version, catalog_revision, cache_ttl_seconds, stack, count, patterns}``

    Raises:
        StackMismatchError: If the index belongs to another stack
    """
    _check_stack(index, stack)
    results = filter_patterns(index.all, tags, query)
    return wrap_response(
        index.cache,
        stack=stack,
        count=len(results),
        patterns=[pattern.to_dict() for pattern in results],
    )


async def get_pattern(
    index: PatternIndex,
    root: Path,
    stack: str,
    pattern_id: str,
) -> Dict[str, Any]:
    """Fetch one pattern with its sections, read fresh from disk.

    The file is re-parsed on every call; only the file location and the
    selection excerpt come from the index.

    Raises:
        StackMismatchError: If the index belongs to another stack
        NotFoundError: If ``pattern_id`` is not in the index or its file is gone
        MalformedContentError: If the file no longer matches its index entry
    """
    _check_stack(index, stack)

    path = index.id_to_path.get(pattern_id)
    if path is None:
        raise NotFoundError(pattern_id, stack)

    source = str(path)
    try:
        raw = await read_text_file(path)
    except FileNotFoundError as exc:
        raise NotFoundError(pattern_id, stack, path=source) from exc
    data, body = extract_frontmatter(raw, source)

    cached = index.by_id[pattern_id]
    fresh = decode_pattern_summary(data, stack, source, cached.selection_excerpt)
    if fresh.id != pattern_id:
        raise MalformedContentError(
            f"Pattern id mismatch. Requested '{pattern_id}', file declares '{fresh.id}' ({source})",
            path=source,
            field="id",
        )

    drifted = [
        name for name in ("status", "summary", "tags", "aliases")
        if getattr(fresh, name) != getattr(cached, name)
    ]
    if drifted:
        logger.warning(
            f"Pattern '{pattern_id}' changed on disk since indexing ({', '.join(drifted)}); serving file contents"
        )

    detail = PatternDetail(
        summary=fresh,
        sections=extract_sections(body),
        source_path=make_relative_path(root, path),
    )
    return wrap_response(index.cache, pattern=detail.to_dict())


def _scope_filter(scope: Union[str, List[str], None]) -> Optional[set]:
    if scope is None:
        return None
    tokens = [scope] if isinstance(scope, str) else list(scope)
    return {token.strip().lower() for token in tokens if token and token.strip()}


async def get_global_rules(
    index: PatternIndex,
    root: Path,
    stack: str,
    scope: Union[str, List[str], None] = None,
    include_raw_markdown: bool = False,
) -> Dict[str, Any]:
    """Fetch the baseline rules of a stack.

    Args:
        index: Index built for ``stack``
        root: Content repository root
        stack: Requested stack
        scope: A scope tag or list of tags; keeps rules whose scope intersects it
        include_raw_markdown: Also return the unparsed file text

    Returns:
        ``{contract_version, catalog_revision, cache_ttl_seconds, stack, meta, rules}``
        where ``cache_ttl_seconds`` is the document's own TTL when declared

    Raises:
        StackMismatchError: If ``stack`` is not the indexed stack
        ConfigurationError: If the baseline file is gone
        MalformedContentError: If the baseline does not parse
    """
    _check_stack(index, stack)

    baseline_path = get_repo_paths(root, stack).baseline_path
    try:
        raw_markdown = await read_text_file(baseline_path)
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Missing baseline file: {baseline_path}") from exc
    document = parse_global_rules_document(raw_markdown, stack, str(baseline_path))

    rules = list(document.rules)
    wanted = _scope_filter(scope)
    if wanted is not None:
        rules = [rule for rule in rules if any(tag.value in wanted for tag in rule.scope)]

    ttl = document.meta.cache_ttl_seconds
    cache = CacheMeta(
        catalog_revision=index.cache.catalog_revision,
        cache_ttl_seconds=ttl if ttl is not None else index.cache.cache_ttl_seconds,
    )

    rules_payload: Dict[str, Any] = {
        "count": len(rules),
        "items": [rule.to_dict() for rule in rules],
    }
    if include_raw_markdown:
        rules_payload["raw_markdown"] = raw_markdown

    return wrap_response(
        cache,
        stack=stack,
        meta=document.meta.to_dict(),
        rules=rules_payload,
    )
