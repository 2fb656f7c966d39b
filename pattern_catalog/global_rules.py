"""
Global (baseline) rules parser.

A baseline document has frontmatter describing the rule set, followed by
rule blocks:

    ## Rule: Page Title

    ```yaml
    id: global.page-title
    scope: [page]
    ```

    ### Must Haves
    - Every page sets a unique <title>

    ### Snippets
    ```html
    <title>Checkout - Shop</title>
    ```

The yaml fence is read by a deliberately narrow parser (``parse_rule_yaml``)
that understands ``id`` plus exactly two ``scope`` shapes: an inline
``[a, b]`` array or a block ``- a`` list.

Any violation fails the whole document; there is no partial result.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from .errors import MalformedContentError
from .frontmatter import decode_inline_array, extract_frontmatter
from .models import (
    PATTERN_STATUSES,
    SCOPE_TAGS,
    ApplyPolicy,
    GlobalRule,
    GlobalRulesDocument,
    GlobalRulesMeta,
    PatternStatus,
    ScopeTag,
    Snippet,
)
from .sections import normalize_heading
from .text_blocks import (
    H3_HEADING,
    RULE_HEADING,
    TextBlock,
    find_all_fenced_blocks,
    find_first_fenced_block,
    split_by_heading,
    to_bullet_list,
)

logger = logging.getLogger(__name__)

_YAML_KEY = re.compile(r'^([A-Za-z_][\w-]*)\s*:\s*(.*)$')
_YAML_ITEM = re.compile(r'^\s*-\s*(.*)$')
_NON_NEGATIVE_INT = re.compile(r'^\d+$')

SUBSECTION_TO_FIELD = {
    "must haves": "must_haves",
    "don'ts": "donts",
    "donts": "donts",
    "acceptance checks": "acceptance_checks",
    "snippets": "snippets",
}


def parse_global_rules_document(
    text: str,
    expected_stack: str,
    source: Optional[str] = None,
) -> GlobalRulesDocument:
    """Parse a baseline rules document.

    Args:
        text: Full file content
        expected_stack: Stack the file was loaded for
        source: File path used in error messages

    Returns:
        GlobalRulesDocument with rules sorted by id

    Raises:
        MalformedContentError: On any missing or invalid field
    """
    data, body = extract_frontmatter(text, source)
    meta = decode_global_rules_meta(data, expected_stack, source)

    rules = [parse_rule_block(block, source) for block in split_by_heading(body, RULE_HEADING)]
    rules.sort(key=lambda rule: rule.id)

    titles_by_id: Dict[str, str] = {}
    for rule in rules:
        if rule.id in titles_by_id:
            raise MalformedContentError(
                f"Duplicate rule id '{rule.id}' in rules '{titles_by_id[rule.id]}' and "
                f"'{rule.title}' ({source or '<string>'})",
                path=source,
                field="id",
            )
        titles_by_id[rule.id] = rule.title

    logger.debug(f"Parsed {len(rules)} global rules for {expected_stack} from {source}")
    return GlobalRulesDocument(meta=meta, rules=tuple(rules))


def decode_global_rules_meta(
    data: Dict[str, Any],
    expected_stack: str,
    source: Optional[str] = None,
) -> GlobalRulesMeta:
    """Decode baseline frontmatter into a validated GlobalRulesMeta."""
    where = source or '<string>'

    rule_set_id = _optional_string(data, "id", source) or ""
    if not rule_set_id.strip():
        raise MalformedContentError(f"Global rules file missing frontmatter 'id' ({where})", path=source, field="id")

    stack = (_optional_string(data, "stack", source) or "").strip() or expected_stack
    if stack != expected_stack:
        raise MalformedContentError(
            f"Global rules frontmatter stack='{stack}' does not match requested stack='{expected_stack}' ({where})",
            path=source,
            field="stack",
        )

    status = None
    raw_status = _optional_string(data, "status", source)
    if raw_status is not None:
        if raw_status.strip() not in PATTERN_STATUSES:
            raise MalformedContentError(
                f"Invalid status '{raw_status}' in {where}. Allowed: {', '.join(PATTERN_STATUSES)}",
                path=source,
                field="status",
            )
        status = PatternStatus(raw_status.strip())

    cache_ttl_seconds = _decode_ttl(data.get("cache_ttl_seconds"), source)

    return GlobalRulesMeta(
        id=rule_set_id.strip(),
        stack=stack,
        rule_set=_optional_string(data, "rule_set", source),
        status=status,
        summary=_optional_string(data, "summary", source),
        cache_ttl_seconds=cache_ttl_seconds,
        apply_policy=_decode_apply_policy(data.get("apply_policy"), source),
    )


def _decode_ttl(value: Any, source: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    text = value.strip() if isinstance(value, str) else None
    if text is None or not _NON_NEGATIVE_INT.match(text):
        raise MalformedContentError(
            f"'cache_ttl_seconds' must be a non-negative integer, got {value!r} ({source or '<string>'})",
            path=source,
            field="cache_ttl_seconds",
        )
    return int(text)


def _decode_apply_policy(value: Any, source: Optional[str]) -> Optional[ApplyPolicy]:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise MalformedContentError(
            f"'apply_policy' must be a mapping ({source or '<string>'})",
            path=source,
            field="apply_policy",
        )

    instruction = value.get("instruction")
    if instruction is not None and not isinstance(instruction, str):
        raise MalformedContentError(
            f"'apply_policy.instruction' must be a string ({source or '<string>'})",
            path=source,
            field="apply_policy.instruction",
        )

    scopes_in_order = None
    raw_scopes = value.get("scopes_in_order")
    if raw_scopes is not None:
        if not isinstance(raw_scopes, list):
            raise MalformedContentError(
                f"'apply_policy.scopes_in_order' must be a list ({source or '<string>'})",
                path=source,
                field="apply_policy.scopes_in_order",
            )
        scopes_in_order = tuple(
            _to_scope_tag(str(token), "apply_policy.scopes_in_order", source) for token in raw_scopes
        )

    return ApplyPolicy(instruction=instruction, scopes_in_order=scopes_in_order)


def _optional_string(data: Dict[str, Any], key: str, source: Optional[str]) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedContentError(
            f"'{key}' must be a string, got {value!r} ({source or '<string>'})",
            path=source,
            field=key,
        )
    return value


def _to_scope_tag(token: str, field: str, source: Optional[str], title: Optional[str] = None) -> ScopeTag:
    normalized = token.strip().lower()
    if normalized not in SCOPE_TAGS:
        where = f"rule '{title}' in {source or '<string>'}" if title else (source or '<string>')
        raise MalformedContentError(
            f"Invalid scope '{token}' in {where}. Allowed: {', '.join(SCOPE_TAGS)}",
            path=source,
            field=field,
        )
    return ScopeTag(normalized)


def parse_rule_block(block: TextBlock, source: Optional[str] = None) -> GlobalRule:
    """Parse one ``## Rule:`` block into a GlobalRule."""
    title = block.title or ""
    where = f"rule '{title}' ({source or '<string>'})"

    yaml_fence = find_first_fenced_block(block.body, "yaml")
    if yaml_fence is None:
        raise MalformedContentError(
            f"Missing ```yaml fenced block with id + scope in {where}",
            path=source,
            field="yaml",
        )

    rule_id, scope_tokens = parse_rule_yaml(yaml_fence.code, title, source)
    if not rule_id:
        raise MalformedContentError(f"yaml block is missing 'id' in {where}", path=source, field="id")
    if not scope_tokens:
        raise MalformedContentError(f"yaml block is missing 'scope' in {where}", path=source, field="scope")

    scope = sorted(
        {_to_scope_tag(token, "scope", source, title) for token in scope_tokens},
        key=lambda tag: tag.value,
    )

    subsections: Dict[str, str] = {}
    for sub in split_by_heading(block.body, H3_HEADING):
        field = SUBSECTION_TO_FIELD.get(normalize_heading(sub.title))
        if field:
            subsections[field] = sub.body

    snippets = sorted(
        (Snippet(language=fence.language, code=fence.code)
         for fence in find_all_fenced_blocks(subsections.get("snippets", ""))),
        key=lambda snippet: (snippet.language, snippet.code),
    )

    return GlobalRule(
        id=rule_id,
        title=title,
        scope=tuple(scope),
        must_haves=tuple(to_bullet_list(subsections.get("must_haves"))),
        donts=tuple(to_bullet_list(subsections.get("donts"))),
        acceptance_checks=tuple(to_bullet_list(subsections.get("acceptance_checks"))),
        snippets=tuple(snippets),
    )


def parse_rule_yaml(
    yaml_text: str,
    title: Optional[str] = None,
    source: Optional[str] = None,
) -> Tuple[str, List[str]]:
    """Read ``id`` and ``scope`` from a rule's yaml fence.

    Supported scope shapes (and only these):

        scope: [page, layout]

        scope:
          - page
          - layout

    A block list ends at the next unindented ``key:`` line. A bare scalar
    scope is rejected rather than guessed at.

    Returns:
        Tuple of (id, raw scope tokens); either may be empty
    """
    rule_id = ""
    scope: List[str] = []
    lines = yaml_text.replace('\r\n', '\n').split('\n')

    i = 0
    while i < len(lines):
        line = lines[i]
        i += 1
        if not line.strip() or line.lstrip().startswith('#'):
            continue

        key_match = _YAML_KEY.match(line)
        if not key_match:
            continue

        key, value = key_match.group(1), key_match.group(2).strip()
        if key == "id":
            rule_id = _strip_quotes(value)
        elif key == "scope":
            if value.startswith('[') and value.endswith(']'):
                scope = decode_inline_array(value)
            elif value:
                raise MalformedContentError(
                    f"'scope' must be a [..] array or a '- item' list in rule '{title}' ({source or '<string>'})",
                    path=source,
                    field="scope",
                )
            else:
                scope = []
                while i < len(lines):
                    item_line = lines[i]
                    if not item_line.strip():
                        i += 1
                        continue
                    if _YAML_KEY.match(item_line):
                        break
                    item_match = _YAML_ITEM.match(item_line)
                    if not item_match:
                        break
                    token = _strip_quotes(item_match.group(1).strip())
                    if token:
                        scope.append(token)
                    i += 1

    return rule_id, scope


def _strip_quotes(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1].strip()
    return value
