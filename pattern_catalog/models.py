"""
Data model for indexed patterns and global rules.

All records are frozen dataclasses; ``to_dict`` produces the JSON shape
returned by the query operations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple


class PatternStatus(str, Enum):
    ALPHA = "alpha"
    BETA = "beta"
    STABLE = "stable"
    DEPRECATED = "deprecated"


class ScopeTag(str, Enum):
    UTILITY = "utility"
    STYLE = "style"
    COMPONENT = "component"
    LAYOUT = "layout"
    PAGE = "page"


PATTERN_STATUSES = tuple(status.value for status in PatternStatus)
SCOPE_TAGS = tuple(tag.value for tag in ScopeTag)


@dataclass(frozen=True)
class SelectionExcerpt:
    use_when: Tuple[str, ...] = ()
    do_not_use_when: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "use_when": list(self.use_when),
            "do_not_use_when": list(self.do_not_use_when),
        }


@dataclass(frozen=True)
class PatternSummary:
    """Small pattern record returned by list_patterns."""
    id: str
    stack: str
    status: PatternStatus
    summary: str
    tags: Tuple[str, ...] = ()
    aliases: Tuple[str, ...] = ()
    selection_excerpt: Optional[SelectionExcerpt] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "stack": self.stack,
            "status": self.status.value,
            "summary": self.summary,
            "tags": list(self.tags),
            "aliases": list(self.aliases),
        }
        if self.selection_excerpt is not None:
            data["selection_excerpt"] = self.selection_excerpt.to_dict()
        return data


@dataclass(frozen=True)
class PatternSections:
    use_when: Tuple[str, ...] = ()
    do_not_use_when: Tuple[str, ...] = ()
    must_haves: Tuple[str, ...] = ()
    customizable: Tuple[str, ...] = ()
    donts: Tuple[str, ...] = ()
    golden_pattern: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "use_when": list(self.use_when),
            "do_not_use_when": list(self.do_not_use_when),
            "must_haves": list(self.must_haves),
            "customizable": list(self.customizable),
            "donts": list(self.donts),
            "golden_pattern": self.golden_pattern,
        }


@dataclass(frozen=True)
class PatternDetail:
    """Full pattern record returned by get_pattern."""
    summary: PatternSummary
    sections: PatternSections
    source_path: str

    @property
    def id(self) -> str:
        return self.summary.id

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.summary.to_dict(),
            "sections": self.sections.to_dict(),
            "source_path": self.source_path,
        }


@dataclass(frozen=True)
class Snippet:
    language: str
    code: str

    def to_dict(self) -> Dict[str, Any]:
        return {"language": self.language, "code": self.code}


@dataclass(frozen=True)
class GlobalRule:
    id: str
    title: str
    scope: Tuple[ScopeTag, ...]
    must_haves: Tuple[str, ...] = ()
    donts: Tuple[str, ...] = ()
    acceptance_checks: Tuple[str, ...] = ()
    snippets: Tuple[Snippet, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "scope": [tag.value for tag in self.scope],
            "must_haves": list(self.must_haves),
            "donts": list(self.donts),
            "acceptance_checks": list(self.acceptance_checks),
            "snippets": [snippet.to_dict() for snippet in self.snippets],
        }


@dataclass(frozen=True)
class ApplyPolicy:
    instruction: Optional[str] = None
    scopes_in_order: Optional[Tuple[ScopeTag, ...]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.instruction is not None:
            data["instruction"] = self.instruction
        if self.scopes_in_order is not None:
            data["scopes_in_order"] = [tag.value for tag in self.scopes_in_order]
        return data


@dataclass(frozen=True)
class GlobalRulesMeta:
    id: str
    stack: str
    rule_set: Optional[str] = None
    status: Optional[PatternStatus] = None
    summary: Optional[str] = None
    cache_ttl_seconds: Optional[int] = None
    apply_policy: Optional[ApplyPolicy] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id, "stack": self.stack}
        if self.rule_set is not None:
            data["rule_set"] = self.rule_set
        if self.status is not None:
            data["status"] = self.status.value
        if self.summary is not None:
            data["summary"] = self.summary
        if self.cache_ttl_seconds is not None:
            data["cache_ttl_seconds"] = self.cache_ttl_seconds
        if self.apply_policy is not None:
            data["apply_policy"] = self.apply_policy.to_dict()
        return data


@dataclass(frozen=True)
class GlobalRulesDocument:
    meta: GlobalRulesMeta
    rules: Tuple[GlobalRule, ...] = ()


@dataclass(frozen=True)
class CacheMeta:
    catalog_revision: str
    cache_ttl_seconds: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "catalog_revision": self.catalog_revision,
            "cache_ttl_seconds": self.cache_ttl_seconds,
        }


@dataclass(frozen=True)
class PatternIndex:
    """In-memory index of one stack. Rebuilt wholesale, never mutated."""
    stack: str
    cache: CacheMeta
    by_id: Mapping[str, PatternSummary] = field(default_factory=dict)
    id_to_path: Mapping[str, Path] = field(default_factory=dict)
    all: Tuple[PatternSummary, ...] = ()
