"""
Pattern catalog for accessibility UI pattern documentation.

This module provides functionality for:
- Extracting frontmatter from pattern markdown files
- Splitting bodies into headed sections, bullet lists and code fences
- Parsing the per-stack global (baseline) rules document
- Indexing a stack's component patterns with a content fingerprint
- Caching built indexes per stack with a TTL

Content layout:
    patterns/<group>/<name>/
        global/global_rules.md   - baseline rules
        patterns.json            - selection excerpts per pattern id
        components/**/*.md       - one file per component pattern

Usage:
    from pattern_catalog import IndexCache

    cache = IndexCache(Path("content"), cache_ttl_seconds=3600)
    index = await cache.get_index("web/react")
    print(index.cache.catalog_revision, len(index.all))
"""

from .errors import (
    PatternCatalogError,
    ConfigurationError,
    MalformedContentError,
    NotFoundError,
    StackMismatchError,
    InvalidStackError,
)
from .models import (
    PatternStatus,
    ScopeTag,
    PatternSummary,
    PatternSections,
    PatternDetail,
    GlobalRule,
    GlobalRulesMeta,
    GlobalRulesDocument,
    PatternIndex,
)
from .frontmatter import extract_frontmatter
from .sections import extract_sections
from .global_rules import parse_global_rules_document
from .builder import build_index
from .cache import IndexCache

__all__ = [
    "PatternCatalogError",
    "ConfigurationError",
    "MalformedContentError",
    "NotFoundError",
    "StackMismatchError",
    "InvalidStackError",
    "PatternStatus",
    "ScopeTag",
    "PatternSummary",
    "PatternSections",
    "PatternDetail",
    "GlobalRule",
    "GlobalRulesMeta",
    "GlobalRulesDocument",
    "PatternIndex",
    "extract_frontmatter",
    "extract_sections",
    "parse_global_rules_document",
    "build_index",
    "IndexCache",
]

__version__ = "1.0.0"
