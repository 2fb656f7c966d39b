"""
Maps a stack identifier to file locations in the content repository.

Layout:
    patterns/<group>/<name>/global/global_rules.md   - baseline rules
    patterns/<group>/<name>/patterns.json            - catalog / selection excerpts
    patterns/<group>/<name>/components/**/*.md       - component patterns (.md, .mdx, .markdown)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List

from .errors import InvalidStackError

PATTERNS_DIRNAME = "patterns"
COMPONENT_SUFFIXES = (".md", ".mdx", ".markdown")


@dataclass(frozen=True)
class RepoPaths:
    stack_dir: Path
    baseline_path: Path
    catalog_path: Path
    components_dir: Path


def parse_stack(stack: str) -> List[str]:
    """Split ``group/name`` into its two parts.

    Raises:
        InvalidStackError: If the stack is not exactly two non-empty parts
    """
    parts = stack.split("/") if isinstance(stack, str) else []
    if len(parts) != 2 or any(not part.strip() or part in (".", "..") for part in parts):
        raise InvalidStackError(f"Invalid stack format: {stack!r}. Expected \"group/name\" like \"web/react\".")
    return parts


def get_repo_paths(root: Path, stack: str) -> RepoPaths:
    """Resolve the baseline, catalog and components locations for a stack."""
    group, name = parse_stack(stack)
    stack_dir = Path(root) / PATTERNS_DIRNAME / group / name
    return RepoPaths(
        stack_dir=stack_dir,
        baseline_path=stack_dir / "global" / "global_rules.md",
        catalog_path=stack_dir / "patterns.json",
        components_dir=stack_dir / "components",
    )


def list_component_files(components_dir: Path) -> List[Path]:
    """List component markdown files recursively, deduplicated and sorted by POSIX path.

    The ordering is independent of directory enumeration order.
    """
    components_dir = Path(components_dir)
    if not components_dir.is_dir():
        return []

    unique = {}
    for path in components_dir.rglob("*"):
        if path.suffix in COMPONENT_SUFFIXES and path.is_file():
            unique[to_posix_path(path)] = path
    return [unique[key] for key in sorted(unique)]


def discover_stacks(root: Path) -> List[str]:
    """Find every ``group/name`` stack that has a baseline rules file."""
    patterns_dir = Path(root) / PATTERNS_DIRNAME
    if not patterns_dir.is_dir():
        return []

    stacks = []
    for baseline in patterns_dir.glob("*/*/global/global_rules.md"):
        stack_dir = baseline.parent.parent
        stacks.append(f"{stack_dir.parent.name}/{stack_dir.name}")
    return sorted(stacks)


def to_posix_path(path) -> str:
    """Normalize OS path separators to forward slashes."""
    return str(path).replace(os.sep, "/")


def make_relative_path(root: Path, path: Path) -> str:
    """POSIX path of ``path`` relative to ``root`` (falls back to the full path)."""
    try:
        relative = Path(path).resolve().relative_to(Path(root).resolve())
    except ValueError:
        relative = Path(path)
    return to_posix_path(relative)
