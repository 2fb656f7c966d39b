#!/usr/bin/env python3
"""
Validate pattern content before it is served.

This script, for each stack:
1. Builds the pattern index (frontmatter, ids, statuses, catalog JSON)
2. Parses the global rules document
3. Optionally checks that component file names match their ids
4. Reports counts and the catalog revision

Usage:
    python Ingress/validate_patterns.py
    python Ingress/validate_patterns.py --root ../accessibility-patterns --stack web/react
    python Ingress/validate_patterns.py --check-filenames --json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))
from pattern_catalog.builder import build_index, read_text_file
from pattern_catalog.errors import PatternCatalogError
from pattern_catalog.global_rules import parse_global_rules_document
from pattern_catalog.paths import discover_stacks, get_repo_paths

logger = logging.getLogger(__name__)


async def validate_stack(root: Path, stack: str, check_filenames: bool = False) -> Dict:
    """Validate one stack and return a report dictionary.

    Raises:
        PatternCatalogError: On the first content error
    """
    index = await build_index(root, stack, cache_ttl_seconds=0)

    baseline_path = get_repo_paths(root, stack).baseline_path
    document = parse_global_rules_document(
        await read_text_file(baseline_path), stack, str(baseline_path)
    )

    warnings: List[str] = []
    if check_filenames:
        for pattern_id, path in index.id_to_path.items():
            if path.stem != pattern_id:
                warnings.append(
                    f"{path}: filename should match id. Expected \"{pattern_id}{path.suffix}\" but found \"{path.name}\""
                )

    return {
        "stack": stack,
        "ok": True,
        "patterns": len(index.all),
        "rules": len(document.rules),
        "catalog_revision": index.cache.catalog_revision,
        "warnings": warnings,
    }


def main():
    parser = argparse.ArgumentParser(
        description="Validate accessibility pattern content",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Validate every stack under the current directory
    python Ingress/validate_patterns.py

    # Validate one stack in another content repo
    python Ingress/validate_patterns.py --root ../content --stack web/react

    # Also warn when file names differ from pattern ids
    python Ingress/validate_patterns.py --check-filenames
        """
    )

    parser.add_argument(
        "--root",
        type=Path,
        default=Path.cwd(),
        help="Content repository root containing patterns/ (default: current directory)"
    )

    parser.add_argument(
        "--stack",
        action="append",
        help="Stack to validate, e.g. web/react (repeatable; default: all stacks found)"
    )

    parser.add_argument(
        "--check-filenames",
        action="store_true",
        help="Warn when a component file name does not match its id"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print a JSON report instead of text"
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show detailed output"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    stacks = args.stack or discover_stacks(args.root)
    if not stacks:
        print(f"\n✗ Error: No stacks found under {args.root / 'patterns'}")
        return 1

    reports = []
    for stack in stacks:
        try:
            reports.append(asyncio.run(validate_stack(args.root, stack, args.check_filenames)))
        except PatternCatalogError as e:
            reports.append({"stack": stack, "ok": False, "error": str(e), "code": e.code})

    failed = [report for report in reports if not report["ok"]]

    if args.json:
        print(json.dumps({"ok": not failed, "stacks": reports}, indent=2))
        return 0 if not failed else 1

    print("\n" + "=" * 70)
    print("Pattern Content Validation")
    print("=" * 70)
    print(f"Root: {args.root}")

    for report in reports:
        if report["ok"]:
            print(f"\n✓ {report['stack']}: {report['patterns']} patterns, {report['rules']} global rules")
            if args.verbose:
                print(f"    Revision: {report['catalog_revision']}")
            for warning in report["warnings"]:
                print(f"  ⚠ {warning}")
        else:
            print(f"\n✗ {report['stack']}: [{report['code']}] {report['error']}")

    print("\n" + "=" * 70)
    if failed:
        print(f"  {len(failed)} of {len(reports)} stack(s) failed. Fix the issues above, then rerun.")
    else:
        print(f"  All {len(reports)} stack(s) passed.")
    print("=" * 70 + "\n")

    return 0 if not failed else 1


if __name__ == "__main__":
    sys.exit(main())
