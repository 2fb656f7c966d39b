#!/usr/bin/env python3
"""
Smoke check a running pattern catalog server.

Calls /health, then list_patterns, get_global_rules and get_pattern (for the
first listed pattern) and checks each tool result carries structuredContent.

Usage:
    python Backend/smoke_remote.py http://localhost:3000
    python Backend/smoke_remote.py https://patterns.example.com --stack android/compose
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Dict

import requests

DEFAULT_TIMEOUT = 30


class SmokeError(RuntimeError):
    """Raised when a smoke check fails."""
    pass


def call_tool(base_url: str, name: str, arguments: Dict, timeout: float = DEFAULT_TIMEOUT) -> Dict:
    response = requests.post(f"{base_url}/tools/{name}", json=arguments, timeout=timeout)
    if response.status_code >= 400:
        raise SmokeError(f"{name} failed with {response.status_code}: {response.text}")

    result = response.json()
    structured = result.get("structuredContent")
    if not isinstance(structured, dict):
        raise SmokeError(f"{name} missing structuredContent in tool response.")
    return structured


def run_smoke(base_url: str, stack: str, timeout: float = DEFAULT_TIMEOUT) -> Dict:
    base_url = base_url.rstrip("/")

    health = requests.get(f"{base_url}/health", timeout=timeout)
    if health.status_code != 200:
        raise SmokeError(f"/health returned {health.status_code}")
    print(f"Connected. Health: {health.json()}")

    listing = call_tool(base_url, "list_patterns", {"stack": stack}, timeout)
    patterns = listing.get("patterns") or []
    if not patterns:
        raise SmokeError("list_patterns returned no patterns; cannot run get_pattern smoke check.")
    first_id = patterns[0]["id"]

    rules = call_tool(base_url, "get_global_rules", {"stack": stack}, timeout)
    pattern = call_tool(base_url, "get_pattern", {"stack": stack, "id": first_id}, timeout)

    return {
        "list_patterns": listing.get("count"),
        "get_global_rules": rules.get("rules", {}).get("count"),
        "get_pattern": pattern.get("pattern", {}).get("id"),
        "catalog_revision": listing.get("catalog_revision"),
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Smoke check a pattern catalog server")
    parser.add_argument("base_url", help="Server base URL, e.g. http://localhost:3000")
    parser.add_argument("--stack", default="web/react", help="Stack to query (default: web/react)")
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help="Request timeout in seconds")
    args = parser.parse_args()

    try:
        summary = run_smoke(args.base_url, args.stack, args.timeout)
    except (SmokeError, requests.RequestException) as e:
        print(f"✗ Smoke check failed: {e}")
        return 1

    print("✓ structuredContent checks passed:")
    print(json.dumps(summary, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
