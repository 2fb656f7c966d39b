"""
Response wrapping for the query surface.

Every tool payload carries the contract version and the cache metadata;
the transport sends it both as JSON text and as structured content.
"""

from __future__ import annotations

import json
from typing import Any, Dict

from pattern_catalog.errors import PatternCatalogError
from pattern_catalog.models import CacheMeta

CONTRACT_VERSION = "1.0"


def wrap_response(cache: CacheMeta, **payload: Any) -> Dict[str, Any]:
    """Build ``{contract_version, catalog_revision, cache_ttl_seconds, **payload}``."""
    return {
        "contract_version": CONTRACT_VERSION,
        **cache.to_dict(),
        **payload,
    }


def json_result(payload: Dict[str, Any], is_error: bool = False) -> Dict[str, Any]:
    """Wrap a payload as a tool result (text + structured content)."""
    result: Dict[str, Any] = {
        "content": [{"type": "text", "text": json.dumps(payload, indent=2, ensure_ascii=False)}],
        "structuredContent": payload,
    }
    if is_error:
        result["isError"] = True
    return result


def error_payload(exc: Exception) -> Dict[str, Any]:
    """Describe an error as ``{code, message, details}``."""
    if isinstance(exc, PatternCatalogError):
        return {"code": exc.code, "message": str(exc), "details": exc.details()}
    return {"code": "INTERNAL_ERROR", "message": str(exc), "details": {}}
