"""
Retrieval package for the pattern query surface.

Components:
- pattern_queries: list_patterns, get_pattern, get_global_rules
- response: contract-version wrapping and tool result shapes
"""

from .pattern_queries import list_patterns, get_pattern, get_global_rules
from .response import CONTRACT_VERSION, json_result, error_payload

__all__ = [
    'list_patterns',
    'get_pattern',
    'get_global_rules',
    'CONTRACT_VERSION',
    'json_result',
    'error_payload',
]
