"""
Error taxonomy for the pattern catalog.

Every error carries a stable ``code`` so the transport layer can tell
"bad content" apart from "not found" and "stack mismatch".
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class PatternCatalogError(Exception):
    """Base exception for all catalog errors."""

    code = "CATALOG_ERROR"

    def details(self) -> Dict[str, Any]:
        return {}


class ConfigurationError(PatternCatalogError):
    """Raised when required repository files or settings are missing."""

    code = "CONFIGURATION_ERROR"


class MalformedContentError(PatternCatalogError, ValueError):
    """Raised when a content file violates the authoring format."""

    code = "MALFORMED_CONTENT"

    def __init__(self, message: str, path: Optional[str] = None, field: Optional[str] = None):
        super().__init__(message)
        self.path = path
        self.field = field

    def details(self) -> Dict[str, Any]:
        details = {}
        if self.path:
            details["path"] = self.path
        if self.field:
            details["field"] = self.field
        return details


class NotFoundError(PatternCatalogError, LookupError):
    """Raised when a pattern id is not in the index, or its file vanished since indexing."""

    code = "PATTERN_NOT_FOUND"

    def __init__(self, pattern_id: str, stack: str, path: Optional[str] = None):
        message = f"No pattern with id '{pattern_id}' for stack '{stack}'"
        if path:
            message += f" (indexed file is gone: {path})"
        super().__init__(message)
        self.pattern_id = pattern_id
        self.stack = stack
        self.path = path

    def details(self) -> Dict[str, Any]:
        details = {"id": self.pattern_id, "stack": self.stack}
        if self.path:
            details["path"] = self.path
        return details


class StackMismatchError(PatternCatalogError):
    """Raised when a query is run against an index built for another stack."""

    code = "STACK_MISMATCH"

    def __init__(self, index_stack: str, requested_stack: str):
        super().__init__(f"Stack mismatch. Index={index_stack}, requested={requested_stack}")
        self.index_stack = index_stack
        self.requested_stack = requested_stack

    def details(self) -> Dict[str, Any]:
        return {"index_stack": self.index_stack, "requested_stack": self.requested_stack}


class InvalidStackError(PatternCatalogError, ValueError):
    """Raised when a stack identifier is not of the form ``group/name``."""

    code = "INVALID_STACK"
