from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional, Union

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

# Add parent directory to path for package imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
from pattern_catalog import IndexCache, __version__
from pattern_catalog.config import Settings, load_settings
from pattern_catalog.errors import (
    ConfigurationError,
    InvalidStackError,
    MalformedContentError,
    NotFoundError,
    PatternCatalogError,
    StackMismatchError,
)
from retrieval import error_payload, get_global_rules, get_pattern, json_result, list_patterns

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Most specific first
ERROR_STATUS = (
    (NotFoundError, 404),
    (StackMismatchError, 409),
    (InvalidStackError, 400),
    (MalformedContentError, 422),
    (ConfigurationError, 500),
)

TOOLS = [
    {
        "name": "list_patterns",
        "description": "List accessible UI patterns for a given stack (optionally filtered by tags/query).",
    },
    {
        "name": "get_pattern",
        "description": "Get a single pattern by id for a given stack.",
    },
    {
        "name": "get_global_rules",
        "description": "Get global baseline rules for a given stack (optionally filtered by scope).",
    },
]


class StackPayload(BaseModel):
    stack: str = Field(..., min_length=3, max_length=200, description='Stack like "web/react".')

    @field_validator("stack")
    @classmethod
    def clean_stack(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Stack cannot be empty.")
        return cleaned


class ListPatternsPayload(StackPayload):
    tags: Optional[List[str]] = Field(None, description="Match patterns with any of these tags.")
    query: Optional[str] = Field(None, max_length=500, description="Substring of id, summary or alias.")


class GetPatternPayload(StackPayload):
    id: str = Field(..., min_length=1, max_length=200)

    @field_validator("id")
    @classmethod
    def clean_id(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Pattern id cannot be empty.")
        return cleaned


class GetGlobalRulesPayload(StackPayload):
    scope: Optional[Union[str, List[str]]] = Field(
        None, description="Scope tag or list of tags (utility, style, component, layout, page)."
    )
    include_raw_markdown: bool = False


class ClearCachePayload(BaseModel):
    stack: Optional[str] = None


def status_for(exc: Exception) -> int:
    for error_type, status in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status
    return 500


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create the HTTP app with its own index cache."""
    settings = settings or load_settings()
    cache = IndexCache(settings.pattern_repo_path, settings.cache_ttl_seconds)

    app = FastAPI(title="Accessibility Pattern Catalog", version=__version__)
    app.state.settings = settings
    app.state.cache = cache

    logger.info(f"Pattern repo path: {settings.pattern_repo_path}")
    logger.info(f"Cache TTL seconds: {settings.cache_ttl_seconds}")
    if not settings.allowed_origins:
        logger.info("No ALLOWED_ORIGINS set; browser requests carrying an Origin header are rejected")

    @app.middleware("http")
    async def origin_guard(request: Request, call_next):
        # Assistants usually send no Origin header; only browsers are checked
        origin = request.headers.get("origin")
        if origin and origin not in settings.allowed_origins:
            logger.warning(f"Rejected request from origin {origin}")
            return JSONResponse({"detail": "Origin not allowed"}, status_code=403)
        return await call_next(request)

    @app.exception_handler(PatternCatalogError)
    async def catalog_error_handler(request: Request, exc: PatternCatalogError) -> JSONResponse:
        status = status_for(exc)
        if status >= 500:
            logger.error(f"{request.url.path} failed: {exc}")
        else:
            logger.info(f"{request.url.path} -> {exc.code}: {exc}")
        return JSONResponse(json_result(error_payload(exc), is_error=True), status_code=status)

    @app.get("/health")
    async def health() -> JSONResponse:
        return JSONResponse(
            {
                "ok": True,
                "contract_version": settings.contract_version,
                "pattern_repo_path": str(settings.pattern_repo_path),
                "cached_stacks": cache.cached_stacks(),
            }
        )

    @app.get("/tools")
    async def tools() -> JSONResponse:
        return JSONResponse({"tools": TOOLS})

    @app.post("/tools/list_patterns")
    async def list_patterns_tool(payload: ListPatternsPayload) -> JSONResponse:
        index = await cache.get_index(payload.stack)
        result = list_patterns(index, payload.stack, tags=payload.tags, query=payload.query)
        return JSONResponse(json_result(result))

    @app.post("/tools/get_pattern")
    async def get_pattern_tool(payload: GetPatternPayload) -> JSONResponse:
        index = await cache.get_index(payload.stack)
        result = await get_pattern(index, settings.pattern_repo_path, payload.stack, payload.id)
        return JSONResponse(json_result(result))

    @app.post("/tools/get_global_rules")
    async def get_global_rules_tool(payload: GetGlobalRulesPayload) -> JSONResponse:
        index = await cache.get_index(payload.stack)
        result = await get_global_rules(
            index,
            settings.pattern_repo_path,
            payload.stack,
            scope=payload.scope,
            include_raw_markdown=payload.include_raw_markdown,
        )
        return JSONResponse(json_result(result))

    @app.post("/cache/clear")
    async def clear_cache(payload: ClearCachePayload) -> JSONResponse:
        cache.clear(payload.stack)
        logger.info(f"Cleared index cache ({payload.stack or 'all stacks'})")
        return JSONResponse({"ok": True, "cached_stacks": cache.cached_stacks()})

    return app


app = create_app()


def run_server(host: Optional[str] = None, port: Optional[int] = None) -> None:
    settings: Settings = app.state.settings
    uvicorn.run(
        app,
        host=host or settings.host,
        port=port or settings.port,
        log_level="info",
    )


if __name__ == "__main__":
    run_server()
