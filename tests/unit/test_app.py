"""Tests for the HTTP tool surface."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from Backend.app import create_app
from pattern_catalog.config import Settings

from tests.conftest import STACK


@pytest.fixture
def client(content_root: Path) -> TestClient:
    settings = Settings(
        pattern_repo_path=content_root,
        cache_ttl_seconds=60,
        allowed_origins=["https://catalog.example.com"],
    )
    return TestClient(create_app(settings))


class TestServiceEndpoints:
    """Health, tool listing and cache control."""

    def test_health(self, client: TestClient, content_root: Path) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        assert body["contract_version"] == "v1"
        assert body["pattern_repo_path"] == str(content_root)
        assert body["cached_stacks"] == []

    def test_tools(self, client: TestClient) -> None:
        """The three query tools are advertised."""
        names = [tool["name"] for tool in client.get("/tools").json()["tools"]]
        assert names == ["list_patterns", "get_pattern", "get_global_rules"]

    def test_cache_clear(self, client: TestClient) -> None:
        """Queries populate the cache and clearing empties it."""
        client.post("/tools/list_patterns", json={"stack": STACK})
        assert client.get("/health").json()["cached_stacks"] == [STACK]

        response = client.post("/cache/clear", json={})
        assert response.status_code == 200
        assert response.json() == {"ok": True, "cached_stacks": []}


class TestToolEndpoints:
    """Successful tool calls."""

    def test_list_patterns(self, client: TestClient) -> None:
        """Results carry both text content and structured content."""
        response = client.post("/tools/list_patterns", json={"stack": STACK, "tags": ["overlay"]})
        assert response.status_code == 200
        result = response.json()
        assert result["content"][0]["type"] == "text"
        assert [p["id"] for p in result["structuredContent"]["patterns"]] == ["dialog"]
        assert "isError" not in result

    def test_get_pattern(self, client: TestClient) -> None:
        response = client.post("/tools/get_pattern", json={"stack": STACK, "id": " button "})
        assert response.status_code == 200
        pattern = response.json()["structuredContent"]["pattern"]
        assert pattern["id"] == "button"
        assert pattern["sections"]["must_haves"] == [
            "Use the native <button> element",
            "Provide an accessible name",
        ]

    def test_get_global_rules_with_scope(self, client: TestClient) -> None:
        response = client.post("/tools/get_global_rules", json={"stack": STACK, "scope": "page"})
        assert response.status_code == 200
        structured = response.json()["structuredContent"]
        assert structured["cache_ttl_seconds"] == 86400
        assert [rule["id"] for rule in structured["rules"]["items"]] == ["global.page-title"]


class TestToolErrors:
    """Errors map to status codes and error payloads."""

    def test_not_found(self, client: TestClient) -> None:
        response = client.post("/tools/get_pattern", json={"stack": STACK, "id": "carousel"})
        assert response.status_code == 404
        result = response.json()
        assert result["isError"] is True
        assert result["structuredContent"]["code"] == "PATTERN_NOT_FOUND"
        assert result["structuredContent"]["details"] == {"id": "carousel", "stack": STACK}

    def test_deleted_component_is_not_found(self, client: TestClient, components_dir: Path) -> None:
        """A component removed after indexing answers 404, not a server error."""
        assert client.post("/tools/list_patterns", json={"stack": STACK}).status_code == 200
        (components_dir / "button.md").unlink()
        response = client.post("/tools/get_pattern", json={"stack": STACK, "id": "button"})
        assert response.status_code == 404
        structured = response.json()["structuredContent"]
        assert structured["code"] == "PATTERN_NOT_FOUND"
        assert structured["details"]["path"].endswith("button.md")

    def test_invalid_stack(self, client: TestClient) -> None:
        response = client.post("/tools/list_patterns", json={"stack": "web/react/extra"})
        assert response.status_code == 400
        assert response.json()["structuredContent"]["code"] == "INVALID_STACK"

    def test_missing_stack_files(self, client: TestClient) -> None:
        """A stack without content is a configuration error."""
        response = client.post("/tools/list_patterns", json={"stack": "ios/swiftui"})
        assert response.status_code == 500
        assert response.json()["structuredContent"]["code"] == "CONFIGURATION_ERROR"

    def test_malformed_content(self, client: TestClient, write_component) -> None:
        write_component("broken.md", "---\nid: broken\nstatus: final\nsummary: Broken\n---\n")
        response = client.post("/tools/list_patterns", json={"stack": STACK})
        assert response.status_code == 422
        structured = response.json()["structuredContent"]
        assert structured["code"] == "MALFORMED_CONTENT"
        assert structured["details"]["field"] == "status"

    def test_request_validation(self, client: TestClient) -> None:
        """Payloads failing validation are rejected before any lookup."""
        assert client.post("/tools/get_pattern", json={"stack": STACK}).status_code == 422
        assert client.post("/tools/list_patterns", json={"stack": "   "}).status_code == 422


class TestOriginGuard:
    """Browser origin checks."""

    def test_no_origin_allowed(self, client: TestClient) -> None:
        assert client.get("/health").status_code == 200

    def test_allowed_origin(self, client: TestClient) -> None:
        response = client.get("/health", headers={"Origin": "https://catalog.example.com"})
        assert response.status_code == 200

    def test_disallowed_origin(self, client: TestClient) -> None:
        response = client.get("/health", headers={"Origin": "https://evil.example.com"})
        assert response.status_code == 403
        assert response.json() == {"detail": "Origin not allowed"}
