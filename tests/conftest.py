"""Shared pytest fixtures for pattern catalog tests."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Callable

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"

STACK = "web/react"

# ============================================================================
# Path Fixtures
# ============================================================================


@pytest.fixture
def fixtures_dir() -> Path:
    """Get test fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def content_root(tmp_path: Path) -> Path:
    """Copy the fixture content repository into a temp dir tests may modify."""
    root = tmp_path / "content"
    shutil.copytree(FIXTURES_DIR / "content", root)
    return root


@pytest.fixture
def components_dir(content_root: Path) -> Path:
    """Components directory of the web/react fixture stack."""
    return content_root / "patterns" / "web" / "react" / "components"


@pytest.fixture
def write_component(components_dir: Path) -> Callable[[str, str], Path]:
    """Write a component file relative to the web/react components dir."""

    def _write(relative_path: str, text: str) -> Path:
        path = components_dir / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
