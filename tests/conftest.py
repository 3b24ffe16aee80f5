"""Shared fixtures for unit and integration tests."""

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
from loguru import logger

from gitops_promoter.workspace import Workspace


@pytest.fixture(autouse=True)
def _quiet_logging() -> Iterator[None]:
    """Keep loguru at WARNING so command output does not flood test logs."""
    logger.remove()
    logger.add(sys.stderr, level="WARNING")
    yield
    logger.remove()


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    """A workspace rooted in a fresh temporary directory."""
    root = tmp_path / "workspace"
    root.mkdir()
    return Workspace(root=root)
