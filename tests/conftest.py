"""Pytest fixtures for permstore tests.

Common fixtures for isolating the process-wide permission registry and
the cached configuration between tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from permstore.config import reset_config
from permstore.store import Container, PermissionRegistry, get_registry


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "feature(name): mark test as belonging to a feature. "
        "Usage: @pytest.mark.feature('permissions')"
    )


@pytest.fixture(autouse=True)
def isolated_registry() -> Iterator[PermissionRegistry]:
    """Clear permission declarations before and after each test."""
    registry = get_registry()
    registry.clear()
    yield registry
    registry.clear()


@pytest.fixture(autouse=True)
def fresh_config() -> Iterator[None]:
    """Drop any cached config so each test loads its own."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def store() -> Container:
    """Empty container with the read-write default policy."""
    return Container(default_policy="rw")


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Write a minimal config file and return its path."""
    path = tmp_path / "config.yaml"
    path.write_text("store:\n  default_policy: rw\nlogging:\n  level: WARNING\n")
    return path
