"""Permstore package.

This package contains:
- config: Configuration loading and management
- store: Permission registry and the path-addressed Container
- loader: Seeding containers from YAML/JSON files
"""

from __future__ import annotations

from .store import (
    AccessDenied,
    Container,
    ContainerOwnershipError,
    Permission,
    declare_permission,
    resolve_permission,
)

__version__ = "0.1.0"

__all__: list[str] = [
    "AccessDenied",
    "Container",
    "ContainerOwnershipError",
    "Permission",
    "declare_permission",
    "resolve_permission",
]
