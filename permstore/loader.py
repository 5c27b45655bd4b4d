"""Seed containers from YAML or JSON files.

A seed document looks like:

    default_policy: rw
    permissions:
      secrets: w
    entries:
      app:
        name: demo
      secrets:
        token: abc

``permissions`` are declared on the root instance only. ``default_policy``,
``permissions`` and ``entries`` are reserved: a document using any of them
may use nothing else, and ``entries`` may then be omitted. A document using
none of them is taken to be the entries mapping itself.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from .store.container import Container
from .store.permissions import Permission, declare_permission

logger = logging.getLogger(__name__)

_DOCUMENT_KEYS = frozenset({"default_policy", "permissions", "entries"})


def load_entries(path: str | Path) -> dict[str, Any]:
    """Read a mapping from a YAML (or JSON) file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the document is not a mapping
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Seed file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Seed file {path} must contain a mapping, got {type(data).__name__}")
    return data


def build_container(
    entries: Mapping[str, Any],
    permissions: Mapping[str, Permission | str] | None = None,
    default_policy: Permission | str | None = None,
) -> Container:
    """Create a root container, declare permissions, then import entries.

    Permissions are declared before entries are written, so a key declared
    read-only cannot be seeded either.

    Raises:
        ValueError: If a permission string is unknown
        AccessDenied: If an entry targets a key that is not writable
    """
    container = Container(default_policy=default_policy)
    for key, permission in (permissions or {}).items():
        declare_permission(container, key, permission)
    container.write_entries(entries)
    logger.info(f"Seeded container with {len(entries)} top-level entries")
    return container


def load_container(
    path: str | Path,
    default_policy: Permission | str | None = None,
) -> Container:
    """Build a container from a seed document on disk.

    Args:
        path: YAML/JSON seed file
        default_policy: Overrides the document's ``default_policy``

    Raises:
        ValueError: If reserved keys are mixed with other top-level keys,
            or a section has the wrong shape
    """
    document = load_entries(path)

    reserved = set(document) & _DOCUMENT_KEYS
    if reserved:
        unexpected = sorted(str(key) for key in set(document) - _DOCUMENT_KEYS)
        if unexpected:
            raise ValueError(
                f"Seed file {path} mixes {sorted(reserved)} with other keys {unexpected}; "
                f"move them under 'entries'"
            )
        entries = document.get("entries") or {}
        permissions = document.get("permissions") or {}
        if default_policy is None:
            default_policy = document.get("default_policy")
    else:
        entries = document
        permissions = {}

    if not isinstance(entries, dict):
        raise ValueError(f"'entries' in {path} must be a mapping")
    if not isinstance(permissions, dict):
        raise ValueError(f"'permissions' in {path} must be a mapping")

    return build_container(entries, permissions=permissions, default_policy=default_policy)
