"""Per-key access permissions for containers.

This module defines:
- Permission: Enum of the four grants a key can carry
- PermissionRegistry: owner -> key -> Permission table with inheritance
- declare_permission / resolve_permission: helpers over the process-wide registry

Owners are either a container class or a single container instance.
Resolution for an instance checks, in order:
1. A permission declared on that exact instance
2. Permissions declared on its class and base classes, nearest first (MRO)
3. The instance's own ``default_policy``

Usage:
    class Settings(Container):
        ...

    declare_permission(Settings, "api_key", "w")      # every Settings
    declare_permission(settings, "api_key", "rw")     # just this one
    resolve_permission(settings, "api_key")           # Permission.READ_WRITE
"""

from __future__ import annotations

import logging
import weakref
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class Permission(str, Enum):
    """Access grants for a single key.

    Using str, Enum allows YAML/JSON round-tripping and string comparison.
    """

    READ = "r"
    """Key may be read but not written."""

    WRITE = "w"
    """Key may be written but not read."""

    READ_WRITE = "rw"
    """Key may be read and written."""

    NONE = "none"
    """Key may be neither read nor written."""

    @property
    def can_read(self) -> bool:
        return self in (Permission.READ, Permission.READ_WRITE)

    @property
    def can_write(self) -> bool:
        return self in (Permission.WRITE, Permission.READ_WRITE)

    @classmethod
    def parse(cls, value: Permission | str) -> Permission:
        """Coerce a string into a Permission.

        Accepts the enum values ("r", "w", "rw", "none") and the long
        spellings used in config files ("read", "write", "read-write").

        Raises:
            ValueError: If the value names no permission
        """
        if isinstance(value, Permission):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            normalized = _PERMISSION_ALIASES.get(normalized, normalized)
            try:
                return cls(normalized)
            except ValueError:
                pass
        raise ValueError(f"Unknown permission: {value!r}")


_PERMISSION_ALIASES: dict[str, str] = {
    "read": "r",
    "write": "w",
    "read-write": "rw",
    "read_write": "rw",
    "wr": "rw",
}


class PermissionRegistry:
    """Permission table keyed by container class or container instance.

    Class-level declarations live in a plain dict; instance-level overrides
    live in a WeakKeyDictionary so a collected container takes its
    overrides with it.

    Entries are only added or overwritten. ``clear()`` exists for tests.
    """

    _type_permissions: dict[type, dict[str, Permission]]
    _instance_permissions: weakref.WeakKeyDictionary[Any, dict[str, Permission]]

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._type_permissions = {}
        self._instance_permissions = weakref.WeakKeyDictionary()

    def _lookup_table(self, owner: Any) -> dict[str, Permission] | None:
        if isinstance(owner, type):
            return self._type_permissions.get(owner)
        return self._instance_permissions.get(owner)

    def _ensure_table(self, owner: Any) -> dict[str, Permission]:
        if isinstance(owner, type):
            return self._type_permissions.setdefault(owner, {})
        table = self._instance_permissions.get(owner)
        if table is None:
            table = {}
            self._instance_permissions[owner] = table
        return table

    def set_permission(
        self,
        owner: Any,
        key: str,
        permission: Permission | str,
    ) -> None:
        """Record the permission for ``key`` under ``owner``.

        Args:
            owner: A container class (applies to it and its subclasses)
                or a container instance (applies to that object only)
            key: Key name at the owner's level (a single path segment)
            permission: Permission or its string form

        Raises:
            ValueError: If the permission string is unknown
        """
        parsed = Permission.parse(permission)
        table = self._ensure_table(owner)
        previous = table.get(key)
        table[key] = parsed
        if previous is not None and previous != parsed:
            logger.debug(
                f"Permission for '{key}' on {_describe(owner)} changed "
                f"from '{previous.value}' to '{parsed.value}'"
            )
        else:
            logger.debug(f"Declared '{parsed.value}' for '{key}' on {_describe(owner)}")

    def resolve(self, instance: Any, key: str) -> Permission:
        """Resolve the effective permission for ``key`` on ``instance``.

        Never fails: falls back to ``instance.default_policy``.
        """
        instance_table = self._instance_permissions.get(instance)
        if instance_table is not None and key in instance_table:
            return instance_table[key]

        for klass in type(instance).__mro__:
            class_table = self._type_permissions.get(klass)
            if class_table is not None and key in class_table:
                return class_table[key]

        return Permission.parse(instance.default_policy)

    def permissions_for(self, owner: Any) -> dict[str, Permission]:
        """Get a copy of the permissions declared directly on ``owner``.

        Inherited declarations are not included.
        """
        table = self._lookup_table(owner)
        return dict(table) if table else {}

    def clear(self) -> None:
        """Clear all declarations. Use with caution - mainly for testing."""
        self._type_permissions.clear()
        self._instance_permissions.clear()


def _describe(owner: Any) -> str:
    if isinstance(owner, type):
        return f"class {owner.__qualname__}"
    return f"{type(owner).__qualname__} instance at {id(owner):#x}"


# Process-wide registry consulted by every Container
_default_registry = PermissionRegistry()


def get_registry() -> PermissionRegistry:
    """Get the process-wide permission registry."""
    return _default_registry


def declare_permission(owner: Any, key: str, permission: Permission | str) -> None:
    """Declare a permission on a container class or instance.

    See PermissionRegistry.set_permission.
    """
    _default_registry.set_permission(owner, key, permission)


def resolve_permission(instance: Any, key: str) -> Permission:
    """Resolve the effective permission for ``key`` on ``instance``."""
    return _default_registry.resolve(instance, key)
