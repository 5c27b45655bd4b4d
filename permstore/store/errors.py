"""Errors raised by container operations.

Usage:
    from permstore.store.errors import AccessDenied, StoreAction

    try:
        container.read("secrets:token")
    except AccessDenied as e:
        print(e.key, e.action)   # "secrets", StoreAction.READ
"""

from __future__ import annotations

from enum import Enum


class StoreAction(str, Enum):
    """Operations that are permission-checked on a key."""

    READ = "read"
    WRITE = "write"


class AccessDenied(PermissionError):
    """Raised when a permission check fails at a path segment.

    Carries the segment that was denied, not the full path, since the
    check happens at the container level that owns that segment.
    """

    def __init__(self, key: str, action: StoreAction | str) -> None:
        self.key = key
        self.action = StoreAction(action)
        super().__init__(
            f"{self.action.value.capitalize()} access denied for key: {key}"
        )


class ContainerOwnershipError(ValueError):
    """Raised when storing a container would alias or create a cycle.

    A container may occupy at most one slot, and may not be stored inside
    itself or any of its own descendants.
    """

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Cannot store container at '{key}': {reason}")
