"""Value-shape helpers shared by container operations."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def is_plain_object(value: Any) -> bool:
    """Check whether a value should become a nested container on write.

    Mappings qualify. Lists, primitives, callables and containers do not
    (containers are not Mappings).
    """
    return isinstance(value, Mapping)


def is_producer(value: Any) -> bool:
    """Check whether a stored value is a zero-argument producer."""
    return callable(value)


def resolve_value(value: Any) -> Any:
    """Resolve a raw slot value, invoking producers.

    Producers are called on every resolution; results are never cached.
    """
    if is_producer(value):
        return value()
    return value
