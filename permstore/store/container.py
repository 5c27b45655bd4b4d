"""Permission-checked, path-addressed container.

A Container holds values under string keys. Paths like ``"a:b:c"`` address
nested containers one segment at a time, and every segment is checked
against the permission registry before it is read or written.

Values are stored in two places:
- Declared slots: public attributes a subclass sets in ``__init__``
- Dynamic slots: an ordered dict for every other key

All slot access goes through ``_get_raw_value`` / ``_set_raw_value`` so
permission logic never needs to know which of the two holds a key.

Usage:
    store = Container()
    store.write("a:b:c", 42)
    store.read("a:b:c")     # 42
    store.entries()         # {"a": {"b": {"c": 42}}}
"""

from __future__ import annotations

import logging
import weakref
from collections.abc import Mapping
from typing import Any, Callable, Iterator, Union

from .errors import AccessDenied, ContainerOwnershipError, StoreAction
from .permissions import Permission, resolve_permission
from .values import is_plain_object, resolve_value

logger = logging.getLogger(__name__)


JSONPrimitive = Union[str, int, float, bool, None]
StoreResult = Union["Container", JSONPrimitive]
StoreValue = Union[StoreResult, list[Any], Mapping[str, Any], Callable[[], Any]]


def _configured_default_policy() -> Permission:
    # Imported here: config_schema imports this package
    from ..config import get_validated_config

    return get_validated_config().store.default_policy


class Container:
    """Hierarchical key-value store with per-key permissions.

    Permissions come from the process-wide registry (see
    ``permstore.store.permissions``). Keys with no declared permission
    use ``default_policy``.

    Nested containers are owned by exactly one slot. Storing a container
    that already sits in another slot, or storing a container inside its
    own subtree, raises ContainerOwnershipError.

    Not thread-safe. Concurrent access should be synchronized externally.
    """

    SEPARATOR = ":"

    _default_policy: Permission
    _dynamic_values: dict[str, StoreValue]
    _owner_ref: weakref.ReferenceType[Container] | None

    def __init__(self, default_policy: Permission | str | None = None) -> None:
        """Initialize an empty container.

        Args:
            default_policy: Fallback permission for undeclared keys.
                Defaults to ``store.default_policy`` from config.
        """
        self._dynamic_values = {}
        self._owner_ref = None
        if default_policy is None:
            default_policy = _configured_default_policy()
        self.default_policy = default_policy

    @property
    def default_policy(self) -> Permission:
        return self._default_policy

    @default_policy.setter
    def default_policy(self, value: Permission | str) -> None:
        self._default_policy = Permission.parse(value)

    # ------------------------------------------------------------------
    # Permission gates
    # ------------------------------------------------------------------

    def allowed_to_read(self, key: str) -> bool:
        return resolve_permission(self, key).can_read

    def allowed_to_write(self, key: str) -> bool:
        return resolve_permission(self, key).can_write

    def _require(self, key: str, action: StoreAction) -> None:
        allowed = (
            self.allowed_to_read(key)
            if action is StoreAction.READ
            else self.allowed_to_write(key)
        )
        if not allowed:
            logger.warning(f"{action.value} denied for key '{key}' on {type(self).__name__}")
            raise AccessDenied(key, action)

    # ------------------------------------------------------------------
    # Path operations
    # ------------------------------------------------------------------

    def read(self, path: str) -> StoreResult:
        """Read the value at ``path``.

        Producers are invoked on every read. Reading through a segment that
        does not hold a container returns None.

        Raises:
            AccessDenied: If any traversed segment is not readable
        """
        key, sep, rest = path.partition(self.SEPARATOR)
        self._require(key, StoreAction.READ)

        value = resolve_value(self._get_raw_value(key))
        if not sep:
            return value

        if isinstance(value, Container):
            return value.read(rest)
        return None

    def write(self, path: str, value: StoreValue) -> StoreValue:
        """Write ``value`` at ``path``, creating intermediate containers.

        Mappings are converted into nested containers. Intermediate segments
        need read permission; a segment that has to be replaced with a new
        container also needs write permission.

        Returns:
            The value actually stored at the final segment

        Raises:
            AccessDenied: If a segment is not readable/writable as required
            ContainerOwnershipError: If a container would be aliased or
                stored inside its own subtree
        """
        key, sep, rest = path.partition(self.SEPARATOR)

        if not sep:
            self._require(key, StoreAction.WRITE)
            stored = _to_store_value(value)
            self._set_raw_value(key, stored)
            return stored

        self._require(key, StoreAction.READ)
        nested = resolve_value(self._get_raw_value(key))
        if isinstance(nested, Container):
            return nested.write(rest, value)

        self._require(key, StoreAction.WRITE)
        if nested is not None:
            logger.debug(f"Replacing non-container value at '{key}' with a container")
        else:
            logger.debug(f"Creating container at '{key}'")
        nested = Container()
        self._set_raw_value(key, nested)
        return nested.write(rest, value)

    def write_entries(self, entries: Mapping[str, Any]) -> None:
        """Write each top-level entry of a plain mapping.

        Nested mappings become nested containers. Stops at the first key
        that cannot be written; keys written before it stay written.
        """
        for key, value in entries.items():
            self.write(key, _to_store_value(value))

    def entries(self) -> dict[str, Any]:
        """Snapshot the readable contents as plain nested dicts.

        Unreadable keys and keys resolving to None are omitted.
        """
        result: dict[str, Any] = {}
        for key in self._all_keys():
            if not self.allowed_to_read(key):
                continue
            value = resolve_value(self._get_raw_value(key))
            if isinstance(value, Container):
                result[key] = value.entries()
            elif value is not None:
                result[key] = value
        return result

    # ------------------------------------------------------------------
    # Slot indirection
    # ------------------------------------------------------------------

    def _declared_slots(self) -> Iterator[str]:
        return (name for name in vars(self) if not name.startswith("_"))

    def _is_declared(self, key: str) -> bool:
        return not key.startswith("_") and key in vars(self)

    def _all_keys(self) -> list[str]:
        # dict.fromkeys keeps first-seen order and drops duplicates
        return list(dict.fromkeys([*self._declared_slots(), *self._dynamic_values]))

    def _get_raw_value(self, key: str) -> StoreValue:
        if self._is_declared(key):
            return vars(self)[key]
        return self._dynamic_values.get(key)

    def _set_raw_value(self, key: str, value: StoreValue) -> None:
        self._place(key, value, declared=self._is_declared(key))

    def _place(self, key: str, value: StoreValue, declared: bool) -> None:
        previous = self._get_raw_value(key)
        if previous is not value:
            self._check_adoptable(key, value)
            if isinstance(previous, Container) and previous._owner is self:
                previous._owner_ref = None

        if declared:
            object.__setattr__(self, key, value)
            self._dynamic_values.pop(key, None)
        else:
            self._dynamic_values[key] = value

        if isinstance(value, Container):
            value._owner_ref = weakref.ref(self)

    def __setattr__(self, name: str, value: Any) -> None:
        # Public attributes are declared slots and go through the ownership guard.
        # Subclasses must call super().__init__() before assigning them.
        if name.startswith("_") or isinstance(getattr(type(self), name, None), property):
            object.__setattr__(self, name, value)
        else:
            self._place(name, value, declared=True)

    # ------------------------------------------------------------------
    # Ownership
    # ------------------------------------------------------------------

    @property
    def _owner(self) -> Container | None:
        if self._owner_ref is None:
            return None
        return self._owner_ref()

    def _check_adoptable(self, key: str, value: StoreValue) -> None:
        if not isinstance(value, Container):
            return

        node: Container | None = self
        while node is not None:
            if node is value:
                raise ContainerOwnershipError(key, "container cannot be stored inside itself")
            node = node._owner

        if value._owner is not None:
            raise ContainerOwnershipError(key, "container already belongs to another slot")

    def __repr__(self) -> str:
        keys = ", ".join(self._all_keys())
        return f"{type(self).__name__}(default_policy='{self.default_policy.value}', keys=[{keys}])"


def _to_store_value(value: Any) -> StoreValue:
    """Convert plain mappings into containers; pass everything else through."""
    if is_plain_object(value):
        container = Container()
        container.write_entries(value)
        return container
    return value
