# Container storage engine
from .permissions import (
    Permission, PermissionRegistry,
    declare_permission, resolve_permission, get_registry,
)
from .errors import AccessDenied, ContainerOwnershipError, StoreAction
from .container import Container, StoreResult, StoreValue

__all__ = [
    "Permission", "PermissionRegistry",
    "declare_permission", "resolve_permission", "get_registry",
    "AccessDenied", "ContainerOwnershipError", "StoreAction",
    "Container", "StoreResult", "StoreValue",
]
