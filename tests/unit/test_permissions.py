"""Unit tests for Permission and PermissionRegistry.

Covers parsing, grant predicates, and the resolution order:
instance override, then class hierarchy (nearest first), then default policy.
"""

import gc

import pytest

from permstore.store import (
    AccessDenied,
    Container,
    Permission,
    PermissionRegistry,
    declare_permission,
    resolve_permission,
)


class Settings(Container):
    """Container subclass used for class-level declarations."""


class ProductionSettings(Settings):
    """Second level of inheritance."""


class TestPermissionEnum:
    """Tests for the Permission enum."""

    def test_values(self) -> None:
        assert Permission.READ.value == "r"
        assert Permission.WRITE.value == "w"
        assert Permission.READ_WRITE.value == "rw"
        assert Permission.NONE.value == "none"

    def test_grants(self) -> None:
        assert Permission.READ.can_read and not Permission.READ.can_write
        assert Permission.WRITE.can_write and not Permission.WRITE.can_read
        assert Permission.READ_WRITE.can_read and Permission.READ_WRITE.can_write
        assert not Permission.NONE.can_read and not Permission.NONE.can_write

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("r", Permission.READ),
            ("read", Permission.READ),
            ("W", Permission.WRITE),
            ("read-write", Permission.READ_WRITE),
            (" rw ", Permission.READ_WRITE),
            ("none", Permission.NONE),
            (Permission.NONE, Permission.NONE),
        ],
    )
    def test_parse(self, raw: str, expected: Permission) -> None:
        assert Permission.parse(raw) is expected

    def test_parse_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unknown permission"):
            Permission.parse("execute")
        with pytest.raises(ValueError):
            Permission.parse(3)  # type: ignore[arg-type]


class TestPermissionRegistry:
    """Tests for a standalone registry instance."""

    def test_falls_back_to_default_policy(self) -> None:
        registry = PermissionRegistry()
        container = Container(default_policy="none")

        assert registry.resolve(container, "x") is Permission.NONE
        container.default_policy = "r"
        assert registry.resolve(container, "x") is Permission.READ

    def test_class_declaration_applies_to_instances(self) -> None:
        registry = PermissionRegistry()
        registry.set_permission(Settings, "token", "w")

        assert registry.resolve(Settings(default_policy="rw"), "token") is Permission.WRITE
        # Other keys and other classes are unaffected
        assert registry.resolve(Settings(default_policy="rw"), "other") is Permission.READ_WRITE
        assert registry.resolve(Container(default_policy="rw"), "token") is Permission.READ_WRITE

    def test_nearest_class_wins(self) -> None:
        registry = PermissionRegistry()
        registry.set_permission(Container, "token", "none")
        registry.set_permission(Settings, "token", "r")

        assert registry.resolve(ProductionSettings(default_policy="rw"), "token") is Permission.READ
        assert registry.resolve(Container(default_policy="rw"), "token") is Permission.NONE

        registry.set_permission(ProductionSettings, "token", "w")
        assert registry.resolve(ProductionSettings(default_policy="rw"), "token") is Permission.WRITE
        assert registry.resolve(Settings(default_policy="rw"), "token") is Permission.READ

    def test_instance_overrides_class(self) -> None:
        registry = PermissionRegistry()
        special = Settings(default_policy="rw")
        plain = Settings(default_policy="rw")
        registry.set_permission(Settings, "x", "r")
        registry.set_permission(special, "x", "w")

        assert registry.resolve(special, "x") is Permission.WRITE
        assert registry.resolve(plain, "x") is Permission.READ

    def test_overwrite_replaces(self) -> None:
        registry = PermissionRegistry()
        registry.set_permission(Settings, "x", "r")
        registry.set_permission(Settings, "x", Permission.NONE)

        assert registry.permissions_for(Settings) == {"x": Permission.NONE}

    def test_permissions_for_is_a_copy(self) -> None:
        registry = PermissionRegistry()
        registry.set_permission(Settings, "x", "r")

        table = registry.permissions_for(Settings)
        table["y"] = Permission.NONE

        assert registry.permissions_for(Settings) == {"x": Permission.READ}
        assert registry.permissions_for(ProductionSettings) == {}

    def test_instance_table_created_on_first_declaration(self) -> None:
        """Lookups never create tables; declarations do, and later ones add to them."""
        registry = PermissionRegistry()
        container = Container(default_policy="rw")

        assert registry.permissions_for(container) == {}
        assert len(registry._instance_permissions) == 0

        registry.set_permission(container, "x", "r")
        registry.set_permission(container, "y", "w")

        assert registry.permissions_for(container) == {
            "x": Permission.READ,
            "y": Permission.WRITE,
        }
        assert len(registry._instance_permissions) == 1

    def test_unknown_permission_rejected(self) -> None:
        registry = PermissionRegistry()
        with pytest.raises(ValueError):
            registry.set_permission(Settings, "x", "admin")

    def test_instance_overrides_are_weak(self) -> None:
        registry = PermissionRegistry()
        container = Container(default_policy="rw")
        registry.set_permission(container, "x", "r")
        assert len(registry._instance_permissions) == 1

        del container
        gc.collect()

        assert len(registry._instance_permissions) == 0

    def test_clear(self) -> None:
        registry = PermissionRegistry()
        container = Container(default_policy="rw")
        registry.set_permission(Settings, "x", "r")
        registry.set_permission(container, "x", "r")

        registry.clear()

        assert registry.permissions_for(Settings) == {}
        assert registry.resolve(container, "x") is Permission.READ_WRITE


@pytest.mark.feature("permissions")
class TestDeclarePermission:
    """Tests for the process-wide helpers and the container gates."""

    def test_default_policy_none_denies_everything(self) -> None:
        container = Container(default_policy="none")

        assert not container.allowed_to_read("x")
        assert not container.allowed_to_write("x")
        with pytest.raises(AccessDenied):
            container.read("x")
        with pytest.raises(AccessDenied):
            container.write("x", 1)

    def test_instance_declaration_beats_class_declaration(self) -> None:
        container = Settings(default_policy="rw")
        declare_permission(Settings, "x", "r")
        declare_permission(container, "x", "w")

        assert container.allowed_to_write("x")
        assert not container.allowed_to_read("x")

    def test_subclass_inherits_declaration(self) -> None:
        declare_permission(Settings, "x", "r")
        container = ProductionSettings(default_policy="rw")

        assert resolve_permission(container, "x") is Permission.READ
        assert container.allowed_to_read("x")
        assert not container.allowed_to_write("x")

    def test_read_only_key(self) -> None:
        container = Container(default_policy="rw")
        container.write("x", 1)
        declare_permission(container, "x", "r")

        assert container.read("x") == 1
        with pytest.raises(AccessDenied):
            container.write("x", 2)
