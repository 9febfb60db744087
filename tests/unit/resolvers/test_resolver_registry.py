from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pytest

from modpaths.config import ResolversConfig
from modpaths.resolvers import (
    ModuleResolution,
    ResolverRegistry,
    build_resolver_registry,
    resolver_factory,
)


@dataclass(slots=True)
class FixedResolver:
    name: str
    module_id: str
    ok: bool

    def resolve(self, directory: str) -> ModuleResolution:
        _ = directory
        return ModuleResolution(
            module_id=self.module_id, ok=self.ok, resolver=self.name if self.ok else None
        )


def test_registry_selects_first_recognizing_resolver_in_registration_order() -> None:
    registry = ResolverRegistry()
    registry.register(FixedResolver(name="miss", module_id="a", ok=False))
    registry.register(FixedResolver(name="first", module_id="b", ok=True))
    registry.register(FixedResolver(name="second", module_id="c", ok=True))

    resolution = registry.resolve("/tmp/x")

    assert resolution == ModuleResolution(module_id="b", ok=True, resolver="first")
    assert registry.names() == ("miss", "first", "second")


def test_registry_returns_first_miss_when_nothing_recognizes() -> None:
    registry = ResolverRegistry()
    registry.register(FixedResolver(name="one", module_id="from-one", ok=False))
    registry.register(FixedResolver(name="two", module_id="from-two", ok=False))

    assert registry.resolve("/tmp/x") == ModuleResolution(module_id="from-one", ok=False)


def test_empty_registry_raises_lookup_error() -> None:
    with pytest.raises(LookupError):
        ResolverRegistry().resolve("/tmp/x")


def test_build_resolver_registry_respects_enabled_order(tmp_path: Path) -> None:
    registry = build_resolver_registry(ResolversConfig(enabled=("go", "python")), [str(tmp_path)])

    assert registry.names() == ("go", "python")


def test_build_resolver_registry_rejects_unknown_name(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Unknown module resolver: rust"):
        build_resolver_registry(ResolversConfig(enabled=("rust",)), [str(tmp_path)])


def test_resolver_factory_binds_roots_per_call(tmp_path: Path) -> None:
    (tmp_path / "a" / "pkg").mkdir(parents=True)
    (tmp_path / "a" / "pkg" / "__init__.py").write_text("", encoding="utf-8")
    (tmp_path / "main.go").write_text("package main\n", encoding="utf-8")
    factory = resolver_factory(ResolversConfig(enabled=("python", "go")))

    narrow = factory((str(tmp_path / "a"),))
    wide = factory((str(tmp_path),))

    assert narrow(str(tmp_path / "a" / "pkg")).module_id == "pkg"
    assert wide(str(tmp_path / "a" / "pkg")).module_id == "a/pkg"
    go_resolution = wide(str(tmp_path))
    assert go_resolution.ok is True
    assert go_resolution.resolver == "go"
