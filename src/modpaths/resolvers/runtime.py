"""Runtime resolver registry construction."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from modpaths.config import ResolversConfig
from modpaths.resolvers.base import ModuleResolution, ModuleResolver
from modpaths.resolvers.go import GoPackageResolver
from modpaths.resolvers.python import PythonPackageResolver
from modpaths.resolvers.registry import ResolverRegistry

RESOLVER_TYPES: dict[str, Callable[[Iterable[str]], ModuleResolver]] = {
    "python": PythonPackageResolver,
    "go": GoPackageResolver,
}


def build_resolver_registry(config: ResolversConfig, roots: Iterable[str]) -> ResolverRegistry:
    """Build a resolver registry for the enabled resolvers bound to roots."""
    bound_roots = tuple(roots)
    registry = ResolverRegistry()
    for name in config.enabled:
        factory = RESOLVER_TYPES.get(name)
        if factory is None:
            raise ValueError(f"Unknown module resolver: {name}")
        registry.register(factory(bound_roots))
    return registry


def resolver_factory(
    config: ResolversConfig,
) -> Callable[[tuple[str, ...]], Callable[[str], ModuleResolution]]:
    """Return a factory binding a fresh registry to each rebuild's roots."""

    def factory(roots: tuple[str, ...]) -> Callable[[str], ModuleResolution]:
        return build_resolver_registry(config, roots).resolve

    return factory
