"""Resolver registry with deterministic selection behavior."""

from __future__ import annotations

from dataclasses import dataclass, field

from modpaths.resolvers.base import ModuleResolution, ModuleResolver


@dataclass(slots=True)
class ResolverRegistry:
    """Ordered resolver chain; the first resolver recognizing a directory wins."""

    _resolvers: list[ModuleResolver] = field(default_factory=list)

    def register(self, resolver: ModuleResolver) -> None:
        """Register a resolver in deterministic insertion order."""
        self._resolvers.append(resolver)

    def resolve(self, directory: str) -> ModuleResolution:
        """Resolve with each resolver in order.

        When no resolver recognizes the directory, the first resolver's
        result is returned so the entry keeps its derived identifier.
        """
        misses: list[ModuleResolution] = []
        for resolver in self._resolvers:
            resolution = resolver.resolve(directory)
            if resolution.ok:
                return resolution
            misses.append(resolution)
        if not misses:
            raise LookupError("No module resolvers are registered.")
        return misses[0]

    def names(self) -> tuple[str, ...]:
        """Return registered resolver names in deterministic order."""
        return tuple(resolver.name for resolver in self._resolvers)
