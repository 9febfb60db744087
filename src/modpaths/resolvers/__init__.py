"""Module resolver interfaces."""

from .base import ModuleResolution, ModuleResolver, containing_root, relative_module_id
from .go import GoPackageResolver, read_module_path
from .python import PythonPackageResolver
from .registry import ResolverRegistry
from .runtime import RESOLVER_TYPES, build_resolver_registry, resolver_factory

__all__ = [
    "GoPackageResolver",
    "ModuleResolution",
    "ModuleResolver",
    "PythonPackageResolver",
    "RESOLVER_TYPES",
    "ResolverRegistry",
    "build_resolver_registry",
    "containing_root",
    "read_module_path",
    "relative_module_id",
    "resolver_factory",
]
