"""Python package resolver."""

from __future__ import annotations

import os
from collections.abc import Iterable

from modpaths.resolvers.base import (
    ModuleResolution,
    containing_root,
    normalize_root,
    relative_module_id,
)

PACKAGE_MARKER = "__init__.py"
MODULE_SUFFIXES = (".py",)


class PythonPackageResolver:
    """Recognize directories holding importable Python modules.

    A directory is a module when it is a regular package (``__init__.py``) or
    holds at least one ``.py`` file, which covers namespace packages and plain
    script directories on ``sys.path``. The identifier is the slash-separated
    import path relative to the search root containing the directory, e.g.
    ``xml/etree`` for ``<stdlib>/xml/etree``.
    """

    name = "python"

    def __init__(self, roots: Iterable[str] = ()) -> None:
        self._roots = tuple(normalize_root(root) for root in roots)

    def resolve(self, directory: str) -> ModuleResolution:
        """Resolve directory, deriving the identifier even without modules."""
        root = containing_root(directory, self._roots)
        module_id = relative_module_id(directory, root) if root is not None else ""
        with os.scandir(directory) as entries:
            ok = any(_is_module_file(entry) for entry in entries)
        return ModuleResolution(module_id=module_id, ok=ok, resolver=self.name if ok else None)


def _is_module_file(entry: os.DirEntry[str]) -> bool:
    if not entry.is_file():
        return False
    if entry.name == PACKAGE_MARKER:
        return True
    if entry.name.startswith("."):
        return False
    return entry.name.endswith(MODULE_SUFFIXES)
