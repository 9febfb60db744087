"""Go package resolver."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable
from typing import Final

from modpaths.resolvers.base import (
    ModuleResolution,
    containing_root,
    normalize_root,
    relative_module_id,
)

GO_MOD_FILE = "go.mod"
MODULE_DIRECTIVE_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^\s*module\s+\"?([^\s\"]+)\"?", re.MULTILINE
)


class GoPackageResolver:
    """Recognize directories holding a buildable Go package.

    Test files and files ignored by the go tool (leading ``_`` or ``.``) do
    not make a package. The import path comes from the nearest ``go.mod``
    inside the search root when present, else from the path relative to the
    root (GOPATH layout).
    """

    name = "go"

    def __init__(self, roots: Iterable[str] = ()) -> None:
        self._roots = tuple(normalize_root(root) for root in roots)
        self._module_cache: dict[str, str | None] = {}

    def resolve(self, directory: str) -> ModuleResolution:
        with os.scandir(directory) as entries:
            ok = any(_is_buildable_go_file(entry) for entry in entries)
        module_id = self._import_path(directory)
        return ModuleResolution(module_id=module_id, ok=ok, resolver=self.name if ok else None)

    def _import_path(self, directory: str) -> str:
        root = containing_root(directory, self._roots)
        if root is None:
            return ""
        current = directory
        while True:
            module_path = self._module_path(current)
            if module_path is not None:
                remainder = relative_module_id(directory, current)
                return f"{module_path}/{remainder}" if remainder else module_path
            if current == root:
                break
            current = os.path.dirname(current)
        return relative_module_id(directory, root)

    def _module_path(self, directory: str) -> str | None:
        if directory in self._module_cache:
            return self._module_cache[directory]
        module_path = read_module_path(os.path.join(directory, GO_MOD_FILE))
        self._module_cache[directory] = module_path
        return module_path


def read_module_path(go_mod: str) -> str | None:
    """Return the module directive of a go.mod file, or None when absent."""
    try:
        with open(go_mod, encoding="utf-8", errors="replace") as handle:
            text = handle.read()
    except OSError:
        return None
    match = MODULE_DIRECTIVE_PATTERN.search(text)
    if match is None:
        return None
    return match.group(1)


def _is_buildable_go_file(entry: os.DirEntry[str]) -> bool:
    name = entry.name
    if not name.endswith(".go") or name.endswith("_test.go"):
        return False
    if name.startswith(("_", ".")):
        return False
    return entry.is_file()
