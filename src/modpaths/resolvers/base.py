"""Core module resolver protocol and data types."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Protocol


@dataclass(slots=True, frozen=True)
class ModuleResolution:
    """Outcome of resolving one directory to a module identifier."""

    module_id: str
    ok: bool
    resolver: str | None = None


class ModuleResolver(Protocol):
    """Protocol implemented by module resolvers."""

    name: str

    def resolve(self, directory: str) -> ModuleResolution:
        """Resolve an absolute directory path to a module identifier."""


def normalize_root(root: str) -> str:
    """Return the absolute, lexically normalized form of a root directory."""
    return os.path.normpath(os.path.abspath(root))


def containing_root(directory: str, roots: tuple[str, ...]) -> str | None:
    """Return the longest configured root that contains directory, if any."""
    best: str | None = None
    for root in roots:
        if directory != root and not directory.startswith(_with_trailing_sep(root)):
            continue
        if best is None or len(root) > len(best):
            best = root
    return best


def relative_module_id(directory: str, root: str) -> str:
    """Build a slash-separated identifier for directory relative to root."""
    relative = os.path.relpath(directory, root)
    if relative == os.curdir:
        return ""
    return relative.replace(os.sep, "/")


def _with_trailing_sep(path: str) -> str:
    if path.endswith(os.sep):
        return path
    return path + os.sep
