"""Deterministic directory discovery."""

from __future__ import annotations

import os
from collections.abc import Callable, Collection

from modpaths.index.models import IndexEntry
from modpaths.resolvers.base import ModuleResolution

Resolve = Callable[[str], ModuleResolution]


class RootUnavailableError(OSError):
    """Raised when a configured root directory cannot be walked at all."""

    def __init__(self, root: str, reason: str) -> None:
        super().__init__(f"Root directory {root} is unavailable: {reason}")
        self.root = root
        self.reason = reason


def walk_directory(
    root: str,
    exclusions: Collection[str],
    resolve: Resolve,
    nested_roots: Collection[str] = (),
) -> list[IndexEntry]:
    """Walk root depth-first in name order, emitting one entry per directory.

    Excluded base names prune the whole sub-tree, the root included. Files
    and symlinked directories are not visited. Unreadable sub-directories keep
    their entry but contribute no children. Directories listed in
    nested_roots are left out because they are walked as roots of their own.
    """
    start = os.path.abspath(root)
    if not os.path.isdir(start):
        raise RootUnavailableError(start, "not a directory")
    try:
        with os.scandir(start):
            pass
    except OSError as error:
        raise RootUnavailableError(start, error.strerror or str(error)) from error

    entries: list[IndexEntry] = []
    stack: list[str] = [start]
    while stack:
        current = stack.pop()
        if os.path.basename(current) in exclusions:
            continue
        entries.append(_build_entry(current, resolve))
        try:
            with os.scandir(current) as children:
                subdirs = sorted(
                    child.path
                    for child in children
                    if _is_walkable_dir(child) and child.path not in nested_roots
                )
        except OSError:
            continue
        stack.extend(reversed(subdirs))
    return entries


def _build_entry(directory: str, resolve: Resolve) -> IndexEntry:
    try:
        resolution = resolve(directory)
    except OSError:
        return IndexEntry(full_path=directory, module_id="", valid=False)
    return IndexEntry(full_path=directory, module_id=resolution.module_id, valid=resolution.ok)


def _is_walkable_dir(entry: os.DirEntry[str]) -> bool:
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError:
        return False
