"""Whole-segment suffix matching over index entries."""

from __future__ import annotations

import os
from collections.abc import Iterable

from modpaths.index.models import IndexEntry, QueryKind


def match_suffix(partial: str, kind: QueryKind, sep: str = os.sep) -> str:
    """Build the separator-anchored suffix a matching subject must end with."""
    if kind is QueryKind.DIRS:
        if sep != "/":
            partial = partial.replace("/", sep)
        return sep + partial
    if kind is QueryKind.IMPORTS:
        return "/" + partial
    raise ValueError(f"Unknown query kind: {kind!r}")


def query_index(
    entries: Iterable[IndexEntry],
    partial: str,
    kind: QueryKind,
    sep: str = os.sep,
) -> list[str]:
    """Return matching paths or module ids for a partial path.

    The leading separator in the suffix makes matching whole-segment: ``os``
    matches ``.../os`` but not ``.../paxos``. Directories that are modules
    win; directories merely leading toward one are returned only when no
    module matched. The two groups are never mixed.
    """
    suffix = match_suffix(partial, kind, sep=sep)
    valid: list[str] = []
    invalid: list[str] = []
    for entry in entries:
        if kind is QueryKind.IMPORTS:
            if not ("/" + entry.module_id).endswith(suffix):
                continue
            subject = entry.module_id
        else:
            if not entry.full_path.endswith(suffix):
                continue
            subject = entry.full_path
        if not subject:
            continue
        if entry.valid:
            valid.append(subject)
        else:
            invalid.append(subject)
    return valid or invalid
