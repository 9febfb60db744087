"""Typed models for indexing state."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(slots=True, frozen=True)
class IndexEntry:
    """Represents one visited directory."""

    full_path: str
    module_id: str
    valid: bool


@dataclass(slots=True, frozen=True)
class IndexSnapshot:
    """One complete index generation."""

    generation: int
    entries: tuple[IndexEntry, ...]
    refreshed_at: str | None
    failed_roots: tuple[str, ...] = ()


EMPTY_SNAPSHOT = IndexSnapshot(generation=0, entries=(), refreshed_at=None)


@dataclass(slots=True, frozen=True)
class RefreshResult:
    """Summary of one rebuild."""

    generation: int
    entry_count: int
    valid_count: int
    root_count: int
    failed_roots: tuple[str, ...]
    duration_ms: int
    timestamp: str


class QueryKind(Enum):
    """Closed set of lookup kinds."""

    IMPORTS = "imports"
    DIRS = "dirs"


def parse_query_kind(value: object) -> QueryKind:
    """Return the QueryKind named by value, rejecting anything else."""
    if isinstance(value, QueryKind):
        return value
    for kind in QueryKind:
        if kind.value == value:
            return kind
    raise ValueError(f"Unknown query kind: {value!r}")
