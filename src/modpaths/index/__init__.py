"""Directory indexing and lookup package."""

from .discovery import RootUnavailableError, walk_directory
from .exclusions import load_exclusions_file, parse_exclusions
from .models import (
    EMPTY_SNAPSHOT,
    IndexEntry,
    IndexSnapshot,
    QueryKind,
    RefreshResult,
    parse_query_kind,
)
from .query import match_suffix, query_index
from .scheduler import RefreshScheduler
from .store import IndexStatus, IndexStore

__all__ = [
    "EMPTY_SNAPSHOT",
    "IndexEntry",
    "IndexSnapshot",
    "IndexStatus",
    "IndexStore",
    "QueryKind",
    "RefreshResult",
    "RefreshScheduler",
    "RootUnavailableError",
    "load_exclusions_file",
    "match_suffix",
    "parse_exclusions",
    "parse_query_kind",
    "query_index",
    "walk_directory",
]
