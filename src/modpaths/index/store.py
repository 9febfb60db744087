"""In-memory index storage and rebuild orchestration."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TextIO

from modpaths.index.discovery import Resolve, RootUnavailableError, walk_directory
from modpaths.index.exclusions import parse_exclusions
from modpaths.index.models import (
    EMPTY_SNAPSHOT,
    IndexEntry,
    IndexSnapshot,
    QueryKind,
    RefreshResult,
)
from modpaths.index.query import query_index
from modpaths.logging.audit import utc_timestamp
from modpaths.resolvers.base import normalize_root


@dataclass(slots=True, frozen=True)
class IndexStatus:
    """Current index status snapshot."""

    index_status: str
    generation: int
    last_refresh_timestamp: str | None
    entry_count: int
    valid_count: int
    roots: tuple[str, ...]
    exclusions: tuple[str, ...]
    failed_roots: tuple[str, ...]


class IndexStore:
    """Owns the current index generation, the roots, and the exclusion set.

    Queries read one immutable snapshot reference and never wait on a walk.
    Rebuilds are serialized; each walks off-lock and publishes the finished
    snapshot by swapping that reference under the store lock.
    """

    def __init__(
        self,
        resolver_factory: Callable[[tuple[str, ...]], Resolve],
        roots: Iterable[str] = (),
        exclusions: Iterable[str] = (),
    ) -> None:
        self._resolver_factory = resolver_factory
        self._lock = threading.Lock()
        self._rebuild_lock = threading.Lock()
        self._roots: tuple[str, ...] = ()
        self._exclusions: frozenset[str] = frozenset(exclusions)
        self._snapshot: IndexSnapshot = EMPTY_SNAPSHOT
        self.set_roots(roots)

    def set_roots(self, roots: Iterable[str]) -> None:
        """Replace roots, dropping duplicates by normalized path in first-seen order."""
        deduplicated: list[str] = []
        seen: set[str] = set()
        for root in roots:
            path = normalize_root(root)
            if path in seen:
                continue
            seen.add(path)
            deduplicated.append(path)
        with self._lock:
            self._roots = tuple(deduplicated)

    def set_exclusions(self, names: Iterable[str]) -> None:
        """Replace the exclusion set wholesale."""
        replacement = frozenset(names)
        with self._lock:
            self._exclusions = replacement

    def load_exclusions(self, stream: TextIO) -> None:
        """Replace the exclusion set with whitespace-separated names from stream."""
        self.set_exclusions(parse_exclusions(stream))

    def roots(self) -> tuple[str, ...]:
        with self._lock:
            return self._roots

    def exclusions(self) -> frozenset[str]:
        with self._lock:
            return self._exclusions

    def snapshot(self) -> IndexSnapshot:
        """Return the current generation."""
        return self._snapshot

    def rebuild(self) -> RefreshResult:
        """Walk every root in order and publish the result as a new generation.

        A directory reachable from two roots (one root nested in another) is
        indexed once, under the walk of the innermost root.
        """
        with self._rebuild_lock:
            start = time.perf_counter()
            with self._lock:
                roots = self._roots
                exclusions = self._exclusions
            resolve = self._resolver_factory(roots)

            entries: list[IndexEntry] = []
            failed_roots: list[str] = []
            for root in roots:
                # Roots nested inside this one are walked on their own turn.
                nested = frozenset(other for other in roots if other != root)
                try:
                    entries.extend(walk_directory(root, exclusions, resolve, nested_roots=nested))
                except RootUnavailableError:
                    failed_roots.append(root)

            timestamp = utc_timestamp()
            with self._lock:
                snapshot = IndexSnapshot(
                    generation=self._snapshot.generation + 1,
                    entries=tuple(entries),
                    refreshed_at=timestamp,
                    failed_roots=tuple(failed_roots),
                )
                self._snapshot = snapshot
            return RefreshResult(
                generation=snapshot.generation,
                entry_count=len(snapshot.entries),
                valid_count=sum(1 for entry in snapshot.entries if entry.valid),
                root_count=len(roots),
                failed_roots=snapshot.failed_roots,
                duration_ms=int((time.perf_counter() - start) * 1000),
                timestamp=timestamp,
            )

    def query(self, partial: str, kind: QueryKind) -> list[str]:
        """Run a suffix query against the current generation."""
        return query_index(self._snapshot.entries, partial, kind)

    def status(self) -> IndexStatus:
        """Return status of the current generation."""
        snapshot = self._snapshot
        with self._lock:
            roots = self._roots
            exclusions = tuple(sorted(self._exclusions))
        return IndexStatus(
            index_status="ready" if snapshot.generation > 0 else "not_indexed",
            generation=snapshot.generation,
            last_refresh_timestamp=snapshot.refreshed_at,
            entry_count=len(snapshot.entries),
            valid_count=sum(1 for entry in snapshot.entries if entry.valid),
            roots=roots,
            exclusions=exclusions,
            failed_roots=snapshot.failed_roots,
        )
