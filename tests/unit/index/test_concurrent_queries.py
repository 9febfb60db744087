from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from modpaths.index import IndexStore, QueryKind
from modpaths.resolvers import PythonPackageResolver


def _make_package(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)
    (path / "__init__.py").write_text("", encoding="utf-8")


def _store(root: Path) -> IndexStore:
    return IndexStore(
        resolver_factory=lambda bound: PythonPackageResolver(bound).resolve,
        roots=[str(root)],
        exclusions=(".git",),
    )


def test_parallel_queries_match_sequential_results(tmp_path: Path) -> None:
    for group in ("a", "b", "c", "d"):
        _make_package(tmp_path / group / "util")
        _make_package(tmp_path / group / "core" / "util")
    store = _store(tmp_path)
    store.rebuild()
    queries = [("util", QueryKind.IMPORTS), ("core/util", QueryKind.DIRS), ("nope", QueryKind.DIRS)]

    sequential = [store.query(partial, kind) for partial, kind in queries * 8]
    with ThreadPoolExecutor(max_workers=8) as pool:
        parallel = list(pool.map(lambda item: store.query(*item), queries * 8))

    assert parallel == sequential


def test_queries_during_rebuild_never_mix_generations(tmp_path: Path) -> None:
    for index in range(20):
        _make_package(tmp_path / f"old{index:02d}" / "target")
    store = _store(tmp_path)
    store.rebuild()
    old_result = store.query("target", QueryKind.IMPORTS)

    for index in range(20):
        _make_package(tmp_path / f"new{index:02d}" / "target")
    expected_new = sorted(
        [f"new{index:02d}/target" for index in range(20)]
        + [f"old{index:02d}/target" for index in range(20)]
    )

    stop = threading.Event()
    observed: list[list[str]] = []

    def reader() -> None:
        while not stop.is_set():
            observed.append(store.query("target", QueryKind.IMPORTS))

    readers = [threading.Thread(target=reader) for _ in range(4)]
    for thread in readers:
        thread.start()
    store.rebuild()
    store.rebuild()
    stop.set()
    for thread in readers:
        thread.join(timeout=5)

    new_result = store.query("target", QueryKind.IMPORTS)
    assert sorted(new_result) == expected_new
    assert observed
    for result in observed:
        assert result == old_result or result == new_result
