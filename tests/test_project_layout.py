from __future__ import annotations

from pathlib import Path


def test_required_package_paths_exist() -> None:
    root = Path(__file__).resolve().parents[1]
    required = [
        "src/modpaths/server.py",
        "src/modpaths/web.py",
        "src/modpaths/stdio.py",
        "src/modpaths/config.py",
        "src/modpaths/tools/__init__.py",
        "src/modpaths/tools/index_tools.py",
        "src/modpaths/index/__init__.py",
        "src/modpaths/resolvers/__init__.py",
        "src/modpaths/logging/__init__.py",
    ]
    for rel in required:
        assert (root / rel).exists(), rel
