"""Directory base-name exclusion sets."""

from __future__ import annotations

from pathlib import Path
from typing import TextIO


def parse_exclusions(stream: TextIO) -> frozenset[str]:
    """Parse whitespace-separated directory names; tokens are not validated."""
    names: set[str] = set()
    for line in stream:
        names.update(line.split())
    return frozenset(names)


def load_exclusions_file(path: Path) -> frozenset[str]:
    """Read an exclusion file; OSError propagates to the caller."""
    with path.open("r", encoding="utf-8") as handle:
        return parse_exclusions(handle)
