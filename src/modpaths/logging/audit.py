"""JSONL audit trail of requests and index rebuilds."""

from __future__ import annotations

import json
import threading
from collections import deque
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

DEFAULT_TAIL_LIMIT = 50

# Argument values short and closed enough to record as-is.
_RECORDED_VERBATIM = frozenset({"kind", "since", "trigger"})


@dataclass(slots=True, frozen=True)
class AuditEvent:
    """One request or rebuild, with arguments reduced to their shape."""

    timestamp: str
    request_id: str
    tool: str
    ok: bool
    error_code: str | None
    metadata: dict[str, object]


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp with millisecond precision."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def describe_argument(key: str, value: object) -> dict[str, object]:
    """Summarize one argument; free text is reduced to presence and length."""
    if isinstance(value, str):
        if key in _RECORDED_VERBATIM:
            return {key: value}
        return {f"{key}_present": True, f"{key}_length": len(value)}
    if value is None or isinstance(value, (bool, int, float)):
        return {key: value}
    if isinstance(value, (list, tuple)):
        return {f"{key}_type": "list", f"{key}_length": len(value)}
    if isinstance(value, dict):
        return {f"{key}_type": "dict", f"{key}_keys": sorted(str(name) for name in value)}
    return {f"{key}_type": type(value).__name__}


def sanitize_arguments(arguments: dict[str, object]) -> dict[str, object]:
    """Describe every argument in key order."""
    described: dict[str, object] = {}
    for key in sorted(arguments):
        described.update(describe_argument(key, arguments[key]))
    return described


class AuditLog:
    """Append-only JSONL file written from request and refresh threads."""

    def __init__(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        self._path = path
        self._write_lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def write(self, event: AuditEvent) -> None:
        line = json.dumps(asdict(event), sort_keys=True) + "\n"
        with self._write_lock, self._path.open("a", encoding="utf-8") as handle:
            handle.write(line)

    def tail(
        self, since: str | None = None, limit: int = DEFAULT_TAIL_LIMIT
    ) -> list[dict[str, object]]:
        """Return up to limit newest events at or after the since timestamp.

        Lines that do not decode to an object are skipped, so a line torn by
        a crash does not hide the rest of the trail.
        """
        if limit < 1 or not self._path.exists():
            return []
        recent: deque[dict[str, object]] = deque(maxlen=limit)
        with self._path.open("r", encoding="utf-8") as handle:
            for line in handle:
                event = _decode_line(line)
                if event is None:
                    continue
                if since is not None and str(event.get("timestamp", "")) < since:
                    continue
                recent.append(event)
        return list(recent)


def _decode_line(line: str) -> dict[str, object] | None:
    text = line.strip()
    if not text:
        return None
    try:
        decoded = json.loads(text)
    except json.JSONDecodeError:
        return None
    return decoded if isinstance(decoded, dict) else None
