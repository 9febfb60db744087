"""Index operations callable by name from the STDIO and HTTP front ends."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict

from modpaths.config import ServerConfig
from modpaths.index import IndexStore, QueryKind, RefreshResult, parse_query_kind

DEFAULT_AUDIT_LIMIT = 50
MAX_AUDIT_LIMIT = 1000

Arguments = dict[str, object]
ReadAudit = Callable[[str | None, int], list[dict[str, object]]]


class ToolError(Exception):
    """A tool call rejected with a stable error code."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class IndexTools:
    """The named operations over one index store.

    Handlers take the decoded argument object and return a JSON-ready
    result. Malformed arguments raise ``ToolError("INVALID_PARAMS")``.
    """

    def __init__(
        self,
        store: IndexStore,
        rebuild: Callable[[], RefreshResult],
        read_audit: ReadAudit,
        config: ServerConfig,
    ) -> None:
        self._store = store
        self._rebuild = rebuild
        self._read_audit = read_audit
        self._config = config
        self._handlers: dict[str, Callable[[Arguments], dict[str, object]]] = {
            "index.status": self._status,
            "index.dirs": self._dirs,
            "index.imports": self._imports,
            "index.query": self._query,
            "index.update": self._update,
            "index.audit_log": self._audit_log,
        }

    def names(self) -> tuple[str, ...]:
        return tuple(self._handlers)

    def call(self, name: str, arguments: Arguments) -> dict[str, object]:
        handler = self._handlers.get(name)
        if handler is None:
            raise ToolError("UNKNOWN_TOOL", f"Unknown tool: {name}")
        return handler(arguments)

    def lookup(self, partial: str, kind: QueryKind) -> dict[str, object]:
        """Run one suffix query and return the partial, kind and matches."""
        return {
            "query": partial,
            "kind": kind.value,
            "matches": self._store.query(partial, kind),
        }

    def _status(self, _: Arguments) -> dict[str, object]:
        status = self._store.status()
        return {
            "index_status": status.index_status,
            "generation": status.generation,
            "last_refresh_timestamp": status.last_refresh_timestamp,
            "entry_count": status.entry_count,
            "valid_count": status.valid_count,
            "roots": list(status.roots),
            "exclusions": list(status.exclusions),
            "failed_roots": list(status.failed_roots),
            "effective_config": self._config.to_public_dict(),
        }

    def _dirs(self, arguments: Arguments) -> dict[str, object]:
        return self.lookup(_partial(arguments, "index.dirs"), QueryKind.DIRS)

    def _imports(self, arguments: Arguments) -> dict[str, object]:
        return self.lookup(_partial(arguments, "index.imports"), QueryKind.IMPORTS)

    def _query(self, arguments: Arguments) -> dict[str, object]:
        partial = _partial(arguments, "index.query")
        try:
            kind = parse_query_kind(arguments.get("kind", QueryKind.DIRS.value))
        except ValueError as error:
            raise ToolError(
                "INVALID_PARAMS", "index.query kind must be 'imports' or 'dirs'."
            ) from error
        return self.lookup(partial, kind)

    def _update(self, _: Arguments) -> dict[str, object]:
        result = self._rebuild()
        summary = asdict(result)
        summary["failed_roots"] = list(result.failed_roots)
        return summary

    def _audit_log(self, arguments: Arguments) -> dict[str, object]:
        since = arguments.get("since")
        limit = arguments.get("limit", DEFAULT_AUDIT_LIMIT)
        if not isinstance(limit, int) or isinstance(limit, bool):
            limit = DEFAULT_AUDIT_LIMIT
        return {
            "entries": self._read_audit(
                since if isinstance(since, str) else None,
                max(1, min(limit, MAX_AUDIT_LIMIT)),
            )
        }


def _partial(arguments: Arguments, tool: str) -> str:
    value = arguments.get("query")
    if not isinstance(value, str):
        raise ToolError("INVALID_PARAMS", f"{tool} query must be a string.")
    return value
