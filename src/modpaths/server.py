"""Server core and command-line entrypoint."""

from __future__ import annotations

import argparse
import itertools
import os
import sys
import threading
from dataclasses import replace
from pathlib import Path

from modpaths.config import (
    KNOWN_RESOLVERS,
    TRANSPORTS,
    CliOverrides,
    ServerConfig,
    load_effective_config,
)
from modpaths.index import IndexStore, RefreshResult, RefreshScheduler, load_exclusions_file
from modpaths.logging import AuditEvent, AuditLog, sanitize_arguments, utc_timestamp
from modpaths.resolvers import resolver_factory
from modpaths.stdio import serve_stdio
from modpaths.tools import IndexTools, ToolError
from modpaths.web import serve_http


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for server startup configuration."""
    parser = argparse.ArgumentParser(
        prog="modpaths",
        description="Index module source directories and answer partial path lookups.",
    )
    parser.add_argument(
        "--http", dest="http_address", default=None, help="HTTP service address, e.g. localhost:6118"
    )
    parser.add_argument(
        "--exclude", dest="exclude_file", default=None, help="file listing directory names to skip"
    )
    parser.add_argument(
        "--root",
        dest="roots",
        default=None,
        help=f"root directories containing modules, separated by {os.pathsep!r}",
    )
    parser.add_argument("--config", default=None, help="path to a modpaths.toml file")
    parser.add_argument("--data-dir", default=None)
    parser.add_argument("--transport", choices=TRANSPORTS, default=None)
    parser.add_argument("--refresh-interval", type=float, default=None, metavar="SECONDS")
    parser.add_argument(
        "--resolvers",
        default=None,
        help=f"comma-separated resolvers to enable ({', '.join(KNOWN_RESOLVERS)})",
    )
    return parser


class ModpathsServer:
    """Owns the index store, its refresh scheduler, the tools, and the audit trail.

    Both front ends execute requests through ``call_tool``, the one place a
    request is run and audited. Rebuilds, whoever asks for them, go through
    ``rebuild`` and are audited under their own ``rebuild-NNNNNN`` ids.
    """

    def __init__(self, config: ServerConfig) -> None:
        self._config = config
        self._audit = AuditLog(config.data_dir / "audit.jsonl")
        self._store = IndexStore(resolver_factory=resolver_factory(config.resolvers))
        if config.index.exclude_file is not None:
            self._store.set_exclusions(load_exclusions_file(config.index.exclude_file))
        else:
            self._store.set_exclusions(config.index.exclusions)
        self._store.set_roots(config.index.roots)
        self._scheduler = RefreshScheduler(
            refresh=lambda: self.rebuild(trigger="scheduler"),
            interval_seconds=config.index.refresh_interval_seconds,
        )
        self._tools = IndexTools(
            store=self._store,
            rebuild=lambda: self.rebuild(trigger="request"),
            read_audit=self._audit.tail,
            config=config,
        )
        self._ids_lock = threading.Lock()
        self._request_ids = itertools.count(1)
        self._rebuild_ids = itertools.count(1)

    @property
    def config(self) -> ServerConfig:
        return self._config

    @property
    def store(self) -> IndexStore:
        return self._store

    @property
    def scheduler(self) -> RefreshScheduler:
        return self._scheduler

    @property
    def tools(self) -> IndexTools:
        return self._tools

    @property
    def audit_log_path(self) -> Path:
        return self._audit.path

    def start(self, initial_rebuild: bool = True) -> None:
        """Build the first generation and start periodic refresh."""
        if initial_rebuild:
            self.rebuild(trigger="startup")
        self._scheduler.start()

    def shutdown(self) -> None:
        """Stop periodic refresh; an in-flight rebuild finishes first."""
        self._scheduler.stop()

    def next_request_id(self) -> str:
        """Synthesize an id for a request that did not carry one."""
        with self._ids_lock:
            return f"req-{next(self._request_ids):06d}"

    def call_tool(
        self,
        name: str,
        arguments: dict[str, object],
        request_id: str | None = None,
    ) -> dict[str, object]:
        """Run one tool and audit the outcome.

        Every failure leaves as ``ToolError``; unexpected exceptions become
        ``INTERNAL_ERROR`` with the original chained as the cause.
        """
        request_id = request_id or self.next_request_id()
        try:
            result = self._tools.call(name, arguments)
        except ToolError as error:
            self.audit_request(request_id, name, arguments, error_code=error.code)
            raise
        except Exception as error:
            self.audit_request(request_id, name, arguments, error_code="INTERNAL_ERROR")
            raise ToolError(
                "INTERNAL_ERROR", "Unhandled server error while executing tool."
            ) from error
        self.audit_request(request_id, name, arguments, error_code=None)
        return result

    def audit_request(
        self,
        request_id: str,
        tool: str,
        arguments: dict[str, object],
        error_code: str | None,
    ) -> None:
        self._audit.write(
            AuditEvent(
                timestamp=utc_timestamp(),
                request_id=request_id,
                tool=tool,
                ok=error_code is None,
                error_code=error_code,
                metadata=sanitize_arguments(arguments),
            )
        )

    def rebuild(self, trigger: str) -> RefreshResult:
        """Rebuild the index, auditing success and failure alike."""
        with self._ids_lock:
            rebuild_id = f"rebuild-{next(self._rebuild_ids):06d}"
        try:
            result = self._store.rebuild()
        except Exception as error:
            self._audit.write(
                AuditEvent(
                    timestamp=utc_timestamp(),
                    request_id=rebuild_id,
                    tool="index.rebuild",
                    ok=False,
                    error_code="REBUILD_FAILED",
                    metadata={"trigger": trigger, "error_type": type(error).__name__},
                )
            )
            raise
        self._audit.write(
            AuditEvent(
                timestamp=utc_timestamp(),
                request_id=rebuild_id,
                tool="index.rebuild",
                ok=True,
                error_code=None,
                metadata={
                    "trigger": trigger,
                    "generation": result.generation,
                    "entry_count": result.entry_count,
                    "valid_count": result.valid_count,
                    "root_count": result.root_count,
                    "failed_root_count": len(result.failed_roots),
                    "duration_ms": result.duration_ms,
                },
            )
        )
        return result


def create_server(
    working_dir: str | None = None,
    data_dir: str | None = None,
    cli_overrides: CliOverrides | None = None,
    config_path: str | None = None,
) -> ModpathsServer:
    """Create a configured server; configuration errors propagate."""
    overrides = cli_overrides or CliOverrides()
    if data_dir is not None and overrides.data_dir is None:
        overrides = replace(overrides, data_dir=Path(data_dir).resolve())
    config = load_effective_config(
        working_dir=Path(working_dir) if working_dir is not None else None,
        overrides=overrides,
        config_path=Path(config_path) if config_path is not None else None,
    )
    return ModpathsServer(config=config)


def overrides_from_args(args: argparse.Namespace) -> CliOverrides:
    """Translate parsed command-line arguments into config overrides."""
    roots: tuple[str, ...] | None = None
    if args.roots:
        roots = tuple(part for part in args.roots.split(os.pathsep) if part)
    resolvers: tuple[str, ...] | None = None
    if args.resolvers:
        resolvers = tuple(part.strip() for part in args.resolvers.split(",") if part.strip())
    return CliOverrides(
        data_dir=Path(args.data_dir).resolve() if args.data_dir is not None else None,
        http_address=args.http_address,
        transport=args.transport,
        roots=roots,
        exclude_file=Path(args.exclude_file) if args.exclude_file else None,
        refresh_interval_seconds=args.refresh_interval,
        resolvers=resolvers,
    )


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the modpaths server process."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    try:
        server = create_server(
            cli_overrides=overrides_from_args(args),
            config_path=args.config,
        )
    except (OSError, ValueError) as error:
        parser.error(str(error))

    server.start()
    try:
        if server.config.transport == "stdio":
            serve_stdio(server, in_stream=sys.stdin, out_stream=sys.stdout)
        else:
            serve_http(server, server.config.http_address)
    except KeyboardInterrupt:
        pass
    finally:
        server.shutdown()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
