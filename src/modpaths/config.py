"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import os
import sysconfig
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path

CONFIG_FILE_NAME = "modpaths.toml"
DEFAULT_HTTP_ADDRESS = "localhost:6118"
DEFAULT_TRANSPORT = "http"
DEFAULT_REFRESH_INTERVAL_SECONDS = 45 * 60
DEFAULT_EXCLUSIONS = ".git .hg .svn .bzr"
DEFAULT_RESOLVERS = ("python",)

KNOWN_RESOLVERS = ("python", "go")
TRANSPORTS = ("http", "stdio")
_PYTHON_SOURCE_PATHS = ("stdlib", "purelib", "platlib")


@dataclass(slots=True, frozen=True)
class IndexConfig:
    """Directory indexing settings."""

    roots: tuple[str, ...]
    exclusions: tuple[str, ...]
    exclude_file: Path | None
    refresh_interval_seconds: float


@dataclass(slots=True, frozen=True)
class ResolversConfig:
    """Enabled module resolvers, in lookup order."""

    enabled: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class ServerConfig:
    """Fully merged server configuration."""

    data_dir: Path
    http_address: str
    transport: str
    index: IndexConfig
    resolvers: ResolversConfig

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot for tool responses."""
        return {
            "data_dir": str(self.data_dir),
            "http_address": self.http_address,
            "transport": self.transport,
            "index": {
                "roots": list(self.index.roots),
                "exclusions": list(self.index.exclusions),
                "exclude_file": (
                    str(self.index.exclude_file) if self.index.exclude_file is not None else None
                ),
                "refresh_interval_seconds": self.index.refresh_interval_seconds,
            },
            "resolvers": {
                "enabled": list(self.resolvers.enabled),
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    data_dir: Path | None = None
    http_address: str | None = None
    transport: str | None = None
    roots: tuple[str, ...] | None = None
    exclude_file: Path | None = None
    refresh_interval_seconds: float | None = None
    resolvers: tuple[str, ...] | None = None


def default_config(working_dir: Path) -> ServerConfig:
    """Build default config; roots stay empty until resolvers are known."""
    resolved_dir = working_dir.resolve()
    return ServerConfig(
        data_dir=resolved_dir / ".modpaths",
        http_address=DEFAULT_HTTP_ADDRESS,
        transport=DEFAULT_TRANSPORT,
        index=IndexConfig(
            roots=(),
            exclusions=tuple(DEFAULT_EXCLUSIONS.split()),
            exclude_file=None,
            refresh_interval_seconds=DEFAULT_REFRESH_INTERVAL_SECONDS,
        ),
        resolvers=ResolversConfig(enabled=DEFAULT_RESOLVERS),
    )


def default_roots(resolvers: tuple[str, ...]) -> tuple[str, ...]:
    """Return the platform's module source directories for enabled resolvers."""
    candidates: list[str] = []
    if "python" in resolvers:
        paths = sysconfig.get_paths()
        candidates.extend(paths[key] for key in _PYTHON_SOURCE_PATHS if key in paths)
    if "go" in resolvers:
        goroot = os.environ.get("GOROOT", "").strip()
        if goroot:
            candidates.append(os.path.join(goroot, "src"))
        for entry in os.environ.get("GOPATH", "").split(os.pathsep):
            if entry.strip():
                candidates.append(os.path.join(entry.strip(), "src"))
    return tuple(path for path in candidates if os.path.isdir(path))


def load_config_file(config_path: Path | None, working_dir: Path) -> tuple[dict[str, object], Path]:
    """Load the TOML config payload and the directory relative paths resolve against.

    An explicit path must exist; otherwise modpaths.toml in working_dir is
    optional.
    """
    if config_path is None:
        candidate = working_dir / CONFIG_FILE_NAME
        if not candidate.exists():
            return {}, working_dir.resolve()
        config_path = candidate
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{config_path.name} must contain a top-level table.")
    return payload, config_path.resolve().parent


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{section}.{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{section}.{field}' must contain only strings.")
        output.append(item)
    return tuple(output)


def merge_config(
    base: ServerConfig,
    payload: dict[str, object],
    overrides: CliOverrides,
    config_dir: Path,
) -> ServerConfig:
    """Merge defaults, config file, then CLI/startup overrides."""
    index_payload = _get_table(payload, "index")
    server_payload = _get_table(payload, "server")
    resolvers_payload = _get_table(payload, "resolvers")

    roots = base.index.roots
    if "roots" in index_payload:
        roots = tuple(
            str(config_dir / root)
            for root in _tuple_of_strings(index_payload["roots"], "index", "roots")
        )

    if "exclude_file" in index_payload and "exclusions" in index_payload:
        raise ValueError(
            "Config fields 'index.exclude_file' and 'index.exclusions' are mutually exclusive."
        )
    exclusions = base.index.exclusions
    exclude_file = base.index.exclude_file
    if "exclusions" in index_payload:
        exclusions = _tuple_of_strings(index_payload["exclusions"], "index", "exclusions")
    if "exclude_file" in index_payload:
        raw_exclude_file = index_payload["exclude_file"]
        if not isinstance(raw_exclude_file, str) or not raw_exclude_file:
            raise ValueError("Config field 'index.exclude_file' must be a non-empty string.")
        exclude_file = (config_dir / raw_exclude_file).resolve()

    refresh_interval_seconds = _optional_positive_number(
        index_payload.get("refresh_interval_seconds"),
        "index.refresh_interval_seconds",
        base.index.refresh_interval_seconds,
    )

    http_address = base.http_address
    if "http" in server_payload:
        http_address = _validated_http_address(server_payload["http"], "server.http")
    transport = base.transport
    if "transport" in server_payload:
        transport = _validated_transport(server_payload["transport"], "server.transport")

    enabled = base.resolvers.enabled
    if "enabled" in resolvers_payload:
        enabled = _validated_resolvers(
            _tuple_of_strings(resolvers_payload["enabled"], "resolvers", "enabled"),
            "resolvers.enabled",
        )

    merged = ServerConfig(
        data_dir=base.data_dir,
        http_address=http_address,
        transport=transport,
        index=IndexConfig(
            roots=roots,
            exclusions=exclusions,
            exclude_file=exclude_file,
            refresh_interval_seconds=refresh_interval_seconds,
        ),
        resolvers=ResolversConfig(enabled=enabled),
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: ServerConfig, overrides: CliOverrides) -> ServerConfig:
    """Apply startup overrides at highest precedence."""
    http_address = config.http_address
    if overrides.http_address is not None:
        http_address = _validated_http_address(overrides.http_address, "overrides.http")
    transport = config.transport
    if overrides.transport is not None:
        transport = _validated_transport(overrides.transport, "overrides.transport")
    enabled = config.resolvers.enabled
    if overrides.resolvers is not None:
        enabled = _validated_resolvers(overrides.resolvers, "overrides.resolvers")

    index = config.index
    if overrides.roots is not None:
        index = replace(index, roots=tuple(str(Path(root).resolve()) for root in overrides.roots))
    if overrides.exclude_file is not None:
        index = replace(index, exclude_file=overrides.exclude_file.resolve())
    index = replace(
        index,
        refresh_interval_seconds=_optional_positive_number(
            overrides.refresh_interval_seconds,
            "overrides.refresh_interval_seconds",
            index.refresh_interval_seconds,
        ),
    )

    data_dir = overrides.data_dir or config.data_dir
    return ServerConfig(
        data_dir=data_dir.resolve(),
        http_address=http_address,
        transport=transport,
        index=index,
        resolvers=ResolversConfig(enabled=enabled),
    )


def load_effective_config(
    working_dir: Path | None = None,
    overrides: CliOverrides | None = None,
    config_path: Path | None = None,
) -> ServerConfig:
    """Load effective config using merge order defaults -> config file -> overrides."""
    resolved_dir = (working_dir or Path.cwd()).resolve()
    base = default_config(resolved_dir)
    payload, config_dir = load_config_file(config_path, resolved_dir)
    merged = merge_config(base, payload, overrides or CliOverrides(), config_dir)
    if merged.index.roots:
        return merged
    return replace(
        merged,
        index=replace(merged.index, roots=default_roots(merged.resolvers.enabled)),
    )


def parse_http_address(value: str) -> tuple[str, int]:
    """Split a HOST:PORT listen address; an empty host listens on all interfaces."""
    host, separator, port_text = value.rpartition(":")
    if not separator or not port_text.isdigit():
        raise ValueError(f"HTTP address must look like HOST:PORT, got {value!r}.")
    port = int(port_text)
    if port > 65535:
        raise ValueError(f"HTTP port must be <= 65535, got {port}.")
    return host.strip("[]"), port


def _validated_http_address(value: object, name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"Config field '{name}' must be a HOST:PORT string.")
    try:
        parse_http_address(value)
    except ValueError as error:
        raise ValueError(f"Config field '{name}' is invalid: {error}") from error
    return value


def _validated_transport(value: object, name: str) -> str:
    if not isinstance(value, str) or value not in TRANSPORTS:
        raise ValueError(f"Config field '{name}' must be one of {', '.join(TRANSPORTS)}.")
    return value


def _validated_resolvers(names: tuple[str, ...], name: str) -> tuple[str, ...]:
    if not names:
        raise ValueError(f"Config field '{name}' must enable at least one resolver.")
    output: list[str] = []
    for item in names:
        if item not in KNOWN_RESOLVERS:
            raise ValueError(
                f"Config field '{name}' has unknown resolver '{item}'; "
                f"expected one of {', '.join(KNOWN_RESOLVERS)}."
            )
        if item not in output:
            output.append(item)
    return tuple(output)


def _optional_positive_number(value: object, name: str, default: float) -> float:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValueError(f"Config field '{name}' must be a positive number.")
    return value
