from __future__ import annotations

from pathlib import Path

import pytest

from modpaths.config import CliOverrides
from modpaths.server import create_server
from modpaths.tools import IndexTools, ToolError


@pytest.fixture
def tools(tmp_path: Path) -> IndexTools:
    (tmp_path / "pkg").mkdir()
    (tmp_path / "pkg" / "__init__.py").write_text("", encoding="utf-8")
    server = create_server(
        working_dir=str(tmp_path),
        cli_overrides=CliOverrides(roots=(str(tmp_path),), data_dir=tmp_path / "data"),
    )
    server.rebuild(trigger="test")
    return server.tools


def test_tool_names_keep_declaration_order(tools: IndexTools) -> None:
    assert tools.names() == (
        "index.status",
        "index.dirs",
        "index.imports",
        "index.query",
        "index.update",
        "index.audit_log",
    )


def test_call_dispatches_by_name(tools: IndexTools) -> None:
    result = tools.call("index.imports", {"query": "pkg"})

    assert result == {"query": "pkg", "kind": "imports", "matches": ["pkg"]}


def test_call_reports_unknown_tool(tools: IndexTools) -> None:
    with pytest.raises(ToolError) as excinfo:
        tools.call("index.nope", {})

    assert excinfo.value.code == "UNKNOWN_TOOL"
    assert "index.nope" in excinfo.value.message


def test_query_must_be_a_string(tools: IndexTools) -> None:
    with pytest.raises(ToolError) as excinfo:
        tools.call("index.dirs", {"query": 3})

    assert excinfo.value.code == "INVALID_PARAMS"
    assert excinfo.value.message == "index.dirs query must be a string."


def test_audit_log_limit_is_clamped(tools: IndexTools) -> None:
    for _ in range(3):
        tools.call("index.update", {})

    assert len(tools.call("index.audit_log", {"limit": 0})["entries"]) == 1
    assert len(tools.call("index.audit_log", {"limit": True})["entries"]) == 4
