"""JSON-lines front end.

Each input line holds one request object::

    {"id": "1", "method": "index.imports", "params": {"query": "etree"}}

``method`` may also be ``tools/call`` with ``params`` shaped as
``{"name": <tool>, "arguments": {...}}``. Every request gets one output line
``{"request_id", "ok", "result", "warnings"}``, plus ``"error": {"code",
"message"}`` when it failed.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, TextIO

from modpaths.tools import ToolError

if TYPE_CHECKING:
    from modpaths.server import ModpathsServer

Envelope = dict[str, object]


@dataclass(slots=True, frozen=True)
class ToolCall:
    """A decoded request line."""

    request_id: str | None
    tool: str
    arguments: dict[str, object]


class MalformedRequest(ToolError):
    """A request line that does not describe a tool call."""

    def __init__(self, code: str, message: str, request_id: str | None = None) -> None:
        super().__init__(code, message)
        self.request_id = request_id


def serve_stdio(app: ModpathsServer, in_stream: TextIO, out_stream: TextIO) -> None:
    """Answer request lines from in_stream until it is exhausted."""
    for raw_line in in_stream:
        line = raw_line.strip()
        if not line:
            continue
        out_stream.write(json.dumps(handle_line(app, line), sort_keys=True) + "\n")
        out_stream.flush()


def handle_line(app: ModpathsServer, line: str) -> Envelope:
    try:
        payload = json.loads(line)
    except json.JSONDecodeError:
        error = MalformedRequest("INVALID_JSON", "Request must be valid JSON.")
        return _reject(app, error, "invalid_json", {"raw_line_length": len(line)})
    return handle_request(app, payload)


def handle_request(app: ModpathsServer, payload: object) -> Envelope:
    """Run one decoded request object and build its envelope."""
    try:
        call = decode_call(payload)
    except MalformedRequest as error:
        return _reject(app, error, "invalid_request", {})
    request_id = call.request_id or app.next_request_id()
    try:
        result = app.call_tool(call.tool, call.arguments, request_id=request_id)
    except ToolError as error:
        return error_envelope(request_id, error)
    return {"request_id": request_id, "ok": True, "result": result, "warnings": []}


def decode_call(payload: object) -> ToolCall:
    """Turn a request object into a tool call, unwrapping ``tools/call``."""
    if not isinstance(payload, dict):
        raise MalformedRequest("INVALID_REQUEST", "Request must be an object.")
    request_id = _request_id(payload.get("id"))
    method = payload.get("method")
    params = payload.get("params", {})
    if not isinstance(method, str) or not method:
        raise MalformedRequest(
            "INVALID_REQUEST", "Request method must be a non-empty string.", request_id
        )
    if not isinstance(params, dict):
        raise MalformedRequest("INVALID_PARAMS", "Request params must be an object.", request_id)
    if method != "tools/call":
        return ToolCall(request_id=request_id, tool=method, arguments=params)

    name = params.get("name")
    arguments = params.get("arguments", {})
    if not isinstance(name, str) or not name:
        raise MalformedRequest(
            "INVALID_PARAMS", "tools/call params.name must be a non-empty string.", request_id
        )
    if not isinstance(arguments, dict):
        raise MalformedRequest(
            "INVALID_PARAMS", "tools/call params.arguments must be an object.", request_id
        )
    return ToolCall(request_id=request_id, tool=name, arguments=arguments)


def error_envelope(request_id: str, error: ToolError) -> Envelope:
    return {
        "request_id": request_id,
        "ok": False,
        "result": {},
        "warnings": [],
        "error": {"code": error.code, "message": error.message},
    }


def _request_id(value: object) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str) and value:
        return value
    if isinstance(value, int):
        return str(value)
    return None


def _reject(
    app: ModpathsServer,
    error: MalformedRequest,
    label: str,
    metadata: dict[str, object],
) -> Envelope:
    request_id = error.request_id or app.next_request_id()
    app.audit_request(request_id, label, metadata, error_code=error.code)
    return error_envelope(request_id, error)
