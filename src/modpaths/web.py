"""HTTP front end.

URL scheme::

    GET /imports/<partial>   module identifiers ending in <partial>
    GET /dirs/<partial>      directory paths ending in <partial>
    GET /<partial>           same as /dirs/<partial>
    GET /update              rebuild the index, empty body

Matches are written one per line as text/plain; no match is an empty body.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from modpaths.config import parse_http_address
from modpaths.index import QueryKind
from modpaths.tools import ToolError

if TYPE_CHECKING:
    from modpaths.server import ModpathsServer


def format_matches(matches: list[str]) -> str:
    """Render matches one per line."""
    if not matches:
        return ""
    return "\n".join(matches) + "\n"


def create_app(server: ModpathsServer) -> FastAPI:
    """Build the application answering lookups against server's index."""
    app = FastAPI(title="modpaths", docs_url=None, redoc_url=None, openapi_url=None)

    @app.exception_handler(ToolError)
    async def tool_error_handler(request: Request, error: ToolError) -> PlainTextResponse:
        status_code = 400 if error.code == "INVALID_PARAMS" else 500
        return PlainTextResponse(f"{error.message}\n", status_code=status_code)

    def lookup(partial: str, kind: QueryKind) -> str:
        result = server.call_tool(f"index.{kind.value}", {"query": partial})
        matches = result["matches"]
        return format_matches(matches if isinstance(matches, list) else [])

    # Declared before the catch-all so these prefixes win.
    @app.get("/update", response_class=PlainTextResponse)
    def update() -> str:
        server.call_tool("index.update", {})
        return ""

    @app.get("/imports/{partial:path}", response_class=PlainTextResponse)
    def imports(partial: str) -> str:
        return lookup(partial, QueryKind.IMPORTS)

    @app.get("/dirs/{partial:path}", response_class=PlainTextResponse)
    def dirs(partial: str) -> str:
        return lookup(partial, QueryKind.DIRS)

    @app.get("/{partial:path}", response_class=PlainTextResponse)
    def default(partial: str) -> str:
        return lookup(partial, QueryKind.DIRS)

    return app


def serve_http(server: ModpathsServer, address: str) -> None:
    """Serve HTTP on address until the process is interrupted."""
    host, port = parse_http_address(address)
    uvicorn.run(create_app(server), host=host or "0.0.0.0", port=port, log_level="warning")
