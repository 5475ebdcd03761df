"""FastMCP server setup.

The ``mcp`` package is an optional extra, so its import is guarded and
``mcp_available`` reports whether the server can be built. Transport is
stdio by default; sse and streamable HTTP are optional.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path

    from tasklistctl.config.settings import TaskSettings

mcp_available = False
_FastMCP: Any = None

try:
    from mcp.server.fastmcp import FastMCP as _FastMCP  # type: ignore[no-redef,import-not-found]

    mcp_available = True
except ImportError:
    pass

__all__ = ["create_server", "mcp_available"]


def create_server(
    *,
    settings: TaskSettings | None = None,
    root: Path | None = None,
    host: str = "127.0.0.1",
    port: int = 8000,
) -> Any:
    """Create the FastMCP server with every tool registered against one Store.

    Uses *settings* when given, otherwise discovers them from *root*
    (or the CWD). *host* and *port* only matter for HTTP transports.

    Raises RuntimeError if the mcp extra is not installed.
    """
    if not mcp_available or _FastMCP is None:
        msg = "MCP extra not installed. Install with: pip install tasklistctl[mcp]"
        raise RuntimeError(msg)

    from tasklistctl.config.settings import TaskSettings
    from tasklistctl.infrastructure.store import Store
    from tasklistctl.mcp.tools import register_tools

    if settings is None:
        settings = TaskSettings.from_cli(root=root)
    store = Store(settings)

    server = _FastMCP("tasklistctl", host=host, port=port)
    register_tools(server, store)
    return server
