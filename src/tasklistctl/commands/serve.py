"""serve: start the MCP server (requires the ``mcp`` extra)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tasklistctl.commands._base import TaskCommand

if TYPE_CHECKING:
    from tasklistctl.commands._context import AppContext


@click.command(
    cls=TaskCommand,
    examples="""\
  # stdio transport (default)
  tasklistctl serve

  # Streamable HTTP on a custom address
  tasklistctl serve --transport streamable-http --host 0.0.0.0 --port 9000""",
)
@click.option(
    "--transport",
    default=None,
    type=click.Choice(["stdio", "sse", "streamable-http"]),
    help="MCP transport protocol (default from [mcp] config).",
)
@click.option("--host", default=None, help="Bind address (HTTP transports only).")
@click.option("--port", default=None, type=int, help="Listen port (HTTP transports only).")
@click.pass_obj
def serve(app: AppContext, transport: str | None, host: str | None, port: int | None) -> None:
    """Start the MCP server."""
    from tasklistctl.mcp.server import create_server, mcp_available

    if not mcp_available:
        click.echo("MCP not installed. Install with: pip install tasklistctl[mcp]", err=True)
        raise SystemExit(1)

    mcp_config = app.settings.mcp
    server = create_server(
        settings=app.settings,
        host=host or mcp_config.host,
        port=port or mcp_config.port,
    )
    server.run(transport=transport or mcp_config.transport)
