"""MCP server exposing tasklistctl operations as tools (optional ``mcp`` extra)."""
