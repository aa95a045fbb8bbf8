"""Protocol contract, tool catalog, registry and handlers for the rod MCP server."""
