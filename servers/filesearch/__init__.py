"""File search MCP server."""
