"""mcp-get: install and manage MCP servers for the Claude desktop app."""

__version__ = "0.1.0"
