"""Example MCP servers that can be run as aggregator children."""
