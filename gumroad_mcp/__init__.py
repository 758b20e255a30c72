"""Gumroad MCP Server.

Exposes the Gumroad REST API as MCP tools for AI agent interaction.

This package provides:
- MCP tools for the user, products, sales and offer codes
- Thin adapter layer over the Gumroad v2 REST API
- An ``init`` command registering the server with Claude Desktop
"""

__version__ = "0.1.0"
