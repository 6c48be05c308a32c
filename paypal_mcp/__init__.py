"""MCP server exposing PayPal REST operations as schema-validated tools."""

__version__ = "0.3.0"
