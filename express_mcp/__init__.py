"""
Express MCP server.
Package tracking and multi-carrier price comparison over the Model Context Protocol.
"""

__version__ = "0.1.0"
