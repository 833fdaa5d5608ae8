"""Batch element creation and bundled command execution for a design canvas over MCP"""

__version__ = "0.1.0"
