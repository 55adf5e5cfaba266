"""
CLI Interface - Command-line tools for MCP Advisor.

Provides commands for:
- MCP server search
- Backend health checks
- Offline catalog building
- API server
"""

from .main import app, main

__all__ = ["app", "main"]
