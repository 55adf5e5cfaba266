"""
Interfaces - User-facing applications.

- api: FastAPI REST API
- cli: Command-line interface
- services: Shared wiring of the search stack
"""

__all__ = ["api", "cli", "services"]
