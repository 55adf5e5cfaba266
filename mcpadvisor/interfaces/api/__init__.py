"""
API Interface - FastAPI REST API.
"""

from .main import create_app

__all__ = ["create_app"]
