"""
Processes router package.

Exports the router for import process endpoints.
"""

from .processes_router import router

__all__ = ["router"]
