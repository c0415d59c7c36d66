"""
NocoDB boundary modules.

Exports: NocoDBClient
"""

from .client import NocoDBClient

__all__ = ["NocoDBClient"]
