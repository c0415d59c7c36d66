"""
Router utility functions.

Contains helpers shared by router endpoints to keep them clean.
"""

from backend.api.routers.router_utils.error_handling import handle_api_errors

__all__ = ["handle_api_errors"]
