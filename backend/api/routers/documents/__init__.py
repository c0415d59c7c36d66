"""Document routes: hash lookup, cache, identification, save and process links."""

from .documents_router import router

__all__ = ["router"]
