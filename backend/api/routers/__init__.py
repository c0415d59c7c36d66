"""API routers."""

from .analysis import router as analysis_router
from .documents import router as documents_router  # documents/ package
from .health import router as health_router
from .ocr import router as ocr_router
from .processes import router as processes_router  # processes/ package

__all__ = [
    "analysis_router",
    "documents_router",
    "health_router",
    "ocr_router",
    "processes_router",
]
