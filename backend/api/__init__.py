"""
API routes module.

FastAPI routers for all HTTP endpoints.
"""

from fastapi import APIRouter

from .routers import (
    analysis_router,
    documents_router,
    health_router,
    ocr_router,
    processes_router,
)

api_router = APIRouter()

# Include all routers
api_router.include_router(health_router)
api_router.include_router(processes_router)
api_router.include_router(documents_router)
api_router.include_router(ocr_router)
api_router.include_router(analysis_router)

__all__ = ["api_router"]
