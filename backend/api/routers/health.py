"""
Health check API endpoints.

Routes: GET /health, GET /health/nocodb

Dependencies: backend.boundary.nocodb
System role: Health check HTTP API
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from backend.api.deps import get_nocodb_client
from backend.boundary.nocodb import NocoDBClient
from backend.models.common import HealthResponse

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check."""
    return HealthResponse(status="healthy", message="Server Healthy")


@router.get("/nocodb", response_model=HealthResponse)
async def health_check_nocodb(nocodb: NocoDBClient = Depends(get_nocodb_client)):
    """NocoDB connectivity check."""
    if await nocodb.health_check():
        return HealthResponse(status="healthy", message="NocoDB connection OK")
    return JSONResponse(
        status_code=503,
        content=HealthResponse(status="unhealthy", message="NocoDB unreachable").model_dump(),
    )
