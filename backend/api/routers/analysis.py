"""
Process matching API endpoints.

Routes:
- POST /analysis/find-process - Suggest processes for a document
- GET /analysis/find-process - Check whether an invoice already has a process

Dependencies: backend.application.services, backend.models
System role: Document-to-process matching HTTP API
"""

from fastapi import APIRouter, Depends, Query

from backend.api.deps import get_current_user, get_process_matching_service
from backend.api.routers.router_utils import handle_api_errors
from backend.application.services import ProcessMatchingService
from backend.boundary.supabase import AuthenticatedUser
from backend.models.analysis import FindProcessRequest

router = APIRouter(prefix="/analysis", tags=["analysis"])


@router.post("/find-process")
@handle_api_errors("find matching processes")
async def find_process(
    request: FindProcessRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    matching_service: ProcessMatchingService = Depends(get_process_matching_service),
) -> dict:
    result = await matching_service.find_matches(
        request.document_data.model_dump(by_alias=True, exclude_none=True),
        request.search_mode,
    )
    return {"success": True, **result}


@router.get("/find-process")
@handle_api_errors("check invoice")
async def invoice_exists(
    invoice_number: str = Query(..., alias="invoiceNumber"),
    user: AuthenticatedUser = Depends(get_current_user),
    matching_service: ProcessMatchingService = Depends(get_process_matching_service),
) -> dict:
    return await matching_service.invoice_exists(invoice_number)
