"""
OCR API endpoints.

Routes:
- POST /ocr/upload - Store a PDF (deduplicated by content hash)
- POST /ocr/extract - Start extraction of a stored PDF
- GET /ocr/extract/status - Poll an extraction request

Dependencies: backend.application.services, backend.models
System role: Upload and extraction HTTP API
"""

import logging

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from backend.api.deps import get_current_user, get_extraction_request_service, get_upload_service
from backend.api.routers.router_utils import handle_api_errors
from backend.application.services import ExtractionRequestService, UploadService
from backend.boundary.supabase import AuthenticatedUser
from backend.models.ocr import ExtractRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ocr", tags=["ocr"])


@router.post("/upload")
@handle_api_errors("upload document")
async def upload_document(
    file: UploadFile = File(...),
    document_type: str = Form("unknown", alias="documentType"),
    user: AuthenticatedUser = Depends(get_current_user),
    upload_service: UploadService = Depends(get_upload_service),
) -> dict:
    """
    Upload a PDF for extraction.

    A file uploaded before is not stored again; when it was already
    processed its saved data is returned as ``structuredResult``.

    Raises:
        HTTPException(400): Empty, oversized or non-PDF file, or unknown type
        HTTPException(500): Storage or database failure
    """
    content = await file.read()
    logger.info(
        "Upload received",
        extra={"original_name": file.filename, "size": len(content), "document_type": document_type},
    )
    result = await upload_service.upload(user, file.filename or "", content, document_type)
    return {"success": True, **result}


@router.post("/extract", status_code=status.HTTP_202_ACCEPTED)
@handle_api_errors("start extraction")
async def start_extraction(
    request: ExtractRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    request_service: ExtractionRequestService = Depends(get_extraction_request_service),
) -> dict:
    """
    Schedule multi-step extraction of a stored PDF.

    Identical requests while one is running share its ``requestId``.

    Raises:
        HTTPException(400): Not a PDF or unsupported type
    """
    result = request_service.submit_extraction(
        user.id, request.storage_path, request.file_type, request.document_type
    )
    return {"success": True, **result}


@router.get("/extract/status")
@handle_api_errors("get extraction status")
async def extraction_status(
    request_id: str = Query(..., alias="requestId"),
    user: AuthenticatedUser = Depends(get_current_user),
    request_service: ExtractionRequestService = Depends(get_extraction_request_service),
) -> dict:
    return request_service.get_status(request_id)
