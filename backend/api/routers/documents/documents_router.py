"""
Document API endpoints.

Routes:
- POST /documents/check-existing - Look up a file by content hash
- POST /documents/connect-process - Link a file to a process by number
- GET /documents/connect-process - Check whether a file is linked
- GET /documents/cache/{hash} - Saved data of a processed file
- POST /documents/identify - Classify a PDF
- POST /documents/process - Validate extraction output before saving
- GET /documents/process/status - Poll an extraction request
- POST /documents/save - Save, update or reset a document's rows
- GET /documents/types - Supported document types
- GET /documents/{type}/prompts - Extraction steps of a type
- GET /documents/health - Document subsystem health

Dependencies: backend.application.services, backend.core, backend.models
System role: Document HTTP API
"""

import logging

from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import JSONResponse

from backend.api.deps import (
    get_current_user,
    get_document_cache_service,
    get_document_save_service,
    get_extraction_request_service,
    get_extraction_service,
    get_process_document_service,
    get_upload_service,
)
from backend.api.routers.router_utils import handle_api_errors
from backend.application.services import (
    DocumentCacheService,
    DocumentSaveService,
    ExtractionRequestService,
    ExtractionService,
    ProcessDocumentService,
    UploadService,
)
from backend.boundary.supabase import AuthenticatedUser
from backend.core.document_types import (
    DOCUMENT_TYPE_INFOS,
    SAVEABLE_TYPES,
    parse_document_type,
)
from backend.core.documents_pipeline import utc_now_iso
from backend.core.exceptions import ValidationError
from backend.core.extraction import get_steps, validate_extracted
from backend.core.extraction.prompts import EXTRACTABLE_TYPES
from backend.models.document import (
    ConnectProcessRequest,
    ProcessExtractedRequest,
    SaveDocumentRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])

CACHE_CONTROL = "private, max-age=300"


@router.post("/check-existing")
@handle_api_errors("check existing document")
async def check_existing(
    file: UploadFile = File(...),
    user: AuthenticatedUser = Depends(get_current_user),
    upload_service: UploadService = Depends(get_upload_service),
) -> dict:
    content = await file.read()
    if not content:
        raise ValidationError("File is empty", field="file")
    result = await upload_service.check_existing(content)
    return {"success": True, **result}


@router.post("/connect-process")
@handle_api_errors("connect document to process")
async def connect_process(
    request: ConnectProcessRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    document_service: ProcessDocumentService = Depends(get_process_document_service),
) -> dict:
    """
    Link a file to a process and record it in the process pipeline.

    ``processId`` carries the process number.

    Raises:
        HTTPException(404): Process not found
    """
    metadata = request.metadata.model_dump(exclude_none=True) if request.metadata else {}
    return await document_service.connect_document(
        request.process_id,
        request.document_type,
        request.file_hash,
        document_id=request.document_id,
        metadata=metadata,
    )


@router.get("/connect-process")
@handle_api_errors("check document connection")
async def check_connection(
    file_hash: str = Query(..., alias="fileHash"),
    process_id: str | None = Query(None, alias="processId", description="Process number"),
    user: AuthenticatedUser = Depends(get_current_user),
    document_service: ProcessDocumentService = Depends(get_process_document_service),
) -> dict:
    if process_id:
        is_linked = await document_service.is_document_linked(process_id, file_hash)
        return {"isLinked": is_linked, "processId": process_id if is_linked else None}

    linked_process = await document_service.find_process_by_document(file_hash)
    return {"isLinked": linked_process is not None, "processId": linked_process}


@router.get("/cache/{file_hash}")
@handle_api_errors("get cached document")
async def get_cached_document(
    file_hash: str,
    document_type: str = Query(..., alias="type"),
    user: AuthenticatedUser = Depends(get_current_user),
    cache_service: DocumentCacheService = Depends(get_document_cache_service),
) -> JSONResponse:
    """
    Saved data of a processed file, rebuilt from its NocoDB rows.

    Raises:
        HTTPException(400): Invalid hash or type
        HTTPException(404): No upload with this hash
    """
    result = await cache_service.get_cached_document(file_hash, document_type, user.id)
    if not result.get("success"):
        return JSONResponse(result)

    logger.info(
        "Serving cached document",
        extra={"file_hash": file_hash, "document_type": document_type, "user_id": user.id},
    )
    return JSONResponse(
        result,
        headers={
            "Cache-Control": CACHE_CONTROL,
            "X-Document-Hash": file_hash,
            "X-Document-Type": document_type,
        },
    )


@router.post("/identify")
@handle_api_errors("identify document")
async def identify_document(
    file: UploadFile = File(...),
    user: AuthenticatedUser = Depends(get_current_user),
    upload_service: UploadService = Depends(get_upload_service),
    extraction_service: ExtractionService = Depends(get_extraction_service),
) -> dict:
    """
    Classify a PDF and read its main reference number.

    Raises:
        HTTPException(400): Not a PDF
        HTTPException(502): Extraction backend failed
    """
    content = await file.read()
    upload_service.validate_file(file.filename or "", content)
    identification = await extraction_service.identify(content)
    return {"success": True, "identification": identification}


@router.post("/process")
@handle_api_errors("process document")
async def process_document(
    request: ProcessExtractedRequest,
    user: AuthenticatedUser = Depends(get_current_user),
) -> dict:
    """
    Validate extraction output and return it ready to save.

    Raises:
        HTTPException(400): Unknown type or missing sections
    """
    doc_type = parse_document_type(request.document_type)
    structured = validate_extracted(doc_type, request.extracted_data)

    source_metadata = {}
    if isinstance(request.extracted_data, dict):
        source_metadata = request.extracted_data.get("metadata") or {}

    return {
        "success": True,
        "documentType": doc_type.value,
        "extractedData": structured,
        "metadata": {
            "storagePath": request.storage_path,
            "fileHash": request.file_hash,
            "originalFileName": request.original_file_name,
            "processingTime": source_metadata.get("totalProcessingTime"),
            "tokenUsage": source_metadata.get("totalTokenUsage"),
        },
        "readyToSave": True,
        "message": f"Documento {doc_type.value} processado com sucesso",
    }


@router.get("/process/status")
@handle_api_errors("get extraction status")
async def process_status(
    request_id: str = Query(..., alias="requestId"),
    user: AuthenticatedUser = Depends(get_current_user),
    request_service: ExtractionRequestService = Depends(get_extraction_request_service),
) -> dict:
    return request_service.get_processed_status(request_id)


@router.post("/save")
@handle_api_errors("save document")
async def save_document(
    request: SaveDocumentRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    save_service: DocumentSaveService = Depends(get_document_save_service),
) -> dict:
    """
    Save, update or reset a document's NocoDB rows.

    Raises:
        HTTPException(400): Unsupported type or missing data
        HTTPException(404): Updating a document that was never saved
    """
    if request.action == "reset":
        if not request.file_hash:
            raise ValidationError("fileHash is required to reset a document", field="fileHash")
        result = await save_service.reset(request.file_hash, request.document_type)
        return {"success": True, **result, "message": f"{request.document_type} reset successfully"}

    if not request.data:
        raise ValidationError("Missing required fields: documentType and data", field="data")

    if request.action == "update":
        if not request.file_hash:
            raise ValidationError("fileHash is required to update a document", field="fileHash")
        result = await save_service.update(
            request.document_type, request.data, request.file_hash, user_id=user.id
        )
        return {"success": True, **result, "message": f"{request.document_type} updated successfully"}

    result = await save_service.save(
        request.document_type,
        request.data,
        file_hash=request.file_hash,
        user_id=user.id,
        process_id=request.process_id,
        overwrite=request.overwrite,
    )
    return {"success": True, **result, "message": f"{request.document_type} saved successfully"}


@router.get("/types")
async def list_document_types(format: str = Query("full")) -> dict:
    """Supported document types, as values (``simple``) or with metadata (``full``)."""
    if format == "simple":
        types = [t.value for t in EXTRACTABLE_TYPES]
        return {"success": True, "documentTypes": types, "count": len(types)}

    infos = [info.to_dict() for info in DOCUMENT_TYPE_INFOS.values()]
    return {
        "success": True,
        "documentTypes": infos,
        "statistics": _statistics(),
        "count": len(infos),
    }


@router.get("/health")
async def documents_health() -> JSONResponse:
    stats = _statistics()
    checks = {
        "promptsRegistered": stats["totalProcessors"] > 0,
        "saveTablesConfigured": stats["saveableTypes"] > 0,
    }
    healthy = all(checks.values())
    return JSONResponse(
        {
            "status": "healthy" if healthy else "degraded",
            "timestamp": utc_now_iso(),
            "service": "Document Processing System",
            "statistics": stats,
            "checks": checks,
        },
        status_code=200 if healthy else 503,
    )


@router.get("/{document_type}/prompts")
@handle_api_errors("get document prompts")
async def document_prompts(
    document_type: str,
    step: int | None = Query(None),
    user: AuthenticatedUser = Depends(get_current_user),
) -> dict:
    """
    Extraction steps configured for a type, or one step with its prompt.

    Raises:
        HTTPException(400): Unsupported type or step
    """
    steps = get_steps(parse_document_type(document_type))
    if step is not None:
        selected = next((s for s in steps if s.step == step), None)
        if selected is None:
            raise ValidationError(f"Invalid step number: {step}", field="step")
        return {"success": True, "step": selected.to_dict(), "prompt": selected.prompt}
    return {"success": True, "documentType": document_type, "steps": [s.to_dict() for s in steps]}


def _statistics() -> dict:
    multi_step = [t for t in EXTRACTABLE_TYPES if len(get_steps(t)) > 1]
    return {
        "totalProcessors": len(EXTRACTABLE_TYPES),
        "multiStepProcessors": len(multi_step),
        "saveableTypes": len(SAVEABLE_TYPES),
        "supportedFormats": ["pdf"],
        "documentTypes": [t.value for t in EXTRACTABLE_TYPES],
    }
