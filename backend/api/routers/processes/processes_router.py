"""
Import process API endpoints.

Routes:
- POST /processo-importacao - Create process
- GET /processo-importacao/list - List processes
- GET /processo-importacao/list-all - List open processes
- POST /processo-importacao/search - Find processes by invoice number
- POST /processo-importacao/check - Process summary with linked documents
- POST /processo-importacao/create-simple - Find or create process for an invoice
- POST /processo-importacao/delete - Delete process
- GET /processo-importacao/documents - List documents of a process
- POST /processo-importacao/documents/delete - Remove document from process
- POST /processo-importacao/connect-documents - Link file to process
- POST /processo-importacao/attach-document - Note a document on a process
- POST /processo-importacao/update-from-proforma - Copy proforma values to process
- POST /processo-importacao/update-stage - Move process to another stage
- GET/POST /processo-importacao/audit-logs - Stage change history
- POST /processo-importacao/migrate-stages - Rewrite legacy stage labels
- GET /processo-importacao/rules - Business rule evaluation
- GET /processo-importacao/completion - Document completion status

Dependencies: backend.application.services, backend.models
System role: Import process HTTP API
"""

import logging

from fastapi import APIRouter, Depends, Query

from backend.api.deps import (
    get_audit_log_service,
    get_current_user,
    get_process_document_service,
    get_process_service,
)
from backend.api.routers.router_utils import handle_api_errors
from backend.application.services import (
    AuditLogService,
    ProcessDocumentService,
    ProcessService,
)
from backend.boundary.supabase import AuthenticatedUser
from backend.core.exceptions import ValidationError
from backend.models.process import (
    AttachDocumentRequest,
    CreateAuditLogRequest,
    CreateProcessRequest,
    CreateSimpleProcessRequest,
    ProcessDocumentRequest,
    ProcessIdRequest,
    RemoveDocumentRequest,
    SearchProcessRequest,
    UpdateFromProformaRequest,
    UpdateStageRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/processo-importacao", tags=["processes"])


@router.post("", status_code=201)
@handle_api_errors("create process")
async def create_process(
    request: CreateProcessRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    process_service: ProcessService = Depends(get_process_service),
) -> dict:
    """
    Create an import process.

    Raises:
        HTTPException(400): Missing process number
        HTTPException(500): Creation failed
    """
    process = await process_service.create_process(request.to_columns(), user.display_name)
    return {"success": True, "data": process}


@router.get("/list")
@handle_api_errors("list processes")
async def list_processes(
    user: AuthenticatedUser = Depends(get_current_user),
    process_service: ProcessService = Depends(get_process_service),
) -> dict:
    processes = await process_service.list_processes()
    return {"success": True, "processes": processes, "total": len(processes)}


@router.get("/list-all")
@handle_api_errors("list active processes")
async def list_active_processes(
    user: AuthenticatedUser = Depends(get_current_user),
    process_service: ProcessService = Depends(get_process_service),
) -> dict:
    processes = await process_service.list_active()
    return {"success": True, "processes": processes, "total": len(processes)}


@router.post("/search")
@handle_api_errors("search processes")
async def search_processes(
    request: SearchProcessRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    process_service: ProcessService = Depends(get_process_service),
) -> dict:
    result = await process_service.search_by_invoice(request.invoice_number)
    return {"success": True, **result}


@router.post("/check")
@handle_api_errors("check process")
async def check_process(
    request: ProcessIdRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    process_service: ProcessService = Depends(get_process_service),
) -> dict:
    result = await process_service.check_process(request.process_id)
    return {"success": True, **result}


@router.post("/create-simple")
@handle_api_errors("create process")
async def create_simple_process(
    request: CreateSimpleProcessRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    process_service: ProcessService = Depends(get_process_service),
) -> dict:
    """
    Find or create the ``IMP-{invoice}`` process and link the uploaded file.

    Raises:
        HTTPException(400): Missing invoice number
    """
    result = await process_service.create_simple(
        request.invoice_number, request.file_hash, user.display_name
    )
    return {"success": True, **result}


@router.post("/delete")
@handle_api_errors("delete process")
async def delete_process(
    request: ProcessIdRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    process_service: ProcessService = Depends(get_process_service),
) -> dict:
    """
    Delete a process and its document links.

    Raises:
        HTTPException(404): Process not found
        HTTPException(409): Related records prevent deletion
    """
    logger.info("Deleting process", extra={"process_id": request.process_id, "user_id": user.id})
    result = await process_service.delete_process(request.process_id, user.display_name)
    return {"success": True, "message": "Processo excluído com sucesso", **result}


@router.get("/documents")
@handle_api_errors("list process documents")
async def list_process_documents(
    process_id: str = Query(..., alias="processId"),
    user: AuthenticatedUser = Depends(get_current_user),
    document_service: ProcessDocumentService = Depends(get_process_document_service),
) -> dict:
    result = await document_service.get_process_documents(process_id)
    return {"success": True, **result}


@router.post("/documents/delete")
@handle_api_errors("remove document")
async def remove_process_document(
    request: RemoveDocumentRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    document_service: ProcessDocumentService = Depends(get_process_document_service),
) -> dict:
    """Detach a file from a process; stored files are never deleted."""
    result = await document_service.remove_document(
        request.process_id, request.document_hash, user.display_name
    )
    return {"success": True, "message": "Documento removido do processo", **result}


@router.post("/connect-documents")
@handle_api_errors("connect document")
async def connect_documents(
    request: ProcessDocumentRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    document_service: ProcessDocumentService = Depends(get_process_document_service),
) -> dict:
    relation = await document_service.connect_documents(request.process_id, request.file_hash)
    return {"success": True, "data": relation}


@router.post("/attach-document")
@handle_api_errors("attach document")
async def attach_document(
    request: AttachDocumentRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    document_service: ProcessDocumentService = Depends(get_process_document_service),
) -> dict:
    result = await document_service.attach_document(
        request.process_id, request.document_id, request.document_type, user.display_name
    )
    return {"success": True, **result}


@router.post("/update-from-proforma")
@handle_api_errors("update process from proforma")
async def update_from_proforma(
    request: UpdateFromProformaRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    process_service: ProcessService = Depends(get_process_service),
) -> dict:
    result = await process_service.update_from_proforma(
        request.process_id, request.proforma_data, user.display_name
    )
    return {"success": True, **result}


@router.post("/update-stage")
@handle_api_errors("update stage")
async def update_stage(
    request: UpdateStageRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    process_service: ProcessService = Depends(get_process_service),
) -> dict:
    """
    Move a process to another Kanban stage.

    Raises:
        HTTPException(400): Unknown stage
        HTTPException(404): Process not found
    """
    result = await process_service.update_stage(
        request.process_id, request.new_stage, user.display_name, force=request.force
    )
    return {"success": True, **result}


@router.get("/audit-logs")
@handle_api_errors("list audit logs")
async def list_audit_logs(
    process_id: str = Query(..., alias="processId", description="Process number"),
    limit: int = Query(50, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    user: AuthenticatedUser = Depends(get_current_user),
    audit_service: AuditLogService = Depends(get_audit_log_service),
) -> dict:
    result = await audit_service.list_logs(process_id, limit=limit, offset=offset)
    return {"success": True, "processId": process_id, **result}


@router.post("/audit-logs", status_code=201)
@handle_api_errors("create audit log")
async def create_audit_log(
    request: CreateAuditLogRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    audit_service: AuditLogService = Depends(get_audit_log_service),
) -> dict:
    return await audit_service.create_manual(
        request.process_id,
        request.process_number,
        request.previous_stage,
        request.new_stage,
        request.reason,
        user.display_name,
    )


@router.post("/migrate-stages")
@handle_api_errors("migrate stages")
async def migrate_stages(
    user: AuthenticatedUser = Depends(get_current_user),
    process_service: ProcessService = Depends(get_process_service),
) -> dict:
    logger.info("Migrating legacy stages", extra={"user_id": user.id})
    result = await process_service.migrate_stages()
    return {"success": True, **result}


@router.get("/rules")
@handle_api_errors("evaluate business rules")
async def evaluate_rules(
    process_id: str = Query(..., alias="processId"),
    user: AuthenticatedUser = Depends(get_current_user),
    process_service: ProcessService = Depends(get_process_service),
) -> dict:
    result = await process_service.evaluate_rules(process_id)
    return {"success": True, **result}


@router.get("/completion")
@handle_api_errors("get completion status")
async def completion_status(
    process_number: str = Query(..., alias="processNumber"),
    user: AuthenticatedUser = Depends(get_current_user),
    document_service: ProcessDocumentService = Depends(get_process_document_service),
) -> dict:
    if not process_number:
        raise ValidationError("processNumber is required", field="processNumber")
    result = await document_service.get_process_completion_status(process_number)
    return {"success": True, **result}
