"""
Import process request schemas.

Dependencies: pydantic
System role: Process API contracts
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from backend.models.common import CamelModel


class CreateProcessRequest(BaseModel):
    """
    Request schema for creating a process.

    Unknown keys are kept so any PROCESSOS_IMPORTACAO column can be set.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    numero_processo: str = Field(..., min_length=1, description="Process number, e.g. IMP-001")
    invoice_number: str | None = Field(None, alias="invoiceNumber")
    empresa: str | None = None
    responsavel: str | None = None
    email_responsavel: str | None = None
    descricao: str | None = None
    status: str | None = None
    etapa: str | None = None
    documents_pipeline: list[dict[str, Any]] | str | None = Field(None, alias="documentsPipeline")

    def to_columns(self) -> dict[str, Any]:
        """Column dict keyed as stored in NocoDB."""
        return self.model_dump(by_alias=True, exclude_none=True)


class SearchProcessRequest(CamelModel):
    invoice_number: str | None = None


class ProcessIdRequest(CamelModel):
    """Request schema for operations addressed by process record Id."""

    process_id: int | str = Field(..., description="Process record Id")


class CreateSimpleProcessRequest(CamelModel):
    invoice_number: str = Field(..., min_length=1)
    file_hash: str | None = None


class ProcessDocumentRequest(CamelModel):
    """Request schema for linking or unlinking a file and a process."""

    process_id: int | str
    file_hash: str = Field(..., min_length=1)


class AttachDocumentRequest(CamelModel):
    process_id: int | str
    document_id: str = Field(..., min_length=1)
    document_type: str = Field(..., min_length=1)


class UpdateFromProformaRequest(CamelModel):
    process_id: int | str
    proforma_data: dict[str, Any]


class UpdateStageRequest(CamelModel):
    """Request schema for moving a process to another Kanban stage."""

    process_id: int | str
    new_stage: str = Field(..., min_length=1)
    force: bool = Field(False, description="Apply even when required documents are missing")


class CreateAuditLogRequest(CamelModel):
    process_id: int | str | None = None
    process_number: str | None = None
    previous_stage: str | None = None
    new_stage: str | None = None
    reason: str | None = None


class RemoveDocumentRequest(CamelModel):
    process_id: int | str
    document_hash: str = Field(..., min_length=1)
