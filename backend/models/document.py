"""
Document request schemas.

Request bodies for connecting, validating and saving extracted
documents.

Dependencies: pydantic
System role: Document API contracts
"""

from typing import Any, Literal

from pydantic import Field

from backend.models.common import CamelModel


class ConnectMetadata(CamelModel):
    invoice_number: str | None = None
    uploaded_at: str | None = None
    processed_at: str | None = None
    status: str | None = None


class ConnectProcessRequest(CamelModel):
    """Request schema for connecting a file to a process by process number."""

    process_id: str = Field(..., min_length=1, description="Process number (numero_processo)")
    document_type: str = Field(..., min_length=1)
    file_hash: str = Field(..., min_length=1)
    document_id: str | None = None
    metadata: ConnectMetadata | None = None


class ProcessExtractedRequest(CamelModel):
    """Request schema for validating extraction output before saving."""

    document_type: str = Field(..., min_length=1)
    extracted_data: Any
    file_hash: str = Field(..., min_length=1)
    original_file_name: str | None = None
    storage_path: str | None = None


class SaveDocumentRequest(CamelModel):
    """
    Request schema for persisting a document.

    ``action`` selects a first save, an in-place update of a saved
    document, or a reset that deletes its rows.
    """

    document_type: str = Field(..., min_length=1)
    data: dict[str, Any] | None = None
    file_hash: str | None = None
    process_id: str | None = None
    overwrite: bool = False
    action: Literal["save", "update", "reset"] = "save"
