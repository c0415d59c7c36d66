"""
OCR request schemas.

Dependencies: pydantic
System role: OCR API contracts
"""

from pydantic import Field

from backend.models.common import CamelModel


class ExtractRequest(CamelModel):
    """Request schema for starting an extraction of a stored file."""

    storage_path: str = Field(..., min_length=1, description="Path returned by /ocr/upload")
    file_type: str = Field(".pdf", description="File extension, only .pdf is supported")
    document_type: str = Field("unknown", description="Document type, or unknown to identify first")
