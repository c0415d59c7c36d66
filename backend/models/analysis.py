"""
Process matching request schemas.

Dependencies: pydantic
System role: Analysis API contracts
"""

from typing import Literal

from pydantic import Field

from backend.models.common import CamelModel


class DocumentMatchData(CamelModel):
    invoice_number: str | None = None
    references: list[str] | None = None
    company_name: str | None = None
    date: str | None = None
    amount: float | None = None
    currency: str | None = None
    extracted_text: str | None = None


class FindProcessRequest(CamelModel):
    document_data: DocumentMatchData
    search_mode: Literal["strict", "fuzzy", "ai"] = Field("ai")
