"""
Validation of extracted document payloads before they are saved.

Dependencies: None (pure domain layer)
System role: Shape checks for the document process endpoint
"""

import json
from typing import Any

from backend.core.document_types import DocumentType
from backend.core.exceptions import ValidationError


def unwrap_structured(extracted: Any) -> dict[str, Any]:
    """Return the structured sections, unwrapping ``structuredResult`` and JSON strings."""
    if isinstance(extracted, str):
        try:
            extracted = json.loads(extracted)
        except json.JSONDecodeError:
            raise ValidationError("Extracted data is not valid JSON", field="extractedData")
    if not isinstance(extracted, dict):
        raise ValidationError("Extracted data must be an object", field="extractedData")
    inner = extracted.get("structuredResult")
    return inner if isinstance(inner, dict) else extracted


def _section_data(structured: dict[str, Any], name: str) -> Any:
    section = structured.get(name)
    if isinstance(section, dict) and "data" in section:
        return section["data"]
    return section


def validate_extracted(document_type: DocumentType, extracted: Any) -> dict[str, Any]:
    """
    Check that an extracted payload has the sections its type needs.

    Args:
        document_type: Document type the payload claims to be
        extracted: Extraction output or its ``structuredResult``

    Returns:
        The unwrapped structured sections

    Raises:
        ValidationError: If a required section is missing
    """
    structured = unwrap_structured(extracted)
    header = _section_data(structured, "header")

    if document_type is DocumentType.NUMERARIO:
        if not structured.get("diInfo") and not structured.get("header"):
            raise ValidationError("Numerário requires diInfo or header", field="diInfo")
        return structured

    if not header:
        raise ValidationError(
            f"Missing header data for {document_type.value}", field="header"
        )

    if document_type in (DocumentType.PROFORMA_INVOICE, DocumentType.COMMERCIAL_INVOICE):
        if not isinstance(_section_data(structured, "items"), list):
            raise ValidationError(
                f"Missing items list for {document_type.value}", field="items"
            )

    if document_type is DocumentType.SWIFT:
        if not isinstance(header, dict) or not (
            header.get("swift_code") or header.get("senders_reference")
        ):
            raise ValidationError(
                "SWIFT requires swift_code or senders_reference", field="senders_reference"
            )

    return structured
