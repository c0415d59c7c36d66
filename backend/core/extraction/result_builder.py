"""
Structured result assembly for multi-step extractions.

Turns the raw per-step LLM outputs into named sections (header, items,
containers, ...) keyed the way the save service and the cache expect.

Dependencies: None (pure domain layer)
System role: Shapes extraction output into document sections
"""

import json
import logging
from typing import Any

from backend.core.document_types import DocumentType

logger = logging.getLogger(__name__)

# Section name per step for types with a fixed layout
_FIXED_SECTIONS: dict[DocumentType, tuple[str, ...]] = {
    DocumentType.DI: ("header", "items", "taxInfo"),
    DocumentType.NUMERARIO: ("diInfo", "header", "items"),
    DocumentType.NOTA_FISCAL: ("header", "items"),
    DocumentType.SWIFT: ("header",),
    DocumentType.BL: ("header", "containers"),
    DocumentType.CONTRATO_CAMBIO: ("header",),
}

_ITEMS_AT_STEP_TWO = (DocumentType.COMMERCIAL_INVOICE, DocumentType.PROFORMA_INVOICE)


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` fence, if the text is wrapped in one."""
    cleaned = text.strip()
    if cleaned.startswith("```json") and cleaned.endswith("```"):
        return cleaned[len("```json"):-3].strip()
    if cleaned.startswith("```") and cleaned.endswith("```"):
        return cleaned[3:-3].strip()
    return cleaned


def parse_step_json(text: str) -> Any:
    """
    Parse a step output as JSON.

    Returns:
        The parsed object or list, or None when the text is not JSON
    """
    cleaned = strip_code_fences(text)
    if not cleaned or cleaned[0] not in "[{":
        return None
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        return None


def _section(data: Any, step: dict[str, Any], **extra_metadata: Any) -> dict[str, Any]:
    metadata = {
        "step": step["step"],
        "stepName": step.get("stepName"),
        "stepDescription": step.get("stepDescription"),
        "processingTime": step.get("metadata", {}).get("processingTime", 0),
    }
    metadata.update(extra_metadata)
    return {"data": data, "source": f"step_{step['step']}", "metadata": metadata}


def _generic_section_name(document_type: DocumentType, step_number: int, parsed: Any) -> str | None:
    if step_number == 1 and isinstance(parsed, dict):
        return "header"
    if step_number == 2 and isinstance(parsed, list):
        return "items" if document_type in _ITEMS_AT_STEP_TWO else "containers"
    if step_number == 4 and isinstance(parsed, list):
        return "items"
    return None


def build_structured_result(
    document_type: DocumentType,
    step_results: list[dict[str, Any]],
) -> dict[str, Any]:
    """
    Assemble named sections from per-step extraction outputs.

    Args:
        document_type: Type that was extracted
        step_results: Step records as produced by the extraction runner
            (``step``, ``stepName``, ``stepDescription``, ``result``, ``metadata``)

    Returns:
        Dict of sections plus a ``processing_summary``
    """
    structured: dict[str, Any] = {}
    fixed = _FIXED_SECTIONS.get(document_type)

    for step in step_results:
        step_number = step["step"]
        raw = step.get("result") or ""
        parsed = parse_step_json(raw)

        if fixed is None and step_number == 3 and parsed is None and raw.strip():
            # Packing list disposition step answers in prose
            structured["disposition_explanation"] = _section(strip_code_fences(raw), step)
            continue

        if parsed is None:
            logger.warning(
                "Skipping unparsable extraction step",
                extra={"document_type": document_type.value, "step": step_number},
            )
            continue

        if fixed is not None:
            name = fixed[step_number - 1] if step_number <= len(fixed) else None
        else:
            name = _generic_section_name(document_type, step_number, parsed)

        if name is None:
            logger.warning(
                "Extraction step output does not match any section",
                extra={"document_type": document_type.value, "step": step_number},
            )
            continue

        extra_metadata = {}
        if isinstance(parsed, list) and name == "items":
            extra_metadata["itemCount"] = len(parsed)
        structured[name] = _section(parsed, step, **extra_metadata)

    structured["processing_summary"] = {
        "total_steps": len(step_results),
        "total_processing_time": sum(
            s.get("metadata", {}).get("processingTime", 0) for s in step_results
        ),
        "completed_steps": [s["step"] for s in step_results],
    }
    return structured


def final_extracted_data(structured: dict[str, Any]) -> Any:
    """The most detailed list section of a structured result (items, then containers)."""
    for name in ("items", "taxInfo", "containers"):
        section = structured.get(name)
        if section and isinstance(section.get("data"), list):
            return section["data"]
    header = structured.get("header")
    return header.get("data") if header else None
