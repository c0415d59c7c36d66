"""
documentsPipeline helpers.

The pipeline is a JSON array stored as text on the process record, one
entry per linked document. It is parsed, modified and re-serialized on
every update without schema validation.

Dependencies: None (pure domain layer)
System role: Read-modify-write helpers for the process documents pipeline
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_pipeline(raw: Any) -> list[dict[str, Any]]:
    """Parse a stored pipeline; anything unparsable becomes an empty list."""
    if not raw:
        return []
    if isinstance(raw, list):
        return list(raw)
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Unparsable documentsPipeline, resetting", extra={"raw": raw[:200]})
            return []
        return parsed if isinstance(parsed, list) else []
    return []


def serialize_pipeline(entries: list[dict[str, Any]]) -> str:
    return json.dumps(entries, ensure_ascii=False)


def build_entry(
    document_type: str,
    file_hash: str,
    status: str = "pending",
    document_id: str | None = None,
    uploaded_at: str | None = None,
    processed_at: str | None = None,
    error: str | None = None,
) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "documentType": document_type,
        "status": status,
        "fileHash": file_hash,
        "documentId": document_id,
        "uploadedAt": uploaded_at or utc_now_iso(),
        "processedAt": processed_at,
    }
    if error:
        entry["error"] = error
    return entry


def upsert_entry(entries: list[dict[str, Any]], entry: dict[str, Any]) -> list[dict[str, Any]]:
    """Replace the entry sharing the file hash or document type, else append."""
    result = list(entries)
    for index, existing in enumerate(result):
        if (
            existing.get("fileHash") == entry.get("fileHash")
            or existing.get("documentType") == entry.get("documentType")
        ):
            result[index] = entry
            return result
    result.append(entry)
    return result


def update_entry_status(
    entries: list[dict[str, Any]], document_type: str, **fields: Any
) -> list[dict[str, Any]]:
    """Merge ``fields`` into every entry of the given document type."""
    return [
        {**entry, **fields} if entry.get("documentType") == document_type else entry
        for entry in entries
    ]


def remove_entry(entries: list[dict[str, Any]], file_hash: str) -> list[dict[str, Any]]:
    return [entry for entry in entries if entry.get("fileHash") != file_hash]
