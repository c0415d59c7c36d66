"""
Process matching service.

Finds active import processes that an extracted document most likely
belongs to, by exact invoice number, by a weighted field score, or by
asking Claude to compare the document against the process list.

Dependencies: backend.boundary.nocodb, backend.boundary.anthropic
System role: Document-to-process suggestion
"""

import json
import logging
import re
from typing import Any

from backend.boundary.anthropic import ClaudeExtractionClient
from backend.boundary.nocodb import NocoDBClient
from backend.configs.nocodb import NocoDBSettings
from backend.core.exceptions import ExtractionError, ValidationError
from backend.core.nocodb_query import eq

logger = logging.getLogger(__name__)

SEARCH_MODES = ("strict", "fuzzy", "ai")
MAX_MATCHES = 10
FUZZY_MIN_SCORE = 3
AMOUNT_TOLERANCE = 0.1

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")

_PROCESS_PROMPT_FIELDS = (
    "numero_processo",
    "invoiceNumber",
    "empresa",
    "valor_total_estimado",
    "moeda",
    "data_inicio",
    "porto_embarque",
    "porto_destino",
)

MATCHING_PROMPT = """
Analyze the following document data and find matching import processes.

Document Data:
{document}

Existing Processes:
{processes}

Find processes that match based on:
1. Invoice numbers (exact or partial matches)
2. Company names (consider variations and abbreviations)
3. Amounts (consider currency and small variations)
4. Dates (consider proximity)
5. Any other relevant information in the extracted text

Return a JSON array of matches with confidence scores:
[
  {{
    "processo_numero": "IMP-XXX-MM-YYYY",
    "confidence": 0.95,
    "matching_criteria": ["invoice_number", "company_name"],
    "explanation": "Exact invoice number match and company name match"
  }}
]

If no good matches are found, return an empty array.
"""


def _to_float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def fuzzy_score(document_data: dict[str, Any], process: dict[str, Any]) -> int:
    """Weighted similarity between a document and a process."""
    score = 0

    invoice = str(document_data.get("invoiceNumber") or "")
    process_invoice = str(process.get("invoiceNumber") or "")
    if invoice and process_invoice and (invoice in process_invoice or process_invoice in invoice):
        score += 5

    company = (document_data.get("companyName") or "").lower()
    empresa = (process.get("empresa") or "").lower()
    if company and empresa and (company in empresa or empresa in company):
        score += 3

    amount = _to_float(document_data.get("amount"))
    estimated = _to_float(process.get("valor_total_estimado"))
    if amount and estimated and abs(amount - estimated) / estimated < AMOUNT_TOLERANCE:
        score += 2

    return score


class ProcessMatchingService:
    """Suggests processes for an extracted document."""

    def __init__(
        self,
        nocodb: NocoDBClient,
        tables: NocoDBSettings,
        client: ClaudeExtractionClient,
        model: str | None = None,
    ) -> None:
        """
        Initialize process matching service.

        Args:
            nocodb: NocoDB client
            tables: NocoDB table id settings
            client: Claude client used by the ``ai`` mode
            model: Model override for matching prompts
        """
        self.nocodb = nocodb
        self.tables = tables
        self.client = client
        self.model = model

    async def _active_processes(self) -> list[dict[str, Any]]:
        response = await self.nocodb.find(
            self.tables.table_processos_importacao,
            where=eq("status", "active"),
            sort="-data_inicio",
            limit=1000,
        )
        return response["list"]

    async def find_matches(self, document_data: dict[str, Any], search_mode: str = "ai") -> dict[str, Any]:
        """
        Rank active processes against a document.

        Args:
            document_data: ``invoiceNumber``, ``companyName``, ``amount``,
                ``references``, ``extractedText``...
            search_mode: ``strict``, ``fuzzy`` or ``ai``

        Returns:
            dict with ``matches`` (top 10), ``totalProcesses`` and ``searchMode``
        """
        if search_mode not in SEARCH_MODES:
            raise ValidationError(
                f"Invalid search mode: {search_mode}. Valid modes are: {', '.join(SEARCH_MODES)}",
                field="searchMode",
            )

        processes = await self._active_processes()
        if not processes:
            return {"matches": [], "message": "Nenhum processo ativo encontrado"}

        if search_mode == "strict":
            invoice = str(document_data.get("invoiceNumber") or "")
            matches = [p for p in processes if invoice and str(p.get("invoiceNumber") or "") == invoice]
        elif search_mode == "fuzzy":
            matches = [p for p in processes if fuzzy_score(document_data, p) >= FUZZY_MIN_SCORE]
        else:
            try:
                matches = await self._ai_matches(document_data, processes)
            except ExtractionError as e:
                logger.error("AI process matching failed", extra={"error": e.message})
                return {
                    "matches": [],
                    "message": "AI matching failed, please try fuzzy mode",
                    "error": e.message,
                }
            matches.sort(key=lambda m: m.get("ai_confidence") or 0, reverse=True)

        logger.info(
            "Process matching completed",
            extra={"search_mode": search_mode, "candidates": len(processes), "matches": len(matches)},
        )
        return {
            "matches": matches[:MAX_MATCHES],
            "totalProcesses": len(processes),
            "searchMode": search_mode,
        }

    async def _ai_matches(
        self,
        document_data: dict[str, Any],
        processes: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        prompt = MATCHING_PROMPT.format(
            document=json.dumps(document_data, indent=2, ensure_ascii=False),
            processes=json.dumps(
                [{key: p.get(key) for key in _PROCESS_PROMPT_FIELDS} for p in processes],
                indent=2,
                ensure_ascii=False,
                default=str,
            ),
        )
        output = await self.client.complete(prompt, model=self.model, max_tokens=1000)

        found = _JSON_ARRAY.search(output.text)
        if not found:
            return []
        try:
            ai_matches = json.loads(found.group(0))
        except json.JSONDecodeError as e:
            raise ExtractionError("AI matching returned invalid JSON") from e

        by_number = {p.get("numero_processo"): p for p in processes}
        matches = []
        for match in ai_matches:
            if not isinstance(match, dict):
                continue
            process = by_number.get(match.get("processo_numero"))
            if process is None:
                continue
            matches.append({
                **process,
                "ai_confidence": _to_float(match.get("confidence")) or 0.0,
                "ai_matching_criteria": match.get("matching_criteria"),
                "ai_explanation": match.get("explanation"),
            })
        return matches

    async def invoice_exists(self, invoice_number: str) -> dict[str, Any]:
        if not invoice_number:
            raise ValidationError("Invoice number is required", field="invoiceNumber")
        response = await self.nocodb.find(
            self.tables.table_processos_importacao,
            where=eq("invoiceNumber", invoice_number),
            limit=1,
        )
        rows = response["list"]
        return {"exists": bool(rows), "process": rows[0] if rows else None}
