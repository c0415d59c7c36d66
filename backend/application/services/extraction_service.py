"""
Document extraction service.

Runs the per-type prompt steps against a PDF through Claude, assembles
the structured result, identifies unknown documents and tracks
asynchronous extraction requests so clients can poll for the outcome.

Dependencies: backend.boundary.anthropic, backend.boundary.supabase, backend.core.extraction
System role: OCR/LLM extraction orchestration
"""

import asyncio
import hashlib
import logging
import time
from dataclasses import dataclass, field
from typing import Any

from backend.boundary.anthropic import ClaudeExtractionClient
from backend.boundary.supabase import SupabaseStorageClient
from backend.core.document_types import DocumentType, map_identified_type, parse_document_type
from backend.core.exceptions import ExtractionError, ValidationError
from backend.core.extraction import (
    IDENTIFICATION_PROMPT,
    build_structured_result,
    final_extracted_data,
    get_steps,
    parse_step_json,
)
from backend.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

PDF_EXTENSION = ".pdf"

STATUS_PROCESSING = "processing"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"
STATUS_NOT_FOUND = "not_found"


def make_request_id(user_id: str, storage_path: str, document_type: str) -> str:
    """Stable id for an extraction of one stored file as one type."""
    return hashlib.md5(f"{user_id}-{storage_path}-{document_type}".encode()).hexdigest()


class ExtractionService:
    """Multi-step extraction and identification over a PDF."""

    def __init__(self, client: ClaudeExtractionClient) -> None:
        """
        Initialize extraction service.

        Args:
            client: Claude extraction client
        """
        self.client = client

    async def extract_multi_step(self, pdf_bytes: bytes, document_type: str) -> dict[str, Any]:
        """
        Run every extraction step for a document type, in order.

        Args:
            pdf_bytes: PDF content
            document_type: Type whose prompts are used

        Returns:
            dict with ``steps``, ``finalResult`` and token/time ``metadata``

        Raises:
            UnsupportedDocumentTypeError: If the type has no prompts
            ExtractionError: If any step fails
        """
        doc_type = parse_document_type(document_type)
        steps = get_steps(doc_type)

        started = time.perf_counter()
        results: list[dict[str, Any]] = []
        previous: str | None = None
        input_tokens = 0
        output_tokens = 0

        for step in steps:
            step_started = time.perf_counter()
            logger.info(
                "Running extraction step",
                extra={"document_type": doc_type.value, "step": step.step, "step_name": step.name},
            )
            try:
                output = await self.client.extract(pdf_bytes, step.render(previous))
            except ExtractionError as e:
                e.details.setdefault("document_type", doc_type.value)
                e.details.setdefault("step", step.step)
                raise

            input_tokens += output.input_tokens
            output_tokens += output.output_tokens
            elapsed_ms = int((time.perf_counter() - step_started) * 1000)
            results.append({
                "step": step.step,
                "stepName": step.name,
                "stepDescription": step.description,
                "result": output.text,
                "metadata": {
                    "processingTime": elapsed_ms,
                    "tokenUsage": {"input": output.input_tokens, "output": output.output_tokens},
                },
            })
            previous = output.text

        structured = build_structured_result(doc_type, results)
        total_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "Extraction completed",
            extra={
                "document_type": doc_type.value,
                "steps": len(results),
                "processing_time_ms": total_ms,
                "input_tokens": input_tokens,
                "output_tokens": output_tokens,
            },
        )

        return {
            "success": True,
            "documentType": doc_type.value,
            "totalSteps": len(results),
            "steps": results,
            "finalResult": {
                "rawText": results[-1]["result"] if results else "",
                "extractedData": final_extracted_data(structured),
                "structuredResult": structured,
            },
            "metadata": {
                "totalProcessingTime": total_ms,
                "totalTokenUsage": {"input": input_tokens, "output": output_tokens},
                "model": self.client.model,
            },
        }

    async def identify(self, pdf_bytes: bytes) -> dict[str, Any]:
        """
        Classify a PDF and pull its key reference number.

        Returns:
            dict with ``documentType`` plus the raw identification fields

        Raises:
            ExtractionError: If the answer is not a JSON object
        """
        output = await self.client.extract(pdf_bytes, IDENTIFICATION_PROMPT)
        parsed = parse_step_json(output.text)
        if not isinstance(parsed, dict):
            raise ExtractionError(
                "Document identification returned invalid JSON",
                details={"raw": output.text[:500]},
            )

        document_type = map_identified_type(parsed.get("tipo"))
        logger.info(
            "Document identified",
            extra={"tipo": parsed.get("tipo"), "document_type": document_type.value},
        )
        return {
            "documentType": document_type.value,
            "tipo": parsed.get("tipo"),
            "proximoModulo": parsed.get("proximo_modulo"),
            "documentNumber": parsed.get("document_number"),
            "hasInvoiceNumber": bool(parsed.get("has_invoice_number")),
            "resumo": parsed.get("resumo"),
            "data": parsed.get("data"),
        }

    async def extract_or_identify(self, pdf_bytes: bytes, document_type: str) -> dict[str, Any]:
        """Extract a known type; identify first when the type is ``unknown``."""
        doc_type = parse_document_type(document_type, allow_unknown=True)
        if doc_type is not DocumentType.UNKNOWN:
            return await self.extract_multi_step(pdf_bytes, doc_type.value)

        identification = await self.identify(pdf_bytes)
        identified = DocumentType(identification["documentType"])
        if identified is DocumentType.UNKNOWN:
            return {"success": True, "documentType": identified.value, "identification": identification}

        result = await self.extract_multi_step(pdf_bytes, identified.value)
        result["identification"] = identification
        return result


@dataclass
class ExtractionRequest:
    request_id: str
    task: asyncio.Task
    started_at: float = field(default_factory=time.monotonic)
    finished_at: float | None = None


class ExtractionRegistry:
    """
    In-process table of running and finished extraction requests.

    Finished entries stay pollable for ``ttl_seconds`` and are purged
    lazily on the next registry access.
    """

    def __init__(self, ttl_seconds: int = 900) -> None:
        self.ttl_seconds = ttl_seconds
        self._requests: dict[str, ExtractionRequest] = {}

    def __contains__(self, request_id: str) -> bool:
        return request_id in self._requests

    def purge(self) -> int:
        now = time.monotonic()
        expired = [
            request_id
            for request_id, request in self._requests.items()
            if now - (request.finished_at or request.started_at) > self.ttl_seconds
            and request.task.done()
        ]
        for request_id in expired:
            task = self._requests.pop(request_id).task
            if not task.cancelled():
                task.exception()
        return len(expired)

    def get(self, request_id: str) -> ExtractionRequest | None:
        self.purge()
        return self._requests.get(request_id)

    def submit(self, request_id: str, coro) -> ExtractionRequest:
        """Schedule ``coro`` under ``request_id`` unless that id is still running."""
        self.purge()
        existing = self._requests.get(request_id)
        if existing and not existing.task.done():
            coro.close()
            return existing

        request = ExtractionRequest(request_id=request_id, task=asyncio.create_task(coro))

        def _finished(_task: asyncio.Task) -> None:
            request.finished_at = time.monotonic()

        request.task.add_done_callback(_finished)
        self._requests[request_id] = request
        return request

    def status(self, request_id: str) -> dict[str, Any]:
        request = self.get(request_id)
        if request is None:
            return {"status": STATUS_NOT_FOUND, "requestId": request_id}

        if not request.task.done():
            return {
                "status": STATUS_PROCESSING,
                "requestId": request_id,
                "elapsedTime": int((time.monotonic() - request.started_at) * 1000),
            }

        error = None if request.task.cancelled() else request.task.exception()
        if request.task.cancelled() or error is not None:
            message = getattr(error, "message", None) or str(error or "Extraction cancelled")
            return {"status": STATUS_FAILED, "requestId": request_id, "error": message}

        return {"status": STATUS_COMPLETED, "requestId": request_id, "result": request.task.result()}


class ExtractionRequestService:
    """Starts extractions of stored files in the background."""

    def __init__(
        self,
        extraction: ExtractionService,
        storage: SupabaseStorageClient,
        registry: ExtractionRegistry,
    ) -> None:
        """
        Initialize extraction request service.

        Args:
            extraction: Extraction runner
            storage: Storage client the PDFs are downloaded from
            registry: Shared request registry
        """
        self.extraction = extraction
        self.storage = storage
        self.registry = registry

    async def _run(self, request_id: str, storage_path: str, document_type: str) -> dict[str, Any]:
        try:
            pdf_bytes = await self.storage.download_file(storage_path)
            result = await self.extraction.extract_or_identify(pdf_bytes, document_type)
        except Exception as e:
            log_exception_with_context(
                logger,
                "Extraction request failed",
                e,
                request_id=request_id,
                storage_path=storage_path,
                document_type=document_type,
            )
            raise
        result["requestId"] = request_id
        result["storagePath"] = storage_path
        return result

    def submit_extraction(
        self,
        user_id: str,
        storage_path: str,
        file_type: str,
        document_type: str,
    ) -> dict[str, Any]:
        """
        Validate and schedule an extraction; identical requests share one run.

        Raises:
            ValidationError: If the path is missing or the file is not a PDF
            UnsupportedDocumentTypeError: If the type is not supported
        """
        if not storage_path:
            raise ValidationError("storagePath is required", field="storagePath")
        if (file_type or "").lower() != PDF_EXTENSION:
            raise ValidationError(
                f"Unsupported file type: {file_type}. Only {PDF_EXTENSION} is supported",
                field="fileType",
            )
        doc_type = parse_document_type(document_type, allow_unknown=True)

        request_id = make_request_id(user_id, storage_path, doc_type.value)
        existing = self.registry.get(request_id)
        if existing and not existing.task.done():
            logger.info("Joining in-flight extraction", extra={"request_id": request_id})
            return {"requestId": request_id, "status": STATUS_PROCESSING, "joined": True}

        self.registry.submit(request_id, self._run(request_id, storage_path, doc_type.value))
        logger.info(
            "Extraction scheduled",
            extra={"request_id": request_id, "document_type": doc_type.value, "user_id": user_id},
        )
        return {"requestId": request_id, "status": STATUS_PROCESSING, "joined": False}

    def get_status(self, request_id: str) -> dict[str, Any]:
        if not request_id:
            raise ValidationError("requestId is required", field="requestId")
        return self.registry.status(request_id)

    def get_processed_status(self, request_id: str) -> dict[str, Any]:
        """
        Status of a request shaped like a synchronous document process.

        A completed extraction is returned with its structured data and
        ``readyToSave``; other states are passed through.
        """
        status = self.get_status(request_id)
        if status["status"] == STATUS_PROCESSING:
            return {"success": True, **status, "message": "Processamento em andamento..."}
        if status["status"] != STATUS_COMPLETED:
            return {"success": False, **status}

        result = status["result"]
        final = result.get("finalResult") or {}
        extracted = final.get("structuredResult") or final.get("extractedData")
        if extracted is None:
            extracted = {"rawText": final.get("rawText", "")}

        metadata = result.get("metadata") or {}
        document_type = result.get("documentType")
        return {
            "success": True,
            "status": STATUS_COMPLETED,
            "requestId": request_id,
            "documentType": document_type,
            "extractedData": extracted,
            "metadata": {
                "storagePath": result.get("storagePath"),
                "processingTime": metadata.get("totalProcessingTime"),
                "tokenUsage": metadata.get("totalTokenUsage"),
                "multiStep": result.get("totalSteps", 0) > 1,
            },
            "readyToSave": True,
            "message": f"Documento {document_type} processado com sucesso",
        }
