"""
Process-document relation service.

Links uploaded files (by hash) to import processes and keeps each
process's ``documentsPipeline`` in step. Relation rows store the
process record ``Id``; operations addressed by process number resolve
the process first.

Pipeline updates are read-modify-write on a JSON column with no
locking. They are best-effort: a failed pipeline write never undoes a
successful link or unlink.

Dependencies: backend.boundary.nocodb, backend.core.documents_pipeline
System role: Document attachment and pipeline bookkeeping for processes
"""

import asyncio
import logging
from typing import Any

from backend.application.services.audit_log_service import AuditLogService
from backend.boundary.nocodb import NocoDBClient
from backend.configs.nocodb import NocoDBSettings
from backend.core import documents_pipeline as pipeline
from backend.core.document_types import SAVEABLE_TYPES, DocumentType
from backend.core.exceptions import NocoDBError, ProcessNotFoundError
from backend.core.nocodb_query import build_where_clause, eq
from backend.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

STATUS_REMOVED = "removido"


def document_view(upload: dict[str, Any]) -> dict[str, Any]:
    """Upload row as listed under a process."""
    return {
        "id": upload.get("Id"),
        "hashArquivo": upload.get("hashArquivo"),
        "nomeArquivo": upload.get("nomeOriginal"),
        "tipoDocumento": upload.get("tipoDocumento"),
        "dataUpload": upload.get("dataUpload"),
        "statusProcessamento": upload.get("statusProcessamento") or "pendente",
        "usuario": upload.get("emailUsuario") or upload.get("idUsuario"),
        "tamanho": upload.get("tamanhoArquivo"),
        "idDocumento": upload.get("idDocumento"),
    }


class ProcessDocumentService:
    """Maintains PROCESSO_DOCUMENTO_REL rows and process pipelines."""

    def __init__(
        self,
        nocodb: NocoDBClient,
        tables: NocoDBSettings,
        audit_service: AuditLogService,
    ) -> None:
        """
        Initialize process-document service.

        Args:
            nocodb: NocoDB client
            tables: NocoDB table id settings
            audit_service: Audit trail for document removals
        """
        self.nocodb = nocodb
        self.tables = tables
        self.audit_service = audit_service

    @property
    def _processes(self) -> str:
        return self.tables.table_processos_importacao

    @property
    def _relations(self) -> str:
        return self.tables.table_processo_documento_rel

    @property
    def _uploads(self) -> str:
        return self.tables.table_document_uploads

    async def find_process_by_number(self, process_number: str) -> dict[str, Any] | None:
        response = await self.nocodb.find(
            self._processes, where=eq("numero_processo", process_number), limit=1
        )
        rows = response["list"]
        return rows[0] if rows else None

    async def get_process_record(self, process_id: Any) -> dict[str, Any]:
        """
        Fetch a process by record Id.

        Raises:
            ProcessNotFoundError: If it does not exist
        """
        process = await self.nocodb.find_one(self._processes, process_id)
        if not process:
            raise ProcessNotFoundError(str(process_id))
        return process

    async def _find_upload(self, file_hash: str) -> dict[str, Any] | None:
        response = await self.nocodb.find(self._uploads, where=eq("hashArquivo", file_hash), limit=1)
        rows = response["list"]
        return rows[0] if rows else None

    async def _find_relation(self, process_id: Any, file_hash: str) -> dict[str, Any] | None:
        where = build_where_clause([
            {"field": "processo_importacao", "op": "eq", "value": process_id},
            {"field": "hash_arquivo_upload", "op": "eq", "value": file_hash},
        ])
        response = await self.nocodb.find(self._relations, where=where, limit=1)
        rows = response["list"]
        return rows[0] if rows else None

    async def connect_documents(self, process_id: Any, file_hash: str) -> dict[str, Any]:
        """Create a relation row without any duplicate check."""
        return await self.nocodb.create(
            self._relations,
            {"processo_importacao": str(process_id), "hash_arquivo_upload": file_hash},
        )

    async def _link(self, process_id: Any, file_hash: str) -> dict[str, Any]:
        existing = await self._find_relation(process_id, file_hash)
        if existing:
            return existing
        relation = await self.connect_documents(process_id, file_hash)
        logger.info(
            "Document linked to process",
            extra={"process_id": process_id, "file_hash": file_hash},
        )
        return relation

    async def link_document_to_process(self, process_number: str, file_hash: str) -> dict[str, Any]:
        """
        Link a file to a process; an existing link is returned unchanged.

        Raises:
            ProcessNotFoundError: If no process has this number
        """
        process = await self.find_process_by_number(process_number)
        if not process:
            raise ProcessNotFoundError(process_number)
        return await self._link(process["Id"], file_hash)

    async def _write_pipeline(self, process: dict[str, Any], entries: list[dict[str, Any]], **extra: Any) -> None:
        await self.nocodb.update(
            self._processes,
            process["Id"],
            {"documentsPipeline": pipeline.serialize_pipeline(entries), **extra},
        )

    async def link_document_with_metadata(
        self,
        process_number: str,
        file_hash: str,
        metadata: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Link a file and record it in the process pipeline.

        Args:
            process_number: Target process number
            file_hash: Hash of the uploaded file
            metadata: ``documentType``, ``documentId`` and optional ``status``,
                ``uploadedAt``, ``processedAt``

        Returns:
            The relation row
        """
        process = await self.find_process_by_number(process_number)
        if not process:
            raise ProcessNotFoundError(process_number)
        relation = await self._link(process["Id"], file_hash)

        document_type = metadata.get("documentType")
        document_id = metadata.get("documentId")
        try:
            entry = pipeline.build_entry(
                document_type,
                file_hash,
                status=metadata.get("status", "completed"),
                document_id=document_id,
                uploaded_at=metadata.get("uploadedAt"),
                processed_at=metadata.get("processedAt") or pipeline.utc_now_iso(),
            )
            entries = pipeline.upsert_entry(pipeline.parse_pipeline(process.get("documentsPipeline")), entry)
            extra = {}
            if document_type == DocumentType.PROFORMA_INVOICE.value and document_id:
                extra["proforma_invoice_doc_id"] = document_id
            await self._write_pipeline(process, entries, **extra)
        except NocoDBError as e:
            log_exception_with_context(
                logger, "Failed to update documents pipeline", e,
                process_number=process_number, file_hash=file_hash,
            )
        return relation

    async def connect_document(
        self,
        process_number: str,
        document_type: str,
        file_hash: str,
        document_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Link a file to a process and upsert its pipeline entry.

        Raises:
            ProcessNotFoundError: If no process has this number

        Returns:
            Connection result; ``warning`` is set when only the pipeline
            update failed
        """
        metadata = metadata or {}
        process = await self.find_process_by_number(process_number)
        if not process:
            raise ProcessNotFoundError(process_number)

        await self._link(process["Id"], file_hash)

        entry = pipeline.build_entry(
            document_type,
            file_hash,
            status=metadata.get("status", "pending"),
            document_id=document_id,
            uploaded_at=metadata.get("uploadedAt"),
            processed_at=metadata.get("processedAt"),
        )
        entries = pipeline.upsert_entry(pipeline.parse_pipeline(process.get("documentsPipeline")), entry)
        try:
            await self._write_pipeline(process, entries)
        except NocoDBError as e:
            log_exception_with_context(
                logger, "Document connected but pipeline update failed", e,
                process_number=process_number, file_hash=file_hash,
            )
            return {
                "success": True,
                "message": "Document connected, but pipeline update failed",
                "warning": e.message,
            }

        return {
            "success": True,
            "message": "Document connected successfully",
            "processId": process_number,
            "documentType": document_type,
            "fileHash": file_hash,
            "pipeline": entries,
        }

    async def attach_document(
        self,
        process_id: Any,
        document_id: str,
        document_type: str,
        user: str,
    ) -> dict[str, Any]:
        """Note an attached document in the process description."""
        process = await self.get_process_record(process_id)
        attached_at = pipeline.utc_now_iso()
        line = f"[{attached_at}] Documento {document_type} (ID: {document_id}) anexado por {user}"
        current = process.get("descricao") or ""

        update: dict[str, Any] = {
            "descricao": f"{current}\n{line}" if current else line,
            "atualizado_em": attached_at,
            "atualizado_por": user,
        }
        if process.get("status") == "aberto":
            update["status"] = "em_andamento"

        updated = await self.nocodb.update(self._processes, process["Id"], update)
        return {
            "process": updated,
            "attachedDocument": {"id": document_id, "type": document_type, "attachedAt": attached_at},
        }

    async def is_document_linked(self, process_number: str, file_hash: str) -> bool:
        process = await self.find_process_by_number(process_number)
        if not process:
            return False
        return await self._find_relation(process["Id"], file_hash) is not None

    async def find_process_by_document(self, file_hash: str) -> str | None:
        """Number of the first process the file is linked to."""
        refs = await self.get_document_processes(file_hash)
        for ref in refs:
            process = await self.nocodb.find_one(self._processes, ref)
            if process:
                return process.get("numero_processo")
        return None

    async def _relation_rows(self, process_id: Any) -> list[dict[str, Any]]:
        response = await self.nocodb.find(
            self._relations, where=eq("processo_importacao", process_id), limit=100
        )
        return response["list"]

    async def _uploads_for_hashes(self, hashes: list[str]) -> list[dict[str, Any]]:
        async def fetch(file_hash: str) -> dict[str, Any] | None:
            try:
                return await self._find_upload(file_hash)
            except NocoDBError as e:
                log_exception_with_context(logger, "Failed to fetch upload", e, file_hash=file_hash)
                return None

        unique = list(dict.fromkeys(h for h in hashes if h))
        uploads = await asyncio.gather(*(fetch(h) for h in unique))
        return [upload for upload in uploads if upload]

    async def get_linked_uploads(self, process_id: Any) -> list[dict[str, Any]]:
        """Upload rows of every file linked to the process."""
        relations = await self._relation_rows(process_id)
        return await self._uploads_for_hashes([r.get("hash_arquivo_upload") for r in relations])

    async def get_process_documents(self, process_id: Any) -> dict[str, Any]:
        """
        Documents linked to a process.

        Raises:
            ProcessNotFoundError: If the process does not exist
        """
        process = await self.get_process_record(process_id)
        uploads = await self.get_linked_uploads(process["Id"])
        documents = [document_view(upload) for upload in uploads]
        return {
            "processId": process_id,
            "processNumber": process.get("numero_processo"),
            "documents": documents,
            "total": len(documents),
        }

    async def get_document_processes(self, file_hash: str) -> list[str]:
        """Process ids the file is linked to."""
        response = await self.nocodb.find(
            self._relations, where=eq("hash_arquivo_upload", file_hash), limit=100
        )
        return [row.get("processo_importacao") for row in response["list"]]

    async def unlink_document_from_process(self, process_id: Any, file_hash: str) -> int:
        """Delete the relation rows between a process and a file; returns how many."""
        where = build_where_clause([
            {"field": "processo_importacao", "op": "eq", "value": process_id},
            {"field": "hash_arquivo_upload", "op": "eq", "value": file_hash},
        ])
        response = await self.nocodb.find(self._relations, where=where, limit=100)
        for row in response["list"]:
            await self.nocodb.delete(self._relations, row["Id"])
        return len(response["list"])

    async def remove_document(self, process_id: Any, file_hash: str, user: str) -> dict[str, Any]:
        """
        Detach a file from a process.

        The upload is marked ``removido`` once no process references it.
        Stored files are never deleted.
        """
        process = await self.nocodb.find_one(self._processes, process_id)
        process_number = (process or {}).get("numero_processo") or str(process_id)

        await self.unlink_document_from_process(process_id, file_hash)

        linked = await self.get_document_processes(file_hash)
        is_orphan = not linked
        if is_orphan:
            try:
                upload = await self._find_upload(file_hash)
                if upload:
                    await self.nocodb.update(
                        self._uploads,
                        upload["Id"],
                        {"statusProcessamento": STATUS_REMOVED, "dataProcessamento": pipeline.utc_now_iso()},
                    )
            except NocoDBError as e:
                log_exception_with_context(logger, "Failed to mark upload removed", e, file_hash=file_hash)

        await self.audit_service.record(
            process_number,
            "document_attached",
            "document_removed",
            f"Documento removido do processo por {user}",
            user,
            file_hash=file_hash,
        )

        if process:
            try:
                entries = pipeline.remove_entry(
                    pipeline.parse_pipeline(process.get("documentsPipeline")), file_hash
                )
                await self._write_pipeline(process, entries)
            except NocoDBError as e:
                log_exception_with_context(
                    logger, "Failed to remove document from pipeline", e, process_id=process_id
                )

        return {
            "documentHash": file_hash,
            "processId": process_id,
            "isOrphan": is_orphan,
            "linkedProcessCount": len(linked),
        }

    async def check_process_document_types(self, process_number: str) -> set[str]:
        """Document types of the files linked to a process."""
        process = await self.find_process_by_number(process_number)
        if not process:
            return set()
        uploads = await self.get_linked_uploads(process["Id"])
        return {u["tipoDocumento"] for u in uploads if u.get("tipoDocumento")}

    async def get_process_completion_status(self, process_number: str) -> dict[str, Any]:
        types = await self.check_process_document_types(process_number)
        documents = {doc_type.value: doc_type.value in types for doc_type in SAVEABLE_TYPES}
        present = sum(documents.values())
        return {
            "processNumber": process_number,
            "documents": documents,
            "completionPercentage": round(present / len(documents) * 100),
            "canProcessPhysicalReceipt": documents["packing_list"] and documents["commercial_invoice"],
            "canProcessFiscal": documents["di"] and documents["nota_fiscal"],
        }
