"""
Upload service orchestrator.

Validates incoming PDFs, deduplicates them by content hash against
DOCUMENT_UPLOADS, stores new files in Supabase and records the upload
row. A re-upload of a processed file returns its saved data instead of
storing it again.

Dependencies: backend.boundary.supabase, backend.boundary.nocodb
System role: Entry point of documents into the extraction workflow
"""

import asyncio
import logging
from typing import Any

from backend.application.services.document_cache_service import (
    STATUS_COMPLETE,
    DocumentCacheService,
    upload_summary,
)
from backend.boundary.nocodb import NocoDBClient
from backend.boundary.supabase import AuthenticatedUser, SupabaseStorageClient, compute_file_hash
from backend.configs.nocodb import NocoDBSettings
from backend.core.document_types import parse_document_type
from backend.core.documents_pipeline import utc_now_iso
from backend.core.exceptions import NocoDBError, ValidationError
from backend.core.nocodb_query import eq
from backend.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"
PDF_MIME_TYPE = "application/pdf"
STATUS_PENDING = "pendente"


class UploadService:
    """
    Upload service orchestrator.

    Owns the write side of DOCUMENT_UPLOADS and the storage upload.
    """

    def __init__(
        self,
        nocodb: NocoDBClient,
        tables: NocoDBSettings,
        storage: SupabaseStorageClient,
        cache_service: DocumentCacheService,
        max_file_size: int = 20 * 1024 * 1024,
    ) -> None:
        """
        Initialize upload service.

        Args:
            nocodb: NocoDB client
            tables: NocoDB table id settings
            storage: Supabase storage client
            cache_service: Hash cache used to detect and rebuild saved documents
            max_file_size: Largest accepted file in bytes
        """
        self.nocodb = nocodb
        self.tables = tables
        self.storage = storage
        self.cache_service = cache_service
        self.max_file_size = max_file_size

    def validate_file(self, filename: str, content: bytes) -> None:
        """
        Reject empty, oversized and non-PDF files.

        Raises:
            ValidationError: Describing the first failed check
        """
        if not content:
            raise ValidationError("File is empty", field="file")
        if len(content) > self.max_file_size:
            limit_mb = self.max_file_size // (1024 * 1024)
            raise ValidationError(f"File exceeds the {limit_mb}MB limit", field="file")
        if not (filename or "").lower().endswith(".pdf"):
            raise ValidationError("Only PDF files are accepted", field="file")
        if not content.startswith(PDF_MAGIC):
            raise ValidationError("File content is not a valid PDF", field="file")

    async def upload(
        self,
        user: AuthenticatedUser,
        filename: str,
        content: bytes,
        document_type: str,
    ) -> dict[str, Any]:
        """
        Store a PDF or reuse the upload row of an identical file.

        Args:
            user: Authenticated uploader
            filename: Original file name
            content: File bytes
            document_type: Declared document type (``unknown`` allowed)

        Returns:
            dict with ``data`` (upload view), ``fromCache`` and, for
            processed files, ``structuredResult`` and ``isAlreadySaved``

        Raises:
            ValidationError: If the file or type is invalid
            StorageError: If the storage upload fails
            NocoDBError: If the upload row cannot be written
        """
        self.validate_file(filename, content)
        doc_type = parse_document_type(document_type, allow_unknown=True)
        file_hash = compute_file_hash(content)

        existing = await self.cache_service.find_upload_by_hash(file_hash)
        if existing:
            return await self._reuse_upload(existing, user, filename, doc_type.value)

        await self.storage.ensure_bucket_exists()
        stored = await self.storage.upload_file(user.id, filename, content, PDF_MIME_TYPE)

        row = {
            "hashArquivo": file_hash,
            "caminhoArmazenamento": stored["path"],
            "urlPublica": stored["url"],
            "nomeOriginal": filename,
            "tamanhoArquivo": stored["size"],
            "tipoMime": PDF_MIME_TYPE,
            "tipoDocumento": doc_type.value,
            "idUsuario": user.id,
            "emailUsuario": user.email or "",
            "dataUpload": utc_now_iso(),
            "statusProcessamento": STATUS_PENDING,
        }
        created = await self.nocodb.create(self.tables.table_document_uploads, row)
        logger.info(
            "Upload recorded",
            extra={"file_hash": file_hash, "document_type": doc_type.value, "user_id": user.id},
        )

        return {
            "fromCache": False,
            "isAlreadySaved": False,
            "data": self._upload_view({**row, **created}, user),
            "message": "Arquivo enviado com sucesso",
        }

    async def _reuse_upload(
        self,
        existing: dict[str, Any],
        user: AuthenticatedUser,
        filename: str,
        document_type: str,
    ) -> dict[str, Any]:
        is_complete = existing.get("statusProcessamento") == STATUS_COMPLETE
        update = {
            "dataUpload": utc_now_iso(),
            "tipoDocumento": document_type,
            "nomeOriginal": filename,
        }
        if not is_complete:
            update["statusProcessamento"] = STATUS_PENDING
        await self.nocodb.update(self.tables.table_document_uploads, existing["Id"], update)
        upload = {**existing, **update}

        structured = None
        if is_complete:
            try:
                structured = await self.cache_service.reconstruct_structured_result(upload, document_type)
            except NocoDBError as e:
                log_exception_with_context(
                    logger, "Failed to rebuild cached document", e, file_hash=existing.get("hashArquivo")
                )

        logger.info(
            "Upload matched existing file",
            extra={"file_hash": existing.get("hashArquivo"), "is_complete": is_complete},
        )
        result: dict[str, Any] = {
            "fromCache": True,
            "isAlreadySaved": structured is not None,
            "data": self._upload_view(upload, user),
            "message": (
                "Documento já processado anteriormente"
                if is_complete
                else "Arquivo já enviado anteriormente"
            ),
        }
        if structured is not None:
            result["structuredResult"] = structured
        return result

    @staticmethod
    def _upload_view(upload: dict[str, Any], user: AuthenticatedUser) -> dict[str, Any]:
        path = upload.get("caminhoArmazenamento") or ""
        return {
            "id": upload.get("Id"),
            "filename": path.rsplit("/", 1)[-1],
            "originalName": upload.get("nomeOriginal"),
            "size": upload.get("tamanhoArquivo"),
            "documentType": upload.get("tipoDocumento"),
            "fileType": upload.get("tipoMime"),
            "storagePath": path,
            "publicUrl": upload.get("urlPublica"),
            "fileHash": upload.get("hashArquivo"),
            "userId": upload.get("idUsuario") or user.id,
            "status": upload.get("statusProcessamento"),
        }

    async def check_existing(self, content: bytes) -> dict[str, Any]:
        """
        Report whether a file was uploaded before and which processes use it.

        Returns:
            ``{exists: False, fileHash}`` or the upload summary with its
            connected processes
        """
        file_hash = compute_file_hash(content)
        upload = await self.cache_service.find_upload_by_hash(file_hash)
        if not upload:
            return {"exists": False, "fileHash": file_hash}

        relations = await self.nocodb.find(
            self.tables.table_processo_documento_rel,
            where=eq("hash_arquivo_upload", file_hash),
            limit=100,
        )
        process_ids = [r.get("processo_importacao") for r in relations["list"] if r.get("processo_importacao")]

        results = await asyncio.gather(
            *(self.nocodb.find_one(self.tables.table_processos_importacao, pid) for pid in process_ids),
            return_exceptions=True,
        )
        processes = []
        for process_id, process in zip(process_ids, results):
            if isinstance(process, BaseException):
                logger.warning(
                    "Failed to fetch linked process",
                    extra={"process_id": process_id, "error": str(process)},
                )
                continue
            if process:
                processes.append({
                    "id": process.get("Id"),
                    "numero_processo": process.get("numero_processo"),
                    "empresa": process.get("empresa"),
                    "status": process.get("status"),
                    "etapa": process.get("etapa"),
                })

        return {
            "exists": True,
            "fileHash": file_hash,
            "document": {
                **upload_summary(upload),
                "documentType": upload.get("tipoDocumento"),
                "status": upload.get("statusProcessamento"),
            },
            "connectedProcesses": processes,
            "isProcessed": upload.get("statusProcessamento") == STATUS_COMPLETE,
        }
