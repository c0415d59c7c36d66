"""
Document cache service.

A processed document is identified by the SHA-256 of its file. When the
same file is uploaded again its saved rows are read back from NocoDB
instead of running extraction a second time.

Dependencies: backend.boundary.nocodb, backend.core.field_mappings
System role: Hash-keyed reuse of previously extracted documents
"""

import logging
from typing import Any

from backend.boundary.nocodb import NocoDBClient
from backend.configs.nocodb import NocoDBSettings
from backend.core.document_types import (
    CACHEABLE_TYPES,
    DOCUMENT_TABLE_LAYOUTS,
    DocumentType,
)
from backend.core.documents_pipeline import utc_now_iso
from backend.core.exceptions import (
    DocumentNotFoundError,
    ImportProcessError,
    NocoDBError,
    ValidationError,
)
from backend.core.field_mappings import transform_from_nocodb, unflatten_swift
from backend.core.nocodb_query import eq

logger = logging.getLogger(__name__)

MIN_HASH_LENGTH = 32
STATUS_COMPLETE = "completo"
STATUS_ERROR = "erro"


def upload_summary(upload: dict[str, Any]) -> dict[str, Any]:
    """API view of a DOCUMENT_UPLOADS row."""
    return {
        "id": upload.get("Id"),
        "hash": upload.get("hashArquivo"),
        "originalName": upload.get("nomeOriginal"),
        "fileSize": upload.get("tamanhoArquivo"),
        "mimeType": upload.get("tipoMime"),
        "uploadDate": upload.get("dataUpload"),
        "processDate": upload.get("dataProcessamento"),
        "documentId": upload.get("idDocumento"),
        "storagePath": upload.get("caminhoArmazenamento"),
        "publicUrl": upload.get("urlPublica"),
    }


class DocumentCacheService:
    """Looks up uploads by hash and rebuilds their saved document data."""

    def __init__(self, nocodb: NocoDBClient, tables: NocoDBSettings) -> None:
        """
        Initialize document cache service.

        Args:
            nocodb: NocoDB client
            tables: NocoDB table id settings
        """
        self.nocodb = nocodb
        self.tables = tables

    def _table(self, attr: str) -> str:
        return getattr(self.tables, attr)

    async def find_upload_by_hash(self, file_hash: str) -> dict[str, Any] | None:
        response = await self.nocodb.find(
            self.tables.table_document_uploads,
            where=eq("hashArquivo", file_hash),
            limit=1,
        )
        rows = response["list"]
        return rows[0] if rows else None

    async def is_document_saved(self, file_hash: str, document_type: str) -> bool:
        """Whether a header row for this hash exists in the type's table."""
        try:
            layout = DOCUMENT_TABLE_LAYOUTS[DocumentType(document_type.lower())]
        except (ValueError, KeyError):
            logger.warning(
                "Document type not supported for save check",
                extra={"document_type": document_type},
            )
            return False

        try:
            response = await self.nocodb.find(
                self._table(layout.header_table_attr),
                where=eq("hash_arquivo_origem", file_hash),
                limit=1,
            )
        except NocoDBError as e:
            logger.error(
                "Failed to check saved document",
                extra={"file_hash": file_hash, "error": str(e)},
            )
            return False
        return bool(response["list"])

    async def find_by_original_name(self, original_name: str) -> dict[str, Any] | None:
        """Most recent completed upload with this original file name."""
        response = await self.nocodb.find(
            self.tables.table_document_uploads,
            where=eq("nomeOriginal", original_name),
            sort="-dataUpload",
            limit=1,
        )
        rows = response["list"]
        if not rows or rows[0].get("statusProcessamento") != STATUS_COMPLETE:
            return None
        return rows[0]

    async def reconstruct_structured_result(
        self,
        upload: dict[str, Any],
        document_type: str,
    ) -> dict[str, Any] | None:
        """
        Rebuild a document from its saved NocoDB rows.

        Args:
            upload: DOCUMENT_UPLOADS row of the file
            document_type: Type the document was saved as

        Returns:
            Sections keyed like the extraction output, or None when the
            type is not saveable or no header row exists
        """
        try:
            doc_type = DocumentType(document_type.lower())
            layout = DOCUMENT_TABLE_LAYOUTS[doc_type]
        except (ValueError, KeyError):
            logger.warning(
                "Document type not supported for cache reconstruction",
                extra={"document_type": document_type},
            )
            return None

        file_hash = upload.get("hashArquivo")
        where = eq("hash_arquivo_origem", file_hash)

        headers = await self.nocodb.find(self._table(layout.header_table_attr), where=where, limit=1)
        if not headers["list"]:
            return None

        header = transform_from_nocodb(headers["list"][0], layout.header_mapping)
        result: dict[str, Any] = {"documentType": upload.get("tipoDocumento")}

        if doc_type is DocumentType.SWIFT:
            result["header"] = unflatten_swift(header)
        elif doc_type is DocumentType.NUMERARIO:
            result["diInfo"] = header
        else:
            result["header"] = header

        for child in layout.children:
            rows = await self.nocodb.find(self._table(child.table_attr), where=where, limit=1000)
            result[child.section] = [
                transform_from_nocodb(row, child.mapping) for row in rows["list"]
            ]
        return result

    async def get_cached_document(
        self,
        file_hash: str,
        document_type: str,
        user_id: str,
    ) -> dict[str, Any]:
        """
        Cached document payload for the cache endpoint.

        Raises:
            ValidationError: If the hash or type is invalid
            DocumentNotFoundError: If no upload has this hash
            ImportProcessError: If the saved rows can no longer be read back
        """
        cacheable = [t.value for t in CACHEABLE_TYPES]
        if document_type.lower() not in cacheable:
            raise ValidationError(
                f"Tipo de documento inválido. Tipos válidos: {', '.join(cacheable)}",
                field="type",
            )
        if not file_hash or len(file_hash) < MIN_HASH_LENGTH:
            raise ValidationError("Hash inválido", field="hash")

        upload = await self.find_upload_by_hash(file_hash)
        if upload is None:
            raise DocumentNotFoundError(file_hash)

        if upload.get("statusProcessamento") != STATUS_COMPLETE:
            return {
                "success": False,
                "message": "Documento ainda não foi processado completamente",
                "data": upload,
            }

        structured = await self.reconstruct_structured_result(upload, document_type)
        if structured is None:
            raise ImportProcessError(
                "Não foi possível recuperar os dados do documento",
                details={"file_hash": file_hash, "document_type": document_type},
            )

        return {
            "success": True,
            "data": {
                "upload": upload_summary(upload),
                "structuredResult": structured,
                "metadata": {
                    "documentType": document_type,
                    "fromCache": True,
                    "retrievedAt": utc_now_iso(),
                    "userId": user_id,
                },
            },
        }

    async def update_upload_status(
        self,
        upload_id: Any,
        document_id: str,
        status: str = STATUS_COMPLETE,
    ) -> None:
        await self.nocodb.update(
            self.tables.table_document_uploads,
            upload_id,
            {
                "statusProcessamento": status,
                "dataProcessamento": utc_now_iso(),
                "idDocumento": document_id,
            },
        )

    async def mark_upload_error(self, upload_id: Any, error: str) -> None:
        logger.warning("Marking upload as failed", extra={"upload_id": upload_id, "error": error})
        await self.nocodb.update(
            self.tables.table_document_uploads,
            upload_id,
            {"statusProcessamento": STATUS_ERROR, "dataProcessamento": utc_now_iso()},
        )
