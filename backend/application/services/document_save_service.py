"""
Document save service.

Persists validated extraction output into the per-type NocoDB tables:
one header row plus child rows (items, containers, tax lines). Every
row is tagged with ``hash_arquivo_origem`` so a document can be read
back, replaced or reset by its file hash.

Dependencies: backend.boundary.nocodb, backend.core.document_types, backend.core.field_mappings
System role: Write path for extracted documents
"""

import json
import logging
from typing import Any

from backend.application.services.document_cache_service import DocumentCacheService
from backend.boundary.nocodb import NocoDBClient
from backend.configs.nocodb import NocoDBSettings
from backend.core.document_types import (
    ChildTable,
    DocumentTableLayout,
    DocumentType,
    get_table_layout,
    parse_document_type,
)
from backend.core.exceptions import DocumentNotFoundError, NocoDBError
from backend.core.field_mappings import flatten_swift, transform_to_nocodb
from backend.core.nocodb_query import eq
from backend.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

HASH_COLUMN = "hash_arquivo_origem"
STATUS_PENDING = "pendente"


def _unwrap(value: Any, default: Any = None) -> Any:
    """Parse JSON strings and unwrap ``{"data": ...}`` sections."""
    if isinstance(value, str) and value.lstrip()[:1] in ("{", "["):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            return default
    if isinstance(value, dict) and "data" in value:
        value = value["data"]
    return default if value is None else value


def normalize_document_data(data: dict[str, Any]) -> dict[str, Any]:
    """Plain sections from either a structured result or an already-flat payload."""
    if isinstance(data.get("structuredResult"), dict):
        data = {**data["structuredResult"], **{k: v for k, v in data.items() if k != "structuredResult"}}
    sections = {key: _unwrap(value) for key, value in data.items()}
    if "items_por_container" in sections and not sections.get("items"):
        sections["items"] = sections["items_por_container"]
    return sections


class DocumentSaveService:
    """Creates, replaces and resets the NocoDB rows of a document."""

    def __init__(
        self,
        nocodb: NocoDBClient,
        tables: NocoDBSettings,
        cache_service: DocumentCacheService,
    ) -> None:
        """
        Initialize document save service.

        Args:
            nocodb: NocoDB client
            tables: NocoDB table id settings
            cache_service: Used to update the upload row after a save
        """
        self.nocodb = nocodb
        self.tables = tables
        self.cache_service = cache_service

    def _table(self, attr: str) -> str:
        return getattr(self.tables, attr)

    @staticmethod
    def _header_fields(
        document_type: DocumentType,
        sections: dict[str, Any],
        user_id: str,
    ) -> dict[str, Any]:
        header = sections.get("header") or {}
        if not isinstance(header, dict):
            header = {}

        if document_type is DocumentType.SWIFT:
            return flatten_swift(header)
        if document_type is DocumentType.NUMERARIO:
            di_info = sections.get("diInfo") or {}
            merged = {**di_info, **header} if isinstance(di_info, dict) else dict(header)
            merged.setdefault("created_by", user_id)
            merged.setdefault("updated_by", user_id)
            return merged
        if document_type is DocumentType.PROFORMA_INVOICE:
            header = dict(header)
            header.setdefault("invoice_number", header.get("proforma_number", ""))
            if not header.get("contracted_company") and header.get("seller"):
                header["contracted_company"] = header["seller"]
            if not header.get("total_price") and header.get("total_amount"):
                header["total_price"] = header["total_amount"]
        return header

    @staticmethod
    def _child_rows(
        child: ChildTable,
        rows: list[dict[str, Any]],
        header: dict[str, Any],
        document_id: Any,
        file_hash: str | None,
    ) -> list[dict[str, Any]]:
        prepared = []
        for index, row in enumerate(rows, start=1):
            if not isinstance(row, dict):
                continue
            row = dict(row)
            if child.link_field and not row.get(child.link_field):
                row[child.link_field] = header.get(child.link_field) or document_id
            if "item_number" in child.mapping and not row.get("item_number"):
                row["item_number"] = index
            if "numero_item" in child.mapping and not row.get("numero_item") and row.get("item_number"):
                row["numero_item"] = row["item_number"]
            mapped = transform_to_nocodb(row, child.mapping)
            if file_hash:
                mapped[HASH_COLUMN] = file_hash
            prepared.append(mapped)
        return prepared

    async def _create_children(
        self,
        layout: DocumentTableLayout,
        sections: dict[str, Any],
        header: dict[str, Any],
        document_id: Any,
        file_hash: str | None,
    ) -> dict[str, list[dict[str, Any]]]:
        saved: dict[str, list[dict[str, Any]]] = {}
        for child in layout.children:
            rows = sections.get(child.section) or []
            if not isinstance(rows, list):
                rows = []
            created = []
            for row in self._child_rows(child, rows, header, document_id, file_hash):
                created.append(await self.nocodb.create(self._table(child.table_attr), row))
            saved[child.section] = created
        return saved

    async def _mark_upload_complete(self, file_hash: str, document_id: Any) -> None:
        try:
            upload = await self.cache_service.find_upload_by_hash(file_hash)
            if upload:
                await self.cache_service.update_upload_status(upload["Id"], str(document_id))
        except NocoDBError as e:
            log_exception_with_context(
                logger, "Failed to update upload status after save", e, file_hash=file_hash
            )

    async def save(
        self,
        document_type: str,
        data: dict[str, Any],
        file_hash: str | None = None,
        user_id: str = "system",
        process_id: str | None = None,
        overwrite: bool = False,
    ) -> dict[str, Any]:
        """
        Save a document's header and child rows.

        Args:
            document_type: One of the saveable document types
            data: Sections (``header``, ``items``, ...) or a structured result
            file_hash: Hash of the source file, stored on every row
            user_id: User performing the save
            process_id: Process the document belongs to (logged only)
            overwrite: Delete previously saved rows for this hash first

        Returns:
            dict with ``documentId`` and ``details`` (created rows per section)

        Raises:
            UnsupportedDocumentTypeError: If the type cannot be saved
            NocoDBError: If a row cannot be written
        """
        doc_type = parse_document_type(document_type)
        layout = get_table_layout(doc_type)

        if overwrite and file_hash:
            await self.reset(file_hash, doc_type.value)

        sections = normalize_document_data(data)
        header = self._header_fields(doc_type, sections, user_id)
        mapped_header = transform_to_nocodb(header, layout.header_mapping)
        if file_hash:
            mapped_header[HASH_COLUMN] = file_hash

        saved_header = await self.nocodb.create(self._table(layout.header_table_attr), mapped_header)
        document_id = header.get(layout.id_field) or (saved_header or {}).get("Id")

        children = await self._create_children(layout, sections, header, document_id, file_hash)

        if file_hash:
            await self._mark_upload_complete(file_hash, document_id)

        logger.info(
            "Document saved",
            extra={
                "document_type": doc_type.value,
                "document_id": document_id,
                "file_hash": file_hash,
                "process_id": process_id,
                "child_rows": {section: len(rows) for section, rows in children.items()},
            },
        )
        return {"documentId": document_id, "details": {"headers": saved_header, **children}}

    async def update(
        self,
        document_type: str,
        data: dict[str, Any],
        file_hash: str,
        user_id: str = "system",
    ) -> dict[str, Any]:
        """
        Replace a saved document in place.

        The header row found by hash is patched and its child rows are
        deleted and recreated from ``data``.

        Raises:
            DocumentNotFoundError: If no header row exists for the hash
        """
        doc_type = parse_document_type(document_type)
        layout = get_table_layout(doc_type)
        header_table = self._table(layout.header_table_attr)

        existing = await self.nocodb.find(header_table, where=eq(HASH_COLUMN, file_hash), limit=1)
        if not existing["list"]:
            raise DocumentNotFoundError(file_hash)
        header_id = existing["list"][0]["Id"]

        sections = normalize_document_data(data)
        header = self._header_fields(doc_type, sections, user_id)
        if doc_type is DocumentType.NUMERARIO:
            header.pop("created_by", None)
        mapped_header = transform_to_nocodb(header, layout.header_mapping)
        updated_header = await self.nocodb.update(header_table, header_id, mapped_header)
        document_id = header.get(layout.id_field) or header_id

        for child in layout.children:
            await self._delete_by_hash(self._table(child.table_attr), file_hash)
        children = await self._create_children(layout, sections, header, document_id, file_hash)

        logger.info(
            "Document updated",
            extra={"document_type": doc_type.value, "document_id": document_id, "file_hash": file_hash},
        )
        return {"documentId": document_id, "details": {"headers": updated_header, **children}}

    async def _delete_by_hash(self, table_id: str, file_hash: str) -> int:
        rows = await self.nocodb.find(table_id, where=eq(HASH_COLUMN, file_hash), limit=1000)
        for row in rows["list"]:
            await self.nocodb.delete(table_id, row["Id"])
        return len(rows["list"])

    async def reset(self, file_hash: str, document_type: str) -> dict[str, Any]:
        """
        Delete every saved row of a document and mark its upload pending.

        Children are removed before the header.

        Returns:
            dict with the number of deleted rows per table
        """
        doc_type = parse_document_type(document_type)
        layout = get_table_layout(doc_type)

        deleted: dict[str, int] = {}
        for child in reversed(layout.children):
            deleted[child.section] = await self._delete_by_hash(self._table(child.table_attr), file_hash)
        deleted["header"] = await self._delete_by_hash(self._table(layout.header_table_attr), file_hash)

        try:
            upload = await self.cache_service.find_upload_by_hash(file_hash)
            if upload:
                await self.nocodb.update(
                    self.tables.table_document_uploads,
                    upload["Id"],
                    {"statusProcessamento": STATUS_PENDING},
                )
        except NocoDBError as e:
            log_exception_with_context(
                logger, "Failed to reset upload status", e, file_hash=file_hash
            )

        logger.info(
            "Document data reset",
            extra={"document_type": doc_type.value, "file_hash": file_hash, "deleted": deleted},
        )
        return {"fileHash": file_hash, "documentType": doc_type.value, "deleted": deleted}
