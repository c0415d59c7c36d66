"""
Test suite for DocumentCacheService.

System role: Verification of hash-keyed document reuse
"""

import pytest

from backend.application.services import DocumentCacheService
from backend.core.exceptions import DocumentNotFoundError, ImportProcessError, ValidationError

FILE_HASH = "b" * 64


@pytest.fixture
def service(nocodb, tables) -> DocumentCacheService:
    return DocumentCacheService(nocodb=nocodb, tables=tables)


@pytest.fixture
def upload(nocodb, tables) -> dict:
    """Provide a completed commercial invoice upload."""
    return nocodb.seed(
        tables.table_document_uploads,
        {
            "hashArquivo": FILE_HASH,
            "nomeOriginal": "invoice.pdf",
            "tipoDocumento": "commercial_invoice",
            "statusProcessamento": "completo",
        },
    )[0]


class TestLookups:
    """Test suite for upload lookups."""

    @pytest.mark.asyncio
    async def test_is_document_saved(self, service, nocodb, tables):
        nocodb.seed(tables.table_di_headers, {"numero_DI": "1", "hash_arquivo_origem": FILE_HASH})

        assert await service.is_document_saved(FILE_HASH, "DI") is True
        assert await service.is_document_saved("other", "di") is False
        assert await service.is_document_saved(FILE_HASH, "bl") is False

    @pytest.mark.asyncio
    async def test_is_document_saved_should_absorb_errors(self, service, nocodb, tables):
        nocodb.fail("find", tables.table_di_headers)

        assert await service.is_document_saved(FILE_HASH, "di") is False

    @pytest.mark.asyncio
    async def test_find_by_original_name_requires_completed_upload(self, service, nocodb, tables, upload):
        assert (await service.find_by_original_name("invoice.pdf"))["Id"] == upload["Id"]

        nocodb.rows(tables.table_document_uploads)[0]["statusProcessamento"] = "pendente"
        assert await service.find_by_original_name("invoice.pdf") is None


class TestReconstruct:
    """Test suite for reconstruct_structured_result."""

    @pytest.mark.asyncio
    async def test_should_rebuild_header_and_items(self, service, nocodb, tables, upload):
        nocodb.seed(
            tables.table_commercial_invoice_headers,
            {"invoiceNumber": "INV-1", "hash_arquivo_origem": FILE_HASH},
        )
        nocodb.seed(
            tables.table_commercial_invoice_items,
            {"invoiceNumber": "INV-1", "referencia": "R1", "hash_arquivo_origem": FILE_HASH},
        )

        result = await service.reconstruct_structured_result(upload, "commercial_invoice")

        assert result == {
            "documentType": "commercial_invoice",
            "header": {"invoice_number": "INV-1"},
            "items": [{"invoice_number": "INV-1", "reference": "R1"}],
        }

    @pytest.mark.asyncio
    async def test_swift_header_should_be_nested(self, service, nocodb, tables):
        nocodb.seed(
            tables.table_swift,
            {"referencia_remetente": "REF1", "beneficiario_nome": "Supplier", "hash_arquivo_origem": FILE_HASH},
        )

        result = await service.reconstruct_structured_result(
            {"hashArquivo": FILE_HASH, "tipoDocumento": "swift"}, "swift"
        )

        assert result["header"]["senders_reference"] == "REF1"
        assert result["header"]["beneficiary"]["name"] == "Supplier"

    @pytest.mark.asyncio
    async def test_numerario_header_goes_under_di_info(self, service, nocodb, tables):
        nocodb.seed(tables.table_numerario, {"invoiceNumber": "INV-1", "hash_arquivo_origem": FILE_HASH})

        result = await service.reconstruct_structured_result(
            {"hashArquivo": FILE_HASH, "tipoDocumento": "numerario"}, "numerario"
        )

        assert result["diInfo"] == {"invoice_number": "INV-1"}

    @pytest.mark.asyncio
    async def test_missing_header_or_type_returns_none(self, service, upload):
        assert await service.reconstruct_structured_result(upload, "commercial_invoice") is None
        assert await service.reconstruct_structured_result(upload, "bl") is None


class TestGetCachedDocument:
    """Test suite for get_cached_document."""

    @pytest.mark.asyncio
    async def test_should_return_cached_payload(self, service, nocodb, tables, upload):
        nocodb.seed(
            tables.table_commercial_invoice_headers,
            {"invoiceNumber": "INV-1", "hash_arquivo_origem": FILE_HASH},
        )

        result = await service.get_cached_document(FILE_HASH, "commercial_invoice", "user-1")

        assert result["success"] is True
        data = result["data"]
        assert data["upload"]["originalName"] == "invoice.pdf"
        assert data["structuredResult"]["header"] == {"invoice_number": "INV-1"}
        assert data["metadata"]["fromCache"] is True
        assert data["metadata"]["userId"] == "user-1"

    @pytest.mark.asyncio
    async def test_incomplete_upload_should_not_be_served(self, service, nocodb, tables, upload):
        nocodb.rows(tables.table_document_uploads)[0]["statusProcessamento"] = "pendente"

        result = await service.get_cached_document(FILE_HASH, "commercial_invoice", "user-1")

        assert result["success"] is False
        assert result["message"] == "Documento ainda não foi processado completamente"

    @pytest.mark.asyncio
    async def test_invalid_arguments_should_raise(self, service):
        with pytest.raises(ValidationError, match="Tipo de documento inválido"):
            await service.get_cached_document(FILE_HASH, "nota_fiscal", "user-1")
        with pytest.raises(ValidationError, match="Hash inválido"):
            await service.get_cached_document("short", "di", "user-1")

    @pytest.mark.asyncio
    async def test_unknown_hash_should_raise_not_found(self, service):
        with pytest.raises(DocumentNotFoundError):
            await service.get_cached_document(FILE_HASH, "di", "user-1")

    @pytest.mark.asyncio
    async def test_unreadable_rows_should_raise(self, service, upload):
        with pytest.raises(ImportProcessError, match="Não foi possível recuperar"):
            await service.get_cached_document(FILE_HASH, "commercial_invoice", "user-1")


class TestStatusUpdates:
    """Test suite for upload status updates."""

    @pytest.mark.asyncio
    async def test_update_and_error_status(self, service, nocodb, tables, upload):
        await service.update_upload_status(upload["Id"], "INV-1")
        row = nocodb.rows(tables.table_document_uploads)[0]
        assert row["idDocumento"] == "INV-1"
        assert row["statusProcessamento"] == "completo"

        await service.mark_upload_error(upload["Id"], "boom")
        assert row["statusProcessamento"] == "erro"
