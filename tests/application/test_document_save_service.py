"""
Test suite for DocumentSaveService.

System role: Verification of the extracted document write path
"""

import json

import pytest

from backend.application.services import DocumentCacheService, DocumentSaveService
from backend.application.services.document_save_service import normalize_document_data
from backend.core.exceptions import DocumentNotFoundError, UnsupportedDocumentTypeError

FILE_HASH = "a" * 64


@pytest.fixture
def cache_service(nocodb, tables) -> DocumentCacheService:
    return DocumentCacheService(nocodb=nocodb, tables=tables)


@pytest.fixture
def service(nocodb, tables, cache_service) -> DocumentSaveService:
    return DocumentSaveService(nocodb=nocodb, tables=tables, cache_service=cache_service)


@pytest.fixture
def invoice_data() -> dict:
    """Provide a commercial invoice structured result."""
    return {
        "structuredResult": {
            "header": {"data": {"invoice_number": "INV-1", "load_port": "Ningbo"}},
            "items": {
                "data": [
                    {"reference": "R1", "quantity": 10},
                    {"item_number": 7, "reference": "R2", "quantity": 5},
                ]
            },
        }
    }


class TestNormalize:
    """Test suite for normalize_document_data."""

    def test_should_unwrap_sections_and_json_strings(self):
        sections = normalize_document_data(
            {
                "header": json.dumps({"invoice": "INV-1"}),
                "containers": {"data": [{"container": "C1"}]},
                "note": "plain text",
            }
        )

        assert sections == {
            "header": {"invoice": "INV-1"},
            "containers": [{"container": "C1"}],
            "note": "plain text",
        }

    def test_should_fall_back_to_items_per_container(self):
        sections = normalize_document_data({"items_por_container": [{"numero_item": 1}]})

        assert sections["items"] == [{"numero_item": 1}]


class TestSave:
    """Test suite for DocumentSaveService.save."""

    @pytest.mark.asyncio
    async def test_should_write_header_and_items(self, service, nocodb, tables, invoice_data):
        nocodb.seed(tables.table_document_uploads, {"hashArquivo": FILE_HASH, "statusProcessamento": "pendente"})

        result = await service.save("commercial_invoice", invoice_data, file_hash=FILE_HASH, user_id="u1")

        assert result["documentId"] == "INV-1"
        header = nocodb.rows(tables.table_commercial_invoice_headers)[0]
        assert header["invoiceNumber"] == "INV-1"
        assert header["portoEmbarque"] == "Ningbo"
        assert header["hash_arquivo_origem"] == FILE_HASH
        items = nocodb.rows(tables.table_commercial_invoice_items)
        assert [i["numeroItem"] for i in items] == [1, 7]
        assert all(i["invoiceNumber"] == "INV-1" for i in items)
        assert len(result["details"]["items"]) == 2
        upload = nocodb.rows(tables.table_document_uploads)[0]
        assert upload["statusProcessamento"] == "completo"
        assert upload["idDocumento"] == "INV-1"

    @pytest.mark.asyncio
    async def test_should_flatten_swift_header(self, service, nocodb, tables):
        await service.save(
            "swift",
            {"header": {"senders_reference": "REF1", "beneficiary": {"name": "Supplier"}}},
            file_hash=FILE_HASH,
        )

        row = nocodb.rows(tables.table_swift)[0]
        assert row["referencia_remetente"] == "REF1"
        assert row["beneficiario_nome"] == "Supplier"

    @pytest.mark.asyncio
    async def test_should_merge_numerario_sections(self, service, nocodb, tables):
        result = await service.save(
            "numerario",
            {"diInfo": {"invoice_number": "INV-2"}, "header": {"banco": "Itaú"}},
            user_id="u1",
        )

        row = nocodb.rows(tables.table_numerario)[0]
        assert row["invoiceNumber"] == "INV-2"
        assert row["banco"] == "Itaú"
        assert row["criado_por"] == "u1"
        assert "hash_arquivo_origem" not in row
        assert result["documentId"] == "INV-2"

    @pytest.mark.asyncio
    async def test_should_use_row_id_without_natural_key(self, service, nocodb, tables):
        result = await service.save("packing_list", {"header": {"consignee": "ACME"}})

        header = nocodb.rows(tables.table_packing_list_headers)[0]
        assert result["documentId"] == header["Id"]

    @pytest.mark.asyncio
    async def test_overwrite_should_replace_previous_rows(self, service, nocodb, tables, invoice_data):
        await service.save("commercial_invoice", invoice_data, file_hash=FILE_HASH)
        await service.save("commercial_invoice", invoice_data, file_hash=FILE_HASH, overwrite=True)

        assert len(nocodb.rows(tables.table_commercial_invoice_headers)) == 1
        assert len(nocodb.rows(tables.table_commercial_invoice_items)) == 2

    @pytest.mark.asyncio
    async def test_unsaveable_type_should_raise(self, service):
        with pytest.raises(UnsupportedDocumentTypeError):
            await service.save("bl", {"header": {"numero_bl": "1"}})


class TestUpdateAndReset:
    """Test suite for update and reset."""

    @pytest.mark.asyncio
    async def test_update_should_patch_header_and_recreate_items(
        self, service, nocodb, tables, invoice_data
    ):
        await service.save("commercial_invoice", invoice_data, file_hash=FILE_HASH)

        result = await service.update(
            "commercial_invoice",
            {"header": {"invoice_number": "INV-1", "load_port": "Shanghai"}, "items": [{"reference": "R9"}]},
            FILE_HASH,
        )

        header = nocodb.rows(tables.table_commercial_invoice_headers)[0]
        assert header["portoEmbarque"] == "Shanghai"
        items = nocodb.rows(tables.table_commercial_invoice_items)
        assert [i["referencia"] for i in items] == ["R9"]
        assert result["documentId"] == "INV-1"

    @pytest.mark.asyncio
    async def test_update_unsaved_document_should_raise(self, service):
        with pytest.raises(DocumentNotFoundError):
            await service.update("commercial_invoice", {"header": {}}, FILE_HASH)

    @pytest.mark.asyncio
    async def test_reset_should_delete_rows_and_mark_pending(self, service, nocodb, tables, invoice_data):
        nocodb.seed(tables.table_document_uploads, {"hashArquivo": FILE_HASH, "statusProcessamento": "pendente"})
        await service.save("commercial_invoice", invoice_data, file_hash=FILE_HASH)

        result = await service.reset(FILE_HASH, "commercial_invoice")

        assert result["deleted"] == {"items": 2, "header": 1}
        assert nocodb.rows(tables.table_commercial_invoice_headers) == []
        assert nocodb.rows(tables.table_commercial_invoice_items) == []
        assert nocodb.rows(tables.table_document_uploads)[0]["statusProcessamento"] == "pendente"
