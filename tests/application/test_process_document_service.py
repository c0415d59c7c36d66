"""
Test suite for ProcessDocumentService.

Uses the in-memory NocoDB store so relation rows, upload rows and the
process documentsPipeline can be asserted after each operation.

System role: Verification of document linking and pipeline bookkeeping
"""

import json

import pytest

from backend.application.services import AuditLogService, ProcessDocumentService
from backend.core.exceptions import ProcessNotFoundError


@pytest.fixture
def service(nocodb, tables) -> ProcessDocumentService:
    return ProcessDocumentService(
        nocodb=nocodb,
        tables=tables,
        audit_service=AuditLogService(nocodb=nocodb, tables=tables),
    )


@pytest.fixture
def process(nocodb, tables) -> dict:
    """Provide a seeded process with an empty pipeline."""
    return nocodb.seed(
        tables.table_processos_importacao,
        {"numero_processo": "IMP-INV1", "etapa": "solicitado", "status": "active"},
    )[0]


def _pipeline(nocodb, tables) -> list[dict]:
    return json.loads(nocodb.rows(tables.table_processos_importacao)[0]["documentsPipeline"])


class TestLinking:
    """Test suite for relation creation."""

    @pytest.mark.asyncio
    async def test_link_should_store_process_record_id(self, service, nocodb, tables, process):
        await service.link_document_to_process("IMP-INV1", "hash-1")

        relations = nocodb.rows(tables.table_processo_documento_rel)
        assert len(relations) == 1
        assert relations[0]["processo_importacao"] == str(process["Id"])
        assert relations[0]["hash_arquivo_upload"] == "hash-1"

    @pytest.mark.asyncio
    async def test_link_should_not_duplicate_relation(self, service, nocodb, tables, process):
        first = await service.link_document_to_process("IMP-INV1", "hash-1")
        second = await service.link_document_to_process("IMP-INV1", "hash-1")

        assert len(nocodb.rows(tables.table_processo_documento_rel)) == 1
        assert second["Id"] == first["Id"]

    @pytest.mark.asyncio
    async def test_link_unknown_process_should_raise(self, service):
        with pytest.raises(ProcessNotFoundError):
            await service.link_document_to_process("IMP-404", "hash-1")

    @pytest.mark.asyncio
    async def test_connect_documents_should_not_check_duplicates(self, service, nocodb, tables, process):
        await service.connect_documents(process["Id"], "hash-1")
        await service.connect_documents(process["Id"], "hash-1")

        assert len(nocodb.rows(tables.table_processo_documento_rel)) == 2


class TestConnectDocument:
    """Test suite for connect_document and link_document_with_metadata."""

    @pytest.mark.asyncio
    async def test_connect_should_upsert_pipeline_entry(self, service, nocodb, tables, process):
        result = await service.connect_document("IMP-INV1", "commercial_invoice", "hash-1", document_id="42")

        assert result["success"] is True
        assert result["processId"] == "IMP-INV1"
        pipeline = _pipeline(nocodb, tables)
        assert len(pipeline) == 1
        assert pipeline[0]["documentType"] == "commercial_invoice"
        assert pipeline[0]["status"] == "pending"
        assert pipeline[0]["documentId"] == "42"

    @pytest.mark.asyncio
    async def test_connect_should_replace_entry_of_same_type(self, service, nocodb, tables, process):
        await service.connect_document("IMP-INV1", "bl", "hash-1")
        await service.connect_document("IMP-INV1", "bl", "hash-2")

        pipeline = _pipeline(nocodb, tables)
        assert [e["fileHash"] for e in pipeline] == ["hash-2"]
        assert len(nocodb.rows(tables.table_processo_documento_rel)) == 2

    @pytest.mark.asyncio
    async def test_connect_should_warn_when_pipeline_write_fails(self, service, nocodb, tables, process):
        nocodb.fail("update", tables.table_processos_importacao)

        result = await service.connect_document("IMP-INV1", "bl", "hash-1")

        assert result["success"] is True
        assert result["message"] == "Document connected, but pipeline update failed"
        assert "warning" in result
        assert len(nocodb.rows(tables.table_processo_documento_rel)) == 1

    @pytest.mark.asyncio
    async def test_connect_unknown_process_should_raise(self, service):
        with pytest.raises(ProcessNotFoundError):
            await service.connect_document("IMP-404", "bl", "hash-1")

    @pytest.mark.asyncio
    async def test_link_with_metadata_should_record_proforma_id(self, service, nocodb, tables, process):
        await service.link_document_with_metadata(
            "IMP-INV1",
            "hash-1",
            {"documentType": "proforma_invoice", "documentId": "9"},
        )

        row = nocodb.rows(tables.table_processos_importacao)[0]
        assert row["proforma_invoice_doc_id"] == "9"
        entry = json.loads(row["documentsPipeline"])[0]
        assert entry["status"] == "completed"
        assert entry["processedAt"] is not None

    @pytest.mark.asyncio
    async def test_link_with_metadata_should_survive_pipeline_failure(
        self, service, nocodb, tables, process
    ):
        nocodb.fail("update", tables.table_processos_importacao)

        relation = await service.link_document_with_metadata(
            "IMP-INV1", "hash-1", {"documentType": "bl"}
        )

        assert relation["Id"] is not None


class TestQueries:
    """Test suite for relation lookups."""

    @pytest.mark.asyncio
    async def test_is_document_linked(self, service, process):
        await service.link_document_to_process("IMP-INV1", "hash-1")

        assert await service.is_document_linked("IMP-INV1", "hash-1") is True
        assert await service.is_document_linked("IMP-INV1", "hash-2") is False
        assert await service.is_document_linked("IMP-404", "hash-1") is False

    @pytest.mark.asyncio
    async def test_find_process_by_document_should_return_number(self, service, process):
        await service.link_document_to_process("IMP-INV1", "hash-1")

        assert await service.find_process_by_document("hash-1") == "IMP-INV1"
        assert await service.find_process_by_document("hash-2") is None

    @pytest.mark.asyncio
    async def test_get_process_documents_should_list_uploads(self, service, nocodb, tables, process):
        nocodb.seed(
            tables.table_document_uploads,
            {"hashArquivo": "hash-1", "nomeOriginal": "bl.pdf", "tipoDocumento": "bl"},
        )
        await service.link_document_to_process("IMP-INV1", "hash-1")

        result = await service.get_process_documents(process["Id"])

        assert result["processNumber"] == "IMP-INV1"
        assert result["total"] == 1
        document = result["documents"][0]
        assert document["nomeArquivo"] == "bl.pdf"
        assert document["statusProcessamento"] == "pendente"

    @pytest.mark.asyncio
    async def test_get_process_documents_unknown_process(self, service):
        with pytest.raises(ProcessNotFoundError):
            await service.get_process_documents(999)

    @pytest.mark.asyncio
    async def test_completion_status(self, service, nocodb, tables, process):
        nocodb.seed(
            tables.table_document_uploads,
            {"hashArquivo": "h1", "tipoDocumento": "packing_list"},
            {"hashArquivo": "h2", "tipoDocumento": "commercial_invoice"},
        )
        await service.link_document_to_process("IMP-INV1", "h1")
        await service.link_document_to_process("IMP-INV1", "h2")

        status = await service.get_process_completion_status("IMP-INV1")

        assert status["documents"]["packing_list"] is True
        assert status["documents"]["di"] is False
        assert status["completionPercentage"] == 29
        assert status["canProcessPhysicalReceipt"] is True
        assert status["canProcessFiscal"] is False


class TestAttachAndRemove:
    """Test suite for attach_document and remove_document."""

    @pytest.mark.asyncio
    async def test_attach_should_append_description_line(self, service, nocodb, tables):
        process = nocodb.seed(
            tables.table_processos_importacao,
            {"numero_processo": "IMP-1", "descricao": "Primeira linha", "status": "aberto"},
        )[0]

        result = await service.attach_document(process["Id"], "D-1", "bl", "ana@example.com")

        row = nocodb.rows(tables.table_processos_importacao)[0]
        lines = row["descricao"].split("\n")
        assert lines[0] == "Primeira linha"
        assert lines[1].endswith("Documento bl (ID: D-1) anexado por ana@example.com")
        assert row["status"] == "em_andamento"
        assert result["attachedDocument"]["id"] == "D-1"

    @pytest.mark.asyncio
    async def test_remove_should_mark_orphan_upload_and_audit(self, service, nocodb, tables, process):
        nocodb.seed(tables.table_document_uploads, {"hashArquivo": "hash-1", "tipoDocumento": "bl"})
        await service.connect_document("IMP-INV1", "bl", "hash-1")

        result = await service.remove_document(process["Id"], "hash-1", "ana@example.com")

        assert result["isOrphan"] is True
        assert result["linkedProcessCount"] == 0
        assert nocodb.rows(tables.table_processo_documento_rel) == []
        assert nocodb.rows(tables.table_document_uploads)[0]["statusProcessamento"] == "removido"
        assert _pipeline(nocodb, tables) == []
        audit = nocodb.rows(tables.table_etapa_audit)[0]
        assert audit["nova_etapa"] == "document_removed"
        assert audit["hash_arquivo_origem"] == "hash-1"

    @pytest.mark.asyncio
    async def test_remove_should_keep_upload_linked_elsewhere(self, service, nocodb, tables, process):
        nocodb.seed(tables.table_processos_importacao, {"numero_processo": "IMP-INV2"})
        nocodb.seed(tables.table_document_uploads, {"hashArquivo": "hash-1", "tipoDocumento": "bl"})
        await service.link_document_to_process("IMP-INV1", "hash-1")
        await service.link_document_to_process("IMP-INV2", "hash-1")

        result = await service.remove_document(process["Id"], "hash-1", "ana")

        assert result["isOrphan"] is False
        assert result["linkedProcessCount"] == 1
        assert "statusProcessamento" not in nocodb.rows(tables.table_document_uploads)[0]
