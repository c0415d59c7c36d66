"""
Test suite for ProcessService.

System role: Verification of import process workflows
"""

import pytest

from backend.application.services import AuditLogService, ProcessDocumentService, ProcessService
from backend.core.exceptions import NocoDBError, ProcessNotFoundError, ValidationError


@pytest.fixture
def audit(nocodb, tables) -> AuditLogService:
    return AuditLogService(nocodb=nocodb, tables=tables)


@pytest.fixture
def service(nocodb, tables, audit) -> ProcessService:
    documents = ProcessDocumentService(nocodb=nocodb, tables=tables, audit_service=audit)
    return ProcessService(nocodb=nocodb, tables=tables, documents=documents, audit=audit)


def _seed_process(nocodb, tables, **fields) -> dict:
    row = {"numero_processo": "IMP-INV1", "etapa": "solicitado", "status": "active", **fields}
    return nocodb.seed(tables.table_processos_importacao, row)[0]


def _link_upload(nocodb, tables, process: dict, file_hash: str, document_type: str) -> None:
    nocodb.seed(tables.table_document_uploads, {"hashArquivo": file_hash, "tipoDocumento": document_type})
    nocodb.seed(
        tables.table_processo_documento_rel,
        {"processo_importacao": str(process["Id"]), "hash_arquivo_upload": file_hash},
    )


class TestCreateProcess:
    """Test suite for create_process."""

    @pytest.mark.asyncio
    async def test_should_apply_defaults(self, service, nocodb, tables):
        created = await service.create_process(
            {"numero_processo": "IMP-1", "empresa": "ACME", "ignored": "x"}, "ana@example.com"
        )

        assert created["Id"] is not None
        assert created["status"] == "active"
        assert created["etapa"] == "solicitado"
        assert created["criado_por"] == "ana@example.com"
        assert "ignored" not in nocodb.rows(tables.table_processos_importacao)[0]

    @pytest.mark.asyncio
    async def test_should_serialize_pipeline_list(self, service, nocodb, tables):
        await service.create_process(
            {"numero_processo": "IMP-1", "documentsPipeline": [{"documentType": "bl"}]}, "ana"
        )

        row = nocodb.rows(tables.table_processos_importacao)[0]
        assert row["documentsPipeline"] == '[{"documentType": "bl"}]'

    @pytest.mark.asyncio
    async def test_should_require_process_number(self, service):
        with pytest.raises(ValidationError):
            await service.create_process({"empresa": "ACME"}, "ana")


class TestQueries:
    """Test suite for list, search and check."""

    @pytest.mark.asyncio
    async def test_list_active_should_exclude_closed_processes(self, service, nocodb, tables):
        _seed_process(nocodb, tables, numero_processo="IMP-1", data_inicio="2024-01-01")
        _seed_process(nocodb, tables, numero_processo="IMP-2", status="concluido")
        _seed_process(nocodb, tables, numero_processo="IMP-3", status="cancelado")
        _seed_process(nocodb, tables, numero_processo="IMP-4", data_inicio="2024-02-01")

        processes = await service.list_active()

        assert [p["numero_processo"] for p in processes] == ["IMP-4", "IMP-1"]
        assert set(processes[0]) == {
            "id", "numero_processo", "empresa", "invoice", "status",
            "data_inicio", "descricao", "responsavel",
        }

    @pytest.mark.asyncio
    async def test_search_by_invoice(self, service, nocodb, tables):
        _seed_process(nocodb, tables, invoiceNumber="INV1")

        result = await service.search_by_invoice("INV1")

        assert result["searchedInvoice"] == "INV1"
        assert result["processes"][0]["invoice"] == "INV1"
        assert "descricao" not in result["processes"][0]

    @pytest.mark.asyncio
    async def test_search_without_invoice(self, service):
        result = await service.search_by_invoice("")

        assert result == {"processes": [], "message": "Número da invoice não fornecido"}

    @pytest.mark.asyncio
    async def test_check_process_should_count_types(self, service, nocodb, tables):
        process = _seed_process(nocodb, tables, invoiceNumber="INV1")
        _link_upload(nocodb, tables, process, "h1", "bl")
        _link_upload(nocodb, tables, process, "h2", "unknown")

        result = await service.check_process(process["Id"])

        assert result["process"]["invoiceNumber"] == "INV1"
        assert result["documents"]["total"] == 2
        assert result["documents"]["byType"] == {"bl": 1}

    @pytest.mark.asyncio
    async def test_get_process_unknown_should_raise(self, service):
        with pytest.raises(ProcessNotFoundError):
            await service.get_process(404)


class TestCreateSimple:
    """Test suite for create_simple."""

    @pytest.mark.asyncio
    async def test_should_create_process_and_link_file(self, service, nocodb, tables):
        nocodb.seed(tables.table_document_uploads, {"hashArquivo": "h1", "tipoDocumento": "unknown"})

        result = await service.create_simple("INV9", "h1", "ana")

        assert result["isNew"] is True
        assert result["processNumber"] == "IMP-INV9"
        process = nocodb.rows(tables.table_processos_importacao)[0]
        assert process["empresa"] == "A definir"
        relation = nocodb.rows(tables.table_processo_documento_rel)[0]
        assert relation["processo_importacao"] == str(process["Id"])
        upload = nocodb.rows(tables.table_document_uploads)[0]
        assert upload["tipoDocumento"] == "identificado_com_processo"

    @pytest.mark.asyncio
    async def test_should_reuse_existing_process(self, service, nocodb, tables):
        process = _seed_process(nocodb, tables, numero_processo="IMP-INV9")

        result = await service.create_simple("INV9", "h1", "ana")

        assert result["isNew"] is False
        assert result["processId"] == process["Id"]
        assert len(nocodb.rows(tables.table_processos_importacao)) == 1
        assert len(nocodb.rows(tables.table_processo_documento_rel)) == 1

    @pytest.mark.asyncio
    async def test_should_require_invoice_number(self, service):
        with pytest.raises(ValidationError):
            await service.create_simple("", None, "ana")


class TestUpdateStage:
    """Test suite for update_stage."""

    @pytest.mark.asyncio
    async def test_should_update_stage_and_audit(self, service, nocodb, tables):
        process = _seed_process(nocodb, tables)
        _link_upload(nocodb, tables, process, "h1", "proforma_invoice")
        _link_upload(nocodb, tables, process, "h2", "bl")

        result = await service.update_stage(process["Id"], "em_transporte_internacional", "ana")

        assert result["oldStage"] == "solicitado"
        assert result["newStage"] == "em_transporte_internacional"
        assert result["transition"]["allowed"] is True
        row = nocodb.rows(tables.table_processos_importacao)[0]
        assert row["etapa"] == "em_transporte_internacional"
        assert row["atualizado_por"] == "ana"
        audit = nocodb.rows(tables.table_etapa_audit)[0]
        assert audit["ultima_etapa"] == "solicitado"
        assert audit["numero_processo"] == "IMP-INV1"

    @pytest.mark.asyncio
    async def test_disallowed_transition_is_still_applied(self, service, nocodb, tables):
        process = _seed_process(nocodb, tables)

        result = await service.update_stage(process["Id"], "recebido", "ana")

        assert result["transition"]["allowed"] is False
        assert result["transition"]["violations"][0]["ruleId"] == "RN-08"
        assert nocodb.rows(tables.table_processos_importacao)[0]["etapa"] == "recebido"

    @pytest.mark.asyncio
    async def test_auditado_should_complete_process(self, service, nocodb, tables):
        process = _seed_process(nocodb, tables, etapa="recebido")

        result = await service.update_stage(process["Id"], "auditado", "ana")

        assert "status" in result["updatedFields"]
        assert nocodb.rows(tables.table_processos_importacao)[0]["status"] == "completed"

    @pytest.mark.asyncio
    async def test_audit_failure_should_not_fail_update(self, service, nocodb, tables):
        process = _seed_process(nocodb, tables)
        nocodb.fail("create", tables.table_etapa_audit)

        result = await service.update_stage(process["Id"], "em_transporte_internacional", "ana")

        assert result["newStage"] == "em_transporte_internacional"

    @pytest.mark.asyncio
    async def test_invalid_stage_should_raise(self, service):
        with pytest.raises(ValidationError, match="Invalid stage: excluido"):
            await service.update_stage(1, "excluido", "ana")

    @pytest.mark.asyncio
    async def test_unknown_process_should_raise(self, service):
        with pytest.raises(ProcessNotFoundError):
            await service.update_stage(404, "recebido", "ana")


class TestDeleteAndMigrate:
    """Test suite for delete_process and migrate_stages."""

    @pytest.mark.asyncio
    async def test_delete_should_remove_relations_and_audit(self, service, nocodb, tables):
        process = _seed_process(nocodb, tables)
        _link_upload(nocodb, tables, process, "h1", "bl")
        _link_upload(nocodb, tables, process, "h2", "di")

        result = await service.delete_process(process["Id"], "ana")

        assert result["deletedRelationships"] == 2
        assert result["numeroProcesso"] == "IMP-INV1"
        assert nocodb.rows(tables.table_processos_importacao) == []
        assert nocodb.rows(tables.table_processo_documento_rel) == []
        assert len(nocodb.rows(tables.table_document_uploads)) == 2
        audit = nocodb.rows(tables.table_etapa_audit)[0]
        assert audit["nova_etapa"] == "excluido"
        assert audit["descricao_regra"] == (
            "Processo IMP-INV1 excluído permanentemente. 2 documento(s) desvinculado(s)."
        )

    @pytest.mark.asyncio
    async def test_delete_constraint_error_should_propagate(self, service, nocodb, tables):
        process = _seed_process(nocodb, tables)
        nocodb.fail(
            "delete",
            tables.table_processos_importacao,
            NocoDBError("FOREIGN KEY constraint failed", status_code=400),
        )

        with pytest.raises(NocoDBError) as exc_info:
            await service.delete_process(process["Id"], "ana")

        assert exc_info.value.is_constraint_violation is True

    @pytest.mark.asyncio
    async def test_migrate_should_map_legacy_labels(self, service, nocodb, tables):
        _seed_process(nocodb, tables, numero_processo="IMP-1", etapa="Em Transporte Internacional")
        _seed_process(nocodb, tables, numero_processo="IMP-2", etapa="recebido")
        _seed_process(nocodb, tables, numero_processo="IMP-3", etapa="Auditado")

        result = await service.migrate_stages()

        assert result == {"totalProcesses": 3, "migratedCount": 2}
        stages = [row["etapa"] for row in nocodb.rows(tables.table_processos_importacao)]
        assert stages == ["em_transporte_internacional", "recebido", "auditado"]


class TestProformaAndRules:
    """Test suite for proforma updates and rule evaluation."""

    @pytest.mark.asyncio
    async def test_update_from_proforma_should_copy_header(self, service, nocodb, tables):
        process = _seed_process(nocodb, tables)

        result = await service.update_from_proforma(
            process["Id"],
            {"header": {"data": {"invoice_number": "P-1", "contracted_company": "ACME", "total_price": 99.5}}},
            "ana",
        )

        row = nocodb.rows(tables.table_processos_importacao)[0]
        assert row["invoiceNumber"] == "P-1"
        assert row["empresa"] == "ACME"
        assert row["moeda"] == "USD"
        assert "valor_total_estimado" in result["updatedFields"]

    @pytest.mark.asyncio
    async def test_update_from_proforma_missing_process_should_raise(self, service, nocodb, tables):
        with pytest.raises(ProcessNotFoundError):
            await service.update_from_proforma(999, {"header": {"invoice_number": "P-1"}}, "ana")

        assert ("update", tables.table_processos_importacao) not in nocodb.calls

    @pytest.mark.asyncio
    async def test_update_with_proforma_details(self, service, nocodb, tables):
        _seed_process(nocodb, tables)

        update = await service.update_with_proforma_details(
            "IMP-INV1", {"load_port": "Ningbo", "destination": "Itajaí", "package": "box"}
        )

        assert update == {"porto_embarque": "Ningbo", "porto_destino": "Itajaí"}

    @pytest.mark.asyncio
    async def test_update_status_completed_sets_conclusion_date(self, service, nocodb, tables):
        _seed_process(nocodb, tables)

        update = await service.update_process_status("IMP-INV1", "completed")

        assert "data_conclusao" in update
        assert nocodb.rows(tables.table_processos_importacao)[0]["status"] == "completed"

    @pytest.mark.asyncio
    async def test_evaluate_rules(self, service, nocodb, tables):
        process = _seed_process(nocodb, tables, etapa="em_transporte_internacional")
        _link_upload(nocodb, tables, process, "h1", "proforma_invoice")
        _link_upload(nocodb, tables, process, "h2", "di")

        result = await service.evaluate_rules(process["Id"])

        assert result["currentStage"] == "em_transporte_internacional"
        assert [v["ruleId"] for v in result["violations"]] == ["RN-05"]
        assert result["suggestedStage"] == "solicitado"
        assert result["completion"]["documents"] == ["di", "proforma_invoice"]
        assert result["completion"]["completionPercentage"] == 29
