"""
Import process service orchestrator.

CRUD and workflow operations on PROCESSOS_IMPORTACAO: creation, lookup,
stage changes with rule evaluation, proforma-driven updates and
deletion with relation cleanup.

Dependencies: backend.boundary.nocodb, backend.core.business_rules, backend.core.field_mappings
System role: Import process use case orchestration
"""

import logging
from datetime import date
from typing import Any

from backend.application.services.audit_log_service import AuditLogService
from backend.application.services.process_document_service import ProcessDocumentService
from backend.boundary.nocodb import NocoDBClient
from backend.configs.nocodb import NocoDBSettings
from backend.core import business_rules as rules
from backend.core.document_types import SAVEABLE_TYPES
from backend.core.documents_pipeline import serialize_pipeline, utc_now_iso
from backend.core.exceptions import NocoDBError, ProcessNotFoundError, ValidationError
from backend.core.field_mappings import PROCESSOS_IMPORTACAO, transform_to_nocodb
from backend.core.nocodb_query import build_where_clause, eq
from backend.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

STATUS_ACTIVE = "active"
STATUS_COMPLETED = "completed"
DELETED_STAGE = "excluido"
UNKNOWN_UPLOAD_TYPES = ("unknown", "desconhecido")

# Proforma header field -> process column
PROFORMA_PROCESS_FIELDS: dict[str, str] = {
    "load_port": "porto_embarque",
    "destination": "porto_destino",
    "payment_terms": "condicoes_pagamento",
    "contracted_company": "empresa",
    "contracted_email": "email_responsavel",
    "total_price": "valor_total_estimado",
    "currency": "moeda",
}


def process_summary(process: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": process.get("Id"),
        "numero_processo": process.get("numero_processo"),
        "empresa": process.get("empresa"),
        "invoice": process.get("invoiceNumber"),
        "status": process.get("status"),
        "data_inicio": process.get("data_inicio"),
        "descricao": process.get("descricao"),
        "responsavel": process.get("responsavel"),
    }


class ProcessService:
    """Import process service orchestrator."""

    def __init__(
        self,
        nocodb: NocoDBClient,
        tables: NocoDBSettings,
        documents: ProcessDocumentService,
        audit: AuditLogService,
    ) -> None:
        """
        Initialize process service.

        Args:
            nocodb: NocoDB client
            tables: NocoDB table id settings
            documents: Process-document relation service
            audit: Audit log service for stage changes
        """
        self.nocodb = nocodb
        self.tables = tables
        self.documents = documents
        self.audit = audit

    @property
    def _table(self) -> str:
        return self.tables.table_processos_importacao

    async def create_process(self, data: dict[str, Any], user: str) -> dict[str, Any]:
        """
        Create a process.

        Args:
            data: Process fields keyed by column name
            user: Email or id of the creator

        Returns:
            The created row

        Raises:
            ValidationError: If ``numero_processo`` is missing
        """
        if not data.get("numero_processo"):
            raise ValidationError("numero_processo is required", field="numero_processo")

        row = transform_to_nocodb(data, PROCESSOS_IMPORTACAO)
        if not isinstance(row.get("documentsPipeline", ""), str):
            row["documentsPipeline"] = serialize_pipeline(row["documentsPipeline"])
        row.setdefault("status", STATUS_ACTIVE)
        row.setdefault("etapa", rules.DEFAULT_STAGE)
        row.setdefault("data_inicio", date.today().isoformat())
        row.setdefault("criado_por", user)

        created = await self.nocodb.create(self._table, row)
        logger.info(
            "Process created",
            extra={"process_id": created.get("Id"), "numero_processo": row["numero_processo"]},
        )
        return {**row, **created}

    async def get_process(self, process_id: Any) -> dict[str, Any]:
        """
        Get process by record Id.

        Raises:
            ProcessNotFoundError: If the process does not exist
        """
        return await self.documents.get_process_record(process_id)

    async def find_by_number(self, process_number: str) -> dict[str, Any] | None:
        return await self.documents.find_process_by_number(process_number)

    async def list_processes(self) -> list[dict[str, Any]]:
        response = await self.nocodb.find(self._table, sort="-criado_em,-data_inicio", limit=100)
        return response["list"]

    async def list_active(self) -> list[dict[str, Any]]:
        """Processes not yet concluded or cancelled, as summaries."""
        where = build_where_clause([
            {"field": "status", "op": "neq", "value": "concluido"},
            {"field": "status", "op": "neq", "value": "cancelado"},
        ])
        response = await self.nocodb.find(self._table, where=where, sort="-data_inicio", limit=100)
        return [process_summary(p) for p in response["list"]]

    async def search_by_invoice(self, invoice_number: str | None) -> dict[str, Any]:
        if not invoice_number:
            return {"processes": [], "message": "Número da invoice não fornecido"}
        response = await self.nocodb.find(self._table, where=eq("invoiceNumber", invoice_number), limit=10)
        processes = []
        for p in response["list"]:
            summary = process_summary(p)
            summary.pop("descricao")
            summary.pop("responsavel")
            processes.append(summary)
        return {"processes": processes, "searchedInvoice": invoice_number}

    async def check_process(self, process_id: Any) -> dict[str, Any]:
        """Process summary with its linked uploads counted by type."""
        process = await self.get_process(process_id)
        uploads = await self.documents.get_linked_uploads(process["Id"])

        counts: dict[str, int] = {}
        for upload in uploads:
            doc_type = upload.get("tipoDocumento")
            if doc_type and doc_type != "unknown":
                counts[doc_type] = counts.get(doc_type, 0) + 1

        summary = process_summary(process)
        summary.pop("invoice")
        summary["invoiceNumber"] = process.get("invoiceNumber")
        return {
            "process": summary,
            "documents": {
                "total": len(uploads),
                "byType": counts,
                "types": list(counts),
                "details": [
                    {
                        "id": u.get("Id"),
                        "hashArquivo": u.get("hashArquivo"),
                        "nomeArquivoOriginal": u.get("nomeOriginal"),
                        "tipoDocumento": u.get("tipoDocumento"),
                        "statusProcessamento": u.get("statusProcessamento"),
                        "dataUpload": u.get("dataUpload"),
                        "idDocumento": u.get("idDocumento"),
                    }
                    for u in uploads
                ],
            },
        }

    async def create_simple(
        self,
        invoice_number: str,
        file_hash: str | None,
        user: str,
    ) -> dict[str, Any]:
        """
        Find or create the ``IMP-{invoice}`` process and link a file to it.

        Raises:
            ValidationError: If the invoice number is missing
        """
        if not invoice_number:
            raise ValidationError("Invoice number is required", field="invoiceNumber")

        process_number = f"IMP-{invoice_number}"
        existing = await self.find_by_number(process_number)
        if existing:
            if file_hash:
                await self.documents.link_document_to_process(process_number, file_hash)
            return {
                "processId": existing["Id"],
                "processNumber": process_number,
                "isNew": False,
                "message": "Processo já existe, documento foi conectado",
            }

        created = await self.nocodb.create(
            self._table,
            {
                "numero_processo": process_number,
                "invoiceNumber": invoice_number,
                "descricao": "Processo criado automaticamente via documento desconhecido",
                "empresa": "A definir",
                "responsavel": "Sistema",
                "email_responsavel": "",
                "data_inicio": date.today().isoformat(),
                "status": STATUS_ACTIVE,
                "etapa": rules.DEFAULT_STAGE,
                "criado_por": user or "sistema",
            },
        )
        logger.info("Process created from document", extra={"numero_processo": process_number})

        if file_hash:
            await self.documents.connect_documents(created["Id"], file_hash)
            await self._mark_unknown_upload_identified(file_hash)

        return {
            "processId": created["Id"],
            "processNumber": process_number,
            "isNew": True,
            "message": "Processo criado com sucesso",
        }

    async def _mark_unknown_upload_identified(self, file_hash: str) -> None:
        try:
            response = await self.nocodb.find(
                self.tables.table_document_uploads, where=eq("hashArquivo", file_hash), limit=1
            )
            if response["list"] and response["list"][0].get("tipoDocumento") in UNKNOWN_UPLOAD_TYPES:
                await self.nocodb.update(
                    self.tables.table_document_uploads,
                    response["list"][0]["Id"],
                    {"tipoDocumento": "identificado_com_processo"},
                )
        except NocoDBError as e:
            log_exception_with_context(logger, "Failed to update upload type", e, file_hash=file_hash)

    async def _require_by_number(self, process_number: str) -> dict[str, Any]:
        process = await self.find_by_number(process_number)
        if not process:
            raise ProcessNotFoundError(process_number)
        return process

    async def update_process_status(self, process_number: str, status: str) -> dict[str, Any]:
        process = await self._require_by_number(process_number)
        update: dict[str, Any] = {"status": status}
        if status == STATUS_COMPLETED:
            update["data_conclusao"] = date.today().isoformat()
        await self.nocodb.update(self._table, process["Id"], update)
        return update

    async def update_with_proforma_details(
        self,
        process_number: str,
        proforma_header: dict[str, Any],
    ) -> dict[str, Any]:
        """Copy proforma header values onto the process columns they describe."""
        process = await self._require_by_number(process_number)
        header = proforma_header.get("header", proforma_header)
        update = {
            column: header[field]
            for field, column in PROFORMA_PROCESS_FIELDS.items()
            if header.get(field)
        }
        if update:
            await self.nocodb.update(self._table, process["Id"], update)
        return update

    async def update_from_proforma(
        self,
        process_id: Any,
        proforma_data: dict[str, Any],
        user: str,
    ) -> dict[str, Any]:
        """
        Copy invoice, company and amount from a proforma onto a process.

        Raises:
            ProcessNotFoundError: If the process does not exist
        """
        await self.get_process(process_id)

        header = proforma_data.get("header") or {}
        if isinstance(header, dict) and isinstance(header.get("data"), dict):
            header = header["data"]

        update: dict[str, Any] = {}
        if header.get("invoice_number"):
            update["invoiceNumber"] = header["invoice_number"]
        if header.get("contracted_company"):
            update["empresa"] = header["contracted_company"]
        if header.get("total_price"):
            update["valor_total_estimado"] = header["total_price"]
            update["moeda"] = "USD"
        update["atualizado_em"] = utc_now_iso()
        update["atualizado_por"] = user

        await self.nocodb.update(self._table, process_id, update)
        return {"processId": process_id, "updatedFields": list(update)}

    async def _linked_types(self, process: dict[str, Any]) -> set[str]:
        uploads = await self.documents.get_linked_uploads(process["Id"])
        return {u["tipoDocumento"] for u in uploads if u.get("tipoDocumento")}

    async def update_stage(
        self,
        process_id: Any,
        new_stage: str,
        user: str,
        force: bool = False,
    ) -> dict[str, Any]:
        """
        Move a process to another Kanban stage.

        Transition rules are evaluated and reported; a disallowed
        transition is logged but still applied.

        Raises:
            ValidationError: If the stage does not exist
            ProcessNotFoundError: If the process does not exist
        """
        if not rules.is_valid_stage(new_stage):
            valid = ", ".join(rules.STAGE_ORDER)
            raise ValidationError(
                f"Invalid stage: {new_stage}. Valid stages are: {valid}", field="newStage"
            )

        process = await self.get_process(process_id)
        old_stage = process.get("etapa") or rules.DEFAULT_STAGE

        transition = rules.check_stage_transition(
            old_stage, new_stage, await self._linked_types(process), force=force
        )
        if not transition.allowed:
            logger.warning(
                "Stage transition outside configured rules",
                extra={
                    "process_id": process_id,
                    "from_stage": old_stage,
                    "to_stage": new_stage,
                    "missing": transition.required_documents,
                },
            )

        update: dict[str, Any] = {
            "etapa": new_stage,
            "atualizado_em": utc_now_iso(),
            "atualizado_por": user,
        }
        if new_stage == "auditado" and process.get("status") != STATUS_COMPLETED:
            update["status"] = STATUS_COMPLETED

        await self.nocodb.update(self._table, process["Id"], update)
        await self.audit.record(
            process.get("numero_processo") or str(process_id),
            old_stage,
            new_stage,
            f"Etapa alterada de {old_stage} para {new_stage} por {user}",
            user,
        )

        return {
            "processId": process_id,
            "oldStage": old_stage,
            "newStage": new_stage,
            "updatedFields": list(update),
            "transition": transition.to_dict(),
        }

    async def delete_process(self, process_id: Any, user: str) -> dict[str, Any]:
        """
        Delete a process and its document relations.

        Uploaded files and their saved document rows are kept.
        """
        process = await self.get_process(process_id)
        relations = await self.nocodb.find(
            self.tables.table_processo_documento_rel,
            where=eq("processo_importacao", process["Id"]),
            limit=1000,
        )
        for relation in relations["list"]:
            await self.nocodb.delete(self.tables.table_processo_documento_rel, relation["Id"])
        deleted_relationships = len(relations["list"])

        process_number = process.get("numero_processo") or str(process_id)
        await self.audit.record(
            process_number,
            process.get("etapa") or rules.DEFAULT_STAGE,
            DELETED_STAGE,
            f"Processo {process_number} excluído permanentemente. "
            f"{deleted_relationships} documento(s) desvinculado(s).",
            user,
        )

        await self.nocodb.delete(self._table, process["Id"])
        logger.info(
            "Process deleted",
            extra={"process_id": process_id, "relations_deleted": deleted_relationships},
        )
        return {
            "processId": process_id,
            "numeroProcesso": process_number,
            "deletedRelationships": deleted_relationships,
        }

    async def migrate_stages(self) -> dict[str, Any]:
        """Rewrite legacy ``etapa`` labels to stage ids."""
        response = await self.nocodb.find(self._table, limit=1000)
        processes = response["list"]
        migrated = 0
        errors: list[dict[str, Any]] = []

        for process in processes:
            new_stage = rules.STAGE_MAPPINGS.get(process.get("etapa") or "")
            if not new_stage:
                continue
            try:
                await self.nocodb.update(self._table, process["Id"], {"etapa": new_stage})
                migrated += 1
            except NocoDBError as e:
                errors.append({"processId": process["Id"], "error": e.message})

        result: dict[str, Any] = {"totalProcesses": len(processes), "migratedCount": migrated}
        if errors:
            result["errors"] = errors
        return result

    async def evaluate_rules(self, process_id: Any) -> dict[str, Any]:
        """Rule violations, suggested stage and completion for a process."""
        process = await self.get_process(process_id)
        types = await self._linked_types(process)
        current_stage = process.get("etapa") or rules.DEFAULT_STAGE

        saveable = [t.value for t in SAVEABLE_TYPES]
        present = [t for t in saveable if t in types]
        return {
            "processId": process_id,
            "currentStage": current_stage,
            "violations": [v.to_dict() for v in rules.get_all_violations(current_stage, types)],
            "suggestedStage": rules.get_suggested_stage(types),
            "requiredDocuments": rules.get_stage_required_documents(current_stage),
            "completion": {
                "documents": sorted(types),
                "completionPercentage": round(len(present) / len(saveable) * 100),
            },
        }
