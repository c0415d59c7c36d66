"""
Audit log service for process stage changes.

Audit rows are append-only and best-effort: a failed write is logged
and never interrupts the operation that triggered it.

Dependencies: backend.boundary.nocodb, backend.core.nocodb_query
System role: Stage transition audit trail
"""

import logging
import time
from typing import Any

from backend.boundary.nocodb import NocoDBClient
from backend.configs.nocodb import NocoDBSettings
from backend.core.exceptions import NocoDBError, ValidationError
from backend.core.nocodb_query import eq
from backend.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

MISSING_TABLE_WARNING = "Audit log table not configured"


def _normalize_log(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": row.get("Id"),
        "hash_arquivo_origem": row.get("hash_arquivo_origem"),
        "numero_processo": row.get("numero_processo"),
        "responsavel": row.get("responsavel"),
        "ultima_etapa": row.get("ultima_etapa"),
        "nova_etapa": row.get("nova_etapa"),
        "descricao_regra": row.get("descricao_regra"),
        "created_at": row.get("CreatedAt"),
        "updated_at": row.get("UpdatedAt"),
    }


class AuditLogService:
    """Reads and writes rows of the stage audit table."""

    def __init__(self, nocodb: NocoDBClient, tables: NocoDBSettings) -> None:
        """
        Initialize audit log service.

        Args:
            nocodb: NocoDB client
            tables: NocoDB table id settings
        """
        self.nocodb = nocodb
        self.table_id = tables.table_etapa_audit

    async def record(
        self,
        process_number: str,
        previous_stage: str | None,
        new_stage: str,
        description: str,
        user: str,
        file_hash: str | None = None,
    ) -> dict[str, Any] | None:
        """
        Append an audit row; never raises.

        Args:
            process_number: Process number the change applies to
            previous_stage: Stage before the change
            new_stage: Stage after the change
            description: Human-readable reason
            user: Email or id of the responsible user
            file_hash: Related document hash, or a synthetic manual key

        Returns:
            The created row, or None when the write failed
        """
        row = {
            "hash_arquivo_origem": file_hash or f"manual_{process_number}_{int(time.time() * 1000)}",
            "numero_processo": process_number,
            "responsavel": user,
            "ultima_etapa": previous_stage or "",
            "nova_etapa": new_stage,
            "descricao_regra": description,
        }
        try:
            created = await self.nocodb.create(self.table_id, row)
        except NocoDBError as e:
            log_exception_with_context(
                logger,
                "Failed to write audit log",
                e,
                process_number=process_number,
                new_stage=new_stage,
            )
            return None
        logger.info(
            "Audit log recorded",
            extra={"process_number": process_number, "new_stage": new_stage},
        )
        return created

    async def list_logs(
        self,
        process_number: str,
        limit: int = 50,
        offset: int = 0,
    ) -> dict[str, Any]:
        """
        List audit rows of a process, newest first.

        Returns:
            dict with ``logs``, ``pageInfo`` and, when the audit table does
            not exist, a ``warning``
        """
        try:
            response = await self.nocodb.find(
                self.table_id,
                where=eq("numero_processo", process_number),
                sort="-CreatedAt",
                limit=limit,
                offset=offset,
            )
        except NocoDBError as e:
            if e.is_missing_table:
                logger.warning("Audit log table missing", extra={"table_id": self.table_id})
                return {"logs": [], "pageInfo": {}, "warning": MISSING_TABLE_WARNING}
            raise

        return {
            "logs": [_normalize_log(row) for row in response["list"]],
            "pageInfo": response.get("pageInfo", {}),
        }

    async def create_manual(
        self,
        process_id: str | None,
        process_number: str | None,
        previous_stage: str | None,
        new_stage: str | None,
        reason: str | None,
        user: str,
    ) -> dict[str, Any]:
        """
        Create an audit row on behalf of a user.

        Raises:
            ValidationError: If the process id or number is missing
        """
        if not process_id or not process_number:
            raise ValidationError("processId and processNumber are required", field="processId")

        row = {
            "hash_arquivo_origem": f"manual_{process_number}_{int(time.time() * 1000)}",
            "numero_processo": process_number,
            "responsavel": user,
            "ultima_etapa": previous_stage or "",
            "nova_etapa": new_stage or "",
            "descricao_regra": reason or "Atualização manual",
        }
        try:
            created = await self.nocodb.create(self.table_id, row)
        except NocoDBError as e:
            if e.is_missing_table:
                logger.warning("Audit log table missing", extra={"table_id": self.table_id})
                return {"success": True, "log": None, "warning": MISSING_TABLE_WARNING}
            raise
        return {"success": True, "log": _normalize_log({**row, **(created or {})})}
