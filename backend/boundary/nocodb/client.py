"""
Async client for the NocoDB v2 REST API.

Thin wrapper over httpx that speaks the ``/tables/{id}/records`` endpoints
and turns HTTP failures into NocoDBError.

Dependencies: httpx
System role: Persistence boundary for processes, uploads and documents
"""

import logging
from typing import Any

import httpx

from backend.core.exceptions import NocoDBError

logger = logging.getLogger(__name__)


class NocoDBClient:
    """Async NocoDB records client authenticated with an ``xc-token``."""

    def __init__(
        self,
        base_url: str,
        api_token: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize NocoDB client.

        Args:
            base_url: API root, e.g. ``https://nocodb.example.com/api/v2``
            api_token: NocoDB API token sent as ``xc-token``
            timeout: Request timeout in seconds
            transport: Optional transport override (used in tests)
        """
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"xc-token": api_token, "Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def _request(
        self,
        method: str,
        path: str,
        table_id: str | None = None,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        if params:
            params = {key: value for key, value in params.items() if value is not None}
        try:
            response = await self._client.request(method, path, params=params, json=json)
        except httpx.HTTPError as e:
            logger.error(
                "NocoDB request failed",
                extra={"method": method, "path": path, "error": str(e)},
            )
            raise NocoDBError(f"NocoDB request failed: {e}", table_id=table_id) from e

        if response.is_error:
            raise NocoDBError(
                self._error_message(response),
                status_code=response.status_code,
                table_id=table_id,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error(
                "NocoDB returned a non-JSON body",
                extra={"method": method, "path": path, "status_code": response.status_code},
            )
            raise NocoDBError(
                "NocoDB returned an invalid JSON response",
                status_code=response.status_code,
                table_id=table_id,
            ) from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"NocoDB returned HTTP {response.status_code}"
        if isinstance(body, dict):
            message = body.get("msg") or body.get("message")
            if message:
                return str(message)
        return f"NocoDB returned HTTP {response.status_code}"

    async def find(
        self,
        table_id: str,
        where: str | None = None,
        sort: str | None = None,
        fields: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> dict[str, Any]:
        """
        List records of a table.

        Returns:
            dict with ``list`` (rows) and ``pageInfo``
        """
        params = {
            "where": where,
            "sort": sort,
            "fields": fields,
            "limit": limit,
            "offset": offset,
        }
        data = await self._request("GET", f"/tables/{table_id}/records", table_id, params=params)
        data = data or {}
        data.setdefault("list", [])
        data.setdefault("pageInfo", {})
        return data

    async def find_one(self, table_id: str, record_id: Any) -> dict[str, Any] | None:
        """Fetch a record by Id; None when NocoDB answers 404."""
        try:
            return await self._request("GET", f"/tables/{table_id}/records/{record_id}", table_id)
        except NocoDBError as e:
            if e.status_code == 404:
                return None
            raise

    async def create(self, table_id: str, data: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", f"/tables/{table_id}/records", table_id, json=data)

    async def update(self, table_id: str, record_id: Any, data: dict[str, Any]) -> dict[str, Any]:
        """Patch a record; NocoDB takes the Id in the body."""
        body = {**data, "Id": record_id}
        return await self._request("PATCH", f"/tables/{table_id}/records", table_id, json=body)

    async def delete(self, table_id: str, record_id: Any) -> None:
        await self._request("DELETE", f"/tables/{table_id}/records", table_id, json={"Id": record_id})

    async def bulk_create(self, table_id: str, records: list[dict[str, Any]]) -> Any:
        if not records:
            return []
        return await self._request("POST", f"/tables/{table_id}/records", table_id, json=records)

    async def bulk_update(self, table_id: str, records: list[dict[str, Any]]) -> Any:
        """Patch several records; each must carry its ``Id``."""
        if not records:
            return []
        return await self._request("PATCH", f"/tables/{table_id}/records", table_id, json=records)

    async def bulk_delete(self, table_id: str, record_ids: list[Any]) -> Any:
        if not record_ids:
            return []
        body = [{"Id": record_id} for record_id in record_ids]
        return await self._request("DELETE", f"/tables/{table_id}/records", table_id, json=body)

    async def count(self, table_id: str, where: str | None = None) -> int:
        data = await self._request(
            "GET", f"/tables/{table_id}/records/count", table_id, params={"where": where}
        )
        return int((data or {}).get("count", 0))

    async def health_check(self) -> bool:
        """Return True when the NocoDB server answers its health endpoint."""
        try:
            response = await self._client.get("/health")
        except httpx.HTTPError as e:
            logger.warning("NocoDB health check failed", extra={"error": str(e)})
            return False
        return response.is_success

    async def aclose(self) -> None:
        await self._client.aclose()
