"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory NocoDB stand-in, NocoDB table settings, a test user,
sample PDF content and an API client with authentication overridden.
Dependencies: pytest, fastapi
System role: Test infrastructure and fixture management
"""

import re
from typing import Any

import pytest
from fastapi.testclient import TestClient

from backend.api.deps import get_current_user
from backend.boundary.supabase import AuthenticatedUser
from backend.configs.nocodb import NocoDBSettings
from backend.core.exceptions import NocoDBError

_CONDITION = re.compile(r"(?:~(and|or))?\(([^,()]+),(\w+)(?:,([^()]*))?\)")


def _matches(row: dict[str, Any], where: str | None) -> bool:
    if not where:
        return True
    result = None
    for logic, field, op, value in _CONDITION.findall(where):
        actual = row.get(field)
        if op == "eq":
            ok = actual is not None and str(actual) == value
        elif op == "neq":
            ok = actual is None or str(actual) != value
        elif op == "null":
            ok = actual in (None, "")
        elif op == "notnull":
            ok = actual not in (None, "")
        else:
            raise AssertionError(f"operator {op} not supported by the in-memory store")
        if result is None:
            result = ok
        elif logic == "or":
            result = result or ok
        else:
            result = result and ok
    return bool(result)


class InMemoryNocoDB:
    """
    Dict-backed stand-in for NocoDBClient.

    Implements the same coroutine methods over per-table row lists and
    understands the eq/neq/null where clauses the services build.
    """

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.failures: dict[tuple[str, str], NocoDBError] = {}
        self.calls: list[tuple[str, str]] = []
        self._next_id = 1

    def seed(self, table_id: str, *rows: dict[str, Any]) -> list[dict[str, Any]]:
        created = []
        for row in rows:
            record = {"Id": self._next_id, **row}
            self._next_id = max(self._next_id, record["Id"]) + 1
            self.tables.setdefault(table_id, []).append(record)
            created.append(record)
        return created

    def rows(self, table_id: str) -> list[dict[str, Any]]:
        return self.tables.get(table_id, [])

    def fail(self, method: str, table_id: str, error: NocoDBError | None = None) -> None:
        """Make every ``method`` call on ``table_id`` raise."""
        self.failures[(method, table_id)] = error or NocoDBError("NocoDB unavailable", status_code=500)

    def _enter(self, method: str, table_id: str) -> None:
        self.calls.append((method, table_id))
        error = self.failures.get((method, table_id))
        if error is not None:
            raise error

    async def find(self, table_id, where=None, sort=None, fields=None, limit=None, offset=None):
        self._enter("find", table_id)
        rows = [dict(r) for r in self.rows(table_id) if _matches(r, where)]
        for key in reversed((sort or "").split(",")):
            if key:
                name = key.lstrip("-")
                rows.sort(key=lambda r: str(r.get(name) or ""), reverse=key.startswith("-"))
        start = offset or 0
        page = rows[start:start + limit] if limit else rows[start:]
        return {"list": page, "pageInfo": {"totalRows": len(rows)}}

    async def find_one(self, table_id, record_id):
        self._enter("find_one", table_id)
        for row in self.rows(table_id):
            if str(row["Id"]) == str(record_id):
                return dict(row)
        return None

    async def create(self, table_id, data):
        self._enter("create", table_id)
        return {"Id": self.seed(table_id, data)[0]["Id"]}

    async def update(self, table_id, record_id, data):
        self._enter("update", table_id)
        for row in self.rows(table_id):
            if str(row["Id"]) == str(record_id):
                row.update(data)
                return {"Id": row["Id"]}
        raise NocoDBError("Record not found", status_code=404, table_id=table_id)

    async def delete(self, table_id, record_id):
        self._enter("delete", table_id)
        self.tables[table_id] = [r for r in self.rows(table_id) if str(r["Id"]) != str(record_id)]

    async def bulk_create(self, table_id, records):
        self._enter("bulk_create", table_id)
        return [{"Id": row["Id"]} for row in self.seed(table_id, *records)]

    async def bulk_update(self, table_id, records):
        self._enter("bulk_update", table_id)
        for record in records:
            await self.update(table_id, record["Id"], record)
        return [{"Id": r["Id"]} for r in records]

    async def bulk_delete(self, table_id, record_ids):
        self._enter("bulk_delete", table_id)
        ids = {str(i) for i in record_ids}
        self.tables[table_id] = [r for r in self.rows(table_id) if str(r["Id"]) not in ids]
        return [{"Id": i} for i in record_ids]

    async def count(self, table_id, where=None):
        self._enter("count", table_id)
        return len([r for r in self.rows(table_id) if _matches(r, where)])

    async def health_check(self):
        return True

    async def aclose(self):
        return None


@pytest.fixture
def nocodb() -> InMemoryNocoDB:
    """Provide empty in-memory NocoDB."""
    return InMemoryNocoDB()


@pytest.fixture
def tables() -> NocoDBSettings:
    """Provide NocoDB table ids (defaults)."""
    return NocoDBSettings()


@pytest.fixture
def test_user() -> AuthenticatedUser:
    """Provide authenticated test user."""
    return AuthenticatedUser(id="user-123", email="ana@example.com")


@pytest.fixture
def sample_pdf() -> bytes:
    """Provide minimal PDF content."""
    return b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n%%EOF\n"


@pytest.fixture
def client(test_user: AuthenticatedUser) -> TestClient:
    """Provide TestClient with the bearer-token check overridden."""
    from backend.main import create_app

    app = create_app()
    app.dependency_overrides[get_current_user] = lambda: test_user
    return TestClient(app)
