"""
Tests for correlation and request logging middleware.

System role: Verification of request tracing
"""

import uuid

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from backend.observability.correlation import get_correlation_id
from backend.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware


@pytest.fixture
def traced_client() -> TestClient:
    """Provide app that echoes the correlation id seen inside the handler."""
    app = FastAPI()
    app.add_middleware(CorrelationMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    @app.get("/ping")
    async def ping():
        return {"correlationId": get_correlation_id()}

    return TestClient(app)


def test_should_echo_incoming_correlation_id(traced_client):
    response = traced_client.get("/ping", headers={"X-Correlation-ID": "abc-123"})

    assert response.headers["X-Correlation-ID"] == "abc-123"
    assert response.json() == {"correlationId": "abc-123"}


def test_should_generate_correlation_id_when_missing(traced_client):
    response = traced_client.get("/ping")

    generated = response.headers["X-Correlation-ID"]
    assert str(uuid.UUID(generated)) == generated
    assert response.json() == {"correlationId": generated}
