"""
OCR API tests.

System role: Verification of upload and background extraction routes
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from backend.api.deps import get_extraction_request_service, get_upload_service
from backend.application.services import DocumentCacheService, UploadService


@pytest.fixture
def storage() -> AsyncMock:
    storage = AsyncMock()
    storage.upload_file.return_value = {
        "path": "user-123/1700000000000-invoice.pdf",
        "url": "https://signed/url",
        "size": 64,
    }
    return storage


@pytest.fixture
def upload_service(nocodb, tables, storage) -> UploadService:
    return UploadService(
        nocodb=nocodb,
        tables=tables,
        storage=storage,
        cache_service=DocumentCacheService(nocodb=nocodb, tables=tables),
    )


def test_upload_document(client, upload_service, sample_pdf, nocodb, tables):
    client.app.dependency_overrides[get_upload_service] = lambda: upload_service

    response = client.post(
        "/api/v1/ocr/upload",
        files={"file": ("invoice.pdf", sample_pdf, "application/pdf")},
        data={"documentType": "commercial_invoice"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["fromCache"] is False
    assert body["data"]["documentType"] == "commercial_invoice"
    assert len(nocodb.rows(tables.table_document_uploads)) == 1


def test_upload_twice_reuses_row(client, upload_service, storage, sample_pdf):
    client.app.dependency_overrides[get_upload_service] = lambda: upload_service
    files = {"file": ("invoice.pdf", sample_pdf, "application/pdf")}

    client.post("/api/v1/ocr/upload", files=files)
    second = client.post("/api/v1/ocr/upload", files=files)

    assert second.json()["fromCache"] is True
    assert storage.upload_file.await_count == 1


def test_upload_rejects_empty_file(client, upload_service):
    client.app.dependency_overrides[get_upload_service] = lambda: upload_service

    response = client.post("/api/v1/ocr/upload", files={"file": ("invoice.pdf", b"", "application/pdf")})

    assert response.status_code == 400
    assert response.json() == {"detail": "File is empty"}


def test_start_extraction(client):
    request_service = MagicMock()
    request_service.submit_extraction.return_value = {"requestId": "abc", "status": "processing", "joined": False}
    client.app.dependency_overrides[get_extraction_request_service] = lambda: request_service

    response = client.post(
        "/api/v1/ocr/extract",
        json={"storagePath": "user-123/1-invoice.pdf", "fileType": ".pdf", "documentType": "swift"},
    )

    assert response.status_code == 202
    assert response.json()["requestId"] == "abc"
    request_service.submit_extraction.assert_called_once_with("user-123", "user-123/1-invoice.pdf", ".pdf", "swift")


def test_extraction_status(client):
    request_service = MagicMock()
    request_service.get_status.return_value = {"status": "not_found", "requestId": "abc"}
    client.app.dependency_overrides[get_extraction_request_service] = lambda: request_service

    response = client.get("/api/v1/ocr/extract/status", params={"requestId": "abc"})

    assert response.json() == {"status": "not_found", "requestId": "abc"}
