"""API-specific dependencies."""

# Re-export common dependencies
from .dependencies import (
    get_audit_log_service,
    get_current_user,
    get_document_cache_service,
    get_document_save_service,
    get_extraction_request_service,
    get_extraction_service,
    get_nocodb_client,
    get_process_document_service,
    get_process_matching_service,
    get_process_service,
    get_service_cache,
    get_settings_dependency,
    get_upload_service,
)

__all__ = [
    "get_audit_log_service",
    "get_current_user",
    "get_document_cache_service",
    "get_document_save_service",
    "get_extraction_request_service",
    "get_extraction_service",
    "get_nocodb_client",
    "get_process_document_service",
    "get_process_matching_service",
    "get_process_service",
    "get_service_cache",
    "get_settings_dependency",
    "get_upload_service",
]
