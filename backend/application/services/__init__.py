"""Service orchestrators."""

from .audit_log_service import AuditLogService
from .document_cache_service import DocumentCacheService
from .document_save_service import DocumentSaveService
from .extraction_service import ExtractionRegistry, ExtractionRequestService, ExtractionService
from .process_document_service import ProcessDocumentService
from .process_matching_service import ProcessMatchingService
from .process_service import ProcessService
from .upload_service import UploadService

__all__ = [
    "AuditLogService",
    "DocumentCacheService",
    "DocumentSaveService",
    "ExtractionRegistry",
    "ExtractionRequestService",
    "ExtractionService",
    "ProcessDocumentService",
    "ProcessMatchingService",
    "ProcessService",
    "UploadService",
]
