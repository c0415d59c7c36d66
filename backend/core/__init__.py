"""
Core business logic module.

Contains domain rules, field mappings, query helpers and the
exception hierarchy. Nothing in here performs I/O.
"""

from backend.core.exceptions import (
    AuthenticationError,
    DocumentNotFoundError,
    ExtractionError,
    ImportProcessError,
    NocoDBError,
    ProcessNotFoundError,
    StorageDeletionForbiddenError,
    StorageError,
    UnsupportedDocumentTypeError,
    ValidationError,
)

__all__ = [
    "AuthenticationError",
    "DocumentNotFoundError",
    "ExtractionError",
    "ImportProcessError",
    "NocoDBError",
    "ProcessNotFoundError",
    "StorageDeletionForbiddenError",
    "StorageError",
    "UnsupportedDocumentTypeError",
    "ValidationError",
]
