"""
Exception hierarchy for the import process API.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class ImportProcessError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(ImportProcessError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class UnsupportedDocumentTypeError(ValidationError):
    """Raised when a document type has no extraction or storage support."""

    def __init__(self, document_type: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["document_type"] = document_type
        super().__init__(
            f"Unsupported document type: {document_type}",
            field="documentType",
            details=details,
        )


class AuthenticationError(ImportProcessError):
    """Raised when a bearer token is missing, malformed or rejected."""


class NocoDBError(ImportProcessError):
    """Raised when the NocoDB REST API returns an error."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        table_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize NocoDB error.

        Args:
            message: Error message reported by NocoDB (msg/message field)
            status_code: HTTP status returned by NocoDB
            table_id: Table the request targeted
            details: Additional context
        """
        details = details or {}
        if status_code is not None:
            details["status_code"] = status_code
        if table_id:
            details["table_id"] = table_id
        self.status_code = status_code
        super().__init__(message, details)

    @property
    def is_constraint_violation(self) -> bool:
        """Whether the failure came from a foreign key or other constraint."""
        msg = self.message.lower()
        return "constraint" in msg or "foreign key" in msg

    @property
    def is_missing_table(self) -> bool:
        """Whether the targeted table does not exist."""
        msg = self.message.lower()
        return "not found" in msg or "does not exist" in msg


class ProcessNotFoundError(ImportProcessError):
    """Raised when an import process cannot be found."""

    def __init__(self, process_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["process_id"] = process_id
        self.process_id = process_id
        super().__init__(f"Processo não encontrado: {process_id}", details)


class DocumentNotFoundError(ImportProcessError):
    """Raised when an uploaded document cannot be found by its hash."""

    def __init__(self, file_hash: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["file_hash"] = file_hash
        self.file_hash = file_hash
        super().__init__(f"Documento não encontrado: {file_hash}", details)


class StorageError(ImportProcessError):
    """Raised when an object storage operation fails."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class StorageDeletionForbiddenError(StorageError):
    """Raised on any attempt to delete a stored document."""

    def __init__(self, path: str) -> None:
        super().__init__(
            "File deletion is not allowed for stored documents",
            operation="delete",
            details={"path": path},
        )


class ExtractionError(ImportProcessError):
    """Raised when the LLM extraction call fails or returns unusable output."""

    def __init__(
        self,
        message: str,
        document_type: str | None = None,
        step: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize extraction error.

        Args:
            message: Error message
            document_type: Document type being extracted
            step: Extraction step number that failed
            details: Additional context
        """
        details = details or {}
        if document_type:
            details["document_type"] = document_type
        if step is not None:
            details["step"] = step
        super().__init__(message, details)
