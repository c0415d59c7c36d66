"""
Dependency injection container.

Factory functions for FastAPI dependencies.

Dependencies: backend.configs, backend.application, backend.boundary
System role: DI container for service injection
"""

from functools import lru_cache

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backend.configs import Settings, get_settings
from backend.application.services import (
    AuditLogService,
    DocumentCacheService,
    DocumentSaveService,
    ExtractionRegistry,
    ExtractionRequestService,
    ExtractionService,
    ProcessDocumentService,
    ProcessMatchingService,
    ProcessService,
    UploadService,
)
from backend.boundary.anthropic import ClaudeExtractionClient
from backend.boundary.nocodb import NocoDBClient
from backend.boundary.supabase import AuthenticatedUser, SupabaseAuthClient, SupabaseStorageClient
from backend.core.exceptions import AuthenticationError

_bearer = HTTPBearer(auto_error=False)


class ServiceCache:
    """Container for cached client instances."""

    def __init__(self):
        self._nocodb_client = None
        self._storage_client = None
        self._auth_client = None
        self._extraction_client = None
        self._extraction_registry = None

    @property
    def nocodb_client(self) -> NocoDBClient:
        """Get cached NocoDB client."""
        if self._nocodb_client is None:
            settings = get_settings().nocodb
            self._nocodb_client = NocoDBClient(
                base_url=settings.base_url,
                api_token=settings.api_token,
                timeout=settings.timeout_seconds,
            )
        return self._nocodb_client

    @property
    def storage_client(self) -> SupabaseStorageClient:
        """Get cached Supabase storage client."""
        if self._storage_client is None:
            settings = get_settings().supabase
            self._storage_client = SupabaseStorageClient(
                url=settings.url,
                service_key=settings.service_key,
                bucket=settings.storage_bucket,
                max_file_size=settings.max_file_size,
                allowed_mime_types=settings.allowed_mime_types,
                signed_url_expiry=settings.signed_url_expiry,
            )
        return self._storage_client

    @property
    def auth_client(self) -> SupabaseAuthClient:
        """Get cached Supabase auth client."""
        if self._auth_client is None:
            settings = get_settings().supabase
            self._auth_client = SupabaseAuthClient(url=settings.url, service_key=settings.service_key)
        return self._auth_client

    @property
    def extraction_client(self) -> ClaudeExtractionClient:
        """Get cached Claude extraction client."""
        if self._extraction_client is None:
            settings = get_settings().extraction
            self._extraction_client = ClaudeExtractionClient(
                api_key=settings.anthropic_api_key,
                model=settings.model,
                max_tokens=settings.max_tokens,
                temperature=settings.temperature,
                timeout_seconds=settings.timeout_seconds,
            )
        return self._extraction_client

    @property
    def extraction_registry(self) -> ExtractionRegistry:
        """Get the process-wide extraction request registry."""
        if self._extraction_registry is None:
            self._extraction_registry = ExtractionRegistry(
                ttl_seconds=get_settings().extraction.request_ttl_seconds
            )
        return self._extraction_registry

    async def aclose(self) -> None:
        """Close clients that hold network connections."""
        if self._nocodb_client is not None:
            await self._nocodb_client.aclose()

    def clear(self) -> None:
        """Clear all cached instances."""
        self._nocodb_client = None
        self._storage_client = None
        self._auth_client = None
        self._extraction_client = None
        self._extraction_registry = None


# Global service cache
_service_cache = ServiceCache()

def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> AuthenticatedUser:
    """
    Resolve the Supabase user from the bearer token.

    Raises:
        HTTPException(401): Missing or invalid token
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    try:
        return await get_service_cache().auth_client.verify_token(credentials.credentials)
    except AuthenticationError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


def get_nocodb_client() -> NocoDBClient:
    return get_service_cache().nocodb_client


def get_audit_log_service() -> AuditLogService:
    return AuditLogService(nocodb=get_nocodb_client(), tables=get_settings().nocodb)


def get_process_document_service() -> ProcessDocumentService:
    """
    Get process-document relation service instance.

    Returns:
        ProcessDocumentService: Service sharing the cached NocoDB client
    """
    return ProcessDocumentService(
        nocodb=get_nocodb_client(),
        tables=get_settings().nocodb,
        audit_service=get_audit_log_service(),
    )


def get_process_service() -> ProcessService:
    """
    Get import process service instance.

    Returns:
        ProcessService: Process service with relation and audit services
    """
    return ProcessService(
        nocodb=get_nocodb_client(),
        tables=get_settings().nocodb,
        documents=get_process_document_service(),
        audit=get_audit_log_service(),
    )


def get_document_cache_service() -> DocumentCacheService:
    return DocumentCacheService(nocodb=get_nocodb_client(), tables=get_settings().nocodb)


def get_document_save_service() -> DocumentSaveService:
    return DocumentSaveService(
        nocodb=get_nocodb_client(),
        tables=get_settings().nocodb,
        cache_service=get_document_cache_service(),
    )


def get_upload_service() -> UploadService:
    """
    Get upload service instance.

    Returns:
        UploadService: Upload service with storage client and hash cache
    """
    settings = get_settings()
    return UploadService(
        nocodb=get_nocodb_client(),
        tables=settings.nocodb,
        storage=get_service_cache().storage_client,
        cache_service=get_document_cache_service(),
        max_file_size=settings.supabase.max_file_size,
    )


def get_extraction_service() -> ExtractionService:
    return ExtractionService(client=get_service_cache().extraction_client)


def get_extraction_request_service() -> ExtractionRequestService:
    """
    Get extraction request service instance.

    Uses the shared registry so status polls see requests submitted
    by earlier calls.

    Returns:
        ExtractionRequestService: Background extraction scheduler
    """
    cache = get_service_cache()
    return ExtractionRequestService(
        extraction=get_extraction_service(),
        storage=cache.storage_client,
        registry=cache.extraction_registry,
    )


def get_process_matching_service() -> ProcessMatchingService:
    settings = get_settings()
    return ProcessMatchingService(
        nocodb=get_nocodb_client(),
        tables=settings.nocodb,
        client=get_service_cache().extraction_client,
        model=settings.extraction.matching_model,
    )
