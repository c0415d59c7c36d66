"""
Supabase Storage client for uploaded trade documents.

Files live in a private bucket under ``{user_id}/{timestamp}-{random}.{ext}``.
Deleting stored files is forbidden by policy: uploads are evidence for
the import process.

Dependencies: supabase
System role: Object storage boundary for document uploads
"""

import asyncio
import hashlib
import logging
import secrets
import time
from typing import Any

from supabase import Client, StorageException, create_client

from backend.core.exceptions import StorageDeletionForbiddenError, StorageError

logger = logging.getLogger(__name__)


def compute_file_hash(content: bytes) -> str:
    """SHA-256 hex digest of the file content."""
    return hashlib.sha256(content).hexdigest()


class SupabaseStorageClient:
    """Storage operations on a single Supabase bucket."""

    def __init__(
        self,
        url: str,
        service_key: str,
        bucket: str = "ocr-documents",
        max_file_size: int = 20 * 1024 * 1024,
        allowed_mime_types: list[str] | None = None,
        signed_url_expiry: int = 3600,
    ) -> None:
        """
        Initialize storage client.

        Args:
            url: Supabase project URL
            service_key: Service role key (bypasses RLS for server-side uploads)
            bucket: Bucket holding the documents
            max_file_size: Bucket file size limit in bytes
            allowed_mime_types: MIME types accepted by the bucket
            signed_url_expiry: Default signed URL lifetime in seconds
        """
        self._client: Client = create_client(url, service_key)
        self._bucket = bucket
        self._max_file_size = max_file_size
        self._allowed_mime_types = allowed_mime_types or [
            "application/pdf",
            "image/jpeg",
            "image/jpg",
            "image/png",
        ]
        self._signed_url_expiry = signed_url_expiry

    @property
    def bucket(self) -> str:
        return self._bucket

    def _bucket_api(self):
        return self._client.storage.from_(self._bucket)

    async def _call(self, operation: str, func, *args, **kwargs) -> Any:
        """Run a blocking SDK call off the event loop, mapping SDK errors."""
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except StorageException as e:
            logger.error(
                "Storage operation failed",
                extra={"operation": operation, "bucket": self._bucket, "error": str(e)},
            )
            raise StorageError(f"Failed to {operation}: {e}", operation=operation) from e

    async def ensure_bucket_exists(self) -> None:
        """Create the private documents bucket; an existing bucket is not an error."""
        try:
            await asyncio.to_thread(
                self._client.storage.create_bucket,
                self._bucket,
                options={
                    "public": False,
                    "file_size_limit": self._max_file_size,
                    "allowed_mime_types": self._allowed_mime_types,
                },
            )
            logger.info("Created storage bucket", extra={"bucket": self._bucket})
        except StorageException as e:
            if "already exists" in str(e).lower():
                return
            raise StorageError(f"Failed to create bucket: {e}", operation="create_bucket") from e

    async def upload_file(
        self,
        user_id: str,
        filename: str,
        content: bytes,
        content_type: str,
    ) -> dict[str, Any]:
        """
        Upload a file under the user's folder.

        Args:
            user_id: Owner id, used as the top-level folder
            filename: Original file name (only its extension is kept)
            content: File bytes
            content_type: MIME type

        Returns:
            dict with ``path``, ``url`` (signed), ``hash``, ``size`` and ``mime_type``
        """
        extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
        path = f"{user_id}/{int(time.time() * 1000)}-{secrets.token_hex(6)}.{extension}"

        await self._call(
            "upload file",
            self._bucket_api().upload,
            path,
            content,
            file_options={"content-type": content_type, "upsert": "false"},
        )
        url = await self.get_signed_url(path)

        logger.info(
            "Uploaded file to storage",
            extra={"path": path, "size": len(content), "mime_type": content_type},
        )
        return {
            "path": path,
            "url": url,
            "hash": compute_file_hash(content),
            "size": len(content),
            "mime_type": content_type,
        }

    async def get_signed_url(self, path: str, expires_in: int | None = None) -> str:
        result = await self._call(
            "create signed URL",
            self._bucket_api().create_signed_url,
            path,
            expires_in or self._signed_url_expiry,
        )
        # The SDK has used both spellings across releases
        return result.get("signedURL") or result.get("signedUrl") or ""

    async def download_file(self, path: str) -> bytes:
        return await self._call("download file", self._bucket_api().download, path)

    async def list_user_files(self, user_id: str) -> list[dict[str, Any]]:
        result = await self._call(
            "list files",
            self._bucket_api().list,
            user_id,
            {"limit": 100, "offset": 0, "sortBy": {"column": "created_at", "order": "desc"}},
        )
        return result or []

    async def move_file(self, from_path: str, to_path: str) -> None:
        await self._call("move file", self._bucket_api().move, from_path, to_path)

    async def delete_file(self, path: str) -> None:
        raise StorageDeletionForbiddenError(path)
