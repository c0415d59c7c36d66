"""
Supabase configuration settings.

Project URL, service key and storage bucket parameters used for
document uploads and bearer token verification.

Dependencies: pydantic_settings
System role: Supabase storage and auth configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from backend.configs.base import BaseSettings


class SupabaseSettings(BaseSettings):
    """Settings for Supabase storage and auth operations."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SUPABASE_",
        case_sensitive=False,
        extra="ignore",
    )

    url: str = Field(default="http://localhost:54321", description="Supabase project URL")
    service_key: str = Field(default="", description="Service role key (server side only)")
    storage_bucket: str = Field(
        default="ocr-documents",
        description="Private bucket holding uploaded trade documents",
    )
    max_file_size: int = Field(
        default=20 * 1024 * 1024,
        description="Maximum upload size in bytes (default 20MB)",
    )
    signed_url_expiry: int = Field(
        default=3600,
        description="Signed URL expiry in seconds (default 1 hour)",
    )
    allowed_mime_types: list[str] = Field(
        default=["application/pdf", "image/jpeg", "image/png", "image/jpg"],
        description="MIME types accepted by the storage bucket",
    )
