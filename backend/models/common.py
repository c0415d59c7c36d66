"""
Common request/response models.

Shared base model and error schema.

Dependencies: pydantic
System role: Common API structures
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Request model accepting camelCase keys (as sent by the web client) or field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    """Error response schema."""

    success: bool = False
    error: str = Field(description="Error message")
    details: dict | None = Field(default=None, description="Additional error context")


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    message: str
