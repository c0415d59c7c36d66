"""
API error handling utilities.

Decorator that maps application exceptions to HTTP responses for every
route, logging each failure with context.

Dependencies: fastapi, pydantic, backend.core.exceptions
System role: Uniform error responses
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status
from pydantic import ValidationError as PydanticValidationError

from backend.core.exceptions import (
    AuthenticationError,
    DocumentNotFoundError,
    ExtractionError,
    NocoDBError,
    ProcessNotFoundError,
    StorageDeletionForbiddenError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Type for the decorated function
F = TypeVar("F", bound=Callable[..., Any])


def handle_api_errors(operation: str) -> Callable[[F], F]:
    """
    Decorator to transform application errors into HTTPExceptions.

    Args:
        operation: Short description used in logs and the generic 500
            detail, e.g. "update stage"
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)

            except HTTPException:
                raise

            except (ProcessNotFoundError, DocumentNotFoundError) as e:
                logger.warning(
                    "Resource not found",
                    extra={"operation": operation, "error": e.message, "details": e.details},
                )
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

            except ValidationError as e:
                logger.warning(
                    "Invalid request",
                    extra={"operation": operation, "error": e.message, "details": e.details},
                )
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

            except AuthenticationError as e:
                raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message)

            except StorageDeletionForbiddenError as e:
                logger.warning("Storage deletion refused", extra={"operation": operation, "details": e.details})
                raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)

            except NocoDBError as e:
                if e.is_constraint_violation:
                    logger.warning(
                        "Database constraint violation",
                        extra={"operation": operation, "error": e.message, "details": e.details},
                    )
                    raise HTTPException(
                        status_code=status.HTTP_409_CONFLICT,
                        detail="Operation conflicts with related records",
                    )
                logger.error(
                    "NocoDB request failed",
                    extra={"operation": operation, "error": e.message, "details": e.details},
                )
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=f"Failed to {operation}",
                )

            except ExtractionError as e:
                logger.error(
                    "Document extraction failed",
                    extra={"operation": operation, "error": e.message, "details": e.details},
                )
                raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)

            except PydanticValidationError as e:
                logger.warning("Pydantic validation error", extra={"error": str(e)})
                raise HTTPException(
                    status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                    detail=e.errors(),
                )

            except ValueError as e:
                msg = str(e).lower()
                if "not found" in msg or "does not exist" in msg:
                    logger.warning("Resource not found (ValueError)", extra={"error": str(e)})
                    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
                logger.warning("Invalid request (ValueError)", extra={"error": str(e)})
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

            except Exception as e:
                logger.exception(
                    "Unexpected failure",
                    extra={"operation": operation, "error": str(e)},
                )
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=f"Failed to {operation}",
                )

        return wrapper  # type: ignore

    return decorator
