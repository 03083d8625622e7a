"""
Custom exception classes for the application.

Every error raised by the sort run derives from AppError so that the
run loop and the routes can turn it into a structured response.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "COLLECTION_NOT_MANUAL")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class UnauthorizedError(AppError):
    """Missing or wrong shared secret (401)."""

    def __init__(self):
        super().__init__(
            code="UNAUTHORIZED",
            message="Unauthorized",
            status_code=401
        )


# ===================
# SORT RUN ERRORS
# ===================

class ConfigurationError(AppError):
    """Required configuration missing. Aborts the run before any collection."""

    def __init__(self, missing: list[str]):
        super().__init__(
            code="CONFIGURATION_ERROR",
            message=f"Missing required configuration: {', '.join(missing)}",
            status_code=500,
            details={"missing": missing}
        )


class CollectionModeError(ValidationError):
    """Collection is not manually sorted, so positions can't be assigned."""

    def __init__(self, collection_id: str, title: str, sort_order: str):
        super().__init__(
            code="COLLECTION_NOT_MANUAL",
            message=f'"{title}" must be MANUAL (is {sort_order})',
            details={
                "collection_id": collection_id,
                "title": title,
                "sort_order": sort_order
            }
        )


class DataFetchError(ExternalServiceError):
    """Shopify read failed (transport, HTTP status or GraphQL errors)."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            service="shopify",
            message=message,
            details=details,
            code="SHOPIFY_FETCH_ERROR"
        )


class CollectionNotFoundError(DataFetchError):
    """Collection id does not resolve to a collection."""

    def __init__(self, collection_id: str):
        super().__init__(
            message=f"Collection not found: {collection_id}",
            details={"collection_id": collection_id}
        )
        self.code = "COLLECTION_NOT_FOUND"


class MutationError(AppError):
    """
    collectionReorderProducts rejected a chunk.

    Chunks before the failing one were already applied; details carry
    chunk_offset and applied_moves so the partial write is visible.
    """

    def __init__(
        self,
        collection_id: str,
        message: str,
        chunk_offset: int,
        applied_moves: int,
        field: Optional[list[str]] = None
    ):
        super().__init__(
            code="SHOPIFY_MUTATION_ERROR",
            message=message,
            status_code=502,
            details={
                "collection_id": collection_id,
                "chunk_offset": chunk_offset,
                "applied_moves": applied_moves,
                "field": field
            }
        )
