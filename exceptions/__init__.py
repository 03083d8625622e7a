"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    ValidationError,
    ExternalServiceError,
    UnauthorizedError,

    # Sort run
    ConfigurationError,
    CollectionModeError,
    DataFetchError,
    CollectionNotFoundError,
    MutationError,
)

__all__ = [
    # Base
    "AppError",
    "ValidationError",
    "ExternalServiceError",
    "UnauthorizedError",

    # Sort run
    "ConfigurationError",
    "CollectionModeError",
    "DataFetchError",
    "CollectionNotFoundError",
    "MutationError",
]
