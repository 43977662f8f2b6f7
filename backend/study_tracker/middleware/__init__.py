"""
Middleware Package

Provides FastAPI middleware and the service exception hierarchy:
- Error handling with correlation ids
- ServiceError and its subclasses, mapped to JSON error responses

Usage:
    from study_tracker.middleware import setup_error_handling, ServiceError
"""

from study_tracker.middleware.error_handling import (
    DateParseError,
    ErrorHandlingMiddleware,
    NotFoundError,
    ServiceError,
    StorageError,
    StudySessionNotFoundError,
    setup_error_handling,
)

__all__ = [
    "setup_error_handling",
    "ErrorHandlingMiddleware",
    "ServiceError",
    "StorageError",
    "DateParseError",
    "NotFoundError",
    "StudySessionNotFoundError",
]
