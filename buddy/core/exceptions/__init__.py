from buddy.core.exceptions.base import (
    AppException,
    NotFoundError,
    DuplicateError,
    DuplicateTermError,
    TermNotFoundError,
    ConnectionFailureError,
    PartialFailureError,
)

__all__ = [
    "AppException",
    "NotFoundError",
    "DuplicateError",
    "DuplicateTermError",
    "TermNotFoundError",
    "ConnectionFailureError",
    "PartialFailureError",
]
