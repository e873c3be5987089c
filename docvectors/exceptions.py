"""Application exception hierarchy.

All custom exceptions inherit from DocVectorsError.
Each exception has an error code for structured error handling.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error handling."""

    # General errors (1xxx)
    INTERNAL_ERROR = "DVS-1000"
    VALIDATION_ERROR = "DVS-1002"

    # Storage root errors (2xxx)
    CONNECTION_ERROR = "DVS-2000"

    # Schema and batch errors (3xxx)
    SCHEMA_ERROR = "DVS-3000"
    DIMENSION_MISMATCH = "DVS-3001"

    # Table lookup errors (4xxx)
    TABLE_NOT_FOUND = "DVS-4000"

    # Query errors (5xxx)
    QUERY_ERROR = "DVS-5000"

    # Storage I/O errors (6xxx)
    STORAGE_IO_ERROR = "DVS-6000"


class DocVectorsError(Exception):
    """Base exception for all vector store errors.

    Attributes:
        message: Human-readable error message.
        code: Structured error code.
        details: Additional error context.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
            }
        }


class ValidationError(DocVectorsError):
    """Caller input rejected before reaching storage."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details)


class StoreConnectionError(DocVectorsError):
    """Storage root could not be reached or opened."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.CONNECTION_ERROR, details)


class SchemaError(DocVectorsError):
    """Malformed batch, dimensionality mismatch or unexpected table layout."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.SCHEMA_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class NotFoundError(DocVectorsError):
    """Operation targets a document table that does not exist."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.TABLE_NOT_FOUND, details)


class QueryError(DocVectorsError):
    """Malformed query or backend query failure."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.QUERY_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class StorageIOError(DocVectorsError):
    """Underlying read, write or drop failure."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.STORAGE_IO_ERROR, details)


def is_retryable(exc: BaseException) -> bool:
    """Whether an error is environmental and worth retrying.

    Connection and storage I/O failures are transient; missing tables,
    schema problems and malformed queries are not.
    """
    return isinstance(exc, (StoreConnectionError, StorageIOError))
