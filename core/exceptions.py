"""
Custom exceptions for the sync service with structured error context.

Every exception carries a context dictionary so failures can be correlated
with the RequestDesk side (external ids, local post ids, endpoints).

Exception Hierarchy:
    SyncException (base)
    ├── ConfigurationError
    ├── RemoteError
    │   └── AuthenticationError
    ├── NotFoundError
    ├── TransformError
    │   └── ValidationError
    └── PersistenceError
"""

from typing import Optional, Dict, Any
from datetime import datetime
import pydantic


class SyncException(Exception):
    """
    Base exception for all sync-related errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (external_id, post_id, url, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.utcnow()

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/storage."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Configuration Errors
# ============================================================================

class ConfigurationError(SyncException):
    """
    Raised when the RequestDesk API key or endpoint is not configured.

    Always raised before any network call is attempted.
    """
    pass


# ============================================================================
# Remote Errors
# ============================================================================

class RemoteError(SyncException):
    """
    Exception raised when a RequestDesk call fails.

    Context should include:
        - url: The endpoint that failed
        - status_code: HTTP status code (absent for transport failures)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
        status_code: Optional[int] = None
    ):
        super().__init__(message, context, original_exception)
        self.status_code = status_code
        if status_code is not None:
            self.context["status_code"] = status_code


class AuthenticationError(RemoteError):
    """Credentials rejected (HTTP 401, 403) or an inbound API key mismatch."""
    pass


# ============================================================================
# Lookup Errors
# ============================================================================

class NotFoundError(SyncException):
    """
    Exception raised when a lookup by id, external id or url key fails.

    Context should include the identifier that was looked up.
    """
    pass


# ============================================================================
# Transformation Errors
# ============================================================================

class TransformError(SyncException):
    """Base exception for malformed entity data."""
    pass


class ValidationError(TransformError):
    """
    Exception raised when field validation fails.

    Context should include:
        - field_name: Name of the field that failed validation
        - field_value: Value that failed validation
    """
    pass


# ============================================================================
# Persistence Errors
# ============================================================================

class PersistenceError(SyncException):
    """
    Exception raised when a post cannot be saved or deleted.

    Context should include:
        - operation: save, delete, link
        - post_id / external_id when known
    """
    pass


def describe_error(error: Exception) -> str:
    """Short, user-facing message for an exception"""
    if isinstance(error, SyncException):
        return error.message
    if isinstance(error, pydantic.ValidationError):
        return "; ".join(
            f"{'.'.join(str(part) for part in e['loc'])}: {e['msg']}" for e in error.errors()
        )
    return str(error) or type(error).__name__
