"""
Custom exceptions for the application.

Every error the slot and swap services raise derives from BaseAPIException,
so a single FastAPI handler can turn them into the standard response envelope.
Subclasses only pick their HTTP status, error code and default message.
"""

from typing import Any, ClassVar, Dict, Optional


class BaseAPIException(Exception):
    """Base exception class for API errors."""

    status_code: ClassVar[int] = 500
    error_code: ClassVar[str] = "INTERNAL_ERROR"
    default_message: ClassVar[str] = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class ValidationError(BaseAPIException):
    """Input is well-formed but not acceptable, e.g. a slot swapped with itself."""

    status_code = 400
    error_code = "VALIDATION_ERROR"
    default_message = "Validation failed"


class InvalidStateError(BaseAPIException):
    """A slot is not in the status an operation requires."""

    status_code = 400
    error_code = "INVALID_STATE"
    default_message = "Invalid state for this operation"


class UnauthorizedError(BaseAPIException):
    status_code = 401
    error_code = "UNAUTHORIZED"
    default_message = "Authentication required"


class ForbiddenError(BaseAPIException):
    status_code = 403
    error_code = "FORBIDDEN"
    default_message = "Access forbidden"


class NotFoundError(BaseAPIException):
    """A slot or swap request is missing, owned by someone else, or already
    resolved. The caller cannot tell these apart."""

    status_code = 404
    error_code = "NOT_FOUND"
    default_message = "Resource not found"


class ConflictError(BaseAPIException):
    """A pending swap request already locks a slot."""

    status_code = 409
    error_code = "CONFLICT"
    default_message = "Conflict with current state"


class StorageFaultError(BaseAPIException):
    """A transaction could not be committed.

    Nothing was written, but retrying may keep failing until the
    underlying infrastructure problem is fixed.
    """

    status_code = 500
    error_code = "STORAGE_FAULT"
    default_message = "Storage failure, no changes were applied"
