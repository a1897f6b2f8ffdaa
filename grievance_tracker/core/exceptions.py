"""
Custom Exceptions for the Grievance Tracker

This module defines the exception classes raised at the HTTP and
persistence boundaries. Services report domain failures through
``ServiceResult``; the API layer turns failed results into these
exceptions and the global handler renders them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    """Standard error codes for the application"""
    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    OPERATION_FAILED = "OPERATION_FAILED"

    # Authentication & Authorization
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # State errors
    INVALID_STATE = "INVALID_STATE"
    CONFLICT = "CONFLICT"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"

    # Database errors
    DATABASE_ERROR = "DATABASE_ERROR"

    # External service errors
    EMAIL_SERVICE_ERROR = "EMAIL_SERVICE_ERROR"
    FILE_STORAGE_ERROR = "FILE_STORAGE_ERROR"


class BaseAppException(Exception):
    """
    Base exception class for all application exceptions.

    Provides consistent error handling across the application with
    structured error information.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to the error response body"""
        return {
            "error": {
                "code": self.error_code.value,
                "message": self.message,
                "details": self.details,
                "type": self.__class__.__name__,
                "timestamp": datetime.utcnow().isoformat(),
            }
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


# ========================================
# General Application Exceptions
# ========================================

class OperationError(BaseAppException):
    """Exception raised when an operation fails"""

    def __init__(
        self,
        message: str = "Operation failed",
        error_code: ErrorCode = ErrorCode.OPERATION_FAILED,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        super().__init__(message, error_code, details, status_code)


class ValidationError(BaseAppException):
    """Exception raised when request data is rejected"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, List[str]]] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 400
    ):
        details = dict(details or {})
        if field_errors:
            details["field_errors"] = field_errors
        super().__init__(message, error_code, details, status_code)


class ResourceNotFoundError(BaseAppException):
    """Exception raised when a requested resource is not found"""

    def __init__(
        self,
        resource_type: str = "Resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None
    ):
        if not message:
            message = f"{resource_type} not found"
            if resource_id:
                message += f" (ID: {resource_id})"

        details = {
            "resource_type": resource_type,
            "resource_id": resource_id
        }
        super().__init__(message, ErrorCode.RESOURCE_NOT_FOUND, details, 404)


class InvalidStateError(BaseAppException):
    """Exception raised when an entity's current state forbids the operation"""

    def __init__(
        self,
        message: str = "Operation not allowed in current state",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, ErrorCode.INVALID_STATE, details, 409)


class ConflictError(BaseAppException):
    """Exception raised when a write collides with existing data"""

    def __init__(
        self,
        message: str = "Resource conflict",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, ErrorCode.CONFLICT, details, 409)


# ========================================
# Authentication & Authorization
# ========================================

class AuthenticationError(BaseAppException):
    """Exception raised when the caller cannot be identified"""

    def __init__(
        self,
        message: str = "Authentication failed",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, ErrorCode.AUTHENTICATION_FAILED, details, 401)


class PermissionDeniedError(BaseAppException):
    """Exception raised when the caller lacks the required role"""

    def __init__(
        self,
        message: str = "Access denied",
        required_roles: Optional[List[str]] = None
    ):
        details = {"required_roles": required_roles} if required_roles else {}
        super().__init__(message, ErrorCode.INSUFFICIENT_PERMISSIONS, details, 403)


# ========================================
# Persistence
# ========================================

class DatabaseError(BaseAppException):
    """Exception raised for unexpected database failures"""

    def __init__(
        self,
        message: str = "Database operation failed",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, ErrorCode.DATABASE_ERROR, details, 500)


class RepositoryError(DatabaseError):
    """Raised by repositories when a query or write fails"""


class EntityNotFoundError(ResourceNotFoundError):
    """Raised by repositories when a required row is missing"""


# ========================================
# External Services
# ========================================

class EmailServiceError(BaseAppException):
    """Exception raised when e-mail delivery fails"""

    def __init__(
        self,
        message: str = "Email delivery failed",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, ErrorCode.EMAIL_SERVICE_ERROR, details, 502)


class FileStorageError(BaseAppException):
    """Exception raised when the file store cannot complete an operation"""

    def __init__(
        self,
        message: str = "File storage operation failed",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, ErrorCode.FILE_STORAGE_ERROR, details, 500)


class EntityAlreadyExistsError(ConflictError):
    """Raised by repositories when a unique constraint rejects a write"""
