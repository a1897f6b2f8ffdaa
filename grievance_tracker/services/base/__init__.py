"""
Base service package: the service base class and result objects.
"""

from grievance_tracker.services.base.base_service import BaseService
from grievance_tracker.services.base.service_result import (
    ErrorCode,
    ErrorSeverity,
    ServiceError,
    ServiceResult,
)

__all__ = [
    "BaseService",
    "ErrorCode",
    "ErrorSeverity",
    "ServiceError",
    "ServiceResult",
]
