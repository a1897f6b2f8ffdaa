"""
Base service class providing common functionality for all services.
"""

from abc import ABC
from contextlib import contextmanager
from typing import Any, Dict, Generic, Optional, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from grievance_tracker.core.exceptions import (
    EntityAlreadyExistsError,
    EntityNotFoundError,
    RepositoryError,
)
from grievance_tracker.core.logging import get_logger
from grievance_tracker.repositories.base import BaseRepository
from grievance_tracker.services.base.service_result import (
    ErrorCode,
    ErrorSeverity,
    ServiceError,
    ServiceResult,
)

TModel = TypeVar("TModel")
TRepo = TypeVar("TRepo", bound=BaseRepository)


class BaseService(ABC, Generic[TModel, TRepo]):
    """
    Base service with common behaviors:
    - Shared logger and db session
    - Consistent error handling via ServiceResult
    - Transaction management utilities
    """

    def __init__(self, repository: TRepo, db_session: Session):
        """
        Initialize base service.

        Args:
            repository: Repository instance for data access
            db_session: SQLAlchemy database session
        """
        self.repository: TRepo = repository
        self.db: Session = db_session
        self._logger = get_logger(self.__class__.__name__).add_context(service=self.__class__.__name__)

    # -------------------------------------------------------------------------
    # Exception & Error Handling
    # -------------------------------------------------------------------------

    def _handle_exception(
        self,
        exception: Exception,
        operation: str,
        entity_ref: Optional[Any] = None,
        severity: ErrorSeverity = ErrorSeverity.CRITICAL,
        additional_context: Optional[Dict[str, Any]] = None,
    ) -> ServiceResult:
        """
        Convert exception to a ServiceResult failure with logging.

        Args:
            exception: The caught exception
            operation: Description of the operation that failed
            entity_ref: Reference to the entity involved (ID, number, etc.)
            severity: Error severity level
            additional_context: Extra context for logging/debugging

        Returns:
            ServiceResult with failure status and error details
        """
        context = {
            "operation": operation,
            "entity_ref": str(entity_ref) if entity_ref is not None else None,
            "exception_type": type(exception).__name__,
        }
        if additional_context:
            context.update(additional_context)

        self._logger.error(
            f"Error during {operation}: {exception}",
            exc_info=True,
            extra=context,
        )

        error_code = self._map_exception_to_error_code(exception)

        return ServiceResult.failure(
            ServiceError(
                code=error_code,
                message=f"Failed to {operation}",
                details={
                    "error": str(exception),
                    "entity_ref": str(entity_ref) if entity_ref is not None else None,
                    "context": additional_context,
                },
                severity=severity,
            )
        )

    def _map_exception_to_error_code(self, exception: Exception) -> ErrorCode:
        """
        Map exception types to appropriate error codes.

        Ordered: the first matching type wins.
        """
        exception_mapping = (
            (EntityAlreadyExistsError, ErrorCode.ALREADY_EXISTS),
            (IntegrityError, ErrorCode.ALREADY_EXISTS),
            (EntityNotFoundError, ErrorCode.NOT_FOUND),
            (RepositoryError, ErrorCode.DATABASE_ERROR),
            (SQLAlchemyError, ErrorCode.DATABASE_ERROR),
            (ValueError, ErrorCode.VALIDATION_ERROR),
        )

        for exc_type, error_code in exception_mapping:
            if isinstance(exception, exc_type):
                return error_code

        return ErrorCode.INTERNAL_ERROR

    # -------------------------------------------------------------------------
    # Transaction Management
    # -------------------------------------------------------------------------

    @contextmanager
    def transaction(self, auto_commit: bool = True):
        """
        Context manager for database transactions with automatic rollback.

        Args:
            auto_commit: Whether to commit automatically on success

        Example:
            with self.transaction():
                self.repository.create(entity)
        """
        try:
            yield self.db
            if auto_commit:
                self._commit()
        except Exception as e:
            self._rollback()
            self._logger.error(f"Transaction failed: {e}", exc_info=True)
            raise

    def _commit(self) -> None:
        """Commit the current transaction with error handling."""
        try:
            self.db.commit()
            self._logger.debug("Transaction committed successfully")
        except Exception as e:
            self._logger.error(f"Commit failed: {e}", exc_info=True)
            self._rollback()
            raise

    def _rollback(self) -> None:
        """Rollback the current transaction, suppressing rollback errors."""
        try:
            self.db.rollback()
            self._logger.debug("Transaction rolled back")
        except SQLAlchemyError as e:
            # Log only: the original error is the one worth surfacing
            self._logger.warning(f"Rollback failed: {e}")

    # -------------------------------------------------------------------------
    # Common Operations
    # -------------------------------------------------------------------------

    def get_by_id(self, entity_id: int) -> ServiceResult[TModel]:
        """
        Retrieve entity by ID.

        Args:
            entity_id: Primary key of the entity

        Returns:
            ServiceResult containing the entity or error
        """
        try:
            entity = self.repository.find_by_id(entity_id)
            if entity is None:
                return ServiceResult.not_found(self.repository.model.__name__, entity_id)
            return ServiceResult.success(entity)
        except (RepositoryError, SQLAlchemyError) as e:
            return self._handle_exception(e, "get entity by ID", entity_id)
