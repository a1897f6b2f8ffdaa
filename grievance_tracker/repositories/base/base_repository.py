"""
Base repository with standardized CRUD operations, transaction management, and error handling.

Provides foundation for all domain repositories with type safety.
Repositories flush; services decide where a transaction commits.
"""

from contextlib import contextmanager
from typing import Any, Generic, List, Optional, Type

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from grievance_tracker.core.exceptions import (
    EntityAlreadyExistsError,
    EntityNotFoundError,
    RepositoryError,
)
from grievance_tracker.core.logging import get_logger
from grievance_tracker.models.base import ModelType

logger = get_logger(__name__)


class BaseRepository(Generic[ModelType]):
    """
    Base repository with standardized operations.

    Provides CRUD operations, transaction management, and error handling
    for all domain repositories.
    """

    def __init__(self, model: Type[ModelType], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    # ==================== Transaction Management ====================

    @contextmanager
    def transaction(self):
        """
        Transaction context manager with automatic rollback.

        Usage:
            with repository.transaction():
                repository.create(entity)
        """
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Transaction rollback: {str(e)}", exc_info=True)
            raise RepositoryError(f"Transaction failed: {str(e)}") from e

    def commit(self):
        """Commit current transaction."""
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RepositoryError(f"Commit failed: {str(e)}") from e

    def rollback(self):
        """Rollback current transaction."""
        self.db.rollback()

    # ==================== Create Operations ====================

    def create(self, entity: ModelType, commit: bool = False) -> ModelType:
        """
        Add a new entity and flush it so generated keys are available.

        Args:
            entity: Entity to create
            commit: Whether to commit immediately

        Returns:
            Created entity

        Raises:
            EntityAlreadyExistsError: If a unique constraint rejects the row
        """
        try:
            self.db.add(entity)
            if commit:
                self.db.commit()
                self.db.refresh(entity)
            else:
                self.db.flush()

            logger.debug(f"Created {self.model.__name__} with id: {entity.id}")
            return entity

        except IntegrityError as e:
            self.db.rollback()
            raise EntityAlreadyExistsError(
                f"{self.model.__name__} already exists",
                details={"error": str(e.orig)},
            ) from e

    # ==================== Read Operations ====================

    def find_by_id(self, id: Any) -> Optional[ModelType]:
        """
        Find entity by ID.

        Args:
            id: Entity ID

        Returns:
            Entity or None
        """
        try:
            return self.db.get(self.model, id)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Find by ID failed: {str(e)}") from e

    def get_by_id(self, id: Any) -> ModelType:
        """
        Get entity by ID or raise exception.

        Raises:
            EntityNotFoundError: If entity not found
        """
        entity = self.find_by_id(id)
        if entity is None:
            raise EntityNotFoundError(self.model.__name__, str(id))
        return entity

    def find_all(self) -> List[ModelType]:
        """Return every row ordered by primary key."""
        return list(self.db.scalars(select(self.model).order_by(self.model.id)))

    def count(self) -> int:
        return self.db.scalar(select(func.count()).select_from(self.model)) or 0

    # ==================== Delete Operations ====================

    def delete(self, entity: ModelType) -> None:
        """Delete one entity (flushed, not committed)."""
        self.db.delete(entity)
        self.db.flush()

    def delete_all(self) -> int:
        """
        Delete every row of this model with a single statement.

        Returns:
            Number of deleted rows
        """
        result = self.db.execute(delete(self.model))
        deleted = result.rowcount or 0
        logger.info(f"Deleted {deleted} {self.model.__name__} rows")
        return deleted
