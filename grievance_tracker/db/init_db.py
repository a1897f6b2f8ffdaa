"""Database initialization utilities."""
from typing import Optional

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from grievance_tracker.core.logging import get_logger
from grievance_tracker.models import Base

logger = get_logger(__name__)


def init_db(bind: Optional[Engine] = None) -> None:
    """
    Create any missing tables.

    Note: suitable for development and testing; production schemas
    should be managed by migrations.
    """
    if bind is None:
        from grievance_tracker.db.session import engine
        bind = engine

    existing_tables = set(inspect(bind).get_table_names())
    Base.metadata.create_all(bind=bind)
    created = set(Base.metadata.tables) - existing_tables
    if created:
        logger.info(f"Created tables: {', '.join(sorted(created))}")
    else:
        logger.info(f"Database already initialized with {len(existing_tables)} tables")
