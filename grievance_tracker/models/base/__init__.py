"""
Base models package.

Provides the declarative base, the abstract model and the enums
used by all database models.
"""

from grievance_tracker.models.base.base_model import Base, BaseModel, ModelType
from grievance_tracker.models.base.enums import (
    ComplaintStatus,
    UserRole,
)

__all__ = [
    "Base",
    "BaseModel",
    "ModelType",
    "ComplaintStatus",
    "UserRole",
]
