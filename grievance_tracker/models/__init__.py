"""
Database models package.

Importing this package registers every table on ``Base.metadata``.
"""

from grievance_tracker.models.base import Base, BaseModel, ComplaintStatus, UserRole
from grievance_tracker.models.complaint import (
    Attachment,
    Complaint,
    ComplaintComment,
    ComplaintUpdate,
)
from grievance_tracker.models.notification import Notification, UserNotification
from grievance_tracker.models.user import User

__all__ = [
    "Base",
    "BaseModel",
    "ComplaintStatus",
    "UserRole",
    "Attachment",
    "Complaint",
    "ComplaintComment",
    "ComplaintUpdate",
    "Notification",
    "UserNotification",
    "User",
]
