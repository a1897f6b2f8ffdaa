"""
Repository layer.

Repositories wrap SQLAlchemy queries per aggregate; they flush but leave
commits to the services.
"""

from grievance_tracker.repositories.base import BaseRepository
from grievance_tracker.repositories.complaint import (
    AttachmentRepository,
    ComplaintRepository,
    ComplaintUpdateRepository,
)
from grievance_tracker.repositories.notification import (
    NotificationRepository,
    UserNotificationRepository,
)
from grievance_tracker.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "AttachmentRepository",
    "ComplaintRepository",
    "ComplaintUpdateRepository",
    "NotificationRepository",
    "UserNotificationRepository",
    "UserRepository",
]
