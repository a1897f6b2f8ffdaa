"""
Notification repositories for the admin audience and per-user inboxes.
"""

from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from grievance_tracker.models.notification import Notification, UserNotification
from grievance_tracker.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """Admin-facing notifications."""

    def __init__(self, db: Session):
        super().__init__(Notification, db)

    def find_recent(self, limit: int = 50) -> List[Notification]:
        stmt = select(Notification).order_by(Notification.created_at.desc()).limit(limit)
        return list(self.db.scalars(stmt))

    def count_unread(self) -> int:
        stmt = select(func.count()).select_from(Notification).where(Notification.is_read.is_(False))
        return self.db.scalar(stmt) or 0

    def mark_as_read(self, notification_id: int) -> Optional[Notification]:
        notification = self.find_by_id(notification_id)
        if notification is None:
            return None
        notification.is_read = True
        self.db.flush()
        return notification

    def mark_all_as_read(self) -> int:
        result = self.db.execute(
            update(Notification)
            .where(Notification.is_read.is_(False))
            .values(is_read=True)
        )
        return result.rowcount or 0


class UserNotificationRepository(BaseRepository[UserNotification]):
    """Notifications addressed to a single user."""

    def __init__(self, db: Session):
        super().__init__(UserNotification, db)

    def find_by_user(self, user_id: int, limit: int = 50) -> List[UserNotification]:
        stmt = (
            select(UserNotification)
            .where(UserNotification.user_id == user_id)
            .order_by(UserNotification.created_at.desc())
            .limit(limit)
        )
        return list(self.db.scalars(stmt))

    def count_unread(self, user_id: int) -> int:
        stmt = (
            select(func.count())
            .select_from(UserNotification)
            .where(UserNotification.user_id == user_id)
            .where(UserNotification.is_read.is_(False))
        )
        return self.db.scalar(stmt) or 0

    def mark_as_read(self, notification_id: int, user_id: int) -> Optional[UserNotification]:
        """Mark one notification read; ``None`` unless it belongs to ``user_id``."""
        notification = self.find_by_id(notification_id)
        if notification is None or notification.user_id != user_id:
            return None
        notification.is_read = True
        self.db.flush()
        return notification

    def mark_all_as_read(self, user_id: int) -> int:
        result = self.db.execute(
            update(UserNotification)
            .where(UserNotification.user_id == user_id)
            .where(UserNotification.is_read.is_(False))
            .values(is_read=True)
        )
        return result.rowcount or 0
