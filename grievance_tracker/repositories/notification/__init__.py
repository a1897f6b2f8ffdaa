from grievance_tracker.repositories.notification.notification_repository import (
    NotificationRepository,
    UserNotificationRepository,
)

__all__ = ["NotificationRepository", "UserNotificationRepository"]
