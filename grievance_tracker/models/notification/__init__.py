from grievance_tracker.models.notification.notification import Notification, UserNotification

__all__ = ["Notification", "UserNotification"]
