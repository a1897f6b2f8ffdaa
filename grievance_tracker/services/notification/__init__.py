from grievance_tracker.services.notification.notification_dispatcher import NotificationDispatcher

__all__ = ["NotificationDispatcher"]
