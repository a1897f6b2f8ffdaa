from grievance_tracker.models.user.user import User

__all__ = ["User"]
