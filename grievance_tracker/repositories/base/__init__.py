from grievance_tracker.repositories.base.base_repository import BaseRepository

__all__ = ["BaseRepository"]
