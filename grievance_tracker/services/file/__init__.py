from grievance_tracker.services.file.file_storage_service import (
    AttachmentCleanupService,
    LocalFileStorage,
)

__all__ = ["AttachmentCleanupService", "LocalFileStorage"]
