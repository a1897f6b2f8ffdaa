"""
File Storage Operations Service

Manages storage-level operations for complaint attachments:
- Local file store rooted at ``UPLOAD_DIR``
- Removal of attachment files together with their records
"""

from pathlib import Path
from typing import List, Optional

from sqlalchemy.orm import Session

from grievance_tracker.config.settings import settings
from grievance_tracker.core.exceptions import FileStorageError
from grievance_tracker.models.complaint import Attachment
from grievance_tracker.repositories.complaint import AttachmentRepository
from grievance_tracker.services.base import BaseService


class LocalFileStorage:
    """Files stored flat under a single upload directory."""

    def __init__(self, upload_dir: Optional[str] = None):
        self.root = Path(upload_dir or settings.UPLOAD_DIR).resolve()

    def path_for(self, file_name: str) -> Path:
        """
        Resolve a stored file name inside the upload directory.

        Raises:
            FileStorageError: If the name escapes the upload directory
        """
        path = (self.root / file_name).resolve()
        if self.root not in path.parents:
            raise FileStorageError(
                "File name resolves outside the upload directory",
                details={"file_name": file_name},
            )
        return path

    def delete_file(self, file_name: str) -> bool:
        """
        Delete a stored file if it exists.

        Returns:
            True if a file was removed, False if there was nothing to remove
        """
        path = self.path_for(file_name)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise FileStorageError(
                f"Could not delete file: {e}",
                details={"file_name": file_name},
            ) from e
        return True


class AttachmentCleanupService(BaseService[Attachment, AttachmentRepository]):
    """
    Removes attachment files and rows.

    Physical deletion is best-effort: a file that cannot be removed is
    logged and its record is still deleted, so a stray file never blocks
    complaint deletion or a reset.
    """

    def __init__(self, db_session: Session, storage: Optional[LocalFileStorage] = None):
        super().__init__(AttachmentRepository(db_session), db_session)
        self.storage = storage or LocalFileStorage()

    def _remove_files(self, attachments: List[Attachment]) -> int:
        removed = 0
        for attachment in attachments:
            try:
                if self.storage.delete_file(attachment.file_name):
                    removed += 1
            except FileStorageError as e:
                self._logger.warning(
                    f"Could not remove attachment file {attachment.file_name}: {e.message}",
                    extra={"attachment_id": attachment.id},
                )
        return removed

    def delete_for_complaint(self, complaint_id: int) -> int:
        """
        Delete the files and rows of one complaint's attachments (no commit).

        Returns:
            Number of attachment rows deleted
        """
        attachments = self.repository.find_by_complaint(complaint_id)
        self._remove_files(attachments)
        for attachment in attachments:
            self.db.delete(attachment)
        self.db.flush()
        return len(attachments)

    def delete_all(self) -> int:
        """
        Delete every attachment file and row (no commit).

        Returns:
            Number of attachment rows deleted
        """
        attachments = self.repository.find_all()
        files_removed = self._remove_files(attachments)
        deleted = self.repository.delete_all()
        self._logger.info(
            f"Removed {files_removed} attachment files and {deleted} attachment records"
        )
        return deleted
