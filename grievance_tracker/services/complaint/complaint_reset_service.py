"""
Administrative reset: wipe history and renumber every complaint.

Renumbering runs in two committed phases. Phase 1 moves every complaint
to a placeholder number derived from its id; phase 2 then hands out
CMP-00001.. in creation order. Assigning the final numbers directly
would trip the unique constraint on numbers not yet renumbered.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from grievance_tracker.core.exceptions import RepositoryError
from grievance_tracker.core.logging import log_execution_time
from grievance_tracker.core.utils import utcnow
from grievance_tracker.models.base import ComplaintStatus
from grievance_tracker.models.complaint import Complaint
from grievance_tracker.repositories.complaint import ComplaintRepository
from grievance_tracker.repositories.notification import NotificationRepository
from grievance_tracker.services.base import BaseService, ServiceResult
from grievance_tracker.services.complaint.complaint_audit_service import ComplaintAuditTrail
from grievance_tracker.services.complaint.complaint_number_service import (
    format_number,
    placeholder_number,
)
from grievance_tracker.services.file import AttachmentCleanupService


@dataclass
class ResetReport:
    attachments_deleted: int = 0
    updates_deleted: int = 0
    notifications_deleted: int = 0
    complaints_renumbered: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ComplaintResetService(BaseService[Complaint, ComplaintRepository]):
    """Bulk reset of complaint state for administrators."""

    def __init__(
        self,
        db_session: Session,
        attachment_cleanup: Optional[AttachmentCleanupService] = None,
    ):
        super().__init__(ComplaintRepository(db_session), db_session)
        self.audit_trail = ComplaintAuditTrail(db_session)
        self.notifications = NotificationRepository(db_session)
        self.attachment_cleanup = attachment_cleanup or AttachmentCleanupService(db_session)

    @log_execution_time()
    def reset_all(self) -> ServiceResult[ResetReport]:
        """
        Clear attachments, audit records and admin notifications, then
        renumber all complaints from CMP-00001 in creation order with status
        NEW and no assignee.

        Per-user notifications, comments and escalation flags are left as
        they are.

        Returns:
            ServiceResult containing the reset report
        """
        report = ResetReport()
        try:
            with self.transaction():
                report.attachments_deleted = self.attachment_cleanup.delete_all()
                report.updates_deleted = self.audit_trail.purge()
                report.notifications_deleted = self.notifications.delete_all()

            complaints = self.repository.find_all_by_created_at()

            # Phase 1
            with self.transaction():
                for complaint in complaints:
                    complaint.complaint_number = placeholder_number(complaint.id)
                self.db.flush()
            self._logger.debug(f"Placeholder numbers assigned to {len(complaints)} complaints")

            # Phase 2
            now = utcnow()
            with self.transaction():
                for sequence, complaint in enumerate(complaints, start=1):
                    complaint.complaint_number = format_number(sequence)
                    complaint.status = ComplaintStatus.NEW
                    complaint.assigned_to_id = None
                    complaint.updated_at = now
            report.complaints_renumbered = len(complaints)

        except (RepositoryError, SQLAlchemyError) as e:
            return self._handle_exception(
                e,
                "reset complaints",
                additional_context=report.to_dict(),
            )

        self._logger.info(
            f"Complaint reset complete: {report.complaints_renumbered} renumbered",
            extra=report.to_dict(),
        )
        return ServiceResult.success(report, message="Complaints reset successfully")
