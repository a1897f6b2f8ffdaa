"""
Complaint audit trail.

Append-only log of status transitions, comments and manual escalations.
Records are written inside the caller's transaction so a transition and
its audit entry commit together.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from grievance_tracker.core.exceptions import RepositoryError
from grievance_tracker.core.utils import utcnow
from grievance_tracker.models.base import ComplaintStatus
from grievance_tracker.models.complaint import Complaint, ComplaintUpdate
from grievance_tracker.models.user import User
from grievance_tracker.repositories.complaint import ComplaintRepository, ComplaintUpdateRepository
from grievance_tracker.services.base import BaseService, ServiceResult


class ComplaintAuditTrail(BaseService[ComplaintUpdate, ComplaintUpdateRepository]):
    """Writes and reads complaint audit records."""

    def __init__(self, db_session: Session):
        super().__init__(ComplaintUpdateRepository(db_session), db_session)

    def record(
        self,
        complaint: Complaint,
        old_status: Optional[ComplaintStatus],
        new_status: Optional[ComplaintStatus],
        actor: Optional[User] = None,
        comments: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> ComplaintUpdate:
        """
        Append an audit record without committing.

        Args:
            complaint: Complaint the record belongs to
            old_status: Status before the change
            new_status: Status after the change (equal to old for comments
                and manual escalations)
            actor: Acting user, None for system actions
            comments: Optional free-text comment
            at: Record timestamp, defaults to now

        Returns:
            The flushed ComplaintUpdate
        """
        entry = ComplaintUpdate(
            complaint_id=complaint.id,
            updated_by_id=actor.id if actor is not None else None,
            old_status=old_status,
            new_status=new_status,
            comments=comments,
            updated_at=at or utcnow(),
        )
        self.repository.create(entry)
        self._logger.debug(
            f"Audit record for complaint {complaint.complaint_number}: {old_status} -> {new_status}"
        )
        return entry

    def timeline(self, complaint_id: int) -> ServiceResult[List[ComplaintUpdate]]:
        """
        Audit records of a complaint, newest first.

        Args:
            complaint_id: Complaint primary key

        Returns:
            ServiceResult with the records, or NOT_FOUND for an unknown complaint
        """
        try:
            if ComplaintRepository(self.db).find_by_id(complaint_id) is None:
                return ServiceResult.not_found("Complaint", complaint_id)
            return ServiceResult.success(self.repository.find_by_complaint(complaint_id))
        except (RepositoryError, SQLAlchemyError) as e:
            return self._handle_exception(e, "load complaint timeline", complaint_id)

    def delete_for_complaint(self, complaint_id: int) -> int:
        """Remove one complaint's records (no commit)."""
        return self.repository.delete_by_complaint(complaint_id)

    def purge(self) -> int:
        """Remove every audit record (no commit). Reset only."""
        return self.repository.delete_all()
