"""
Complaint escalation service (periodic sweep, on-demand check, manual).

A complaint is overdue when the whole days elapsed since its creation
reach the threshold for its priority:

    CRITICAL 3, HIGH 7, MEDIUM 10, LOW and anything else 15

Escalation is a one-way flag set alongside its timestamp. It is
independent of status and never goes through the lifecycle service.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from grievance_tracker.core.constants import (
    DEFAULT_ESCALATION_THRESHOLD_DAYS,
    ESCALATION_THRESHOLD_DAYS,
    MANUAL_ESCALATION_COMMENT,
)
from grievance_tracker.core.exceptions import RepositoryError
from grievance_tracker.core.logging import get_logger
from grievance_tracker.core.utils import utcnow
from grievance_tracker.models.complaint import Complaint
from grievance_tracker.models.user import User
from grievance_tracker.repositories.complaint import ComplaintRepository
from grievance_tracker.services.base import BaseService, ServiceResult
from grievance_tracker.services.complaint.complaint_audit_service import ComplaintAuditTrail
from grievance_tracker.services.notification import NotificationDispatcher

logger = get_logger(__name__)


def escalation_threshold_days(priority: Optional[str]) -> int:
    """
    Days after creation at which a complaint of ``priority`` is overdue.

    Matching is case-insensitive; unknown or missing priorities get the
    loosest threshold.
    """
    if not priority:
        return DEFAULT_ESCALATION_THRESHOLD_DAYS
    key = priority.strip().upper()
    threshold = ESCALATION_THRESHOLD_DAYS.get(key)
    if threshold is None:
        logger.warning(
            f"Unrecognized priority '{priority}', using {DEFAULT_ESCALATION_THRESHOLD_DAYS}-day threshold"
        )
        return DEFAULT_ESCALATION_THRESHOLD_DAYS
    return threshold


def elapsed_days(created_at: datetime, now: datetime) -> int:
    """Whole days between two instants, truncated."""
    return (now - created_at).days


def is_escalation_due(complaint: Complaint, now: datetime) -> bool:
    """Eligibility shared by the sweep and the on-demand check."""
    if complaint.is_escalated or complaint.is_terminal:
        return False
    if complaint.created_at is None:
        return False
    return elapsed_days(complaint.created_at, now) >= escalation_threshold_days(complaint.priority)


@dataclass
class EscalationSweepReport:
    """Outcome of one sweep run."""

    started_at: datetime
    completed_at: Optional[datetime] = None
    processed_count: int = 0
    escalated_count: int = 0
    skipped_count: int = 0
    failed_count: int = 0
    escalated_numbers: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "processed_count": self.processed_count,
            "escalated_count": self.escalated_count,
            "skipped_count": self.skipped_count,
            "failed_count": self.failed_count,
            "escalated_numbers": list(self.escalated_numbers),
            "duration_seconds": self.duration_seconds,
        }


class ComplaintEscalationService(BaseService[Complaint, ComplaintRepository]):
    """
    Flags overdue complaints.

    Args:
        db_session: SQLAlchemy session; the sweep commits once per complaint
        dispatcher: Used by manual escalation to e-mail the assignee
    """

    def __init__(self, db_session: Session, dispatcher: Optional[NotificationDispatcher] = None):
        super().__init__(ComplaintRepository(db_session), db_session)
        self.audit_trail = ComplaintAuditTrail(db_session)
        self._dispatcher = dispatcher

    @property
    def dispatcher(self) -> NotificationDispatcher:
        if self._dispatcher is None:
            self._dispatcher = NotificationDispatcher(self.db)
        return self._dispatcher

    # -------------------------------------------------------------------------
    # Periodic sweep
    # -------------------------------------------------------------------------

    def run_sweep(self, now: Optional[datetime] = None) -> ServiceResult[EscalationSweepReport]:
        """
        Escalate every overdue complaint.

        Complaints are handled one at a time, each in its own
        transaction. A database error on one complaint (for example a
        concurrent write) is rolled back, logged and counted; the sweep
        carries on with the rest. Running the sweep twice is harmless
        because escalated complaints are skipped.

        Args:
            now: Reference time, defaults to the current UTC time

        Returns:
            ServiceResult containing the sweep report
        """
        now = now or utcnow()
        report = EscalationSweepReport(started_at=now)
        started = time.monotonic()

        try:
            candidate_ids = self.repository.find_escalation_candidate_ids()
        except (RepositoryError, SQLAlchemyError) as e:
            self._rollback()
            return self._handle_exception(e, "load escalation candidates")

        for complaint_id in candidate_ids:
            report.processed_count += 1
            try:
                complaint = self.repository.find_by_id(complaint_id)
                if complaint is None or not is_escalation_due(complaint, now):
                    report.skipped_count += 1
                    continue

                complaint.mark_escalated(now)
                number = complaint.complaint_number
                self._commit()

                report.escalated_count += 1
                report.escalated_numbers.append(number)
                self._logger.info(
                    f"Complaint {number} auto-escalated",
                    extra={"complaint_id": complaint_id, "priority": complaint.priority},
                )

            except (RepositoryError, SQLAlchemyError) as e:
                self._rollback()
                report.failed_count += 1
                self._logger.warning(
                    f"Failed to escalate complaint {complaint_id} (possible concurrent update): {e}",
                    extra={"complaint_id": complaint_id},
                )

        report.completed_at = utcnow()
        report.duration_seconds = round(time.monotonic() - started, 3)

        self._logger.info(
            f"Escalation sweep complete: {report.escalated_count} escalated, "
            f"{report.skipped_count} skipped, {report.failed_count} failed",
            extra={"processed_count": report.processed_count},
        )

        return ServiceResult.success(
            report,
            message="Escalation sweep completed",
            metadata={"escalated_count": report.escalated_count},
        )

    # -------------------------------------------------------------------------
    # On-demand check
    # -------------------------------------------------------------------------

    def check_escalation(self, complaint_id: int, now: Optional[datetime] = None) -> ServiceResult[bool]:
        """
        Apply the sweep rule to a single complaint.

        Args:
            complaint_id: Complaint primary key
            now: Reference time, defaults to the current UTC time

        Returns:
            ServiceResult with True if the complaint was escalated by this call
        """
        now = now or utcnow()
        try:
            complaint = self.repository.find_by_id(complaint_id)
            if complaint is None:
                return ServiceResult.not_found("Complaint", complaint_id)

            if not is_escalation_due(complaint, now):
                return ServiceResult.success(False, message="Complaint not due for escalation")

            with self.transaction():
                complaint.mark_escalated(now)

            self._logger.info(
                f"Complaint {complaint.complaint_number} escalated on check",
                extra={"complaint_id": complaint_id},
            )
            return ServiceResult.success(True, message="Complaint escalated")

        except (RepositoryError, SQLAlchemyError) as e:
            return self._handle_exception(e, "check complaint escalation", complaint_id)

    # -------------------------------------------------------------------------
    # Manual escalation
    # -------------------------------------------------------------------------

    def escalate_manually(
        self,
        complaint_id: int,
        actor: Optional[User] = None,
        now: Optional[datetime] = None,
    ) -> ServiceResult[Complaint]:
        """
        Escalate a complaint on an admin's request.

        Writes an audit record whose old and new status are both the
        current status, annotated as a manual escalation, then e-mails the
        assignee if there is one.

        Args:
            complaint_id: Complaint primary key
            actor: Escalating admin
            now: Escalation time, defaults to the current UTC time

        Returns:
            ServiceResult containing the complaint; INVALID_STATE if it was
            already escalated
        """
        now = now or utcnow()
        try:
            complaint = self.repository.find_by_id(complaint_id)
            if complaint is None:
                return ServiceResult.not_found("Complaint", complaint_id)
            if complaint.is_escalated:
                return ServiceResult.invalid_state(
                    "Complaint is already escalated.",
                    details={"escalated_at": complaint.escalated_at.isoformat() if complaint.escalated_at else None},
                )

            with self.transaction():
                complaint.mark_escalated(now)
                self.audit_trail.record(
                    complaint,
                    complaint.status,
                    complaint.status,
                    actor=actor,
                    comments=MANUAL_ESCALATION_COMMENT,
                    at=now,
                )

        except (RepositoryError, SQLAlchemyError) as e:
            return self._handle_exception(e, "escalate complaint", complaint_id)

        self._logger.info(
            f"Complaint {complaint.complaint_number} escalated manually",
            extra={"complaint_id": complaint_id, "actor_id": actor.id if actor else None},
        )

        try:
            assignee = complaint.assigned_to
            if assignee is not None and assignee.email:
                self.dispatcher.send_escalation_email(complaint, assignee)
        except SQLAlchemyError as e:
            self._logger.error(f"Escalation e-mail skipped for complaint {complaint_id}: {e}")

        return ServiceResult.success(complaint, message="Complaint escalated successfully")
