"""
Complaint lifecycle service.

Owns the complaint status state machine

    NEW -> UNDER_REVIEW -> RESOLVED -> CLOSED

plus creation, descriptive edits, comments, assignment and deletion. Each
state-changing operation writes its audit record in the same transaction
and hands notification work to the NotificationDispatcher only after the
commit succeeded.
"""

from datetime import datetime
from typing import Dict, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from grievance_tracker.core.exceptions import EntityAlreadyExistsError, RepositoryError
from grievance_tracker.core.utils import utcnow
from grievance_tracker.models.base import ComplaintStatus
from grievance_tracker.models.complaint import Complaint, ComplaintComment
from grievance_tracker.models.user import User
from grievance_tracker.repositories.complaint import ComplaintCommentRepository, ComplaintRepository
from grievance_tracker.repositories.user import UserRepository
from grievance_tracker.schemas.complaint import ComplaintCreate, ComplaintEdit
from grievance_tracker.services.base import BaseService, ServiceResult
from grievance_tracker.services.complaint.complaint_audit_service import ComplaintAuditTrail
from grievance_tracker.services.complaint.complaint_number_service import ComplaintNumberGenerator
from grievance_tracker.services.file import AttachmentCleanupService
from grievance_tracker.services.notification import NotificationDispatcher

# Single forward edge out of each non-terminal status
FORWARD_TRANSITIONS: Dict[ComplaintStatus, ComplaintStatus] = {
    ComplaintStatus.NEW: ComplaintStatus.UNDER_REVIEW,
    ComplaintStatus.UNDER_REVIEW: ComplaintStatus.RESOLVED,
    ComplaintStatus.RESOLVED: ComplaintStatus.CLOSED,
}

STATUS_HIERARCHY = "NEW -> UNDER_REVIEW -> RESOLVED -> CLOSED"
CLOSED_MESSAGE = "Complaint is already CLOSED and cannot be updated."


def is_allowed_transition(current: ComplaintStatus, requested: ComplaintStatus) -> bool:
    """
    Whether ``current -> requested`` is a legal move.

    Self-loops are legal except on CLOSED, which accepts nothing. Legacy
    statuses have no edges in or out.
    """
    if current == ComplaintStatus.CLOSED:
        return False
    if current == requested:
        return True
    if current.is_legacy or requested.is_legacy:
        return False
    return FORWARD_TRANSITIONS.get(current) == requested


class ComplaintLifecycleService(BaseService[Complaint, ComplaintRepository]):
    """
    Validates and applies complaint state changes.

    Args:
        db_session: SQLAlchemy session for the unit of work
        dispatcher: Notification dispatcher; built on the same session
            when omitted
        number_generator: Complaint number source; built on the same
            session when omitted
    """

    def __init__(
        self,
        db_session: Session,
        dispatcher: Optional[NotificationDispatcher] = None,
        number_generator: Optional[ComplaintNumberGenerator] = None,
        attachment_cleanup: Optional[AttachmentCleanupService] = None,
    ):
        super().__init__(ComplaintRepository(db_session), db_session)
        self.users = UserRepository(db_session)
        self.comments = ComplaintCommentRepository(db_session)
        self.audit_trail = ComplaintAuditTrail(db_session)
        self.dispatcher = dispatcher or NotificationDispatcher(db_session)
        self.number_generator = number_generator or ComplaintNumberGenerator(db_session, self.repository)
        self.attachment_cleanup = attachment_cleanup or AttachmentCleanupService(db_session)

    # -------------------------------------------------------------------------
    # Creation & edits
    # -------------------------------------------------------------------------

    def create_complaint(
        self,
        data: ComplaintCreate,
        creator: Optional[User],
        now: Optional[datetime] = None,
    ) -> ServiceResult[Complaint]:
        """
        File a new complaint.

        The complaint starts as NEW and unescalated, numbered by the
        ComplaintNumberGenerator.

        Args:
            data: Complaint payload
            creator: Filing user
            now: Creation time, defaults to the current UTC time

        Returns:
            ServiceResult containing the created complaint
        """
        try:
            complaint = Complaint(
                complaint_number=self.number_generator.next_number(),
                title=data.title,
                description=data.description,
                category=data.category,
                priority=data.priority,
                is_anonymous=data.is_anonymous,
                status=ComplaintStatus.NEW,
                created_by_id=creator.id if creator is not None else None,
                created_at=now or utcnow(),
                is_escalated=False,
            )
            with self.transaction():
                self.repository.create(complaint)

            self._logger.info(
                f"Complaint {complaint.complaint_number} created",
                extra={"complaint_id": complaint.id, "priority": complaint.priority},
            )
            return ServiceResult.success(complaint, message="Complaint created successfully")

        except (EntityAlreadyExistsError, RepositoryError, SQLAlchemyError) as e:
            return self._handle_exception(e, "create complaint")

    def update_complaint(
        self,
        complaint_id: int,
        data: ComplaintEdit,
        actor: User,
    ) -> ServiceResult[Complaint]:
        """
        Edit a complaint's descriptive fields.

        Only the creator or an admin may edit. Status and escalation are
        never touched here.

        Args:
            complaint_id: Complaint primary key
            data: Fields to change; unset fields are left alone
            actor: Acting user

        Returns:
            ServiceResult containing the updated complaint
        """
        try:
            complaint = self.repository.find_by_id(complaint_id)
            if complaint is None:
                return ServiceResult.not_found("Complaint", complaint_id)
            if not self._is_owner_or_admin(complaint, actor):
                return ServiceResult.forbidden("edit this complaint")

            changes = data.model_dump(exclude_unset=True, exclude_none=True)
            with self.transaction():
                for field, value in changes.items():
                    setattr(complaint, field, value)
                complaint.updated_at = utcnow()

            return ServiceResult.success(complaint, message="Complaint updated successfully")

        except (RepositoryError, SQLAlchemyError) as e:
            return self._handle_exception(e, "update complaint", complaint_id)

    def delete_complaint(self, complaint_id: int, actor: User) -> ServiceResult[bool]:
        """
        Delete a complaint together with its comments, audit records and
        attachments.

        Args:
            complaint_id: Complaint primary key
            actor: Acting user; must be the creator or an admin

        Returns:
            ServiceResult with True on success
        """
        try:
            complaint = self.repository.find_by_id(complaint_id)
            if complaint is None:
                return ServiceResult.not_found("Complaint", complaint_id)
            if not self._is_owner_or_admin(complaint, actor):
                return ServiceResult.forbidden("delete this complaint")

            number = complaint.complaint_number
            with self.transaction():
                self.attachment_cleanup.delete_for_complaint(complaint.id)
                self.comments.delete_by_complaint(complaint.id)
                self.audit_trail.delete_for_complaint(complaint.id)
                self.repository.delete(complaint)

            self._logger.info(f"Complaint {number} deleted", extra={"complaint_id": complaint_id})
            return ServiceResult.success(True, message="Complaint deleted successfully")

        except (RepositoryError, SQLAlchemyError) as e:
            return self._handle_exception(e, "delete complaint", complaint_id)

    def assign_complaint(
        self,
        complaint_id: int,
        user_id: int,
        actor: Optional[User] = None,
    ) -> ServiceResult[Complaint]:
        """
        Assign a complaint to a user.

        Args:
            complaint_id: Complaint primary key
            user_id: Assignee primary key
            actor: Acting user, recorded on the audit entry

        Returns:
            ServiceResult containing the complaint, NOT_FOUND if either
            the complaint or the user does not exist
        """
        try:
            complaint = self.repository.find_by_id(complaint_id)
            if complaint is None:
                return ServiceResult.not_found("Complaint", complaint_id)
            if complaint.status == ComplaintStatus.CLOSED:
                return ServiceResult.invalid_state(CLOSED_MESSAGE)
            assignee = self.users.find_by_id(user_id)
            if assignee is None:
                return ServiceResult.not_found("User", user_id)

            if complaint.assigned_to_id != assignee.id:
                at = utcnow()
                complaint.assigned_to_id = assignee.id
                complaint.updated_at = at
                with self.transaction():
                    self.audit_trail.record(
                        complaint,
                        complaint.status,
                        complaint.status,
                        actor=actor,
                        comments=f"Assigned to {assignee.name}",
                        at=at,
                    )

            return ServiceResult.success(complaint, message="Complaint assigned successfully")

        except (RepositoryError, SQLAlchemyError) as e:
            return self._handle_exception(e, "assign complaint", complaint_id)

    def add_comment(
        self,
        complaint_id: int,
        content: str,
        user: Optional[User] = None,
        now: Optional[datetime] = None,
    ) -> ServiceResult[ComplaintComment]:
        """
        Attach a free-text comment to a complaint.

        Comments leave status, assignee and the audit trail untouched.

        Returns:
            ServiceResult containing the comment, NOT_FOUND for an unknown
            complaint
        """
        content = content.strip() if content else ""
        if not content:
            return ServiceResult.validation_failure("Comment content is required", field="content")

        try:
            complaint = self.repository.find_by_id(complaint_id)
            if complaint is None:
                return ServiceResult.not_found("Complaint", complaint_id)

            comment = ComplaintComment(
                complaint_id=complaint.id,
                user_id=user.id if user is not None else None,
                content=content,
                created_at=now or utcnow(),
            )
            with self.transaction():
                self.comments.create(comment)

            self._logger.info(
                f"Comment added to complaint {complaint.complaint_number}",
                extra={"complaint_id": complaint_id, "user_id": comment.user_id},
            )
            return ServiceResult.success(comment, message="Comment added successfully")

        except (RepositoryError, SQLAlchemyError) as e:
            return self._handle_exception(e, "add comment", complaint_id)

    # -------------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------------

    def change_status(
        self,
        complaint_id: int,
        new_status: Union[ComplaintStatus, str, None],
        actor: Optional[User] = None,
        comments: Optional[str] = None,
        assigned_to_email: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ServiceResult[Complaint]:
        """
        Apply a status transition, comment or reassignment.

        Rules:
            - the requested status is required;
            - a CLOSED complaint accepts no update at all;
            - the requested status may equal the current one (comment or
              reassignment only);
            - otherwise only the single forward edge out of the current
              status is accepted.

        An audit record is written when the status changes, a comment is
        given or the assignee changes. After the commit the creator is
        notified of a status change (unless the complaint is anonymous),
        and admins are notified when an escalated complaint reaches
        RESOLVED.

        Args:
            complaint_id: Complaint primary key
            new_status: Requested status, enum or case-insensitive name
            actor: Acting user
            comments: Optional comment for the audit record
            assigned_to_email: Optional new assignee, looked up by e-mail
            now: Transition time, defaults to the current UTC time

        Returns:
            ServiceResult containing the updated complaint. Failures use
            VALIDATION_ERROR for a rejected transition, INVALID_STATE for a
            CLOSED complaint and NOT_FOUND for an unknown complaint.
        """
        try:
            requested = ComplaintStatus.parse(new_status)
        except ValueError as e:
            return ServiceResult.validation_failure(str(e), field="status")
        if requested is None:
            return ServiceResult.validation_failure("New status cannot be null", field="status")

        try:
            complaint = self.repository.find_by_id(complaint_id)
            if complaint is None:
                return ServiceResult.not_found("Complaint", complaint_id)

            old_status = complaint.status
            rejection = self._validate_transition(old_status, requested)
            if rejection is not None:
                self._logger.warning(
                    f"Rejected status change on {complaint.complaint_number}: "
                    f"{old_status.value} -> {requested.value}",
                    extra={"complaint_id": complaint_id},
                )
                return rejection

            at = now or utcnow()
            comments = comments.strip() if comments and comments.strip() else None

            assignee_changed = self._apply_assignee(complaint, assigned_to_email)
            complaint.status = requested
            complaint.updated_at = at
            status_changed = old_status != requested

            with self.transaction():
                if status_changed or comments or assignee_changed:
                    self.audit_trail.record(
                        complaint,
                        old_status,
                        requested,
                        actor=actor,
                        comments=comments,
                        at=at,
                    )

        except (RepositoryError, SQLAlchemyError) as e:
            return self._handle_exception(e, "update complaint status", complaint_id)

        self._logger.info(
            f"Complaint {complaint.complaint_number} status {old_status.value} -> {requested.value}",
            extra={"complaint_id": complaint_id, "actor_id": actor.id if actor else None},
        )

        self._dispatch_notifications(complaint, old_status, requested)

        return ServiceResult.success(complaint, message="Complaint status updated successfully")

    def _validate_transition(
        self,
        current: ComplaintStatus,
        requested: ComplaintStatus,
    ) -> Optional[ServiceResult]:
        """Return a failure result for an illegal move, None if it is allowed."""
        if current == ComplaintStatus.CLOSED:
            return ServiceResult.invalid_state(
                CLOSED_MESSAGE,
                details={"current_status": current.value, "requested_status": requested.value},
            )
        if is_allowed_transition(current, requested):
            return None
        return ServiceResult.validation_failure(
            f"Invalid status transition: Cannot move from {current.value} to {requested.value}. "
            f"Strict hierarchy is: {STATUS_HIERARCHY}.",
            field="status",
            details={"current_status": current.value, "requested_status": requested.value},
        )

    def _apply_assignee(self, complaint: Complaint, assigned_to_email: Optional[str]) -> bool:
        """Point the complaint at the user owning ``assigned_to_email``; True if it changed."""
        if not assigned_to_email or not assigned_to_email.strip():
            return False
        assignee = self.users.find_by_email(assigned_to_email)
        if assignee is None:
            self._logger.warning(
                f"Assignee {assigned_to_email} not found; assignment left unchanged",
                extra={"complaint_id": complaint.id},
            )
            return False
        if complaint.assigned_to_id == assignee.id:
            return False
        complaint.assigned_to_id = assignee.id
        return True

    def _dispatch_notifications(
        self,
        complaint: Complaint,
        old_status: ComplaintStatus,
        new_status: ComplaintStatus,
    ) -> None:
        """Best-effort notifications for a committed transition."""
        try:
            creator = complaint.created_by
            if old_status != new_status and not complaint.is_anonymous and creator is not None:
                result = self.dispatcher.notify_status_change(complaint, creator, old_status, new_status)
                if not result:
                    self._logger.warning(
                        f"Status update notification failed for {complaint.complaint_number}: {result.message}"
                    )

            if complaint.is_escalated and new_status == ComplaintStatus.RESOLVED:
                result = self.dispatcher.notify_escalated_resolved(complaint)
                if not result:
                    self._logger.warning(
                        f"Escalated-resolved notification failed for {complaint.complaint_number}: "
                        f"{result.message}"
                    )
        except SQLAlchemyError as e:
            self._logger.error(
                f"Notification dispatch failed for complaint {complaint.id}: {e}",
                exc_info=True,
            )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _is_owner_or_admin(complaint: Complaint, actor: Optional[User]) -> bool:
        if actor is None:
            return False
        return actor.is_admin or complaint.created_by_id == actor.id
