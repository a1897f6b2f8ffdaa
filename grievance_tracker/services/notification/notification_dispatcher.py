"""
Notification dispatcher.

Emits the side-channel messages produced by complaint activity:
- user-facing ``UserNotification`` rows plus an e-mail,
- admin-facing ``Notification`` rows,
and manages their read state.

Dispatch is best-effort. Every send method commits its own rows after
the triggering change has already been committed, and reports failure
through ``ServiceResult`` instead of raising, so a notification problem
can never undo a status change.
"""

from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from grievance_tracker.core.constants import (
    EMAIL_SUBJECT_PREFIX,
    NOTIFICATION_ESCALATED_RESOLVED,
    NOTIFICATION_RESOLVED_PENDING,
    NOTIFICATION_STATUS_CHANGE_REQUEST,
    NOTIFICATION_STATUS_UPDATE,
)
from grievance_tracker.core.exceptions import RepositoryError
from grievance_tracker.core.utils import humanize_enum_value
from grievance_tracker.models.base import ComplaintStatus
from grievance_tracker.models.complaint import Complaint
from grievance_tracker.models.notification import Notification, UserNotification
from grievance_tracker.models.user import User
from grievance_tracker.repositories.notification import (
    NotificationRepository,
    UserNotificationRepository,
)
from grievance_tracker.services.base import BaseService, ServiceResult
from grievance_tracker.utils.email import EmailTransport, get_email_transport

STATUS_UPDATE_EMAIL_BODY = (
    "Hello,\n\n"
    "Your complaint '{title}' ({number}) has been updated.\n\n"
    "Status changed from: {old_status}\n"
    "Status changed to: {new_status}\n\n"
    "Please log in to ResolveIT to view more details.\n\n"
    "Best regards,\n"
    "ResolveIT Team"
)

ESCALATION_EMAIL_BODY = (
    "Hello,\n\n"
    "Complaint '{title}' ({number}), assigned to you, has been ESCALATED.\n\n"
    "Priority: {priority}\n"
    "It has exceeded the expected resolution time. Please review it and resolve "
    "it as soon as possible.\n\n"
    "Best regards,\n"
    "ResolveIT Team"
)


class NotificationDispatcher(BaseService[Notification, NotificationRepository]):
    """
    Creates and manages complaint notifications.

    Args:
        db_session: SQLAlchemy session, shared with the calling service
        email_transport: Delivery channel for e-mails; defaults to the
            process-wide SMTP transport
    """

    def __init__(self, db_session: Session, email_transport: Optional[EmailTransport] = None):
        super().__init__(NotificationRepository(db_session), db_session)
        self.user_notifications = UserNotificationRepository(db_session)
        self.email_transport = email_transport or get_email_transport()

    # -------------------------------------------------------------------------
    # User-facing
    # -------------------------------------------------------------------------

    def notify_status_change(
        self,
        complaint: Complaint,
        recipient: User,
        old_status: ComplaintStatus,
        new_status: ComplaintStatus,
    ) -> ServiceResult[UserNotification]:
        """
        Tell a complaint's creator that its status changed.

        Sends the e-mail (queued, not awaited) and persists an in-app
        notification.

        Args:
            complaint: The updated complaint
            recipient: The complaint's creator
            old_status: Status before the change
            new_status: Status after the change

        Returns:
            ServiceResult with the persisted UserNotification
        """
        self._send_email(
            recipient.email,
            f"{EMAIL_SUBJECT_PREFIX}: Status Update for {complaint.complaint_number}",
            STATUS_UPDATE_EMAIL_BODY.format(
                title=complaint.title,
                number=complaint.complaint_number,
                old_status=old_status.value,
                new_status=new_status.value,
            ),
        )

        notification = UserNotification(
            user_id=recipient.id,
            type=NOTIFICATION_STATUS_UPDATE,
            message=(
                f"Your complaint '{complaint.title}' status changed to "
                f"{humanize_enum_value(new_status.value)}"
            ),
            complaint_id=complaint.id,
        )
        return self._persist(notification, "send status update notification", complaint.id)

    def send_escalation_email(self, complaint: Complaint, recipient: User) -> bool:
        """
        Queue the escalation e-mail for ``recipient``, the complaint's assignee.

        Returns:
            True if the message was queued
        """
        return self._send_email(
            recipient.email,
            f"{EMAIL_SUBJECT_PREFIX}: Complaint Escalated - {complaint.complaint_number}",
            ESCALATION_EMAIL_BODY.format(
                title=complaint.title,
                number=complaint.complaint_number,
                priority=complaint.priority or "UNSPECIFIED",
            ),
        )

    # -------------------------------------------------------------------------
    # Admin-facing
    # -------------------------------------------------------------------------

    def notify_escalated_resolved(self, complaint: Complaint) -> ServiceResult[Notification]:
        """Ask admins to review and close an escalated complaint that was resolved."""
        notification = Notification(
            type=NOTIFICATION_ESCALATED_RESOLVED,
            message=(
                f"Escalated complaint '{complaint.title}' ({complaint.complaint_number}) "
                f"has been RESOLVED. Please review and close."
            ),
            complaint_id=complaint.id,
        )
        return self._persist(notification, "send escalated-resolved notification", complaint.id)

    def report_resolved(self, complaint: Complaint, staff: User) -> ServiceResult[Notification]:
        """
        Record a staff member's report that a complaint is resolved.

        Args:
            complaint: Complaint reported as resolved
            staff: Reporting staff member

        Returns:
            ServiceResult with the admin notification
        """
        staff_name = staff.username or staff.name
        notification = Notification(
            type=NOTIFICATION_RESOLVED_PENDING,
            message=(
                f"Staff {staff_name} reports complaint #{complaint.complaint_number} "
                f"(\"{complaint.title}\") as resolved. Awaiting admin approval."
            ),
            complaint_id=complaint.id,
            created_by_id=staff.id,
        )
        return self._persist(notification, "report complaint resolved", complaint.id)

    def request_status_change(
        self,
        complaint: Complaint,
        staff: User,
        requested_status: ComplaintStatus,
        comment: Optional[str] = None,
    ) -> ServiceResult[Notification]:
        """
        Forward a staff member's status change request to admins.

        The request is informational; no transition is attempted.

        Args:
            complaint: Complaint concerned
            staff: Requesting staff member
            requested_status: Status the staff member asks for
            comment: Optional justification

        Returns:
            ServiceResult with the admin notification
        """
        message = (
            f"Staff {staff.name} requests to change complaint #{complaint.complaint_number} "
            f"(\"{complaint.title}\") from {complaint.status.value} to {requested_status.value}"
        )
        if comment:
            message += f". Comment: {comment}"

        notification = Notification(
            type=NOTIFICATION_STATUS_CHANGE_REQUEST,
            message=message,
            complaint_id=complaint.id,
            created_by_id=staff.id,
            requested_status=requested_status.value,
        )
        return self._persist(notification, "request status change", complaint.id)

    # -------------------------------------------------------------------------
    # Read state
    # -------------------------------------------------------------------------

    def list_admin(self, limit: int = 50) -> ServiceResult[List[Notification]]:
        """Most recent admin notifications, newest first."""
        try:
            return ServiceResult.success(self.repository.find_recent(limit))
        except SQLAlchemyError as e:
            return self._handle_exception(e, "list notifications")

    def list_for_user(self, user: User, limit: int = 50) -> ServiceResult[List[UserNotification]]:
        """Most recent notifications addressed to ``user``, newest first."""
        try:
            return ServiceResult.success(self.user_notifications.find_by_user(user.id, limit))
        except SQLAlchemyError as e:
            return self._handle_exception(e, "list user notifications", user.id)

    def mark_admin_read(self, notification_id: int) -> ServiceResult[Notification]:
        try:
            notification = self.repository.mark_as_read(notification_id)
            if notification is None:
                return ServiceResult.not_found("Notification", notification_id)
            self._commit()
            return ServiceResult.success(notification, message="Notification marked as read")
        except (RepositoryError, SQLAlchemyError) as e:
            self._rollback()
            return self._handle_exception(e, "mark notification as read", notification_id)

    def mark_all_admin_read(self) -> ServiceResult[int]:
        try:
            count = self.repository.mark_all_as_read()
            self._commit()
            return ServiceResult.success(count, message=f"{count} notifications marked as read")
        except SQLAlchemyError as e:
            self._rollback()
            return self._handle_exception(e, "mark all notifications as read")

    def admin_unread_count(self) -> ServiceResult[int]:
        try:
            return ServiceResult.success(self.repository.count_unread())
        except SQLAlchemyError as e:
            return self._handle_exception(e, "count unread notifications")

    def mark_user_read(self, notification_id: int, user: User) -> ServiceResult[UserNotification]:
        try:
            notification = self.user_notifications.mark_as_read(notification_id, user.id)
            if notification is None:
                return ServiceResult.not_found("UserNotification", notification_id)
            self._commit()
            return ServiceResult.success(notification, message="Notification marked as read")
        except (RepositoryError, SQLAlchemyError) as e:
            self._rollback()
            return self._handle_exception(e, "mark user notification as read", notification_id)

    def mark_all_user_read(self, user: User) -> ServiceResult[int]:
        try:
            count = self.user_notifications.mark_all_as_read(user.id)
            self._commit()
            return ServiceResult.success(count, message=f"{count} notifications marked as read")
        except SQLAlchemyError as e:
            self._rollback()
            return self._handle_exception(e, "mark all user notifications as read", user.id)

    def user_unread_count(self, user: User) -> ServiceResult[int]:
        try:
            return ServiceResult.success(self.user_notifications.count_unread(user.id))
        except SQLAlchemyError as e:
            return self._handle_exception(e, "count unread user notifications", user.id)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _persist(self, notification, operation: str, complaint_id: int) -> ServiceResult:
        try:
            self.db.add(notification)
            self._commit()
            self._logger.info(
                f"Notification {notification.type} created for complaint {complaint_id}"
            )
            return ServiceResult.success(notification)
        except SQLAlchemyError as e:
            self._rollback()
            return self._handle_exception(e, operation, complaint_id)

    def _send_email(self, to: Optional[str], subject: str, body: str) -> bool:
        if not to:
            return False
        try:
            return self.email_transport.send(to, subject, body) is not None
        except Exception as e:  # noqa: BLE001
            self._logger.error(f"Failed to queue email to {to}: {e}", exc_info=True)
            return False
