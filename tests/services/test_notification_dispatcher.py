"""Tests for notification dispatch and read state."""

from unittest.mock import patch

from grievance_tracker.models import ComplaintStatus, Notification, UserNotification
from grievance_tracker.services.base import ErrorCode


class TestStaffReports:
    def test_report_resolved_creates_admin_notification(self, dispatcher, make_complaint, staff):
        complaint = make_complaint(title="No hot water")

        notice = dispatcher.report_resolved(complaint, staff).data

        assert notice.type == "RESOLVED_PENDING"
        assert notice.created_by_id == staff.id
        assert notice.message == (
            f'Staff {staff.username} reports complaint #CMP-00001 ("No hot water") '
            "as resolved. Awaiting admin approval."
        )

    def test_request_status_change(self, dispatcher, make_complaint, staff):
        complaint = make_complaint()

        notice = dispatcher.request_status_change(
            complaint, staff, ComplaintStatus.CLOSED, comment="Tenant confirmed"
        ).data

        assert notice.type == "STATUS_CHANGE_REQUEST"
        assert notice.requested_status == "CLOSED"
        assert "from NEW to CLOSED" in notice.message
        assert notice.message.endswith("Comment: Tenant confirmed")
        assert complaint.status == ComplaintStatus.NEW


class TestAdminReadState:
    def test_mark_read_and_count(self, db, dispatcher, make_complaint, staff):
        complaint = make_complaint()
        first = dispatcher.report_resolved(complaint, staff).data
        dispatcher.report_resolved(complaint, staff)

        assert dispatcher.admin_unread_count().data == 2
        assert dispatcher.mark_admin_read(first.id).data.is_read is True
        assert dispatcher.admin_unread_count().data == 1
        assert dispatcher.mark_all_admin_read().data == 1
        assert dispatcher.admin_unread_count().data == 0

    def test_mark_unknown_notification(self, dispatcher):
        assert dispatcher.mark_admin_read(999).error_code == ErrorCode.NOT_FOUND


class TestUserReadState:
    def test_user_marks_own_notifications(self, db, dispatcher, lifecycle, make_complaint, user):
        complaint = make_complaint()
        lifecycle.change_status(complaint.id, ComplaintStatus.UNDER_REVIEW)
        lifecycle.change_status(complaint.id, ComplaintStatus.RESOLVED)

        assert dispatcher.user_unread_count(user).data == 2
        note = db.query(UserNotification).first()
        assert dispatcher.mark_user_read(note.id, user).is_success
        assert dispatcher.user_unread_count(user).data == 1
        assert dispatcher.mark_all_user_read(user).data == 1
        assert dispatcher.user_unread_count(user).data == 0

    def test_cannot_mark_someone_elses_notification(self, db, dispatcher, lifecycle, make_complaint, staff):
        complaint = make_complaint()
        lifecycle.change_status(complaint.id, ComplaintStatus.UNDER_REVIEW)
        note = db.query(UserNotification).one()

        result = dispatcher.mark_user_read(note.id, staff)

        assert result.error_code == ErrorCode.NOT_FOUND
        db.refresh(note)
        assert note.is_read is False


class TestEmailFailure:
    def test_transport_error_still_persists_notification(self, db, dispatcher, transport, make_complaint, user):
        complaint = make_complaint()

        with patch.object(transport, "send", side_effect=OSError("smtp down")):
            result = dispatcher.notify_status_change(
                complaint, user, ComplaintStatus.NEW, ComplaintStatus.UNDER_REVIEW
            )

        assert result.is_success
        assert db.query(UserNotification).count() == 1
        assert transport.sent == []


class TestListing:
    def test_admin_listing(self, dispatcher, make_complaint, staff):
        complaint = make_complaint()
        dispatcher.report_resolved(complaint, staff)
        dispatcher.report_resolved(complaint, staff)

        listed = dispatcher.list_admin(limit=5).data
        assert len(listed) == 2
        assert all(isinstance(n, Notification) for n in listed)
