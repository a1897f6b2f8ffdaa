"""Tests for the administrative reset and renumbering."""

from datetime import datetime, timedelta

import pytest

from grievance_tracker.models import (
    Attachment,
    Complaint,
    ComplaintStatus,
    ComplaintUpdate,
    Notification,
    UserNotification,
)
from grievance_tracker.services.complaint import ComplaintResetService
from grievance_tracker.services.file import AttachmentCleanupService, LocalFileStorage

T0 = datetime(2024, 1, 10, 8, 0)


@pytest.fixture
def storage(tmp_path):
    return LocalFileStorage(str(tmp_path))


@pytest.fixture
def reset_service(db, storage):
    return ComplaintResetService(db, attachment_cleanup=AttachmentCleanupService(db, storage=storage))


@pytest.fixture
def populated(db, lifecycle, dispatcher, make_complaint, staff, storage, tmp_path):
    """Three complaints created out of id order, with history, files and notifications."""
    newest = make_complaint(title="newest", created_at=T0 + timedelta(days=2))
    oldest = make_complaint(title="oldest", created_at=T0)
    middle = make_complaint(title="middle", created_at=T0 + timedelta(days=1))

    lifecycle.change_status(oldest.id, ComplaintStatus.UNDER_REVIEW, assigned_to_email=staff.email)
    lifecycle.change_status(oldest.id, ComplaintStatus.RESOLVED)
    lifecycle.change_status(middle.id, ComplaintStatus.UNDER_REVIEW, comments="on it")
    dispatcher.report_resolved(oldest, staff)

    (tmp_path / "evidence.png").write_bytes(b"png")
    db.add(Attachment(complaint_id=oldest.id, file_name="evidence.png", original_file_name="photo.png"))
    db.commit()
    return oldest, middle, newest


class TestResetAll:
    def test_renumbers_in_creation_order(self, db, reset_service, populated):
        oldest, middle, newest = populated

        result = reset_service.reset_all()

        assert result.is_success
        db.expire_all()
        assert oldest.complaint_number == "CMP-00001"
        assert middle.complaint_number == "CMP-00002"
        assert newest.complaint_number == "CMP-00003"
        assert result.data.complaints_renumbered == 3

    def test_resets_status_and_assignment(self, db, reset_service, populated):
        reset_service.reset_all()

        complaints = db.query(Complaint).all()
        assert {c.status for c in complaints} == {ComplaintStatus.NEW}
        assert all(c.assigned_to_id is None for c in complaints)

    def test_clears_history_attachments_and_admin_notifications(
        self, db, reset_service, populated, tmp_path
    ):
        user_notes_before = db.query(UserNotification).count()

        report = reset_service.reset_all().data

        assert db.query(ComplaintUpdate).count() == 0
        assert db.query(Attachment).count() == 0
        assert db.query(Notification).count() == 0
        assert not (tmp_path / "evidence.png").exists()
        assert report.attachments_deleted == 1
        assert report.updates_deleted == 3
        assert report.notifications_deleted == 1
        assert db.query(UserNotification).count() == user_notes_before

    def test_missing_file_does_not_block_reset(self, db, reset_service, populated, tmp_path):
        (tmp_path / "evidence.png").unlink()
        assert reset_service.reset_all().is_success
        assert db.query(Attachment).count() == 0

    def test_numbering_continues_after_reset(self, reset_service, populated, make_complaint):
        reset_service.reset_all()
        assert make_complaint(title="after reset").complaint_number == "CMP-00004"

    def test_reset_on_empty_database(self, reset_service):
        result = reset_service.reset_all()
        assert result.is_success
        assert result.data.complaints_renumbered == 0
