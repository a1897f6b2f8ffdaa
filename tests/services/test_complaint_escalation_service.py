"""Tests for the escalation sweep, on-demand check and manual escalation."""

from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from grievance_tracker.models import ComplaintStatus, ComplaintUpdate
from grievance_tracker.services.base import ErrorCode
from grievance_tracker.services.complaint import ComplaintEscalationService
from grievance_tracker.services.complaint.complaint_escalation_service import (
    escalation_threshold_days,
    is_escalation_due,
)
from grievance_tracker.services.notification import NotificationDispatcher

T0 = datetime(2024, 3, 1, 9, 0, 0)


@pytest.fixture
def escalation(db, transport):
    return ComplaintEscalationService(db, dispatcher=NotificationDispatcher(db, email_transport=transport))


class TestThresholds:
    @pytest.mark.parametrize(
        "priority, days",
        [
            ("CRITICAL", 3),
            ("critical", 3),
            ("High", 7),
            ("MEDIUM", 10),
            ("LOW", 15),
            ("urgent", 15),
            ("", 15),
            (None, 15),
        ],
    )
    def test_threshold_by_priority(self, priority, days):
        assert escalation_threshold_days(priority) == days


class TestSweep:
    """Periodic sweep over all complaints."""

    def test_critical_escalates_after_three_days(self, db, escalation, make_complaint):
        complaint = make_complaint(priority="CRITICAL", created_at=T0)
        now = T0 + timedelta(days=3, seconds=1)

        report = escalation.run_sweep(now=now).data

        db.refresh(complaint)
        assert complaint.is_escalated is True
        assert complaint.escalated_at == now
        assert report.escalated_count == 1
        assert report.escalated_numbers == [complaint.complaint_number]

    def test_critical_not_escalated_before_three_whole_days(self, db, escalation, make_complaint):
        complaint = make_complaint(priority="CRITICAL", created_at=T0)

        report = escalation.run_sweep(now=T0 + timedelta(days=2, hours=23)).data

        db.refresh(complaint)
        assert complaint.is_escalated is False
        assert complaint.escalated_at is None
        assert report.escalated_count == 0
        assert report.skipped_count == 1

    def test_unknown_priority_uses_fifteen_days(self, db, escalation, make_complaint):
        complaint = make_complaint(priority="whenever", created_at=T0)

        escalation.run_sweep(now=T0 + timedelta(days=14, hours=23))
        db.refresh(complaint)
        assert complaint.is_escalated is False

        escalation.run_sweep(now=T0 + timedelta(days=15))
        db.refresh(complaint)
        assert complaint.is_escalated is True

    def test_mixed_case_priority_kept_and_matched(self, db, escalation, make_complaint):
        complaint = make_complaint(priority="High", created_at=T0)

        escalation.run_sweep(now=T0 + timedelta(days=7))

        db.refresh(complaint)
        assert complaint.priority == "High"
        assert complaint.is_escalated is True

    def test_resolved_and_closed_are_skipped(self, db, escalation, lifecycle, make_complaint):
        resolved = make_complaint(priority="CRITICAL", created_at=T0)
        for status in (ComplaintStatus.UNDER_REVIEW, ComplaintStatus.RESOLVED):
            lifecycle.change_status(resolved.id, status)

        report = escalation.run_sweep(now=T0 + timedelta(days=30)).data

        db.refresh(resolved)
        assert resolved.is_escalated is False
        assert report.processed_count == 0

    def test_sweep_is_idempotent(self, db, escalation, make_complaint):
        complaint = make_complaint(priority="HIGH", created_at=T0)
        first_run = T0 + timedelta(days=8)

        escalation.run_sweep(now=first_run)
        second = escalation.run_sweep(now=first_run + timedelta(days=1)).data

        db.refresh(complaint)
        assert complaint.escalated_at == first_run
        assert second.escalated_count == 0

    def test_per_item_failure_does_not_abort_sweep(self, db, escalation, make_complaint, monkeypatch):
        first = make_complaint(title="first", priority="CRITICAL", created_at=T0)
        second = make_complaint(title="second", priority="CRITICAL", created_at=T0)
        third = make_complaint(title="third", priority="CRITICAL", created_at=T0)

        real_commit = db.commit
        calls = {"n": 0}

        def flaky_commit():
            calls["n"] += 1
            if calls["n"] == 1:
                raise OperationalError("UPDATE complaints", {}, Exception("database is locked"))
            return real_commit()

        monkeypatch.setattr(db, "commit", flaky_commit)
        report = escalation.run_sweep(now=T0 + timedelta(days=4)).data
        monkeypatch.setattr(db, "commit", real_commit)

        assert report.failed_count == 1
        assert report.escalated_count == 2
        db.expire_all()
        assert [c.is_escalated for c in (first, second, third)] == [False, True, True]

    def test_report_to_dict(self, escalation, make_complaint):
        make_complaint(priority="LOW", created_at=T0)
        data = escalation.run_sweep(now=T0 + timedelta(days=20)).data.to_dict()

        assert data["escalated_count"] == 1
        assert data["escalated_numbers"] == ["CMP-00001"]
        assert data["started_at"] == (T0 + timedelta(days=20)).isoformat()


class TestOnDemandCheck:
    def test_check_escalates_when_due(self, db, escalation, make_complaint):
        complaint = make_complaint(priority="HIGH", created_at=T0)
        result = escalation.check_escalation(complaint.id, now=T0 + timedelta(days=7))

        assert result.is_success
        assert result.data is True
        db.refresh(complaint)
        assert complaint.is_escalated

    def test_check_reports_false_when_not_due(self, escalation, make_complaint):
        complaint = make_complaint(priority="HIGH", created_at=T0)
        result = escalation.check_escalation(complaint.id, now=T0 + timedelta(days=6, hours=23))
        assert result.data is False

    def test_check_matches_sweep_rule(self, escalation, make_complaint):
        complaint = make_complaint(priority="MEDIUM", created_at=T0)
        now = T0 + timedelta(days=10)
        expected = is_escalation_due(complaint, now)
        assert escalation.check_escalation(complaint.id, now=now).data is expected

    def test_check_unknown_complaint(self, escalation):
        assert escalation.check_escalation(12345).error_code == ErrorCode.NOT_FOUND


class TestManualEscalation:
    def test_manual_escalation_records_audit(self, db, escalation, make_complaint, admin):
        complaint = make_complaint(priority="LOW")
        now = datetime(2024, 5, 5, 12, 0)

        result = escalation.escalate_manually(complaint.id, actor=admin, now=now)

        assert result.is_success
        assert result.data.is_escalated
        assert result.data.escalated_at == now
        entry = db.query(ComplaintUpdate).one()
        assert entry.old_status == entry.new_status == ComplaintStatus.NEW
        assert entry.comments == "Manual Escalation by Admin"
        assert entry.updated_by_id == admin.id

    def test_manual_escalation_twice_fails(self, escalation, make_complaint, admin):
        complaint = make_complaint()
        escalation.escalate_manually(complaint.id, actor=admin)

        result = escalation.escalate_manually(complaint.id, actor=admin)
        assert result.error_code == ErrorCode.INVALID_STATE
        assert result.message == "Complaint is already escalated."

    def test_manual_escalation_emails_assignee(self, escalation, lifecycle, make_complaint, staff, admin, transport):
        complaint = make_complaint()
        lifecycle.assign_complaint(complaint.id, staff.id, actor=admin)

        escalation.escalate_manually(complaint.id, actor=admin)

        assert (staff.email, "ResolveIT: Complaint Escalated - CMP-00001") in [
            (to, subject) for to, subject, _ in transport.sent
        ]
        body = next(body for to, _, body in transport.sent if to == staff.email)
        assert "assigned to you, has been ESCALATED" in body
        assert "Your complaint" not in body

    def test_manual_escalation_without_assignee_sends_nothing(self, escalation, make_complaint, admin, transport):
        escalation.escalate_manually(make_complaint().id, actor=admin)
        assert transport.sent == []
