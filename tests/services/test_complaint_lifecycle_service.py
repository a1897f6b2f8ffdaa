"""Tests for the complaint status state machine and related operations."""

from datetime import datetime, timedelta

import pytest
from hypothesis import given, settings as hypothesis_settings, strategies as st

from grievance_tracker.models import (
    ComplaintComment,
    ComplaintStatus,
    ComplaintUpdate,
    Notification,
    User,
    UserNotification,
    UserRole,
)
from grievance_tracker.repositories.complaint import ComplaintCommentRepository, ComplaintUpdateRepository
from grievance_tracker.schemas.complaint import ComplaintCreate, ComplaintEdit
from grievance_tracker.services.base import ErrorCode
from grievance_tracker.services.complaint import ComplaintLifecycleService
from grievance_tracker.services.complaint.complaint_lifecycle_service import is_allowed_transition
from grievance_tracker.services.notification import NotificationDispatcher
from tests.conftest import RecordingTransport, build_session_factory

S = ComplaintStatus
FORWARD = [S.NEW, S.UNDER_REVIEW, S.RESOLVED, S.CLOSED]


def walk(lifecycle, complaint, *statuses, actor=None):
    for status in statuses:
        result = lifecycle.change_status(complaint.id, status, actor=actor)
        assert result.is_success, result.message
    return complaint


class TestTransitionTable:
    @pytest.mark.parametrize(
        "current, requested",
        [(S.NEW, S.UNDER_REVIEW), (S.UNDER_REVIEW, S.RESOLVED), (S.RESOLVED, S.CLOSED)],
    )
    def test_forward_edges_allowed(self, current, requested):
        assert is_allowed_transition(current, requested)

    @pytest.mark.parametrize("status", [S.NEW, S.UNDER_REVIEW, S.RESOLVED, S.OPEN, S.IN_PROGRESS])
    def test_self_loops_allowed(self, status):
        assert is_allowed_transition(status, status)

    def test_closed_accepts_nothing(self):
        for status in S:
            assert not is_allowed_transition(S.CLOSED, status)

    @pytest.mark.parametrize(
        "current, requested",
        [
            (S.NEW, S.RESOLVED),
            (S.NEW, S.CLOSED),
            (S.UNDER_REVIEW, S.NEW),
            (S.RESOLVED, S.UNDER_REVIEW),
            (S.OPEN, S.UNDER_REVIEW),
            (S.NEW, S.IN_PROGRESS),
        ],
    )
    def test_skips_regressions_and_legacy_rejected(self, current, requested):
        assert not is_allowed_transition(current, requested)


class TestCreateComplaint:
    def test_new_complaint_defaults(self, make_complaint, user):
        complaint = make_complaint(priority=" high ")

        assert complaint.status == S.NEW
        assert complaint.is_escalated is False
        assert complaint.escalated_at is None
        assert complaint.priority == "high"
        assert complaint.created_by_id == user.id
        assert complaint.complaint_number == "CMP-00001"


class TestChangeStatus:
    """Transition contract of ComplaintLifecycleService.change_status."""

    def test_forward_walk_writes_one_record_per_step(self, db, lifecycle, make_complaint, staff):
        complaint = make_complaint()
        walk(lifecycle, complaint, S.UNDER_REVIEW, S.RESOLVED, S.CLOSED, actor=staff)

        db.refresh(complaint)
        assert complaint.status == S.CLOSED
        history = ComplaintUpdateRepository(db).find_by_complaint(complaint.id, newest_first=False)
        assert [(h.old_status, h.new_status) for h in history] == [
            (S.NEW, S.UNDER_REVIEW),
            (S.UNDER_REVIEW, S.RESOLVED),
            (S.RESOLVED, S.CLOSED),
        ]
        assert all(h.updated_by_id == staff.id for h in history)

    def test_status_is_case_insensitive(self, lifecycle, make_complaint):
        complaint = make_complaint()
        result = lifecycle.change_status(complaint.id, "under_review")
        assert result.is_success
        assert result.data.status == S.UNDER_REVIEW

    def test_skip_ahead_rejected(self, db, lifecycle, make_complaint):
        complaint = make_complaint()
        result = lifecycle.change_status(complaint.id, S.RESOLVED)

        assert not result.is_success
        assert result.error_code == ErrorCode.VALIDATION_ERROR
        assert "Cannot move from NEW to RESOLVED" in result.message
        assert "NEW -> UNDER_REVIEW -> RESOLVED -> CLOSED" in result.message
        db.refresh(complaint)
        assert complaint.status == S.NEW
        assert db.query(ComplaintUpdate).count() == 0

    def test_regression_rejected(self, lifecycle, make_complaint):
        complaint = make_complaint()
        walk(lifecycle, complaint, S.UNDER_REVIEW)
        result = lifecycle.change_status(complaint.id, S.NEW)
        assert result.error_code == ErrorCode.VALIDATION_ERROR

    def test_closed_rejects_even_self_loop(self, lifecycle, make_complaint):
        complaint = make_complaint()
        walk(lifecycle, complaint, S.UNDER_REVIEW, S.RESOLVED, S.CLOSED)

        result = lifecycle.change_status(complaint.id, S.CLOSED, comments="one more thing")
        assert result.error_code == ErrorCode.INVALID_STATE
        assert "already CLOSED" in result.message

    def test_missing_status_rejected(self, lifecycle, make_complaint):
        complaint = make_complaint()
        result = lifecycle.change_status(complaint.id, None)
        assert result.error_code == ErrorCode.VALIDATION_ERROR
        assert result.message == "New status cannot be null"

    def test_unknown_status_rejected(self, lifecycle, make_complaint):
        result = lifecycle.change_status(make_complaint().id, "ARCHIVED")
        assert result.error_code == ErrorCode.VALIDATION_ERROR

    def test_unknown_complaint(self, lifecycle):
        result = lifecycle.change_status(999, S.UNDER_REVIEW)
        assert result.error_code == ErrorCode.NOT_FOUND

    def test_self_loop_with_comment_records_audit(self, db, lifecycle, make_complaint, staff):
        complaint = make_complaint()
        result = lifecycle.change_status(complaint.id, S.NEW, actor=staff, comments="Looking into it")

        assert result.is_success
        history = ComplaintUpdateRepository(db).find_by_complaint(complaint.id)
        assert len(history) == 1
        assert history[0].old_status == history[0].new_status == S.NEW
        assert history[0].comments == "Looking into it"

    def test_bare_self_loop_records_nothing(self, db, lifecycle, make_complaint, transport):
        complaint = make_complaint()
        assert lifecycle.change_status(complaint.id, S.NEW).is_success
        assert db.query(ComplaintUpdate).count() == 0
        assert transport.sent == []

    def test_legacy_status_accepts_only_self_loop(self, db, lifecycle, make_complaint):
        complaint = make_complaint()
        complaint.status = S.OPEN
        db.commit()

        assert lifecycle.change_status(complaint.id, S.OPEN, comments="note").is_success
        assert lifecycle.change_status(complaint.id, S.UNDER_REVIEW).error_code == ErrorCode.VALIDATION_ERROR

    def test_assignee_resolved_by_email(self, db, lifecycle, make_complaint, staff):
        complaint = make_complaint()
        result = lifecycle.change_status(
            complaint.id, S.UNDER_REVIEW, assigned_to_email=staff.email.upper()
        )
        assert result.is_success
        assert result.data.assigned_to_id == staff.id

    def test_unknown_assignee_email_ignored(self, lifecycle, make_complaint):
        complaint = make_complaint()
        result = lifecycle.change_status(
            complaint.id, S.UNDER_REVIEW, assigned_to_email="nobody@example.com"
        )
        assert result.is_success
        assert result.data.assigned_to_id is None

    def test_reassignment_alone_records_audit(self, db, lifecycle, make_complaint, staff):
        complaint = make_complaint()
        lifecycle.change_status(complaint.id, S.NEW, assigned_to_email=staff.email)
        assert db.query(ComplaintUpdate).count() == 1


class TestStatusNotifications:
    def test_creator_notified_of_change(self, db, lifecycle, make_complaint, user, transport):
        complaint = make_complaint(title="Leaky tap")
        walk(lifecycle, complaint, S.UNDER_REVIEW)

        assert transport.sent[0][0] == user.email
        assert transport.subjects == ["ResolveIT: Status Update for CMP-00001"]
        note = db.query(UserNotification).one()
        assert note.user_id == user.id
        assert note.type == "STATUS_UPDATE"
        assert note.message == "Your complaint 'Leaky tap' status changed to UNDER REVIEW"

    def test_anonymous_complaint_not_notified(self, db, lifecycle, make_complaint, transport):
        complaint = make_complaint(is_anonymous=True)
        walk(lifecycle, complaint, S.UNDER_REVIEW)

        assert transport.sent == []
        assert db.query(UserNotification).count() == 0

    def test_escalated_resolution_notifies_admins(self, db, lifecycle, make_complaint):
        complaint = make_complaint()
        complaint.mark_escalated(datetime(2024, 1, 1))
        db.commit()

        walk(lifecycle, complaint, S.UNDER_REVIEW)
        assert db.query(Notification).count() == 0

        walk(lifecycle, complaint, S.RESOLVED)
        notice = db.query(Notification).one()
        assert notice.type == "ESCALATED_RESOLVED"
        assert notice.complaint_id == complaint.id

    def test_email_failure_does_not_undo_transition(self, db, make_complaint, user):
        class ExplodingTransport(RecordingTransport):
            def send(self, to, subject, body):
                raise RuntimeError("smtp down")

        service = ComplaintLifecycleService(
            db, dispatcher=NotificationDispatcher(db, email_transport=ExplodingTransport())
        )
        complaint = make_complaint()
        result = service.change_status(complaint.id, S.UNDER_REVIEW)

        assert result.is_success
        db.refresh(complaint)
        assert complaint.status == S.UNDER_REVIEW
        assert db.query(UserNotification).count() == 1


class TestEditsAndAssignment:
    def test_owner_can_edit_descriptive_fields(self, lifecycle, make_complaint, user):
        complaint = make_complaint()
        result = lifecycle.update_complaint(
            complaint.id, ComplaintEdit(title="Heater still broken", priority="critical"), user
        )
        assert result.is_success
        assert result.data.title == "Heater still broken"
        assert result.data.priority == "critical"
        assert result.data.status == S.NEW

    def test_other_user_cannot_edit(self, lifecycle, make_complaint, make_user):
        complaint = make_complaint()
        stranger = make_user(UserRole.USER)
        result = lifecycle.update_complaint(complaint.id, ComplaintEdit(title="x"), stranger)
        assert result.error_code == ErrorCode.INSUFFICIENT_PERMISSIONS

    def test_admin_deletes_complaint_with_history(self, db, lifecycle, make_complaint, admin):
        complaint = make_complaint()
        walk(lifecycle, complaint, S.UNDER_REVIEW)
        complaint_id = complaint.id

        assert lifecycle.delete_complaint(complaint_id, admin).is_success
        assert lifecycle.get_by_id(complaint_id).error_code == ErrorCode.NOT_FOUND
        assert db.query(ComplaintUpdate).count() == 0

    def test_delete_removes_comments(self, db, lifecycle, make_complaint, user):
        complaint = make_complaint()
        kept = make_complaint(title="Other")
        lifecycle.add_comment(complaint.id, "First note", user)
        lifecycle.add_comment(kept.id, "Unrelated", user)

        assert lifecycle.delete_complaint(complaint.id, user).is_success
        assert [c.content for c in db.query(ComplaintComment)] == ["Unrelated"]

    def test_assign_to_user(self, db, lifecycle, make_complaint, staff, admin):
        complaint = make_complaint()
        result = lifecycle.assign_complaint(complaint.id, staff.id, actor=admin)

        assert result.is_success
        assert result.data.assigned_to_id == staff.id
        entry = db.query(ComplaintUpdate).one()
        assert entry.comments == f"Assigned to {staff.name}"

    def test_assign_to_unknown_user(self, lifecycle, make_complaint):
        result = lifecycle.assign_complaint(make_complaint().id, 424242)
        assert result.error_code == ErrorCode.NOT_FOUND

    def test_assign_closed_complaint_rejected(self, lifecycle, make_complaint, staff):
        complaint = make_complaint()
        walk(lifecycle, complaint, S.UNDER_REVIEW, S.RESOLVED, S.CLOSED)
        result = lifecycle.assign_complaint(complaint.id, staff.id)
        assert result.error_code == ErrorCode.INVALID_STATE


class TestMonotonicity:
    """Whatever is requested, realized transitions never skip or regress."""

    @hypothesis_settings(max_examples=40, deadline=None)
    @given(requests=st.lists(st.sampled_from(list(S)), min_size=1, max_size=8))
    def test_realized_transitions_follow_hierarchy(self, requests):
        factory = build_session_factory()
        db = factory()
        try:
            creator = User(name="Prop", email="prop@example.com", role=UserRole.USER)
            db.add(creator)
            db.commit()
            service = ComplaintLifecycleService(
                db, dispatcher=NotificationDispatcher(db, email_transport=RecordingTransport())
            )
            complaint = service.create_complaint(ComplaintCreate(title="prop"), creator).data

            for requested in requests:
                before = complaint.status
                result = service.change_status(complaint.id, requested)
                after = complaint.status
                if result.is_success:
                    assert after == requested
                    assert after == before or FORWARD.index(after) == FORWARD.index(before) + 1
                else:
                    assert after == before
        finally:
            db.close()
            factory.kw["bind"].dispose()


class TestComments:
    def test_add_comment(self, db, lifecycle, make_complaint, staff):
        complaint = make_complaint()
        at = datetime(2024, 5, 2, 12, 0)

        result = lifecycle.add_comment(complaint.id, "  Plumber booked for Monday  ", staff, now=at)

        assert result.is_success
        comment = result.data
        assert comment.content == "Plumber booked for Monday"
        assert comment.user_id == staff.id
        assert comment.created_at == at
        assert complaint.status == S.NEW
        assert db.query(ComplaintUpdate).count() == 0

    def test_comments_listed_oldest_first(self, db, lifecycle, make_complaint, user):
        complaint = make_complaint()
        lifecycle.add_comment(complaint.id, "second", user, now=datetime(2024, 5, 2))
        lifecycle.add_comment(complaint.id, "first", user, now=datetime(2024, 5, 1))

        listed = ComplaintCommentRepository(db).find_by_complaint(complaint.id)
        assert [c.content for c in listed] == ["first", "second"]

    def test_unknown_complaint(self, lifecycle, user):
        assert lifecycle.add_comment(999, "Hello", user).error_code == ErrorCode.NOT_FOUND

    def test_blank_content_rejected(self, lifecycle, make_complaint, user):
        result = lifecycle.add_comment(make_complaint().id, "   ", user)
        assert result.error_code == ErrorCode.VALIDATION_ERROR
