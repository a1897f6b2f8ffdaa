"""Tests for complaint queries used by numbering, reset and the sweep."""

from datetime import datetime

import pytest

from grievance_tracker.models import ComplaintStatus
from grievance_tracker.repositories.complaint import ComplaintRepository


@pytest.fixture
def repo(db):
    return ComplaintRepository(db)


def test_find_by_number(repo, make_complaint):
    make_complaint(title="First")
    second = make_complaint(title="Second")

    assert repo.find_by_number("CMP-00002") is second
    assert repo.find_by_number("CMP-99999") is None


def test_find_all_by_created_at_orders_oldest_first(repo, make_complaint):
    late = make_complaint(title="Late", created_at=datetime(2024, 3, 1))
    early = make_complaint(title="Early", created_at=datetime(2024, 1, 1))

    assert repo.find_all_by_created_at() == [early, late]


def test_candidates_exclude_escalated_and_finished(repo, db, make_complaint):
    open_one = make_complaint(title="Open")
    escalated = make_complaint(title="Escalated")
    resolved = make_complaint(title="Resolved")
    closed = make_complaint(title="Closed")

    escalated.mark_escalated(datetime(2024, 1, 1))
    resolved.status = ComplaintStatus.RESOLVED
    closed.status = ComplaintStatus.CLOSED
    db.commit()

    assert repo.find_escalation_candidate_ids() == [open_one.id]
