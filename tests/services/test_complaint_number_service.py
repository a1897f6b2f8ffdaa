"""Tests for complaint number generation."""

import pytest

from grievance_tracker.models import Complaint
from grievance_tracker.services.complaint import ComplaintNumberGenerator
from grievance_tracker.services.complaint.complaint_number_service import (
    format_number,
    parse_sequence,
    placeholder_number,
)


class TestNumberFormatting:
    def test_format_number_pads_to_five_digits(self):
        assert format_number(1) == "CMP-00001"
        assert format_number(42) == "CMP-00042"
        assert format_number(99999) == "CMP-99999"

    def test_placeholder_number_uses_id(self):
        assert placeholder_number(17) == "T-17"

    @pytest.mark.parametrize(
        "number, expected",
        [
            ("CMP-00042", 42),
            ("CMP-1", 1),
            ("CMP-", None),
            ("CMP-00x1", None),
            ("T-5", None),
            ("00042", None),
            ("CMP-٣", None),
            (None, None),
        ],
    )
    def test_parse_sequence(self, number, expected):
        assert parse_sequence(number) == expected


class TestComplaintNumberGenerator:
    """Next-number computation against the complaint table."""

    def test_first_number_when_table_empty(self, db):
        assert ComplaintNumberGenerator(db).next_number() == "CMP-00001"

    def test_increments_highest_number(self, db, make_complaint):
        first = make_complaint()
        second = make_complaint()

        assert first.complaint_number == "CMP-00001"
        assert second.complaint_number == "CMP-00002"
        assert ComplaintNumberGenerator(db).next_number() == "CMP-00003"

    def test_unparseable_top_number_falls_back_to_id(self, db):
        complaint = Complaint(complaint_number="LEGACY-9", title="Old import")
        db.add(complaint)
        db.commit()

        assert ComplaintNumberGenerator(db).next_number() == format_number(complaint.id + 1)

    def test_numbers_stay_unique(self, make_complaint):
        numbers = [make_complaint(title=f"c{i}").complaint_number for i in range(5)]
        assert numbers == [f"CMP-0000{i}" for i in range(1, 6)]

    def test_rolls_past_five_digits(self, db):
        db.add(Complaint(complaint_number="CMP-99999", title="Last five digit"))
        db.commit()
        generator = ComplaintNumberGenerator(db)

        first = generator.next_number()
        db.add(Complaint(complaint_number=first, title="First six digit"))
        db.commit()
        second = generator.next_number()

        assert first == "CMP-100000"
        assert second == "CMP-100001"

    def test_sequenced_numbers_outrank_legacy_ones(self, db):
        db.add_all(
            [
                Complaint(complaint_number="LEGACY-9", title="Old import"),
                Complaint(complaint_number="CMP-00007", title="Current"),
            ]
        )
        db.commit()

        assert ComplaintNumberGenerator(db).next_number() == "CMP-00008"
