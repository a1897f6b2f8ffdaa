"""
Complaint number generation.

Numbers are ``CMP-`` followed by a five digit zero-padded sequence
(``CMP-00001``). The next number is derived from the highest existing
one; there is no separate sequence table.
"""

from typing import Optional

from sqlalchemy.orm import Session

from grievance_tracker.core.constants import (
    COMPLAINT_NUMBER_PREFIX,
    COMPLAINT_NUMBER_WIDTH,
    PLACEHOLDER_NUMBER_PREFIX,
)
from grievance_tracker.core.logging import get_logger
from grievance_tracker.repositories.complaint import ComplaintRepository

logger = get_logger(__name__)


def format_number(sequence: int) -> str:
    """``42`` -> ``CMP-00042``"""
    return f"{COMPLAINT_NUMBER_PREFIX}{sequence:0{COMPLAINT_NUMBER_WIDTH}d}"


def placeholder_number(complaint_id: int) -> str:
    """Temporary number used while renumbering; unique because ids are."""
    return f"{PLACEHOLDER_NUMBER_PREFIX}{complaint_id}"


def parse_sequence(complaint_number: Optional[str]) -> Optional[int]:
    """
    Extract the numeric sequence from a complaint number.

    Returns:
        The sequence, or None if the value is not a ``CMP-<digits>`` number
    """
    if not complaint_number or not complaint_number.startswith(COMPLAINT_NUMBER_PREFIX):
        return None
    suffix = complaint_number[len(COMPLAINT_NUMBER_PREFIX):]
    if not (suffix.isascii() and suffix.isdigit()):
        return None
    return int(suffix)


class ComplaintNumberGenerator:
    """
    Derives the next sequential complaint number.

    Two creations racing each other can compute the same number; the
    unique constraint on ``complaint_number`` rejects the second insert.
    """

    def __init__(self, db_session: Session, repository: Optional[ComplaintRepository] = None):
        self.db = db_session
        self.repository = repository or ComplaintRepository(db_session)

    def next_number(self) -> str:
        """
        Compute the number for a new complaint.

        Returns:
            ``CMP-00001`` when no complaint exists, otherwise the highest
            existing sequence plus one. If the highest number cannot be
            parsed the complaint's id plus one is used instead.
        """
        last = self.repository.find_top_by_number()
        if last is None:
            return format_number(1)

        sequence = parse_sequence(last.complaint_number)
        if sequence is None:
            logger.warning(
                f"Cannot parse complaint number '{last.complaint_number}', "
                f"falling back to id-based sequence",
                extra={"complaint_id": last.id},
            )
            return format_number(last.id + 1)

        return format_number(sequence + 1)
