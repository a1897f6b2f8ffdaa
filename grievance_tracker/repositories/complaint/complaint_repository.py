"""
Complaint repository: lookups used by numbering, escalation and reset.
"""

from typing import List, Optional

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from grievance_tracker.core.constants import COMPLAINT_NUMBER_PREFIX
from grievance_tracker.models.base import ComplaintStatus
from grievance_tracker.models.complaint import Complaint
from grievance_tracker.repositories.base import BaseRepository

CLOSED_FOR_ESCALATION = (ComplaintStatus.RESOLVED, ComplaintStatus.CLOSED)


class ComplaintRepository(BaseRepository[Complaint]):

    def __init__(self, db: Session):
        super().__init__(Complaint, db)

    def find_by_number(self, complaint_number: str) -> Optional[Complaint]:
        return self.db.scalar(
            select(Complaint).where(Complaint.complaint_number == complaint_number)
        )

    def find_top_by_number(self) -> Optional[Complaint]:
        """
        Complaint with the highest number.

        ``CMP-`` numbers rank above anything else and compare by length
        first, so ``CMP-100000`` beats ``CMP-99999``. Without any ``CMP-``
        row the lexicographically highest number is returned.
        """
        number = Complaint.complaint_number
        is_sequenced = case((number.like(f"{COMPLAINT_NUMBER_PREFIX}%"), 1), else_=0)
        stmt = (
            select(Complaint)
            .order_by(is_sequenced.desc(), func.length(number).desc(), number.desc())
            .limit(1)
        )
        return self.db.scalar(stmt)

    def find_all_by_created_at(self) -> List[Complaint]:
        """All complaints, oldest first; ties broken by id."""
        return list(
            self.db.scalars(select(Complaint).order_by(Complaint.created_at, Complaint.id))
        )

    def find_escalation_candidate_ids(self) -> List[int]:
        """
        Ids of complaints the sweep still has to look at.

        Returns:
            Ids of unescalated complaints that are not RESOLVED or CLOSED
        """
        stmt = (
            select(Complaint.id)
            .where(Complaint.is_escalated.is_(False))
            .where(Complaint.status.not_in(CLOSED_FOR_ESCALATION))
            .order_by(Complaint.id)
        )
        return list(self.db.scalars(stmt))
