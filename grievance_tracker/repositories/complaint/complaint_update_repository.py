"""
Audit record repository.
"""

from typing import List

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from grievance_tracker.models.complaint import ComplaintUpdate
from grievance_tracker.repositories.base import BaseRepository


class ComplaintUpdateRepository(BaseRepository[ComplaintUpdate]):

    def __init__(self, db: Session):
        super().__init__(ComplaintUpdate, db)

    def find_by_complaint(self, complaint_id: int, newest_first: bool = True) -> List[ComplaintUpdate]:
        """Audit records of one complaint ordered by time."""
        order = (
            (ComplaintUpdate.updated_at.desc(), ComplaintUpdate.id.desc())
            if newest_first
            else (ComplaintUpdate.updated_at, ComplaintUpdate.id)
        )
        stmt = (
            select(ComplaintUpdate)
            .where(ComplaintUpdate.complaint_id == complaint_id)
            .order_by(*order)
        )
        return list(self.db.scalars(stmt))

    def delete_by_complaint(self, complaint_id: int) -> int:
        result = self.db.execute(
            delete(ComplaintUpdate).where(ComplaintUpdate.complaint_id == complaint_id)
        )
        return result.rowcount or 0
