"""
Complaint comment repository.
"""

from typing import List

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from grievance_tracker.models.complaint import ComplaintComment
from grievance_tracker.repositories.base import BaseRepository


class ComplaintCommentRepository(BaseRepository[ComplaintComment]):

    def __init__(self, db: Session):
        super().__init__(ComplaintComment, db)

    def find_by_complaint(self, complaint_id: int) -> List[ComplaintComment]:
        """Comments of one complaint, oldest first."""
        stmt = (
            select(ComplaintComment)
            .where(ComplaintComment.complaint_id == complaint_id)
            .order_by(ComplaintComment.created_at, ComplaintComment.id)
        )
        return list(self.db.scalars(stmt))

    def delete_by_complaint(self, complaint_id: int) -> int:
        result = self.db.execute(
            delete(ComplaintComment).where(ComplaintComment.complaint_id == complaint_id)
        )
        return result.rowcount or 0
