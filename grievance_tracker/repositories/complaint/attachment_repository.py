"""
Attachment repository.
"""

from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from grievance_tracker.models.complaint import Attachment
from grievance_tracker.repositories.base import BaseRepository


class AttachmentRepository(BaseRepository[Attachment]):

    def __init__(self, db: Session):
        super().__init__(Attachment, db)

    def find_by_complaint(self, complaint_id: int) -> List[Attachment]:
        stmt = (
            select(Attachment)
            .where(Attachment.complaint_id == complaint_id)
            .order_by(Attachment.id)
        )
        return list(self.db.scalars(stmt))
