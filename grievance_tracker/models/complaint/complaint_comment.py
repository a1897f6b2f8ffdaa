"""
Complaint comment model.

Free-text discussion entries on a complaint. Unlike audit records they
never carry a status change.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from grievance_tracker.core.utils import utcnow
from grievance_tracker.models.base import BaseModel
from grievance_tracker.models.user import User


class ComplaintComment(BaseModel):

    complaint_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("complaints.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    user: Mapped[Optional[User]] = relationship(User)

    def __repr__(self) -> str:
        return f"<ComplaintComment(id={self.id}, complaint_id={self.complaint_id})>"
