"""
Complaint update (audit record) model.

Append-only: one row per status transition, comment or manual
escalation. Rows are removed only together with their complaint or by
the administrative reset.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from grievance_tracker.core.utils import utcnow
from grievance_tracker.models.base import BaseModel, ComplaintStatus

_status_column = Enum(ComplaintStatus, name="complaint_status_enum", native_enum=False, length=20)


class ComplaintUpdate(BaseModel):
    """Immutable audit entry for a complaint."""

    __table_args__ = (
        Index("ix_complaint_update_complaint_time", "complaint_id", "updated_at"),
    )

    complaint_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("complaints.id", ondelete="CASCADE"),
        nullable=False,
    )
    updated_by_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        comment="Acting user, null for system actions"
    )
    old_status: Mapped[Optional[ComplaintStatus]] = mapped_column(_status_column, nullable=True)
    new_status: Mapped[Optional[ComplaintStatus]] = mapped_column(_status_column, nullable=True)
    comments: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    @property
    def is_status_change(self) -> bool:
        return self.old_status != self.new_status

    def __repr__(self) -> str:
        return (
            f"<ComplaintUpdate(complaint_id={self.complaint_id}, "
            f"{self.old_status} -> {self.new_status})>"
        )
