"""
Complaint model.

A complaint carries a unique sequential number, a lifecycle status and
an escalation flag. Audit records and attachments live in their own
tables keyed by ``complaint_id``; only the creator and assignee are
mapped as (lookup-only) relationships.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from grievance_tracker.core.constants import COMPLAINT_NUMBER_MAX_LENGTH
from grievance_tracker.core.utils import utcnow
from grievance_tracker.models.base import BaseModel, ComplaintStatus
from grievance_tracker.models.user import User


class Complaint(BaseModel):
    """
    Complaint tracked through NEW -> UNDER_REVIEW -> RESOLVED -> CLOSED.

    Escalation is orthogonal to status: ``is_escalated`` and
    ``escalated_at`` are only ever written together through
    :meth:`mark_escalated`.
    """

    __table_args__ = (
        Index("ix_complaint_status_escalated", "status", "is_escalated"),
        Index("ix_complaint_created_at", "created_at"),
    )

    complaint_number: Mapped[str] = mapped_column(
        String(COMPLAINT_NUMBER_MAX_LENGTH),
        unique=True,
        nullable=False,
        comment="Human readable sequential number, e.g. CMP-00001"
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[ComplaintStatus] = mapped_column(
        Enum(ComplaintStatus, name="complaint_status_enum", native_enum=False, length=20),
        nullable=False,
        default=ComplaintStatus.NEW,
    )
    category: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    priority: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
        comment="Free text, conventionally CRITICAL/HIGH/MEDIUM/LOW"
    )
    is_anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_by_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    assigned_to_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    is_escalated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    escalated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_by: Mapped[Optional[User]] = relationship(User, foreign_keys=[created_by_id])
    assigned_to: Mapped[Optional[User]] = relationship(User, foreign_keys=[assigned_to_id])

    def mark_escalated(self, at: datetime) -> None:
        """Flip the one-way escalation flag."""
        self.is_escalated = True
        self.escalated_at = at

    @property
    def is_terminal(self) -> bool:
        return self.status in (ComplaintStatus.RESOLVED, ComplaintStatus.CLOSED)

    def __repr__(self) -> str:
        return (
            f"<Complaint(id={self.id}, number='{self.complaint_number}', "
            f"status={self.status}, escalated={self.is_escalated})>"
        )
