"""
Notification models.

``Notification`` rows are addressed to the admin audience as a whole;
``UserNotification`` rows belong to a single user. Both are polled by
clients and carry only a read flag as state.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from grievance_tracker.core.utils import utcnow
from grievance_tracker.models.base import BaseModel


class Notification(BaseModel):
    """Admin-facing notification."""

    __table_args__ = (
        Index("ix_notification_read_created", "is_read", "created_at"),
    )

    type: Mapped[str] = mapped_column(String(50), nullable=False, comment="Type tag, e.g. ESCALATED_RESOLVED")
    message: Mapped[str] = mapped_column(Text, nullable=False)
    complaint_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    created_by_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    requested_status: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)


class UserNotification(BaseModel):
    """In-app notification for one user."""

    __table_args__ = (
        Index("ix_user_notification_user_read", "user_id", "is_read"),
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    complaint_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
