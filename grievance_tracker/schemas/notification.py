"""
Notification and administrative response schemas.
"""

from datetime import datetime
from typing import List, Optional

from grievance_tracker.schemas.base import BaseSchema

__all__ = [
    "NotificationResponse",
    "UserNotificationResponse",
    "UnreadCountResponse",
    "MessageResponse",
    "SweepReportResponse",
    "ResetReportResponse",
]


class NotificationResponse(BaseSchema):
    id: int
    type: str
    message: str
    complaint_id: Optional[int] = None
    created_by_id: Optional[int] = None
    requested_status: Optional[str] = None
    is_read: bool
    created_at: datetime


class UserNotificationResponse(BaseSchema):
    id: int
    user_id: int
    type: str
    message: str
    complaint_id: Optional[int] = None
    is_read: bool
    created_at: datetime


class UnreadCountResponse(BaseSchema):
    count: int


class MessageResponse(BaseSchema):
    message: str


class SweepReportResponse(BaseSchema):
    started_at: datetime
    completed_at: Optional[datetime] = None
    processed_count: int
    escalated_count: int
    skipped_count: int
    failed_count: int
    escalated_numbers: List[str]


class ResetReportResponse(BaseSchema):
    attachments_deleted: int
    updates_deleted: int
    notifications_deleted: int
    complaints_renumbered: int
