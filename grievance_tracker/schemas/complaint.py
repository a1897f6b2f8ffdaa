"""
Complaint request and response schemas.

Status values are accepted case-insensitively; priority is free text,
stored as given apart from surrounding whitespace.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from grievance_tracker.models.base import ComplaintStatus
from grievance_tracker.schemas.base import BaseSchema

__all__ = [
    "ComplaintCreate",
    "ComplaintEdit",
    "ComplaintStatusUpdate",
    "StatusChangeRequest",
    "ComplaintResponse",
    "ComplaintUpdateResponse",
    "ComplaintCommentCreate",
    "ComplaintCommentResponse",
    "EscalationCheckResponse",
]


def _normalize_priority(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _parse_status(value):
    try:
        return ComplaintStatus.parse(value)
    except ValueError as e:
        raise ValueError(str(e)) from None


class ComplaintCreate(BaseSchema):
    """Payload for filing a complaint."""

    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=5000)
    category: Optional[str] = Field(default=None, max_length=50)
    priority: Optional[str] = Field(
        default=None,
        max_length=20,
        description="CRITICAL, HIGH, MEDIUM or LOW; other values escalate on the LOW schedule",
    )
    is_anonymous: bool = False

    normalize_priority = field_validator("priority")(_normalize_priority)


class ComplaintEdit(BaseSchema):
    """Partial edit of descriptive fields; status and escalation are not editable here."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=5000)
    category: Optional[str] = Field(default=None, max_length=50)
    priority: Optional[str] = Field(default=None, max_length=20)
    is_anonymous: Optional[bool] = None

    normalize_priority = field_validator("priority")(_normalize_priority)


class ComplaintStatusUpdate(BaseSchema):
    """Status transition request."""

    status: Optional[ComplaintStatus] = Field(
        default=None,
        description="NEW, UNDER_REVIEW, RESOLVED or CLOSED (case-insensitive)",
    )
    comments: Optional[str] = Field(default=None, max_length=5000)
    assigned_to_email: Optional[str] = Field(default=None, max_length=255)

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v):
        return _parse_status(v)


class StatusChangeRequest(BaseSchema):
    """Staff request asking admins to move a complaint to another status."""

    requested_status: ComplaintStatus
    comment: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("requested_status", mode="before")
    @classmethod
    def parse_status(cls, v):
        status = _parse_status(v)
        if status is None:
            raise ValueError("Requested status is required")
        return status


class ComplaintResponse(BaseSchema):
    id: int
    complaint_number: str
    title: str
    description: Optional[str] = None
    status: ComplaintStatus
    category: Optional[str] = None
    priority: Optional[str] = None
    is_anonymous: bool
    created_by_id: Optional[int] = None
    assigned_to_id: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    is_escalated: bool
    escalated_at: Optional[datetime] = None


class ComplaintUpdateResponse(BaseSchema):
    """One timeline entry."""

    id: int
    complaint_id: int
    updated_by_id: Optional[int] = None
    old_status: Optional[ComplaintStatus] = None
    new_status: Optional[ComplaintStatus] = None
    comments: Optional[str] = None
    updated_at: datetime
    is_status_change: bool = False


class ComplaintCommentCreate(BaseSchema):
    content: str = Field(..., min_length=1, max_length=5000)


class ComplaintCommentResponse(BaseSchema):
    id: int
    complaint_id: int
    user_id: Optional[int] = None
    content: str
    created_at: datetime


class EscalationCheckResponse(BaseSchema):
    complaint_id: int
    escalated: bool
