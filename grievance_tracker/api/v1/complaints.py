"""
Complaint endpoints: filing, edits, comments, status transitions,
assignment, timeline and escalation.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from grievance_tracker.api import deps
from grievance_tracker.models.user import User
from grievance_tracker.schemas.complaint import (
    ComplaintCommentCreate,
    ComplaintCommentResponse,
    ComplaintCreate,
    ComplaintEdit,
    ComplaintResponse,
    ComplaintStatusUpdate,
    ComplaintUpdateResponse,
    EscalationCheckResponse,
    StatusChangeRequest,
)
from grievance_tracker.schemas.notification import MessageResponse, NotificationResponse
from grievance_tracker.services.complaint import (
    ComplaintAuditTrail,
    ComplaintEscalationService,
    ComplaintLifecycleService,
)
from grievance_tracker.services.notification import NotificationDispatcher

router = APIRouter(prefix="/complaints", tags=["Complaints"])


@router.post("", response_model=ComplaintResponse, status_code=status.HTTP_201_CREATED)
def create_complaint(
    payload: ComplaintCreate,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    """File a new complaint; it starts as NEW with the next complaint number."""
    result = ComplaintLifecycleService(db).create_complaint(payload, current_user)
    return deps.raise_for_result(result)


@router.get("/{complaint_id}", response_model=ComplaintResponse)
def get_complaint(
    complaint_id: int,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    return deps.raise_for_result(ComplaintLifecycleService(db).get_by_id(complaint_id))


@router.put("/{complaint_id}", response_model=ComplaintResponse)
def update_complaint(
    complaint_id: int,
    payload: ComplaintEdit,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    """Edit descriptive fields. Creator or admin only."""
    result = ComplaintLifecycleService(db).update_complaint(complaint_id, payload, current_user)
    return deps.raise_for_result(result)


@router.delete("/{complaint_id}", response_model=MessageResponse)
def delete_complaint(
    complaint_id: int,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    """Delete a complaint with its history and attachments. Creator or admin only."""
    deps.raise_for_result(ComplaintLifecycleService(db).delete_complaint(complaint_id, current_user))
    return MessageResponse(message="Complaint deleted successfully")


@router.put("/{complaint_id}/status", response_model=ComplaintResponse)
def update_complaint_status(
    complaint_id: int,
    payload: ComplaintStatusUpdate,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_staff_user),
):
    """
    Move a complaint along NEW -> UNDER_REVIEW -> RESOLVED -> CLOSED.

    Sending the current status records a comment or reassignment
    without changing status.
    """
    result = ComplaintLifecycleService(db).change_status(
        complaint_id,
        payload.status,
        actor=current_user,
        comments=payload.comments,
        assigned_to_email=payload.assigned_to_email,
    )
    return deps.raise_for_result(result)


@router.post("/{complaint_id}/assign/{user_id}", response_model=ComplaintResponse)
def assign_complaint(
    complaint_id: int,
    user_id: int,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_admin_user),
):
    result = ComplaintLifecycleService(db).assign_complaint(complaint_id, user_id, actor=current_user)
    return deps.raise_for_result(result)


@router.post(
    "/{complaint_id}/comments",
    response_model=ComplaintCommentResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_complaint_comment(
    complaint_id: int,
    payload: ComplaintCommentCreate,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    result = ComplaintLifecycleService(db).add_comment(complaint_id, payload.content, current_user)
    return deps.raise_for_result(result)


@router.get("/{complaint_id}/timeline", response_model=List[ComplaintUpdateResponse])
def get_complaint_timeline(
    complaint_id: int,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    """Audit records of the complaint, newest first."""
    return deps.raise_for_result(ComplaintAuditTrail(db).timeline(complaint_id))


@router.post("/{complaint_id}/escalate", response_model=ComplaintResponse)
def escalate_complaint(
    complaint_id: int,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_admin_user),
):
    """Escalate manually; 409 if the complaint is already escalated."""
    result = ComplaintEscalationService(db).escalate_manually(complaint_id, actor=current_user)
    return deps.raise_for_result(result)


@router.post("/{complaint_id}/escalation-check", response_model=EscalationCheckResponse)
def check_complaint_escalation(
    complaint_id: int,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_staff_user),
):
    escalated = deps.raise_for_result(ComplaintEscalationService(db).check_escalation(complaint_id))
    return EscalationCheckResponse(complaint_id=complaint_id, escalated=escalated)


@router.post(
    "/{complaint_id}/report-resolved",
    response_model=NotificationResponse,
    status_code=status.HTTP_201_CREATED,
)
def report_complaint_resolved(
    complaint_id: int,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_staff_only_user),
):
    """Tell admins the complaint is resolved; the status itself is unchanged."""
    complaint = deps.raise_for_result(ComplaintLifecycleService(db).get_by_id(complaint_id))
    return deps.raise_for_result(NotificationDispatcher(db).report_resolved(complaint, current_user))


@router.post(
    "/{complaint_id}/request-status-change",
    response_model=NotificationResponse,
    status_code=status.HTTP_201_CREATED,
)
def request_complaint_status_change(
    complaint_id: int,
    payload: StatusChangeRequest,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_staff_only_user),
):
    complaint = deps.raise_for_result(ComplaintLifecycleService(db).get_by_id(complaint_id))
    result = NotificationDispatcher(db).request_status_change(
        complaint,
        current_user,
        payload.requested_status,
        comment=payload.comment,
    )
    return deps.raise_for_result(result)
