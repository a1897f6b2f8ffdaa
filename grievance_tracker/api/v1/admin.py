"""
Administrative endpoints: bulk reset and on-demand escalation sweep.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from grievance_tracker.api import deps
from grievance_tracker.models.user import User
from grievance_tracker.schemas.notification import ResetReportResponse, SweepReportResponse
from grievance_tracker.services.complaint import ComplaintEscalationService, ComplaintResetService

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/complaints/reset", response_model=ResetReportResponse)
def reset_complaints(
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_admin_user),
):
    """
    Delete attachments, audit history and admin notifications, then
    renumber every complaint from CMP-00001 as NEW and unassigned.
    """
    report = deps.raise_for_result(ComplaintResetService(db).reset_all())
    return ResetReportResponse(**report.to_dict())


@router.post("/escalations/sweep", response_model=SweepReportResponse)
def run_escalation_sweep(
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_admin_user),
):
    report = deps.raise_for_result(ComplaintEscalationService(db).run_sweep())
    return SweepReportResponse(
        started_at=report.started_at,
        completed_at=report.completed_at,
        processed_count=report.processed_count,
        escalated_count=report.escalated_count,
        skipped_count=report.skipped_count,
        failed_count=report.failed_count,
        escalated_numbers=report.escalated_numbers,
    )
