"""
Complaint service layer.

- **Numbering**: sequential CMP-NNNNN complaint numbers
- **Audit**: append-only transition history
- **Lifecycle**: creation, edits, comments, assignment and the status state machine
- **Escalation**: periodic sweep, on-demand check and manual escalation
- **Reset**: administrative wipe and two-phase renumbering
"""

from grievance_tracker.services.complaint.complaint_audit_service import ComplaintAuditTrail
from grievance_tracker.services.complaint.complaint_escalation_service import (
    ComplaintEscalationService,
    EscalationSweepReport,
)
from grievance_tracker.services.complaint.complaint_lifecycle_service import ComplaintLifecycleService
from grievance_tracker.services.complaint.complaint_number_service import ComplaintNumberGenerator
from grievance_tracker.services.complaint.complaint_reset_service import (
    ComplaintResetService,
    ResetReport,
)

__all__ = [
    "ComplaintAuditTrail",
    "ComplaintEscalationService",
    "ComplaintLifecycleService",
    "ComplaintNumberGenerator",
    "ComplaintResetService",
    "EscalationSweepReport",
    "ResetReport",
]
