"""
Complaint models package.
"""

from grievance_tracker.models.complaint.attachment import Attachment
from grievance_tracker.models.complaint.complaint import Complaint
from grievance_tracker.models.complaint.complaint_comment import ComplaintComment
from grievance_tracker.models.complaint.complaint_update import ComplaintUpdate

__all__ = ["Attachment", "Complaint", "ComplaintComment", "ComplaintUpdate"]
