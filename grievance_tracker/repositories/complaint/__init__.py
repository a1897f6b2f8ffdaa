from grievance_tracker.repositories.complaint.attachment_repository import AttachmentRepository
from grievance_tracker.repositories.complaint.complaint_comment_repository import ComplaintCommentRepository
from grievance_tracker.repositories.complaint.complaint_repository import ComplaintRepository
from grievance_tracker.repositories.complaint.complaint_update_repository import ComplaintUpdateRepository

__all__ = [
    "AttachmentRepository",
    "ComplaintCommentRepository",
    "ComplaintRepository",
    "ComplaintUpdateRepository",
]
