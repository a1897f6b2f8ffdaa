# grievance_tracker/core/constants.py
"""
Core application constants.

These values centralize literals shared by the complaint services:
- Complaint numbering format.
- Escalation thresholds per priority.
- Notification type tags and message templates.
- Common HTTP header names.
"""

from typing import Dict

# Complaint numbering
COMPLAINT_NUMBER_PREFIX: str = "CMP-"
COMPLAINT_NUMBER_WIDTH: int = 5
COMPLAINT_NUMBER_MAX_LENGTH: int = 20
PLACEHOLDER_NUMBER_PREFIX: str = "T-"

# Escalation thresholds (days since creation)
ESCALATION_THRESHOLD_DAYS: Dict[str, int] = {
    "CRITICAL": 3,
    "HIGH": 7,
    "MEDIUM": 10,
    "LOW": 15,
}
DEFAULT_ESCALATION_THRESHOLD_DAYS: int = 15

MANUAL_ESCALATION_COMMENT: str = "Manual Escalation by Admin"

# Notification type tags
NOTIFICATION_STATUS_UPDATE: str = "STATUS_UPDATE"
NOTIFICATION_ESCALATED_RESOLVED: str = "ESCALATED_RESOLVED"
NOTIFICATION_RESOLVED_PENDING: str = "RESOLVED_PENDING"
NOTIFICATION_STATUS_CHANGE_REQUEST: str = "STATUS_CHANGE_REQUEST"

# E-mail
EMAIL_SUBJECT_PREFIX: str = "ResolveIT"

# Common HTTP header names
HEADER_REQUEST_ID: str = "X-Request-ID"
HEADER_USER_ID: str = "X-User-ID"
