"""
Grievance tracker: complaint lifecycle, escalation and notification service.
"""

__version__ = "1.0.0"
