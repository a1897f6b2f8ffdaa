"""
Enumerations shared by the database models and API schemas.
"""

import enum
from typing import Optional


class UserRole(str, enum.Enum):
    """User role enumeration."""
    USER = "USER"
    STAFF = "STAFF"
    ADMIN = "ADMIN"


class ComplaintStatus(str, enum.Enum):
    """
    Complaint lifecycle status.

    NEW -> UNDER_REVIEW -> RESOLVED -> CLOSED is the forward hierarchy.
    OPEN and IN_PROGRESS are kept so older rows still load; they only
    accept a self-loop and nothing else moves into them.
    """
    NEW = "NEW"
    UNDER_REVIEW = "UNDER_REVIEW"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["ComplaintStatus"]:
        """Case-insensitive lookup; ``None`` for blank input, ValueError if unknown."""
        if value is None:
            return None
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().upper()
        if not normalized:
            return None
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unknown complaint status: {value}") from None

    @property
    def is_legacy(self) -> bool:
        return self in (ComplaintStatus.OPEN, ComplaintStatus.IN_PROGRESS)

