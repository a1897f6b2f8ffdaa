"""
Small helpers shared across layers.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def humanize_enum_value(value: str) -> str:
    """``UNDER_REVIEW`` -> ``UNDER REVIEW``"""
    return value.replace("_", " ")
