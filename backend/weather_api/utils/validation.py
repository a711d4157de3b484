"""
Input Validation Utilities
===========================

Checks the routers run on user input BEFORE anything reaches a repository.
The repositories themselves trust their callers.
"""

from datetime import datetime
from typing import Optional

from bson import ObjectId
from dateutil.parser import isoparse

from weather_api.utils.timeutils import to_storage_time


def validate_object_id(value: Optional[str]) -> bool:
    """
    Validate a MongoDB ObjectId string.

    Args:
        value: Id string (24 hex characters)

    Returns:
        True if valid, False otherwise
    """
    if not value:
        return False
    return ObjectId.is_valid(value)


def validate_date_range(start: Optional[datetime], end: Optional[datetime]) -> Optional[str]:
    """
    Validate a start/end date pair from a query or path.

    Both must be present and start must be strictly before end.

    Returns:
        None if valid, otherwise the message to send back with a 400
    """
    if start is None or end is None:
        return "Both startDate and endDate must be provided"
    if to_storage_time(start) >= to_storage_time(end):
        return "startDate must be before endDate"
    return None


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO 8601 date or datetime string from a query or path.

    Returns:
        The datetime, or None if missing or unparseable
    """
    if not value:
        return None
    try:
        return isoparse(value)
    except (ValueError, OverflowError):
        return None


def validate_precipitation(value: float) -> bool:
    """
    Validate a precipitation value (mm/h).

    Returns:
        True if non-negative, False otherwise
    """
    return value >= 0


def strip_api_key(value: Optional[str]) -> str:
    """
    Remove wrapping braces from an API key.

    Some clients send the key as "{3f2b...}". Every leading and trailing
    brace is dropped; anything inside is left alone.
    """
    if not value:
        return ""
    return value.strip("{}")
