"""
Utility modules for the weather data API.
"""

from weather_api.utils.timeutils import (
    utc_now,
    to_storage_time,
    from_storage_time,
    months_before,
)
from weather_api.utils.validation import (
    validate_object_id,
    validate_date_range,
    parse_datetime,
    validate_precipitation,
    strip_api_key,
)

__all__ = [
    "utc_now",
    "to_storage_time",
    "from_storage_time",
    "months_before",
    "validate_object_id",
    "validate_date_range",
    "parse_datetime",
    "validate_precipitation",
    "strip_api_key",
]
