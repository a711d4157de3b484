"""
Models Package
==============

This is where all our data models live.
Import from here instead of the individual files.

Example:
    from weather_api.models import Role, SensorRecord
"""

from .account import (
    # Who can do what
    Role,
    UnknownRole,
    decode_role,

    # Accounts
    Account,
    CreateAccountRequest,
    AccountResponse,
)

from .reading import (
    # Weather readings
    SensorRecordIn,
    SensorRecord,

    # Derived views
    MaxPrecipitationRecord,
    MaxTemperatureRecord,
    DeviceSnapshot,
)

__all__ = [
    "Role",
    "UnknownRole",
    "decode_role",
    "Account",
    "CreateAccountRequest",
    "AccountResponse",
    "SensorRecordIn",
    "SensorRecord",
    "MaxPrecipitationRecord",
    "MaxTemperatureRecord",
    "DeviceSnapshot",
]
