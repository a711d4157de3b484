"""
DataPoint API Router
====================

Endpoints for weather sensor readings.

WHO CAN CALL WHAT:
-----------------
Reading data    -> STUDENT or TEACHER
Adding data     -> TEACHER or SENSOR
Changing data   -> TEACHER only

Every endpoint needs an `apiKey` header. No key = 401, wrong role = 403.

ALL ENDPOINTS:
-------------
GET    /api/DataPoint/range?startDate=&endDate=                  - Readings in a date range
GET    /api/DataPoint/max-temperature?startDate=&endDate=        - Hottest temperature per device
GET    /api/DataPoint/max-precipitation?deviceName=              - Wettest recent reading for a device
GET    /api/DataPoint/snapshot/{deviceName}?snapShotDateTime=    - Reading at an exact time
POST   /api/DataPoint/record                                     - Add one reading
POST   /api/DataPoint/multiple-records                           - Add many readings
GET    /api/DataPoint/{deviceName}/range?startDate=&endDate=     - One device's readings in a range
GET    /api/DataPoint/{id}                                       - One reading
PUT    /api/DataPoint/{id}                                       - Replace a reading
PATCH  /api/DataPoint/{id}/precipitation                         - Change just the precipitation

Dates are ISO 8601 ("2021-05-07" or "2021-05-07T02:21:00Z"). Date ranges
include both ends and startDate must be before endDate.

NOTE: the fixed paths are registered before "/{id}" so that e.g.
"/range" isn't mistaken for an id.
"""

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from typing import Optional

from weather_api.models import (
    Role,
    SensorRecord,
    SensorRecordIn,
    MaxPrecipitationRecord,
    MaxTemperatureRecord,
    DeviceSnapshot,
)
from weather_api.routers.api_key import ApiKeyGate
from weather_api.services import Authorizer, TelemetryRepository
from weather_api.utils.validation import (
    parse_datetime,
    validate_date_range,
    validate_object_id,
    validate_precipitation,
)


def _checked_range(start_date: Optional[str], end_date: Optional[str]):
    """Parse and check a startDate/endDate pair, or raise a 400."""
    start = parse_datetime(start_date)
    end = parse_datetime(end_date)
    problem = validate_date_range(start, end)
    if problem:
        raise HTTPException(status_code=400, detail=problem)
    return start, end


def _checked_id(record_id: str) -> str:
    if not record_id:
        raise HTTPException(status_code=400, detail="ID not provided")
    if not validate_object_id(record_id):
        raise HTTPException(status_code=400, detail="Invalid ID format")
    return record_id


def create_router(authorizer: Authorizer, readings: TelemetryRepository) -> APIRouter:
    """
    Build the DataPoint router.

    Args:
        authorizer: Checks API keys for every endpoint
        readings: Where the readings live
    """
    router = APIRouter(prefix="/api/DataPoint", tags=["DataPoint"])

    can_read = ApiKeyGate(authorizer, Role.STUDENT, Role.TEACHER)
    can_add = ApiKeyGate(authorizer, Role.TEACHER, Role.SENSOR)
    can_change = ApiKeyGate(authorizer, Role.TEACHER)

    # =========================================================================
    # QUERIES
    # =========================================================================

    @router.get(
        "/range",
        response_model=list[SensorRecord],
        dependencies=[Depends(can_read)],
        summary="Readings in a date range",
    )
    def get_range(
        start_date: Optional[str] = Query(None, alias="startDate", description="ISO 8601, inclusive"),
        end_date: Optional[str] = Query(None, alias="endDate", description="ISO 8601, inclusive"),
    ):
        """Get every reading from every device between startDate and endDate."""
        start, end = _checked_range(start_date, end_date)
        return readings.get_range(start, end)

    @router.get(
        "/max-temperature",
        response_model=list[MaxTemperatureRecord],
        dependencies=[Depends(can_read)],
        summary="Max temperature per device",
    )
    def get_max_temperature(
        start_date: Optional[str] = Query(None, alias="startDate"),
        end_date: Optional[str] = Query(None, alias="endDate"),
    ):
        """
        Get the highest temperature each device recorded in the range.

        One row per device. Heads up: the Time on each row is the time of
        one of that device's readings in the range, not necessarily the
        one with the max temperature.
        """
        start, end = _checked_range(start_date, end_date)
        return readings.get_max_temperature_per_device(start, end)

    @router.get(
        "/max-precipitation",
        response_model=MaxPrecipitationRecord,
        dependencies=[Depends(can_read)],
        summary="Wettest recent reading for a device",
    )
    def get_max_precipitation(device_name: str = Query(..., alias="deviceName")):
        """Get the reading with the most precipitation for a device over the recent window."""
        record = readings.get_max_precipitation(device_name)
        if not record:
            raise HTTPException(status_code=404, detail=f"No recent readings for '{device_name}'")
        return MaxPrecipitationRecord.from_record(record)

    @router.get(
        "/snapshot/{device_name}",
        response_model=DeviceSnapshot,
        dependencies=[Depends(can_read)],
        summary="Reading at an exact time",
    )
    def get_snapshot(
        device_name: str,
        snapshot_time: Optional[str] = Query(None, alias="snapShotDateTime", description="Exact reading time"),
    ):
        """
        Get a device's reading at EXACTLY snapShotDateTime.

        There's no "closest reading" - the time has to match to the millisecond.
        """
        if not device_name.strip():
            raise HTTPException(status_code=400, detail="Device name must be provided")
        timestamp = parse_datetime(snapshot_time)
        if timestamp is None:
            raise HTTPException(status_code=400, detail="snapShotDateTime must be provided and be a valid date")

        record = readings.get_snapshot(device_name, timestamp)
        if not record:
            raise HTTPException(status_code=404, detail="No reading at that time for this device")
        return DeviceSnapshot.from_record(record)

    # =========================================================================
    # INSERTS
    # =========================================================================

    @router.post(
        "/record",
        response_model=SensorRecord,
        status_code=201,
        dependencies=[Depends(can_add)],
        summary="Add one reading",
    )
    def insert_record(record: SensorRecordIn):
        """Add a reading. You get it back with its new id."""
        return readings.insert_one(record)

    @router.post(
        "/multiple-records",
        response_model=list[SensorRecord],
        status_code=201,
        dependencies=[Depends(can_add)],
        summary="Add many readings",
    )
    def insert_records(records: list[SensorRecordIn]):
        """Add a batch of readings. You get them back with their new ids."""
        return readings.insert_many(records)

    # =========================================================================
    # PER-DEVICE / PER-ID (must come after the fixed paths above)
    # =========================================================================

    @router.get(
        "/{device_name}/range",
        response_model=list[SensorRecord],
        dependencies=[Depends(can_read)],
        summary="One device's readings in a date range",
    )
    def get_device_range(
        device_name: str,
        start_date: Optional[str] = Query(None, alias="startDate"),
        end_date: Optional[str] = Query(None, alias="endDate"),
    ):
        """Get one device's readings between startDate and endDate."""
        start, end = _checked_range(start_date, end_date)
        return readings.get_range_for_device(device_name, start, end)

    @router.patch(
        "/{record_id}/precipitation",
        dependencies=[Depends(can_change)],
        summary="Change a reading's precipitation",
    )
    def update_precipitation(record_id: str, value: float = Body(..., description="New precipitation (mm/h)")):
        """
        Change just the precipitation on one reading.

        The body is the bare number, e.g. `3.2`. Negative values are rejected.
        """
        _checked_id(record_id)
        if not validate_precipitation(value):
            raise HTTPException(status_code=400, detail="Precipitation value must be non-negative")

        if not readings.patch_precipitation(record_id, value):
            raise HTTPException(status_code=404, detail="The specified ID does not exist")
        return {"status": "updated", "id": record_id, "message": "Precipitation updated successfully"}

    @router.get(
        "/{record_id}",
        response_model=SensorRecord,
        dependencies=[Depends(can_read)],
        summary="One reading",
    )
    def get_record(record_id: str):
        """Get one reading by its id."""
        record = readings.get_by_id(record_id)
        if not record:
            raise HTTPException(status_code=404, detail="Reading not found. Is the ID correct?")
        return record

    @router.put(
        "/{record_id}",
        dependencies=[Depends(can_change)],
        summary="Replace a reading",
    )
    def replace_record(record_id: str, record: SensorRecord):
        """
        Replace a whole reading.

        Any id in the body is ignored; the reading keeps the id in the URL.
        """
        _checked_id(record_id)
        if not readings.replace(record_id, record):
            raise HTTPException(status_code=404, detail="The specified ID does not exist")
        return {"status": "updated", "id": record_id, "message": "Record updated successfully"}

    return router
