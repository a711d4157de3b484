"""
Sensor Reading Models
=====================
Pydantic models for weather sensor readings.

The stored documents (and the JSON the API sends and receives) use the
human-readable column names the sensor network has always used, units and
symbols included, e.g. "Precipitation mm/h" or "Temperature (°C)". Python
code uses snake_case attribute names; pydantic aliases bridge the two.

DO NOT rename the aliases. Existing clients and the existing collection
depend on these exact strings.

MODELS:
    SensorRecordIn          - What a client sends to create a reading
    SensorRecord            - A stored reading (has an id)
    MaxPrecipitationRecord  - Wettest reading for a device
    MaxTemperatureRecord    - Hottest temperature per device in a range
    DeviceSnapshot          - Subset of fields at an exact timestamp
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from weather_api.utils.timeutils import to_storage_time, from_storage_time


# =============================================================================
# FIELD NAMES (storage + wire)
# =============================================================================

DEVICE_NAME = "Device Name"
PRECIPITATION = "Precipitation mm/h"
TIME = "Time"
LATITUDE = "Latitude"
LONGITUDE = "Longitude"
TEMPERATURE = "Temperature (°C)"
ATMOSPHERIC_PRESSURE = "Atmospheric Pressure (kPa)"
MAX_WIND_SPEED = "Max Wind Speed (m/s)"
SOLAR_RADIATION = "Solar Radiation (W/m2)"
VAPOR_PRESSURE = "Vapor Pressure (kPa)"
HUMIDITY = "Humidity (%)"
WIND_DIRECTION = "Wind Direction (°)"


# =============================================================================
# READINGS
# =============================================================================

class SensorRecordIn(BaseModel):
    """
    Request body for inserting a weather reading.

    Example Request:
        POST /api/DataPoint/record
        {
            "Device Name": "Woodford_Sensor",
            "Time": "2021-05-07T02:21:00Z",
            "Precipitation mm/h": 0.085,
            "Temperature (°C)": 22.74,
            ...
        }
    """
    model_config = ConfigDict(populate_by_name=True)

    device_name: str = Field(..., alias=DEVICE_NAME, min_length=1, description="Sensor device name")
    time: datetime = Field(..., alias=TIME, description="Reading timestamp (UTC)")
    precipitation: float = Field(0.0, alias=PRECIPITATION, description="Precipitation in mm/h")
    latitude: float = Field(0.0, alias=LATITUDE)
    longitude: float = Field(0.0, alias=LONGITUDE)
    temperature: float = Field(0.0, alias=TEMPERATURE, description="Temperature in °C")
    atmospheric_pressure: float = Field(0.0, alias=ATMOSPHERIC_PRESSURE, description="Pressure in kPa")
    max_wind_speed: float = Field(0.0, alias=MAX_WIND_SPEED, description="Max wind speed in m/s")
    solar_radiation: float = Field(0.0, alias=SOLAR_RADIATION, description="Solar radiation in W/m2")
    vapor_pressure: float = Field(0.0, alias=VAPOR_PRESSURE, description="Vapor pressure in kPa")
    humidity: float = Field(0.0, alias=HUMIDITY, description="Relative humidity %")
    wind_direction: float = Field(0.0, alias=WIND_DIRECTION, description="Wind direction in degrees")

    def to_document(self) -> dict:
        """Convert to a MongoDB document (no _id; the store assigns it)."""
        document = self.model_dump(by_alias=True, exclude={"id"})
        document[TIME] = to_storage_time(self.time)
        return document


class SensorRecord(SensorRecordIn):
    """
    A stored weather reading.

    `id` is the MongoDB ObjectId as a 24 character hex string. It is "id"
    on the wire and "_id" in the collection.

    Readings loaded straight into the collection can hold null measurements,
    so every measurement may be None here.
    """
    id: Optional[str] = Field(None, description="Record id (ObjectId hex string)")
    precipitation: Optional[float] = Field(0.0, alias=PRECIPITATION)
    latitude: Optional[float] = Field(0.0, alias=LATITUDE)
    longitude: Optional[float] = Field(0.0, alias=LONGITUDE)
    temperature: Optional[float] = Field(0.0, alias=TEMPERATURE)
    atmospheric_pressure: Optional[float] = Field(0.0, alias=ATMOSPHERIC_PRESSURE)
    max_wind_speed: Optional[float] = Field(0.0, alias=MAX_WIND_SPEED)
    solar_radiation: Optional[float] = Field(0.0, alias=SOLAR_RADIATION)
    vapor_pressure: Optional[float] = Field(0.0, alias=VAPOR_PRESSURE)
    humidity: Optional[float] = Field(0.0, alias=HUMIDITY)
    wind_direction: Optional[float] = Field(0.0, alias=WIND_DIRECTION)

    @classmethod
    def from_document(cls, document: dict) -> "SensorRecord":
        """Build a record from a MongoDB document."""
        data = dict(document)
        object_id = data.pop("_id", None)
        if object_id is not None:
            data["id"] = str(object_id)
        data[TIME] = from_storage_time(data.get(TIME))
        return cls.model_validate(data)


# =============================================================================
# DERIVED VIEWS
# =============================================================================

class MaxPrecipitationRecord(BaseModel):
    """Returned by GET /api/DataPoint/max-precipitation."""
    model_config = ConfigDict(populate_by_name=True)

    device_name: str = Field(..., alias=DEVICE_NAME)
    time: datetime = Field(..., alias=TIME)
    precipitation: Optional[float] = Field(..., alias=PRECIPITATION)

    @classmethod
    def from_record(cls, record: SensorRecord) -> "MaxPrecipitationRecord":
        return cls(
            device_name=record.device_name,
            time=record.time,
            precipitation=record.precipitation,
        )


class MaxTemperatureRecord(BaseModel):
    """
    One row of GET /api/DataPoint/max-temperature.

    NOTE: `time` is the time of whichever reading the grouping saw first for
    the device, not necessarily the reading with the max temperature.
    """
    model_config = ConfigDict(populate_by_name=True)

    device_name: str = Field(..., alias=DEVICE_NAME)
    time: datetime = Field(..., alias=TIME)
    temperature: Optional[float] = Field(..., alias=TEMPERATURE)


class DeviceSnapshot(BaseModel):
    """Returned by GET /api/DataPoint/snapshot/{deviceName}."""
    model_config = ConfigDict(populate_by_name=True)

    device_name: str = Field(..., alias=DEVICE_NAME)
    time: datetime = Field(..., alias=TIME)
    precipitation: Optional[float] = Field(..., alias=PRECIPITATION)
    temperature: Optional[float] = Field(..., alias=TEMPERATURE)
    atmospheric_pressure: Optional[float] = Field(..., alias=ATMOSPHERIC_PRESSURE)
    solar_radiation: Optional[float] = Field(..., alias=SOLAR_RADIATION)

    @classmethod
    def from_record(cls, record: SensorRecord) -> "DeviceSnapshot":
        return cls(
            device_name=record.device_name,
            time=record.time,
            precipitation=record.precipitation,
            temperature=record.temperature,
            atmospheric_pressure=record.atmospheric_pressure,
            solar_radiation=record.solar_radiation,
        )
