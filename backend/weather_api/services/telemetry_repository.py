"""
Telemetry Repository
====================

Owns the "WeatherSensorReadings" collection.

QUERIES:
-------
- get_by_id                       one reading
- get_range                       all readings with Time in [start, end]
- get_range_for_device            same, one device
- get_max_precipitation           wettest recent reading for a device
- get_max_temperature_per_device  hottest temperature per device in a range
- get_snapshot                    reading at an EXACT device + time

MUTATIONS:
---------
- insert_one / insert_many        append; MongoDB assigns ids
- replace                         overwrite a reading by id
- patch_precipitation             change just the precipitation

Like the credential store, this trusts its caller. An inverted range comes
back empty, a negative precipitation is written as-is. The routers reject
those before they get here.
"""

import logging
from datetime import datetime
from typing import Iterable, Optional

from bson import ObjectId
from pymongo import DESCENDING
from pymongo.collection import Collection
from pymongo.database import Database

from weather_api.database import READINGS_COLLECTION
from weather_api.models import MaxTemperatureRecord, SensorRecord, SensorRecordIn
from weather_api.models.reading import DEVICE_NAME, PRECIPITATION, TEMPERATURE, TIME
from weather_api.utils.timeutils import (
    from_storage_time,
    months_before,
    to_storage_time,
    utc_now,
)

logger = logging.getLogger(__name__)


def _time_range(start: datetime, end: datetime) -> dict:
    return {"$gte": to_storage_time(start), "$lte": to_storage_time(end)}


class TelemetryRepository:
    """Sensor reading persistence on top of the WeatherSensorReadings collection."""

    # The sample data set stops a few years back, so "recent" has to reach
    # that far. Override with MAX_PRECIPITATION_WINDOW_MONTHS.
    DEFAULT_PRECIPITATION_WINDOW_MONTHS = 50

    def __init__(self, database: Database, precipitation_window_months: int = DEFAULT_PRECIPITATION_WINDOW_MONTHS):
        self._readings: Collection = database[READINGS_COLLECTION]
        self.precipitation_window_months = precipitation_window_months

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get_by_id(self, record_id: str) -> Optional[SensorRecord]:
        """One reading by id. A malformed id finds nothing."""
        if not ObjectId.is_valid(record_id):
            return None
        document = self._readings.find_one({"_id": ObjectId(record_id)})
        if document is None:
            return None
        return SensorRecord.from_document(document)

    def get_range(self, start: datetime, end: datetime) -> list[SensorRecord]:
        """All readings with start <= Time <= end."""
        cursor = self._readings.find({TIME: _time_range(start, end)})
        return [SensorRecord.from_document(doc) for doc in cursor]

    def get_range_for_device(self, device_name: str, start: datetime, end: datetime) -> list[SensorRecord]:
        """All readings from one device with start <= Time <= end."""
        cursor = self._readings.find({
            DEVICE_NAME: device_name,
            TIME: _time_range(start, end),
        })
        return [SensorRecord.from_document(doc) for doc in cursor]

    def get_max_precipitation(self, device_name: str) -> Optional[SensorRecord]:
        """
        The reading with the highest precipitation for a device.

        Only readings inside the trailing window (precipitation_window_months)
        count. On a tie, whichever the store returns first wins.
        """
        cutoff = months_before(utc_now(), self.precipitation_window_months)
        cursor = (
            self._readings.find({
                DEVICE_NAME: device_name,
                TIME: {"$gte": to_storage_time(cutoff)},
            })
            .sort(PRECIPITATION, DESCENDING)
            .limit(1)
        )
        for document in cursor:
            return SensorRecord.from_document(document)
        return None

    def get_max_temperature_per_device(self, start: datetime, end: datetime) -> list[MaxTemperatureRecord]:
        """
        Max temperature for each device with readings in [start, end].

        NOTE: the time on each row is the $first reading the group sees for
        that device, NOT the time the max temperature was recorded.
        """
        pipeline = [
            {"$match": {TIME: _time_range(start, end)}},
            {"$group": {
                "_id": f"${DEVICE_NAME}",
                "temperature": {"$max": f"${TEMPERATURE}"},
                "time": {"$first": f"${TIME}"},
            }},
        ]
        return [
            MaxTemperatureRecord(
                device_name=row["_id"],
                temperature=row["temperature"],
                time=from_storage_time(row["time"]),
            )
            for row in self._readings.aggregate(pipeline)
        ]

    def get_snapshot(self, device_name: str, timestamp: datetime) -> Optional[SensorRecord]:
        """
        The reading for a device at EXACTLY this time.

        No tolerance: a reading one second (or one millisecond) off is not a
        match.
        """
        document = self._readings.find_one({
            DEVICE_NAME: device_name,
            TIME: to_storage_time(timestamp),
        })
        if document is None:
            return None
        return SensorRecord.from_document(document)

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def insert_one(self, record: SensorRecordIn) -> SensorRecord:
        """Insert a reading. Returns it with the id MongoDB assigned."""
        document = record.to_document()
        result = self._readings.insert_one(document)
        document["_id"] = result.inserted_id
        return SensorRecord.from_document(document)

    def insert_many(self, records: Iterable[SensorRecordIn]) -> list[SensorRecord]:
        """Insert a batch of readings. Not atomic: a failure part-way keeps what went in."""
        documents = [record.to_document() for record in records]
        if not documents:
            return []
        result = self._readings.insert_many(documents)
        logger.info(f"Inserted {len(result.inserted_ids)} readings")
        stored = []
        for document, inserted_id in zip(documents, result.inserted_ids):
            document["_id"] = inserted_id
            stored.append(SensorRecord.from_document(document))
        return stored

    def replace(self, record_id: str, record: SensorRecordIn) -> bool:
        """
        Overwrite the reading with this id.

        Whatever id `record` carries is ignored; the stored reading keeps
        `record_id`.

        Returns:
            True if a reading with that id existed
        """
        object_id = ObjectId(record_id)
        document = record.to_document()
        document["_id"] = object_id
        result = self._readings.replace_one({"_id": object_id}, document)
        return result.matched_count > 0

    def patch_precipitation(self, record_id: str, value: float) -> bool:
        """
        Set just the precipitation on one reading.

        Returns:
            True if a reading with that id existed
        """
        result = self._readings.update_one(
            {"_id": ObjectId(record_id)},
            {"$set": {PRECIPITATION: value}},
        )
        return result.matched_count > 0
