"""
MongoDB Connection
==================

One MongoClient per process, built from a connection string and a database
name. MongoClient is thread-safe and pools its own connections, so every
request shares it.

COLLECTIONS:
    Users                  - accounts and their API keys
    WeatherSensorReadings  - sensor readings
"""

import logging

from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

logger = logging.getLogger(__name__)

USERS_COLLECTION = "Users"
READINGS_COLLECTION = "WeatherSensorReadings"


def connect(connection_string: str, database_name: str) -> Database:
    """
    Open a client and return the named database.

    The client connects lazily; nothing touches the network until the first
    operation.
    """
    client = MongoClient(connection_string)
    return client[database_name]


def ensure_indexes(database: Database) -> None:
    """
    Create the indexes the repositories rely on.

    Usernames and API keys are unique. Readings are indexed for the device +
    time lookups. Safe to call on every startup.
    """
    users = database[USERS_COLLECTION]
    users.create_index([("Username", ASCENDING)], unique=True)
    users.create_index([("ApiKey", ASCENDING)], unique=True)
    users.create_index([("LastLoginDate", ASCENDING)])

    readings = database[READINGS_COLLECTION]
    readings.create_index([("Device Name", ASCENDING), ("Time", ASCENDING)])
    readings.create_index([("Time", ASCENDING)])

    logger.info(f"Indexes ensured on database '{database.name}'")


def ping(database: Database) -> bool:
    """Return True if the server answers a ping."""
    try:
        database.client.admin.command("ping")
        return True
    except Exception as e:
        logger.error(f"MongoDB ping failed: {e}")
        return False
