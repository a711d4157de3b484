from datetime import datetime, timezone

import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from weather_api.database import READINGS_COLLECTION, USERS_COLLECTION
from weather_api.main import create_app
from weather_api.models import Account, Role, SensorRecordIn
from weather_api.services import Authorizer, CredentialStore, TelemetryRepository


# ============================================================================
# Store Fixtures
# ============================================================================


@pytest.fixture
def database():
    """Fresh in-memory MongoDB database per test."""
    return mongomock.MongoClient()["WeatherDataTest"]


@pytest.fixture
def users_collection(database):
    return database[USERS_COLLECTION]


@pytest.fixture
def readings_collection(database):
    return database[READINGS_COLLECTION]


@pytest.fixture
def credential_store(database):
    return CredentialStore(database)


@pytest.fixture
def authorizer(credential_store):
    return Authorizer(credential_store)


@pytest.fixture
def readings(database):
    return TelemetryRepository(database, precipitation_window_months=50)


# ============================================================================
# Data Fixtures
# ============================================================================


OLD_LOGIN = datetime(2020, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def add_account(users_collection):
    """
    Insert an account document directly and return it as an Account.

    `role` is written as-is, so unknown roles can be stored too.
    """

    def _add(username, role, api_key=None, last_login=OLD_LOGIN):
        document = {
            "_id": ObjectId(),
            "Username": username,
            "Password": "pw",
            "Role": role.value if isinstance(role, Role) else role,
            "Email": f"{username}@example.edu",
            "LastLoginDate": last_login.replace(tzinfo=None),
            "ApiKey": api_key or f"key-{username}",
        }
        users_collection.insert_one(document)
        return Account.from_document(document)

    return _add


@pytest.fixture
def teacher(add_account):
    return add_account("teacher", Role.TEACHER)


@pytest.fixture
def student(add_account):
    return add_account("student", Role.STUDENT)


@pytest.fixture
def sensor(add_account):
    return add_account("sensor", Role.SENSOR)


def make_reading(device="sensor1", time=None, **measurements):
    """Build a SensorRecordIn with sensible defaults."""
    return SensorRecordIn(
        device_name=device,
        time=time or datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc),
        latitude=-27.5,
        longitude=153.0,
        **measurements,
    )


# ============================================================================
# App Fixtures
# ============================================================================


@pytest.fixture
def client(database):
    """Test client for the full app, served from the mongomock database."""
    return TestClient(create_app(database))


def key_header(account):
    return {"apiKey": account.api_key}
