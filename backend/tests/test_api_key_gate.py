"""
Tests for the ApiKeyGate dependency.

The gate is mounted on a throwaway FastAPI app so it can be tested without
the real routers.

Tests cover:
- 401 when the apiKey header is missing or empty
- 403 for unknown keys, wrong roles and unparsable stored roles
- Last-login stamped before the endpoint runs, only on success
"""

from datetime import datetime

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from conftest import OLD_LOGIN
from weather_api.models import Account, Role
from weather_api.routers import ApiKeyGate
from weather_api.utils.timeutils import utc_now


@pytest.fixture
def gated_app(authorizer, credential_store):
    """App with one TEACHER-or-SENSOR route that reports what it saw."""
    app = FastAPI()
    gate = ApiKeyGate(authorizer, Role.TEACHER, Role.SENSOR)
    calls = []

    @app.get("/protected")
    def protected(account: Account = Depends(gate)):
        calls.append(account.username)
        # What the store holds by the time the endpoint runs
        seen = credential_store.find_by_key(account.api_key).last_login
        return {"username": account.username, "last_login_seen": seen.isoformat()}

    app.state.calls = calls
    return app


@pytest.fixture
def gated_client(gated_app):
    return TestClient(gated_app)


def test_missing_header_is_401(gated_client, gated_app):
    response = gated_client.get("/protected")

    assert response.status_code == 401
    assert response.json()["detail"] == "No API key provided."
    assert gated_app.state.calls == []


@pytest.mark.parametrize("value", ["", "{}"])
def test_empty_key_is_401(gated_client, value):
    response = gated_client.get("/protected", headers={"apiKey": value})

    assert response.status_code == 401


def test_unknown_key_is_403(gated_client, gated_app, teacher):
    response = gated_client.get("/protected", headers={"apiKey": "not-a-real-key"})

    assert response.status_code == 403
    assert response.json()["detail"] == "Provided API key is not valid for this operation"
    assert gated_app.state.calls == []


def test_wrong_role_is_403_and_leaves_last_login(gated_client, gated_app, credential_store, student):
    response = gated_client.get("/protected", headers={"apiKey": student.api_key})

    assert response.status_code == 403
    assert gated_app.state.calls == []
    assert credential_store.find_by_key(student.api_key).last_login == OLD_LOGIN


def test_unparsable_role_is_403_not_500(gated_client, credential_store, add_account):
    account = add_account("weird", "ROOT")

    response = gated_client.get("/protected", headers={"apiKey": account.api_key})

    assert response.status_code == 403
    assert credential_store.find_by_key(account.api_key).last_login == OLD_LOGIN


@pytest.mark.parametrize("fixture_name", ["teacher", "sensor"])
def test_allowed_role_passes(gated_client, gated_app, request, fixture_name):
    account = request.getfixturevalue(fixture_name)

    response = gated_client.get("/protected", headers={"apiKey": account.api_key})

    assert response.status_code == 200
    assert response.json()["username"] == account.username
    assert gated_app.state.calls == [account.username]


def test_last_login_updated_before_endpoint_runs(gated_client, credential_store, teacher):
    before = utc_now()
    before = before.replace(microsecond=before.microsecond // 1000 * 1000)

    response = gated_client.get("/protected", headers={"apiKey": teacher.api_key})

    assert response.status_code == 200
    # The endpoint already saw the new login time
    seen = datetime.fromisoformat(response.json()["last_login_seen"])
    assert seen >= before
    assert credential_store.find_by_key(teacher.api_key).last_login >= before


def test_braced_key_is_accepted(gated_client, credential_store, teacher):
    response = gated_client.get("/protected", headers={"apiKey": "{" + teacher.api_key + "}"})

    assert response.status_code == 200
    assert credential_store.find_by_key(teacher.api_key).last_login > OLD_LOGIN


def test_header_name_is_case_insensitive(gated_client, teacher):
    response = gated_client.get("/protected", headers={"APIKEY": teacher.api_key})

    assert response.status_code == 200
