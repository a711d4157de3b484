"""
Tests for the Authorizer.

Tests cover:
- Exact role membership (no hierarchy, empty allow-list)
- Brace-wrapped keys
- Unknown keys and unparsable stored roles
- authenticate() never touching last-login
- record_usage() stamping last-login
"""

from datetime import datetime, timezone

import pytest

from conftest import OLD_LOGIN
from weather_api.exceptions import Forbidden, Unauthenticated, UnknownRoleError
from weather_api.models import Role
from weather_api.utils.timeutils import utc_now


ALL_ROLE_SETS = [
    frozenset(),
    frozenset({Role.STUDENT}),
    frozenset({Role.TEACHER}),
    frozenset({Role.SENSOR}),
    frozenset({Role.STUDENT, Role.TEACHER}),
    frozenset({Role.TEACHER, Role.SENSOR}),
    frozenset(Role),
]


@pytest.mark.parametrize("account_role", list(Role))
@pytest.mark.parametrize("allowed", ALL_ROLE_SETS)
def test_authenticate_succeeds_iff_role_allowed(authorizer, add_account, account_role, allowed):
    """authenticate() lets the key through exactly when its role is in the allow-list."""
    account = add_account("someone", account_role)

    if account_role in allowed:
        result = authorizer.authenticate(account.api_key, allowed)
        assert result.username == "someone"
        assert result.role == account_role
    else:
        with pytest.raises(Forbidden):
            authorizer.authenticate(account.api_key, allowed)


def test_teacher_does_not_imply_student(authorizer, teacher):
    """Roles have no hierarchy."""
    with pytest.raises(Forbidden):
        authorizer.authenticate(teacher.api_key, {Role.STUDENT})


def test_braces_are_stripped(authorizer, student):
    """A key sent as {key} is looked up as key."""
    result = authorizer.authenticate("{" + student.api_key + "}", {Role.STUDENT})
    assert result.api_key == student.api_key


def test_unknown_key_is_unauthenticated(authorizer, student):
    with pytest.raises(Unauthenticated):
        authorizer.authenticate("no-such-key", {Role.STUDENT})


@pytest.mark.parametrize("presented", [None, "", "{}", "{{}}"])
def test_empty_key_is_unauthenticated(authorizer, presented):
    with pytest.raises(Unauthenticated):
        authorizer.authenticate(presented, {Role.STUDENT})


def test_unparsable_role_is_forbidden(authorizer, add_account):
    """A stored role we don't know is denied as Forbidden, and flagged as UnknownRoleError."""
    account = add_account("janitor", "JANITOR")

    with pytest.raises(UnknownRoleError) as excinfo:
        authorizer.authenticate(account.api_key, set(Role))

    assert isinstance(excinfo.value, Forbidden)
    assert excinfo.value.stored_role == "JANITOR"


def test_lowercase_stored_role_is_unknown(authorizer, add_account):
    """Stored roles are matched exactly; 'teacher' is not TEACHER."""
    account = add_account("lower", "teacher")

    with pytest.raises(UnknownRoleError):
        authorizer.authenticate(account.api_key, {Role.TEACHER})


def test_authenticate_does_not_update_last_login(authorizer, credential_store, student):
    """Neither a success nor a failure writes last-login."""
    authorizer.authenticate(student.api_key, {Role.STUDENT})
    with pytest.raises(Forbidden):
        authorizer.authenticate(student.api_key, {Role.TEACHER})

    assert credential_store.find_by_key(student.api_key).last_login == OLD_LOGIN


def test_record_usage_stamps_last_login(authorizer, credential_store, student):
    before = utc_now()
    before = before.replace(microsecond=before.microsecond // 1000 * 1000)

    authorizer.record_usage(student.api_key)

    last_login = credential_store.find_by_key(student.api_key).last_login
    assert last_login >= before


def test_record_usage_with_explicit_time(authorizer, credential_store, student):
    at = datetime(2025, 3, 4, 5, 6, 7, tzinfo=timezone.utc)

    authorizer.record_usage("{" + student.api_key + "}", at=at)

    assert credential_store.find_by_key(student.api_key).last_login == at
