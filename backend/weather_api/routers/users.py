"""
UserData API Router
===================

Endpoints for managing accounts. TEACHER keys only.

ALL ENDPOINTS:
-------------
GET    /api/UserData/                                                    - List accounts
GET    /api/UserData/{id}                                                - Get one account
POST   /api/UserData/                                                    - Create an account (new API key)
DELETE /api/UserData/{id}                                                - Delete one account
DELETE /api/UserData/delete-by-role/{role}/from/{startDate}/to/{endDate}  - Bulk delete
PATCH  /api/UserData/update-access-level/from/{startDate}/to/{endDate}/to-role/{newRole}
                                                                         - Bulk role change

The bulk endpoints go by LAST LOGIN date, both ends included. There's no
undo and no confirmation step!

NOTE: passwords are stored exactly as sent and never checked, here or at
login. Only the API key matters.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException

from weather_api.models import (
    Account,
    AccountResponse,
    CreateAccountRequest,
    Role,
    decode_role,
)
from weather_api.routers.api_key import ApiKeyGate
from weather_api.services import Authorizer, CredentialStore
from weather_api.utils.validation import parse_datetime, validate_date_range

logger = logging.getLogger(__name__)


def _known_role(value: str) -> Role:
    """Upper-case and decode a role from the URL or body, or raise a 400."""
    role = decode_role(value.strip().upper())
    if not isinstance(role, Role):
        allowed = ", ".join(r.value for r in Role)
        raise HTTPException(status_code=400, detail=f"Invalid role '{value}'. Must be one of: {allowed}")
    return role


def _checked_path_range(start_date: str, end_date: str):
    start = parse_datetime(start_date)
    end = parse_datetime(end_date)
    if start is None or end is None:
        raise HTTPException(
            status_code=400,
            detail="Both startDate and endDate must be provided and be valid format",
        )
    problem = validate_date_range(start, end)
    if problem:
        raise HTTPException(status_code=400, detail=problem)
    return start, end


def create_router(authorizer: Authorizer, accounts: CredentialStore) -> APIRouter:
    """
    Build the UserData router.

    Args:
        authorizer: Checks API keys for every endpoint
        accounts: Where the accounts live
    """
    router = APIRouter(prefix="/api/UserData", tags=["UserData"])

    teacher_only = ApiKeyGate(authorizer, Role.TEACHER)

    @router.get("/", response_model=list[AccountResponse], dependencies=[Depends(teacher_only)])
    def list_accounts():
        """Get every account."""
        return [AccountResponse.from_account(a) for a in accounts.get_all()]

    @router.post("/", response_model=AccountResponse, status_code=201, dependencies=[Depends(teacher_only)])
    def create_account(request: CreateAccountRequest):
        """
        Create an account.

        Send us:
        - username: Must not already exist
        - password: Stored as-is
        - role: STUDENT, TEACHER or SENSOR (any case)
        - email

        We generate the API key and send it back. Hand it to the new user!
        """
        role = _known_role(request.role)

        account = Account(
            username=request.username,
            password=request.password,
            role=role,
            email=request.email,
            api_key=str(uuid.uuid4()),
        )

        try:
            created = accounts.insert(account)
        except Exception:
            logger.exception(f"Failed to create account '{request.username}'")
            raise HTTPException(status_code=500, detail="An error occurred while processing the request")

        if not created:
            raise HTTPException(status_code=400, detail=f"Username '{request.username}' already exists")
        return AccountResponse.from_account(account)

    # Bulk routes are registered before "/{account_id}"

    @router.delete(
        "/delete-by-role/{role}/from/{start_date}/to/{end_date}",
        dependencies=[Depends(teacher_only)],
    )
    def delete_by_role(role: str, start_date: str, end_date: str):
        """
        Delete every account with this role whose last login is in the range.

        There's no undo! The role is matched exactly as stored.
        """
        start, end = _checked_path_range(start_date, end_date)
        deleted = accounts.delete_by_role_and_login_range(role, start, end)
        return {
            "status": "deleted",
            "deleted_count": deleted,
            "message": (
                f"Users with role '{role}' and last login date between "
                f"'{start.isoformat()}' and '{end.isoformat()}' deleted successfully"
            ),
        }

    @router.patch(
        "/update-access-level/from/{start_date}/to/{end_date}/to-role/{new_role}",
        dependencies=[Depends(teacher_only)],
    )
    def update_access_level(start_date: str, end_date: str, new_role: str):
        """Give every account whose last login is in the range a new role."""
        start, end = _checked_path_range(start_date, end_date)
        role = _known_role(new_role)
        updated = accounts.update_role_for_login_range(start, end, role.value)
        return {
            "status": "updated",
            "updated_count": updated,
            "message": (
                f"Access level updated for users with last login date between "
                f"'{start.isoformat()}' and '{end.isoformat()}' to role '{role.value}'"
            ),
        }

    @router.get("/{account_id}", response_model=AccountResponse, dependencies=[Depends(teacher_only)])
    def get_account(account_id: str):
        """Get one account by its id."""
        account = accounts.find_by_id(account_id)
        if not account:
            raise HTTPException(status_code=404, detail="User not found. Is the ID correct?")
        return AccountResponse.from_account(account)

    @router.delete("/{account_id}", dependencies=[Depends(teacher_only)])
    def delete_account(account_id: str):
        """Delete one account. There's no undo!"""
        if not accounts.find_by_id(account_id):
            raise HTTPException(status_code=404, detail="User not found. Is the ID correct?")
        accounts.delete_by_id(account_id)
        return {"status": "deleted", "id": account_id, "message": "User deleted successfully"}

    return router
