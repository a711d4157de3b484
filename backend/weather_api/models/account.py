"""
Account Models
==============
Pydantic models for user accounts and their roles.

Accounts live in the "Users" collection. Each account has an API key that
clients send in the `apiKey` header; the account's role decides which
endpoints that key may call.

ROLES:
    Roles are a closed set with NO hierarchy. An endpoint lists the exact
    roles it accepts; TEACHER does not imply STUDENT.

STORED ROLES THAT DON'T PARSE:
    Roles are stored as text. A document whose role text isn't one of ours
    decodes to UnknownRole instead of blowing up, so the authorizer can deny
    it (and log it) explicitly.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Union
from datetime import datetime
from enum import Enum

from weather_api.utils.timeutils import to_storage_time, from_storage_time


# =============================================================================
# ROLES
# =============================================================================

class Role(str, Enum):
    """Account roles. Stored as the upper-case name."""
    STUDENT = "STUDENT"
    TEACHER = "TEACHER"
    SENSOR = "SENSOR"


class UnknownRole(BaseModel):
    """A stored role string that isn't a Role."""
    model_config = ConfigDict(frozen=True)

    value: str


def decode_role(value) -> Union[Role, UnknownRole]:
    """
    Decode a stored role string.

    Matching is exact (case-sensitive), the same as the stored form.

    Returns:
        The Role, or UnknownRole carrying the raw value
    """
    if isinstance(value, str):
        try:
            return Role(value)
        except ValueError:
            pass
    return UnknownRole(value="" if value is None else str(value))


# =============================================================================
# ACCOUNT (internal)
# =============================================================================

class Account(BaseModel):
    """
    A user account as held in the Users collection.

    Storage field names are the capitalised ones (Username, ApiKey, ...);
    see to_document / from_document.
    """
    id: Optional[str] = Field(None, description="Account id (ObjectId hex string)")
    username: str
    password: str = ""
    role: Union[Role, UnknownRole]
    email: str = ""
    last_login: Optional[datetime] = None
    api_key: str

    def to_document(self) -> dict:
        """Convert to a MongoDB document (no _id)."""
        return {
            "Username": self.username,
            "Password": self.password,
            "Role": self.role.value,
            "Email": self.email,
            "LastLoginDate": to_storage_time(self.last_login),
            "ApiKey": self.api_key,
        }

    @classmethod
    def from_document(cls, document: dict) -> "Account":
        """Build an account from a MongoDB document, decoding the role."""
        object_id = document.get("_id")
        return cls(
            id=str(object_id) if object_id is not None else None,
            username=document.get("Username", ""),
            password=document.get("Password") or "",
            role=decode_role(document.get("Role")),
            email=document.get("Email") or "",
            last_login=from_storage_time(document.get("LastLoginDate")),
            api_key=document.get("ApiKey", ""),
        )


# =============================================================================
# REQUEST / RESPONSE MODELS
# =============================================================================

class CreateAccountRequest(BaseModel):
    """
    Request body for creating an account.

    The role is upper-cased before it is checked, so "teacher" works.
    The API key is generated by the server, not sent by the client.

    Example Request:
        POST /api/UserData
        {
            "username": "jsmith",
            "password": "hunter2",
            "role": "student",
            "email": "jsmith@example.edu"
        }
    """
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., description="Stored as given; not verified anywhere")
    role: str = Field(..., description="STUDENT, TEACHER or SENSOR")
    email: str = Field("", max_length=200)


class AccountResponse(BaseModel):
    """
    Account as returned by the API.

    The password is never included.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    username: str
    role: str
    email: str
    last_login: Optional[datetime] = Field(None, alias="lastLoginDate")
    api_key: str = Field(..., alias="apiKey")

    @classmethod
    def from_account(cls, account: Account) -> "AccountResponse":
        return cls(
            id=account.id,
            username=account.username,
            role=account.role.value,
            email=account.email,
            last_login=account.last_login,
            api_key=account.api_key,
        )
