"""
Credential Store
================

Owns the "Users" collection: every read and write of account documents goes
through here.

WHAT IT DOES:
------------
1. Looks accounts up by API key (for the authorizer) or by id
2. Creates accounts, refusing duplicate usernames
3. Stamps the last-login time when a key is used
4. Bulk admin operations: delete by role + login range, re-role by login range

WHAT IT DOESN'T DO:
------------------
Validate. Role strings, date ranges and ids are the caller's problem; the
routers check them before calling in. A bad range just matches nothing.

Every write is a single MongoDB call, so each document update is atomic. The
bulk operations are NOT atomic as a whole; a failure part-way leaves the
documents it already touched changed.
"""

import logging
from datetime import datetime
from typing import Optional

from bson import ObjectId
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from weather_api.database import USERS_COLLECTION
from weather_api.models import Account
from weather_api.utils.timeutils import from_storage_time, to_storage_time, utc_now

logger = logging.getLogger(__name__)


class CredentialStore:
    """Account persistence on top of the Users collection."""

    def __init__(self, database: Database):
        self._users: Collection = database[USERS_COLLECTION]

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    def find_by_key(self, key: str) -> Optional[Account]:
        """Exact match on API key."""
        document = self._users.find_one({"ApiKey": key})
        if document is None:
            return None
        return Account.from_document(document)

    def find_by_id(self, account_id: str) -> Optional[Account]:
        """Look up by id. A malformed id finds nothing."""
        if not ObjectId.is_valid(account_id):
            return None
        document = self._users.find_one({"_id": ObjectId(account_id)})
        if document is None:
            return None
        return Account.from_document(document)

    def get_all(self) -> list[Account]:
        """Every account, in store order."""
        return [Account.from_document(doc) for doc in self._users.find({})]

    # =========================================================================
    # CREATE / DELETE
    # =========================================================================

    def insert(self, account: Account) -> bool:
        """
        Create an account.

        The caller must have generated the API key already. On success the
        account's last_login is set to now and its id is filled in.

        Returns:
            False (and nothing is written) if the username is taken
        """
        if self._users.find_one({"Username": account.username}) is not None:
            logger.info(f"Account '{account.username}' already exists, not inserting")
            return False

        account.last_login = from_storage_time(to_storage_time(utc_now()))
        try:
            result = self._users.insert_one(account.to_document())
        except DuplicateKeyError:
            # Another request created the same username between our check and insert
            logger.info(f"Account '{account.username}' created concurrently, not inserting")
            return False

        account.id = str(result.inserted_id)
        logger.info(f"Created account '{account.username}' ({account.role.value})")
        return True

    def delete_by_id(self, account_id: str) -> int:
        """Delete one account. Returns how many were deleted (0 or 1)."""
        if not ObjectId.is_valid(account_id):
            return 0
        result = self._users.delete_one({"_id": ObjectId(account_id)})
        return result.deleted_count

    def delete_by_role_and_login_range(self, role: str, start: datetime, end: datetime) -> int:
        """
        Delete every account with `role` whose last login is in [start, end].

        No confirmation. Returns the number deleted.
        """
        result = self._users.delete_many({
            "Role": role,
            "LastLoginDate": {"$gte": to_storage_time(start), "$lte": to_storage_time(end)},
        })
        logger.info(
            f"Deleted {result.deleted_count} '{role}' accounts last seen "
            f"{start.isoformat()} - {end.isoformat()}"
        )
        return result.deleted_count

    # =========================================================================
    # UPDATES
    # =========================================================================

    def update_last_login(self, key: str, timestamp: datetime) -> None:
        """
        Set the last-login time for the account with this key.

        A single targeted $set, so concurrent logins with the same key can't
        lose each other's update. No-op if the key matches nothing.
        """
        self._users.update_one(
            {"ApiKey": key},
            {"$set": {"LastLoginDate": to_storage_time(timestamp)}},
        )

    def update_role_for_login_range(self, start: datetime, end: datetime, new_role: str) -> int:
        """
        Set the role of every account whose last login is in [start, end].

        `new_role` is written as given; the caller validates it.
        Returns the number of accounts changed.
        """
        result = self._users.update_many(
            {"LastLoginDate": {"$gte": to_storage_time(start), "$lte": to_storage_time(end)}},
            {"$set": {"Role": new_role}},
        )
        logger.info(
            f"Set role '{new_role}' on {result.modified_count} accounts last seen "
            f"{start.isoformat()} - {end.isoformat()}"
        )
        return result.modified_count
