"""
Authorizer
==========

Decides whether an API key may call an operation.

HOW A KEY IS CHECKED:
--------------------
1. Strip any wrapping braces ("{abc}" -> "abc")
2. Find the account with exactly that key       -> Unauthenticated if none
3. Decode the account's stored role             -> UnknownRoleError if it isn't a Role
4. Is the role in the operation's allow-list?   -> Forbidden if not
5. Hand back the account

authenticate() never writes anything. Recording that the key was used is a
separate call, record_usage(), which the API key gate makes only after the
request has been let through.
"""

import logging
from datetime import datetime
from typing import AbstractSet, Optional

from weather_api.exceptions import Forbidden, Unauthenticated, UnknownRoleError
from weather_api.models import Account, Role, UnknownRole
from weather_api.services.credential_store import CredentialStore
from weather_api.utils.timeutils import utc_now
from weather_api.utils.validation import strip_api_key

logger = logging.getLogger(__name__)


class Authorizer:
    """Resolves API keys to accounts and checks them against allow-lists."""

    def __init__(self, credentials: CredentialStore):
        self.credentials = credentials

    def authenticate(self, presented_key: Optional[str], allowed_roles: AbstractSet[Role]) -> Account:
        """
        Check a presented key against an allow-list.

        Args:
            presented_key: The raw key as sent, braces and all
            allowed_roles: Exact roles the operation accepts (may be empty)

        Returns:
            The account the key belongs to

        Raises:
            Unauthenticated: Empty key, or no account has it
            UnknownRoleError: The account's stored role isn't a Role
            Forbidden: The account's role isn't in allowed_roles
        """
        key = strip_api_key(presented_key)
        if not key:
            raise Unauthenticated("No API key provided")

        account = self.credentials.find_by_key(key)
        if account is None:
            logger.info("Rejected unknown API key")
            raise Unauthenticated("API key does not match any account")

        if isinstance(account.role, UnknownRole):
            logger.warning(
                f"Account '{account.username}' has unrecognised role "
                f"'{account.role.value}', denying"
            )
            raise UnknownRoleError(account.username, account.role.value)

        if account.role not in allowed_roles:
            logger.info(
                f"Denied '{account.username}' ({account.role.value}); "
                f"allowed: {sorted(r.value for r in allowed_roles)}"
            )
            raise Forbidden(f"Role '{account.role.value}' is not allowed for this operation")

        return account

    def record_usage(self, key: str, at: Optional[datetime] = None) -> None:
        """Stamp the account's last-login time (now, unless `at` is given)."""
        self.credentials.update_last_login(strip_api_key(key), at or utc_now())
