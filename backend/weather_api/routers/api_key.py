"""
API Key Gate
============
Guards every protected endpoint.

HOW IT WORKS:
    Each protected route is registered with its own gate, built with the
    authorizer and the exact roles that route accepts:

        read_gate = ApiKeyGate(authorizer, Role.STUDENT, Role.TEACHER)

        @router.get("/range", dependencies=[Depends(read_gate)])
        def get_range(...):
            ...

    On every request the gate:
        1. Reads the `apiKey` header              -> 401 if missing/empty
        2. Asks the authorizer about key + roles  -> 403 if refused
        3. Stamps the account's last-login time
        4. Lets the endpoint run (and hands it the Account if it asks)

    Last-login is only touched once the key has been accepted. A refused
    request changes nothing.

HEADER:
    apiKey: <key>        (braces are fine too: apiKey: {<key>})
"""

import logging
from typing import Optional

from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader

from weather_api.exceptions import AuthorizationError
from weather_api.models import Account, Role
from weather_api.services import Authorizer
from weather_api.utils.validation import strip_api_key

logger = logging.getLogger(__name__)

API_KEY_HEADER = "apiKey"

# Declared as a security scheme so /docs shows an "Authorize" button
api_key_header = APIKeyHeader(
    name=API_KEY_HEADER,
    auto_error=False,
    description="Your account's API key",
)


class ApiKeyGate:
    """
    FastAPI dependency that checks the caller's API key against a fixed
    set of roles.

    The roles are fixed when the route is registered; they can't change at
    runtime.
    """

    def __init__(self, authorizer: Authorizer, *allowed_roles: Role):
        self.authorizer = authorizer
        self.allowed_roles = frozenset(allowed_roles)

    def __call__(self, api_key: Optional[str] = Security(api_key_header)) -> Account:
        """
        Verify the API key from the apiKey header.

        Returns:
            The authenticated account

        Raises:
            HTTPException: 401 if no key was sent, 403 if it isn't valid here
        """
        if not strip_api_key(api_key):
            raise HTTPException(status_code=401, detail="No API key provided.")

        try:
            account = self.authorizer.authenticate(api_key, self.allowed_roles)
        except AuthorizationError as e:
            logger.info(f"Request refused: {e}")
            raise HTTPException(
                status_code=403,
                detail="Provided API key is not valid for this operation",
            )

        self.authorizer.record_usage(account.api_key)
        return account
