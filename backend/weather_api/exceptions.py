"""
Authorization Exceptions
========================

Raised by the Authorizer when a key can't be used for an operation. The
API key gate turns these into 401/403 responses; nothing else should need
to catch them.

All exceptions inherit from AuthorizationError for easy catching.
"""


class AuthorizationError(Exception):
    """Base exception for all authorization failures."""

    pass


class Unauthenticated(AuthorizationError):
    """Raised when no usable API key was presented or it matches no account."""

    pass


class Forbidden(AuthorizationError):
    """Raised when the account's role is not allowed for the operation."""

    pass


class UnknownRoleError(Forbidden):
    """
    Raised when the account's stored role isn't a recognised Role.

    Still a Forbidden (the request is denied the same way) but kept separate
    so it shows up differently in the logs.
    """

    def __init__(self, username: str, stored_role: str):
        super().__init__(f"Account '{username}' has unrecognised role '{stored_role}'")
        self.username = username
        self.stored_role = stored_role


__all__ = [
    "AuthorizationError",
    "Forbidden",
    "Unauthenticated",
    "UnknownRoleError",
]
