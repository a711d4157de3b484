"""
Services Package
================

These are the "workers" that do the actual work.

- CredentialStore: Reads and writes accounts
- Authorizer: Decides whether an API key may call an operation
- TelemetryRepository: Reads and writes sensor readings
"""

from .credential_store import CredentialStore
from .authorizer import Authorizer
from .telemetry_repository import TelemetryRepository

__all__ = [
    "CredentialStore",
    "Authorizer",
    "TelemetryRepository",
]
