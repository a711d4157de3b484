"""
Routers Package
===============

Routers are like the reception desk - they direct incoming requests
to the right place. Every protected route has an ApiKeyGate at the door.
"""

from .api_key import ApiKeyGate, API_KEY_HEADER
from .datapoints import create_router as create_datapoints_router
from .users import create_router as create_users_router

__all__ = [
    "ApiKeyGate",
    "API_KEY_HEADER",
    "create_datapoints_router",
    "create_users_router",
]
