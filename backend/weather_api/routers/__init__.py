"""
Routers Package
===============

Routers are like the reception desk - they direct incoming requests
to the right place.
"""

from .accounts import router as accounts_router
from .readings import router as readings_router
from .dependencies import set_services, require_role

__all__ = [
    "accounts_router",
    "readings_router",
    "set_services",
    "require_role",
]
