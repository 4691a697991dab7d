"""
Routers Package
===============

Routers are like the reception desk - they direct incoming requests
to the right place.
"""

from .ingest import router as ingest_router
from .measurements import router as measurements_router, get_store
from .devices import router as devices_router

__all__ = [
    "ingest_router",
    "measurements_router",
    "devices_router",
    "get_store",
]
