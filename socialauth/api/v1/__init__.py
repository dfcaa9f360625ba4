"""
API v1 module.
Berisi semua endpoints untuk API versi 1.
"""

from socialauth.api.v1.auth import router as auth_router

__all__ = ["auth_router"]
