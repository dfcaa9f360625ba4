"""
API module untuk SocialAuth.
Berisi endpoints dan dependencies untuk API.
"""

from socialauth.api.v1 import auth

__all__ = ["auth"]
