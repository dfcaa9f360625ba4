"""
Token service untuk SocialAuth.
Membuat dan memvalidasi signed JWT access tokens (HS256). Tidak ada lookup ke database.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from jose import jwt, JWTError

from socialauth.core.config import settings

logger = logging.getLogger(__name__)

# Claims yang diisi service; custom claims tidak boleh menimpanya
RESERVED_CLAIMS = frozenset({"sub", "email", "username", "roles", "jti", "iat", "exp", "iss", "aud"})


@dataclass
class TokenPayload:
    """
    Data yang di-embed ke access token.

    Attributes:
        account_id: ID akun (menjadi claim `sub`)
        email: Email akun
        username: Username, atau email jika akun tidak punya username
        roles: Nama-nama role akun
        claims: Custom claims tambahan
    """
    account_id: str
    email: str
    username: str
    roles: List[str] = field(default_factory=list)
    claims: Dict[str, str] = field(default_factory=dict)


class TokenService:
    """
    Service untuk JWT access tokens.

    Args:
        secret_key: Symmetric signing key
        issuer: Claim `iss` yang dibuat dan diwajibkan
        audience: Claim `aud` yang dibuat dan diwajibkan
        expires_delta: Masa berlaku token
        algorithm: Algoritma JWT
        clock: Sumber waktu untuk `iat`/`exp` dan is_expired
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        issuer: Optional[str] = None,
        audience: Optional[str] = None,
        expires_delta: Optional[timedelta] = None,
        algorithm: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.secret_key = secret_key or settings.JWT_SECRET_KEY
        self.issuer = issuer or settings.JWT_ISSUER
        self.audience = audience or settings.JWT_AUDIENCE
        self.expires_delta = expires_delta or settings.access_token_expire_timedelta
        self.algorithm = algorithm or settings.ALGORITHM
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def issue(self, payload: TokenPayload) -> str:
        """
        Membuat signed access token.

        Args:
            payload: Identitas dan claims akun

        Returns:
            Encoded JWT
        """
        now = self.clock()

        to_encode: Dict[str, Any] = {
            key: value for key, value in payload.claims.items()
            if key not in RESERVED_CLAIMS
        }
        to_encode.update({
            "sub": payload.account_id,
            "email": payload.email,
            "username": payload.username,
            "roles": list(payload.roles),
            "jti": str(uuid.uuid4()),
            "iat": now,
            "exp": now + self.expires_delta,
            "iss": self.issuer,
            "aud": self.audience,
        })

        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def validate(self, token: str) -> Optional[Dict[str, Any]]:
        """
        Validasi signature, issuer, audience, dan expiry sekaligus.

        Args:
            token: Encoded JWT

        Returns:
            Claims jika valid, None jika tidak
        """
        if not token:
            return None

        try:
            return jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
            )
        except JWTError as e:
            logger.debug(f"Access token rejected: {e}")
            return None

    def is_expired(self, token: str) -> bool:
        """
        Check expiry tanpa verifikasi signature.
        Token yang tidak bisa dibaca dianggap expired.
        """
        try:
            claims = jwt.get_unverified_claims(token)
            exp = claims["exp"]
            return datetime.fromtimestamp(int(exp), tz=timezone.utc) <= self.clock()
        except (JWTError, KeyError, TypeError, ValueError, OverflowError):
            return True

    def get_account_id(self, token: str) -> Optional[str]:
        """Ambil `sub` dari token yang valid."""
        claims = self.validate(token)
        if claims is None:
            return None
        return claims.get("sub")
