"""
Modul password hashing untuk SocialAuth.
Argon2id dengan parameter tetap per deployment; hasil disimpan sebagai base64(salt || digest).
"""

import base64
import binascii
import secrets
from dataclasses import dataclass

from argon2.low_level import Type, hash_secret_raw
from cryptography.hazmat.primitives import constant_time

from socialauth.core.config import settings


@dataclass(frozen=True)
class HashingParameters:
    """
    Parameter Argon2id. Harus sama untuk seluruh deployment, karena
    encoded hash tidak menyimpan parameter.

    Attributes:
        salt_size: Panjang salt dalam bytes
        hash_size: Panjang digest dalam bytes
        time_cost: Jumlah iterasi
        memory_cost: Memory cost dalam KiB
        parallelism: Jumlah lanes
    """
    salt_size: int = 16
    hash_size: int = 32
    time_cost: int = 4
    memory_cost: int = 65536
    parallelism: int = 1

    @classmethod
    def from_settings(cls) -> "HashingParameters":
        """Build parameter dari global settings."""
        return cls(
            salt_size=settings.ARGON2_SALT_SIZE,
            hash_size=settings.ARGON2_HASH_SIZE,
            time_cost=settings.ARGON2_TIME_COST,
            memory_cost=settings.ARGON2_MEMORY_COST,
            parallelism=settings.ARGON2_PARALLELISM,
        )

    @property
    def encoded_size(self) -> int:
        return self.salt_size + self.hash_size


class PasswordHasher:
    """
    One-way password hasher.

    Hashing sengaja mahal (CPU dan memory), jadi caller async harus
    menjalankannya di worker pool, bukan di event loop.
    """

    def __init__(self, params: HashingParameters = HashingParameters()):
        self.params = params

    def hash(self, password: str) -> str:
        """
        Hash password menggunakan Argon2id.

        Args:
            password: Plain text password

        Returns:
            base64(salt || digest)

        Raises:
            ValueError: Jika password kosong
        """
        if not password or not password.strip():
            raise ValueError("Password cannot be empty")

        salt = secrets.token_bytes(self.params.salt_size)
        digest = self._derive(password, salt)
        return base64.b64encode(salt + digest).decode("ascii")

    def verify(self, password: str, encoded: str) -> bool:
        """
        Verifikasi password terhadap encoded hash.

        Input yang malformed (base64 rusak, panjang salah, kosong)
        menghasilkan False, tidak pernah raise.

        Args:
            password: Plain text password
            encoded: Hash yang tersimpan

        Returns:
            True jika password cocok
        """
        if not password or not encoded:
            return False

        try:
            raw = base64.b64decode(encoded.encode("ascii"), validate=True)
        except (binascii.Error, ValueError, UnicodeEncodeError):
            return False

        if len(raw) != self.params.encoded_size:
            return False

        salt = raw[:self.params.salt_size]
        stored = raw[self.params.salt_size:]
        computed = self._derive(password, salt)

        return constant_time.bytes_eq(stored, computed)

    def _derive(self, password: str, salt: bytes) -> bytes:
        return hash_secret_raw(
            secret=password.encode("utf-8"),
            salt=salt,
            time_cost=self.params.time_cost,
            memory_cost=self.params.memory_cost,
            parallelism=self.params.parallelism,
            hash_len=self.params.hash_size,
            type=Type.ID,
        )
