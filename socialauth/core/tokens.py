"""
Random token generator untuk SocialAuth.
Semua nilai berasal dari CSPRNG (modul secrets), tidak pernah dari generator yang bisa di-seed.
"""

import base64
import secrets
import string
import uuid

URL_SAFE_ALPHABET = string.ascii_letters + string.digits + "-_"
SHORT_ID_ALPHABET = string.ascii_lowercase + string.digits

REFRESH_TOKEN_BYTES = 64
VERIFICATION_TOKEN_LENGTH = 48
RESET_TOKEN_LENGTH = 48


class TokenGenerator:
    """
    Generator untuk verification, reset, dan refresh tokens.

    Uniqueness hanya probabilistik; unique constraint di database yang
    menjadi jaminan sebenarnya.
    """

    @staticmethod
    def random_token(length: int = 32) -> str:
        """
        Generate token alfanumerik dari base64 random bytes.

        Args:
            length: Panjang token

        Returns:
            Token tanpa karakter '+', '/', '='
        """
        if length <= 0:
            raise ValueError("Length must be greater than 0")

        # Buffer tambahan karena karakter non-alfanumerik dibuang
        token = ""
        while len(token) < length:
            raw = base64.b64encode(secrets.token_bytes(length)).decode("ascii")
            token += raw.replace("+", "").replace("/", "").replace("=", "")
        return token[:length]

    @staticmethod
    def secure_token(byte_size: int = 32) -> str:
        """
        Generate base64 dari random bytes.

        Args:
            byte_size: Jumlah random bytes

        Returns:
            Base64 string
        """
        if byte_size <= 0:
            raise ValueError("Byte size must be greater than 0")

        return base64.b64encode(secrets.token_bytes(byte_size)).decode("ascii")

    @staticmethod
    def numeric_code(digits: int = 6) -> str:
        """
        Generate kode numerik tanpa leading zero.

        Args:
            digits: Jumlah digit (1-10)

        Returns:
            Kode numerik
        """
        if digits <= 0 or digits > 10:
            raise ValueError("Digits must be between 1 and 10")

        lower = 10 ** (digits - 1) if digits > 1 else 0
        upper = 10 ** digits
        return str(lower + secrets.randbelow(upper - lower))

    @staticmethod
    def url_safe_token(length: int = 32) -> str:
        """
        Generate token dengan alphabet URL-safe (A-Z, a-z, 0-9, '-', '_').

        Args:
            length: Panjang token

        Returns:
            URL-safe token
        """
        if length <= 0:
            raise ValueError("Length must be greater than 0")

        return "".join(secrets.choice(URL_SAFE_ALPHABET) for _ in range(length))

    @staticmethod
    def short_id(length: int = 8) -> str:
        """Generate short lowercase identifier."""
        if length <= 0:
            raise ValueError("Length must be greater than 0")

        return "".join(secrets.choice(SHORT_ID_ALPHABET) for _ in range(length))

    @staticmethod
    def new_id() -> uuid.UUID:
        return uuid.uuid4()

    # Derived tokens
    def refresh_token(self) -> str:
        return self.secure_token(REFRESH_TOKEN_BYTES)

    def verification_token(self) -> str:
        return self.url_safe_token(VERIFICATION_TOKEN_LENGTH)

    def reset_password_token(self) -> str:
        return self.url_safe_token(RESET_TOKEN_LENGTH)


# Global generator instance
token_generator = TokenGenerator()
