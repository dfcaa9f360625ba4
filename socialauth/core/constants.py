"""
Konstanta yang digunakan di seluruh aplikasi SocialAuth.
"""

from enum import Enum


class Gender(str, Enum):
    """Pilihan gender pada profil akun."""
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"
    PREFER_NOT_TO_SAY = "PREFER_NOT_TO_SAY"


class RevocationReason(str, Enum):
    """Alasan pencabutan refresh token (disimpan apa adanya di database)."""
    REPLACED = "Replaced by new token"
    REUSE_DETECTED = "Attempted reuse of revoked token"
    LOGGED_OUT = "Logged out"
    LOGGED_OUT_ALL = "Logged out from all devices"


class NotificationType(str, Enum):
    """Jenis notifikasi yang dikirim ke user."""
    EMAIL_VERIFICATION = "EMAIL_VERIFICATION"
    PASSWORD_RESET = "PASSWORD_RESET"
    WELCOME = "WELCOME"


# Response messages
class ResponseMessage:
    """Standard response messages."""
    # Success messages
    REGISTRATION_SUCCESS = "Registration successful. Please check your email to verify your account."
    LOGOUT_SUCCESS = "Logged out successfully"
    LOGOUT_ALL_SUCCESS = "Logged out from all devices"
    EMAIL_VERIFIED = "Email verified successfully"
    VERIFICATION_SENT = "Verification email sent"
    PASSWORD_RESET_REQUESTED = "If the email exists, a password reset link has been sent"
    PASSWORD_RESET_SUCCESS = "Password reset successfully"
    PASSWORD_CHANGED = "Password changed successfully"

    # Error messages
    INVALID_CREDENTIALS = "Invalid email or password"
    ACCOUNT_LOCKED = "Account is locked due to too many failed login attempts"
    ACCOUNT_DEACTIVATED = "Account is deactivated"
    EMAIL_TAKEN = "Email is already registered"
    USERNAME_TAKEN = "Username is already taken"
    EMAIL_OR_USERNAME_TAKEN = "Email or username is already registered"
    PASSWORD_MISMATCH = "Passwords do not match"
    INVALID_REFRESH_TOKEN = "Invalid refresh token"
    REFRESH_TOKEN_REUSED = "Refresh token has been revoked"
    REFRESH_TOKEN_EXPIRED = "Refresh token has expired"
    ACCOUNT_NOT_FOUND = "User not found"
    INVALID_VERIFICATION_TOKEN = "Invalid verification token"
    VERIFICATION_TOKEN_EXPIRED = "Verification token has expired"
    EMAIL_ALREADY_VERIFIED = "Email is already verified"
    INVALID_RESET_TOKEN = "Invalid reset token"
    RESET_TOKEN_EXPIRED = "Reset token has expired"
    EMPTY_PASSWORD = "Password cannot be empty"
    INCORRECT_CURRENT_PASSWORD = "Current password is incorrect"
    PASSWORD_REUSED = "New password must be different from current password"
    INVALID_ACCESS_TOKEN = "Could not validate credentials"


# Default values
class DefaultValue:
    """Default values untuk settings dan profil akun baru."""
    PREFERRED_LANGUAGE = "en"
    PREFERRED_CONTENT_REGION = "US"
    EMAIL_DISPLAY_NAME = "User"
