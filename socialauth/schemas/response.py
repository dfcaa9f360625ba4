"""
Generic response schemas untuk SocialAuth.
Menangani response format yang konsisten.
"""

from typing import Optional, Dict, Any

from pydantic import BaseModel, ConfigDict, Field


class MessageResponse(BaseModel):
    """
    Simple message response schema.
    """
    message: str = Field(
        ...,
        description="Response message"
    )
    details: Optional[Dict[str, Any]] = Field(
        None,
        description="Additional details"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "message": "Logged out from all devices",
                "details": {
                    "revoked_sessions": 2
                }
            }
        }
    )


class ErrorResponse(BaseModel):
    """
    Error response schema dengan struktur konsisten.
    """
    error: Dict[str, Any] = Field(
        ...,
        description="Error details"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": {
                    "message": "Invalid email or password",
                    "type": "UNAUTHORIZED",
                    "details": {},
                    "timestamp": "2024-01-01T00:00:00Z",
                    "request_id": "550e8400-e29b-41d4-a716-446655440000"
                }
            }
        }
    )
