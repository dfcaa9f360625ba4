"""
Request logging middleware untuk SocialAuth.
Logs semua HTTP request dengan request ID, durasi, dan status code.
"""

from typing import Callable, Optional, Dict, Any
import time
import json
import uuid
import logging
from datetime import datetime, timezone

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp


logger = logging.getLogger("socialauth.access")

# Field yang tidak boleh muncul di log
SENSITIVE_FIELDS = (
    "password", "token", "secret", "authorization", "confirm_password"
)


def redact_sensitive_data(data: Any) -> Any:
    """
    Redact sensitive fields dari data secara rekursif.

    Args:
        data: Data to redact

    Returns:
        Redacted data
    """
    if isinstance(data, dict):
        redacted = {}
        for key, value in data.items():
            if any(sensitive in key.lower() for sensitive in SENSITIVE_FIELDS):
                redacted[key] = "[REDACTED]"
            else:
                redacted[key] = redact_sensitive_data(value)
        return redacted
    elif isinstance(data, list):
        return [redact_sensitive_data(item) for item in data]
    return data


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Request/response logging middleware.

    Features:
    - Request ID (juga dikirim sebagai header X-Request-ID)
    - Request timing
    - Body logging opsional dengan redaction
    """

    def __init__(
        self,
        app: ASGIApp,
        log_request_body: bool = False,
        exclude_paths: Optional[list] = None,
        max_body_size: int = 1024
    ):
        super().__init__(app)
        self.log_request_body = log_request_body
        self.exclude_paths = exclude_paths or []
        self.max_body_size = max_body_size

    def should_log_path(self, path: str) -> bool:
        return not any(path.startswith(excluded) for excluded in self.exclude_paths)

    async def get_request_body(self, request: Request) -> Optional[str]:
        """
        Ambil request body yang sudah di-redact.

        Returns:
            Body sebagai string, atau None
        """
        body = await request.body()
        if not body:
            return None

        if len(body) > self.max_body_size:
            return f"[Body too large: {len(body)} bytes]"

        try:
            return json.dumps(redact_sensitive_data(json.loads(body)))
        except (json.JSONDecodeError, UnicodeDecodeError):
            return "[Non-JSON body]"

    def create_log_entry(
        self,
        request: Request,
        response: Optional[Response],
        duration_ms: float,
        request_body: Optional[str] = None
    ) -> Dict[str, Any]:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            client_ip = forwarded_for.split(",")[0].strip()
        else:
            client_ip = request.client.host if request.client else "unknown"

        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "request_id": getattr(request.state, "request_id", "unknown"),
            "method": request.method,
            "path": request.url.path,
            "client_ip": client_ip,
            "user_agent": request.headers.get("user-agent", "unknown"),
            "duration_ms": round(duration_ms, 2),
        }

        if hasattr(request.state, "account_id"):
            log_entry["account_id"] = str(request.state.account_id)

        if request_body:
            log_entry["request_body"] = request_body

        if response is not None:
            log_entry["status_code"] = response.status_code

        return log_entry

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self.should_log_path(request.url.path):
            return await call_next(request)

        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.time()

        request_body = None
        if self.log_request_body and request.method in ("POST", "PUT", "PATCH"):
            request_body = await self.get_request_body(request)

        response = None
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            duration_ms = (time.time() - start_time) * 1000
            log_entry = self.create_log_entry(request, response, duration_ms, request_body)

            if response is None or response.status_code >= 500:
                logger.error(json.dumps(log_entry))
            elif response.status_code >= 400:
                logger.warning(json.dumps(log_entry))
            else:
                logger.info(json.dumps(log_entry))
