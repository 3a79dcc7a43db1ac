"""Logging middleware with sensitive data redaction."""

import re
import time

from fastapi import FastAPI, Request

from sinnaybot.logging_config import get_logger, log_with_context

logger = get_logger(__name__)

# Sensitive parameters to redact from URLs
SENSITIVE_PARAMS = [
    "token",
    "password",
    "secret",
    "refresh_token",
    "access_token",
    "client_secret",
    "authorization",
    "bearer",
    "code",
    "state",
]


def redact_sensitive_data(url: str) -> str:
    """Redact sensitive query parameters from URL."""
    redacted = url
    for param in SENSITIVE_PARAMS:
        pattern = rf"([?&]){param}=([^&\s\"]+)"
        redacted = re.sub(pattern, rf"\g<1>{param}=***REDACTED***", redacted)
    return redacted


def register_request_logging(app: FastAPI) -> None:
    """Log every inbound request with its status and duration."""

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        log_with_context(
            logger,
            "info",
            "Handled request",
            method=request.method,
            url=redact_sensitive_data(str(request.url)),
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
            event_type="http_inbound",
        )
        return response
