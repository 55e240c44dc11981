"""
ASGI middleware that logs each HTTP request and its outcome.

Pure ASGI rather than BaseHTTPMiddleware, so response bodies are streamed
through untouched. Request bodies are only captured at DEBUG level and are
passed through ``filter_sensitive_data`` before they are logged, which keeps
passwords and tokens from /auth out of the logs.
"""

import json
import logging
import time
import uuid
from typing import Optional
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..core.logging_config import filter_sensitive_data, truncate_large_data

logger = logging.getLogger(__name__)


def _sanitize_body(body: bytes) -> str:
    """Decode a request body for logging, masking sensitive JSON fields."""
    text = body.decode("utf-8", errors="ignore")
    try:
        text = json.dumps(filter_sensitive_data(json.loads(text)), ensure_ascii=False)
    except json.JSONDecodeError:
        pass
    return truncate_large_data(text, max_length=2000)


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware:
    """Logs method, path, status code and duration of every HTTP request."""

    def __init__(self, app: ASGIApp, exclude_paths: Optional[list] = None):
        """
        Args:
            app: The ASGI application
            exclude_paths: Paths that are not logged (default: "/" and "/health")
        """
        self.app = app
        self.exclude_paths = set(exclude_paths or ["/health", "/"])

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope.get("path", "") in self.exclude_paths:
            await self.app(scope, receive, send)
            return

        request_id = uuid.uuid4().hex[:12]
        method = scope.get("method", "UNKNOWN")
        path = scope.get("path", "")
        client = scope.get("client")
        fields = {
            "request_id": request_id,
            "method": method,
            "path": path,
            "client": client[0] if client else None,
        }
        capture_body = logger.isEnabledFor(logging.DEBUG)
        body_chunks: list = []
        status_code = 0

        async def logging_receive() -> Message:
            message = await receive()
            if capture_body and message["type"] == "http.request":
                body_chunks.append(message.get("body", b""))
            return message

        async def logging_send(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            await send(message)

        start_time = time.time()
        logger.debug(f"Request started: {method} {path}", extra={"extra_fields": fields})

        try:
            await self.app(scope, logging_receive, logging_send)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {method} {path} - {e}",
                exc_info=True,
                extra={"extra_fields": {**fields, "duration_ms": round(duration_ms, 2), "error": str(e)}},
            )
            raise

        duration_ms = (time.time() - start_time) * 1000
        body = b"".join(body_chunks)
        if body:
            logger.debug(
                f"Request body: {_sanitize_body(body)}",
                extra={"extra_fields": {"request_id": request_id}},
            )

        logger.log(
            _level_for(status_code),
            f"Request completed: {method} {path} - {status_code} ({duration_ms:.2f}ms)",
            extra={"extra_fields": {
                **fields,
                "status_code": status_code,
                "duration_ms": round(duration_ms, 2),
            }},
        )
