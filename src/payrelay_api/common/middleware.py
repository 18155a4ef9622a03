from __future__ import annotations

import contextvars
import json
import logging
import time
import uuid
from typing import Callable

from opentelemetry import trace
from starlette.concurrency import iterate_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from ..core.config import Settings, get_settings


request_id_ctx_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")

_RULE = "━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━"


class RequestIDMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID") -> None:
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:  # type: ignore[override]
        req_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        token = request_id_ctx_var.set(req_id)
        try:
            request.state.request_id = req_id
            response = await call_next(request)
        finally:
            request_id_ctx_var.reset(token)
        response.headers.setdefault(self.header_name, req_id)
        return response


class RequestIDLogFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - pure logging
        record.request_id = request_id_ctx_var.get()
        record.trace_id = record.span_id = "-"
        span_ctx = trace.get_current_span().get_span_context()
        if span_ctx.is_valid:
            record.trace_id = f"{span_ctx.trace_id:032x}"
            record.span_id = f"{span_ctx.span_id:016x}"
        return True


def mask_header(name: str, value: str, sensitive: set[str]) -> str:
    if name.lower() not in sensitive:
        return value
    if name.lower() == "authorization" and value.startswith("Bearer "):
        return "Bearer ***"
    return "***"


class DebugLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for detailed request/response logging in DEBUG mode.
    Logs masked headers, request/response bodies and timing.
    """
    def __init__(self, app: ASGIApp, settings: Settings | None = None) -> None:
        super().__init__(app)
        self.settings = settings or get_settings()
        self.logger = logging.getLogger("payrelay_api.debug")
        self.enabled = self.settings.DEBUG
        self.log_headers = self.settings.DEBUG_LOG_HEADERS
        self.log_body = self.settings.DEBUG_LOG_BODY
        self.max_body_length = self.settings.DEBUG_MAX_BODY_LENGTH
        self.sensitive_headers = {h.lower() for h in self.settings.debug_sensitive_headers_list}

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:  # type: ignore[override]
        if not self.enabled:
            return await call_next(request)

        start_time = time.time()
        lines = ["", "━━━━━━━━━━━━ REQUEST ━━━━━━━━━━━━", f"{request.method} {request.url.path}"]
        if request.url.query:
            lines.append(f"Query: {request.url.query}")
        if self.log_headers:
            lines.append("Headers:")
            for name, value in request.headers.items():
                lines.append(f"  {name}: {mask_header(name, value, self.sensitive_headers)}")

        if self.log_body and request.method in ("POST", "PUT", "PATCH"):
            # Starlette caches the body on the request, so downstream handlers can read it again
            body_bytes = await request.body()
            if body_bytes:
                lines.append("Body:")
                lines.append(self._render_body(body_bytes))
        lines.append(_RULE)
        self.logger.debug("\n".join(lines))

        response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000
        lines = [
            "",
            "━━━━━━━━━━━━ RESPONSE ━━━━━━━━━━━━",
            f"Status: {response.status_code}",
            f"Duration: {duration_ms:.2f}ms",
        ]
        if self.log_headers:
            lines.append("Headers:")
            for name, value in response.headers.items():
                lines.append(f"  {name}: {mask_header(name, value, self.sensitive_headers)}")
        if self.log_body:
            # The body stream can only be consumed once, so it is buffered and replayed
            chunks = [chunk async for chunk in response.body_iterator]
            response.body_iterator = iterate_in_threadpool(iter(chunks))
            body_bytes = b"".join(chunks)
            lines.append("Body:")
            lines.append(self._render_body(body_bytes) if body_bytes else "(empty)")
        lines.append(_RULE)
        self.logger.debug("\n".join(lines))
        return response

    def _render_body(self, body_bytes: bytes) -> str:
        text = body_bytes.decode("utf-8", errors="replace")
        try:
            text = json.dumps(json.loads(text), indent=2)
        except ValueError:
            pass
        if len(text) > self.max_body_length:
            text = text[: self.max_body_length] + f"... (truncated {len(text) - self.max_body_length} chars)"
        return text
